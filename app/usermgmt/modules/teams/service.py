"""
Team membership rewrites.

The platform has no add/remove member endpoint: every change resends the whole
member list, so these helpers only ever build new lists from the current one.
"""
from __future__ import annotations

import re
from collections.abc import Iterable

from app.usermgmt.platform.models import TeamMember, TeamType, User, team_type_label

SUPERVISION_SERVICE = "supervision"

_ID = re.compile(r"-?[0-9]+")


def add_member(members: list[TeamMember], user_id: int) -> list[TeamMember]:
    """Append user_id unless it is already a member."""
    if any(m.id == user_id for m in members):
        return list(members)
    return [*members, TeamMember(id=user_id)]


def remove_members(members: list[TeamMember], selected_ids: Iterable[int]) -> list[TeamMember]:
    selected = set(selected_ids)
    return [m for m in members if m.id not in selected]


def select_members(members: list[TeamMember], selected_ids: Iterable[int]) -> dict[int, str]:
    """Display names of the selected ids; ids not in the team are dropped."""
    selected = set(selected_ids)
    return {m.id: m.display_name for m in members if m.id in selected}


def membership_map(candidates: list[User], members: list[TeamMember]) -> dict[int, bool]:
    result = {u.id: False for u in candidates}
    for m in members:
        result[m.id] = True
    return result


def parse_id(value: str | None) -> int:
    """Plain ASCII digits with an optional sign; no spaces or underscores."""
    if value is None or not _ID.fullmatch(value):
        raise ValueError(f"invalid id: {value!r}")
    return int(value)


def parse_selected(values: Iterable[str]) -> list[int]:
    """Parse submitted member ids. Raises ValueError on anything non-numeric."""
    return [parse_id(v) for v in values]


def submitted_team_type(service: str | None, supervision_type: str | None) -> str:
    if (service or "") == SUPERVISION_SERVICE:
        return supervision_type or ""
    return ""


def label_for(handle: str, options: list[TeamType]) -> str:
    for option in options:
        if option.handle == handle:
            return team_type_label(handle, option.label)
    return team_type_label(handle, handle)


def filter_teams(teams: list, search: str) -> list:
    if not search:
        return teams
    needle = search.lower()
    return [t for t in teams if needle in t.display_name.lower()]
