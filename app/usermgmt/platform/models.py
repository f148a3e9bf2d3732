from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Roles that name the user's organisation rather than a permission set.
ORGANISATIONS = ("COP User", "OPG User")

LPA_TEAM_LABEL = "LPA"


class UserStatus(str, Enum):
    ACTIVE = "Active"
    LOCKED = "Locked"
    SUSPENDED = "Suspended"

    def __str__(self) -> str:
        return self.value

    @property
    def tag_colour(self) -> str:
        if self is UserStatus.SUSPENDED:
            return "govuk-tag--grey"
        if self is UserStatus.LOCKED:
            return "govuk-tag--orange"
        return ""

    @classmethod
    def from_flags(cls, *, locked: bool, suspended: bool) -> "UserStatus":
        if suspended:
            return cls.SUSPENDED
        if locked:
            return cls.LOCKED
        return cls.ACTIVE


def split_organisation(roles: list[str]) -> tuple[str, list[str]]:
    """Separate the organisation role from the remaining roles, keeping order."""
    organisation = ""
    rest: list[str] = []
    for role in roles:
        if not organisation and role in ORGANISATIONS:
            organisation = role
        else:
            rest.append(role)
    return organisation, rest


def team_type_label(handle: str, label: str = "") -> str:
    if not handle:
        return LPA_TEAM_LABEL
    return f"Supervision — {label}"


@dataclass(frozen=True)
class User:
    id: int
    display_name: str = ""
    email: str = ""
    status: UserStatus = UserStatus.ACTIVE

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=int(data.get("id") or 0),
            display_name=data.get("displayName") or "",
            email=data.get("email") or "",
            status=UserStatus.from_flags(
                locked=bool(data.get("locked")),
                suspended=bool(data.get("suspended")),
            ),
        )


@dataclass(frozen=True)
class AuthUser:
    id: int
    firstname: str = ""
    surname: str = ""
    email: str = ""
    organisation: str = ""
    roles: list[str] = field(default_factory=list)
    locked: bool = False
    suspended: bool = False

    @property
    def status(self) -> UserStatus:
        return UserStatus.from_flags(locked=self.locked, suspended=self.suspended)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "AuthUser":
        organisation, roles = split_organisation(list(data.get("roles") or []))
        return cls(
            id=int(data.get("id") or 0),
            firstname=data.get("firstname") or "",
            surname=data.get("surname") or "",
            email=data.get("email") or "",
            organisation=organisation,
            roles=roles,
            locked=bool(data.get("locked")),
            suspended=bool(data.get("suspended")),
        )


@dataclass(frozen=True)
class MyDetails:
    id: int
    name: str = ""
    firstname: str = ""
    surname: str = ""
    display_name: str = ""
    email: str = ""
    phone_number: str = ""
    roles: list[str] = field(default_factory=list)
    teams: list[str] = field(default_factory=list)
    locked: bool = False
    suspended: bool = False
    deleted: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "MyDetails":
        return cls(
            id=int(data.get("id") or 0),
            name=data.get("name") or "",
            firstname=data.get("firstname") or "",
            surname=data.get("surname") or "",
            display_name=data.get("displayName") or "",
            email=data.get("email") or "",
            phone_number=data.get("phoneNumber") or "",
            roles=list(data.get("roles") or []),
            teams=[t.get("displayName") or "" for t in data.get("teams") or []],
            locked=bool(data.get("locked")),
            suspended=bool(data.get("suspended")),
            deleted=bool(data.get("deleted")),
        )


@dataclass(frozen=True)
class TeamMember:
    id: int
    display_name: str = ""
    email: str = ""


@dataclass(frozen=True)
class TeamType:
    handle: str
    label: str


@dataclass(frozen=True)
class Team:
    id: int
    display_name: str = ""
    phone_number: str = ""
    email: str = ""
    type: str = ""
    type_label: str = LPA_TEAM_LABEL
    members: list[TeamMember] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Team":
        team_type = data.get("teamType") or {}
        handle = team_type.get("handle") or ""

        members: list[TeamMember] = []
        seen: set[int] = set()
        for m in data.get("members") or []:
            member_id = int(m.get("id") or 0)
            if member_id and member_id in seen:
                continue
            seen.add(member_id)
            members.append(
                TeamMember(
                    id=member_id,
                    display_name=m.get("displayName") or "",
                    email=m.get("email") or "",
                )
            )

        return cls(
            id=int(data.get("id") or 0),
            display_name=data.get("displayName") or "",
            phone_number=data.get("phoneNumber") or "",
            email=data.get("email") or "",
            type=handle,
            type_label=team_type_label(handle, team_type.get("label") or ""),
            members=members,
        )
