from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from flask import Blueprint, abort, render_template, request

from app.usermgmt.context import get_context
from app.usermgmt.errors import RedirectError
from app.usermgmt.modules.teams.service import (
    add_member,
    filter_teams,
    label_for,
    membership_map,
    parse_id,
    parse_selected,
    remove_members,
    select_members,
    submitted_team_type,
)
from app.usermgmt.platform import ClientError, Context, ValidationError, ValidationErrors, platform_client
from app.usermgmt.platform.client import MIN_SEARCH_LENGTH, SEARCH_TOO_SHORT
from app.usermgmt.platform.models import Team, TeamMember, TeamType, User
from app.usermgmt.rbac import TEAM_ADMIN_ROLES, require_roles

bp = Blueprint("teams", __name__)


class ListTeamsClient(Protocol):
    def teams(self, ctx: Context) -> list[Team]: ...


class ViewTeamClient(Protocol):
    def team(self, ctx: Context, team_id: int) -> Team: ...


class AddTeamClient(Protocol):
    def team_types(self, ctx: Context) -> list[TeamType]: ...
    def add_team(self, ctx: Context, name: str, team_type: str, phone: str, email: str) -> int: ...


class EditTeamClient(Protocol):
    def has_permission(self, ctx: Context, group: str, method: str) -> bool: ...
    def team(self, ctx: Context, team_id: int) -> Team: ...
    def team_types(self, ctx: Context) -> list[TeamType]: ...
    def edit_team(self, ctx: Context, team: Team) -> None: ...


class TeamMembersClient(Protocol):
    def team(self, ctx: Context, team_id: int) -> Team: ...
    def edit_team(self, ctx: Context, team: Team) -> None: ...
    def search_users(self, ctx: Context, search: str) -> list[User]: ...


# ---------- List ----------
@bp.get("/teams")
@require_roles(*TEAM_ADMIN_ROLES)
def teams_list():
    client: ListTeamsClient = platform_client()
    search = request.args.get("search") or ""
    teams = filter_teams(client.teams(get_context(request)), search)
    return render_template("teams/list.html", teams=teams, search=search)


# ---------- Detail ----------
@bp.get("/teams/<int:team_id>")
@require_roles(*TEAM_ADMIN_ROLES)
def team_detail(team_id: int):
    client: ViewTeamClient = platform_client()
    team = client.team(get_context(request), team_id)
    return render_template("teams/detail.html", team=team)


# ---------- New ----------
_ADD_TEAM_FIELDS = ("name", "service", "supervision-type", "phone", "email")


@bp.get("/teams/add")
@require_roles(*TEAM_ADMIN_ROLES)
def team_add_get():
    client: AddTeamClient = platform_client()
    options = client.team_types(get_context(request))
    return render_template("teams/add.html", team_type_options=options, form={}, errors=None)


@bp.post("/teams/add")
@require_roles(*TEAM_ADMIN_ROLES)
def team_add_post():
    ctx = get_context(request)
    client: AddTeamClient = platform_client()
    options = client.team_types(ctx)

    form = {k: request.form.get(k) or "" for k in _ADD_TEAM_FIELDS}
    try:
        team_id = client.add_team(
            ctx,
            form["name"],
            submitted_team_type(form["service"], form["supervision-type"]),
            form["phone"],
            form["email"],
        )
    except ValidationError as e:
        return render_template("teams/add.html", team_type_options=options, form=form, errors=e.errors), 400

    raise RedirectError(f"/teams/{team_id}")


# ---------- Edit ----------
def _load_edit_team(ctx: Context, client: EditTeamClient, team_id: int) -> tuple[Team, list[TeamType], bool]:
    can_edit_team_type = client.has_permission(ctx, "team", "post")
    team = client.team(ctx, team_id)
    options = client.team_types(ctx)
    return team, options, can_edit_team_type


@bp.get("/teams/edit/<int:team_id>")
@require_roles(*TEAM_ADMIN_ROLES)
def team_edit_get(team_id: int):
    ctx = get_context(request)
    client: EditTeamClient = platform_client()
    team, options, can_edit_team_type = _load_edit_team(ctx, client, team_id)
    return render_template(
        "teams/edit.html",
        team=team,
        team_type_options=options,
        can_edit_team_type=can_edit_team_type,
        success=False,
        errors=None,
    )


@bp.post("/teams/edit/<int:team_id>")
@require_roles(*TEAM_ADMIN_ROLES)
def team_edit_post(team_id: int):
    ctx = get_context(request)
    client: EditTeamClient = platform_client()
    team, options, can_edit_team_type = _load_edit_team(ctx, client, team_id)

    if can_edit_team_type:
        team_type = submitted_team_type(request.form.get("service"), request.form.get("supervision-type"))
    else:
        # A tampered form must not change the type without the permission.
        team_type = team.type

    updated = replace(
        team,
        display_name=request.form.get("name") or "",
        phone_number=request.form.get("phone") or "",
        email=request.form.get("email") or "",
        type=team_type,
        type_label=team.type_label if team_type == team.type else label_for(team_type, options),
    )

    page = {
        "team": updated,
        "team_type_options": options,
        "can_edit_team_type": can_edit_team_type,
    }
    try:
        client.edit_team(ctx, updated)
    except ValidationError as e:
        return render_template("teams/edit.html", success=False, errors=e.errors, **page), 400
    except ClientError as e:
        return render_template("teams/edit.html", success=False, errors={"": {"": e.message}}, **page), 400

    return render_template("teams/edit.html", success=True, errors=None, **page)


# ---------- Members ----------
def _render_add_member(
    ctx: Context,
    client: TeamMembersClient,
    team: Team,
    members: list[TeamMember],
    *,
    success: str | None = None,
    errors: ValidationErrors | None = None,
    status: int = 200,
):
    search = request.values.get("search") or ""
    users: list[User] = []
    if len(search) >= MIN_SEARCH_LENGTH:
        users = client.search_users(ctx, search)
    elif search:
        errors = {**(errors or {}), "search": {"": SEARCH_TOO_SHORT}}

    return (
        render_template(
            "teams/add_member.html",
            team=team,
            search=search,
            users=users,
            members=membership_map(users, members),
            success=success,
            errors=errors,
        ),
        status,
    )


@bp.get("/teams/add-member/<int:team_id>")
@require_roles(*TEAM_ADMIN_ROLES)
def team_add_member_get(team_id: int):
    ctx = get_context(request)
    client: TeamMembersClient = platform_client()
    team = client.team(ctx, team_id)
    return _render_add_member(ctx, client, team, team.members)


@bp.post("/teams/add-member/<int:team_id>")
@require_roles(*TEAM_ADMIN_ROLES)
def team_add_member_post(team_id: int):
    try:
        user_id = parse_id(request.form.get("id"))
    except ValueError:
        abort(400)

    ctx = get_context(request)
    client: TeamMembersClient = platform_client()
    team = client.team(ctx, team_id)

    members = add_member(team.members, user_id)
    try:
        client.edit_team(ctx, replace(team, members=members))
    except ValidationError as e:
        return _render_add_member(ctx, client, team, members, errors=e.errors, status=400)
    except ClientError as e:
        return _render_add_member(ctx, client, team, members, errors={"search": {"": e.message}}, status=400)

    return _render_add_member(
        ctx,
        client,
        replace(team, members=members),
        members,
        success=request.form.get("email") or "",
    )


@bp.post("/teams/remove-member/<int:team_id>")
@require_roles(*TEAM_ADMIN_ROLES)
def team_remove_member(team_id: int):
    try:
        selected_ids = parse_selected(request.form.getlist("selected[]"))
    except ValueError:
        abort(400)

    ctx = get_context(request)
    client: TeamMembersClient = platform_client()
    team = client.team(ctx, team_id)

    # TODO: confirm with product whether unknown ids should be rejected instead of dropped.
    selected = select_members(team.members, selected_ids)

    if not request.form.get("confirm"):
        return render_template("teams/remove_member.html", team=team, selected=selected, errors=None)

    try:
        client.edit_team(ctx, replace(team, members=remove_members(team.members, selected_ids)))
    except ValidationError as e:
        return render_template("teams/remove_member.html", team=team, selected=selected, errors=e.errors), 400
    except ClientError as e:
        return render_template("teams/remove_member.html", team=team, selected=selected, errors={"_": {"": e.message}}), 400

    raise RedirectError(f"/teams/{team_id}")
