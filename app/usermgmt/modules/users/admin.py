from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from flask import Blueprint, render_template, request

from app.usermgmt.context import get_context
from app.usermgmt.errors import RedirectError
from app.usermgmt.platform import ClientError, Context, ValidationError, ValidationErrors, platform_client
from app.usermgmt.platform.client import MIN_SEARCH_LENGTH, SEARCH_TOO_SHORT
from app.usermgmt.platform.models import AuthUser, User
from app.usermgmt.rbac import USER_ADMIN_ROLES, require_roles

bp = Blueprint("users", __name__)


class ListUsersClient(Protocol):
    def search_users(self, ctx: Context, search: str) -> list[User]: ...


class AddUserClient(Protocol):
    def add_user(
        self, ctx: Context, email: str, firstname: str, surname: str, organisation: str, roles: list[str]
    ) -> None: ...


class EditUserClient(Protocol):
    def user(self, ctx: Context, user_id: int) -> AuthUser: ...
    def edit_user(self, ctx: Context, user: AuthUser) -> None: ...


class DeleteUserClient(Protocol):
    def user(self, ctx: Context, user_id: int) -> AuthUser: ...
    def delete_user(self, ctx: Context, user_id: int) -> None: ...


class ResendConfirmationClient(Protocol):
    def resend_confirmation(self, ctx: Context, email: str) -> None: ...


def _yes(value: str | None) -> bool:
    return (value or "") == "Yes"


# ---------- List ----------
@bp.get("/users")
@require_roles(*USER_ADMIN_ROLES)
def users_list():
    client: ListUsersClient = platform_client()
    search = request.args.get("search") or ""

    users: list[User] = []
    errors: ValidationErrors | None = None
    if len(search) >= MIN_SEARCH_LENGTH:
        users = client.search_users(get_context(request), search)
    elif search:
        errors = {"search": {"": SEARCH_TOO_SHORT}}

    return render_template("users/list.html", users=users, search=search, errors=errors)


# ---------- New ----------
@bp.get("/add-user")
@require_roles(*USER_ADMIN_ROLES)
def user_add_get():
    return render_template("users/add.html", form={}, errors=None)


@bp.post("/add-user")
@require_roles(*USER_ADMIN_ROLES)
def user_add_post():
    client: AddUserClient = platform_client()
    form = {
        "email": request.form.get("email") or "",
        "firstname": request.form.get("firstname") or "",
        "surname": request.form.get("surname") or "",
        "organisation": request.form.get("organisation") or "",
        "roles": request.form.getlist("roles"),
    }

    try:
        client.add_user(
            get_context(request),
            form["email"],
            form["firstname"],
            form["surname"],
            form["organisation"],
            form["roles"],
        )
    except ValidationError as e:
        return render_template("users/add.html", form=form, errors=e.errors), 400

    raise RedirectError("/users")


# ---------- Edit ----------
@bp.get("/edit-user/<int:user_id>")
@require_roles(*USER_ADMIN_ROLES)
def user_edit_get(user_id: int):
    client: EditUserClient = platform_client()
    user = client.user(get_context(request), user_id)
    return render_template("users/edit.html", user=user, errors=None)


@bp.post("/edit-user/<int:user_id>")
@require_roles(*USER_ADMIN_ROLES)
def user_edit_post(user_id: int):
    ctx = get_context(request)
    client: EditUserClient = platform_client()
    user = client.user(ctx, user_id)

    # Only these fields are editable; everything else keeps its fetched value.
    user = replace(
        user,
        id=user_id,
        firstname=request.form.get("firstname") or "",
        surname=request.form.get("surname") or "",
        organisation=request.form.get("organisation") or "",
        roles=request.form.getlist("roles"),
        locked=_yes(request.form.get("locked")),
        suspended=_yes(request.form.get("suspended")),
    )

    try:
        client.edit_user(ctx, user)
    except ValidationError as e:
        return render_template("users/edit.html", user=user, errors=e.errors), 400
    except ClientError as e:
        return render_template("users/edit.html", user=user, errors={"firstname": {"": e.message}}), 400

    raise RedirectError("/users")


# ---------- Unlock ----------
@bp.get("/unlock-user/<int:user_id>")
@require_roles(*USER_ADMIN_ROLES)
def user_unlock_get(user_id: int):
    client: EditUserClient = platform_client()
    user = client.user(get_context(request), user_id)
    return render_template("users/unlock.html", user=user, errors=None)


@bp.post("/unlock-user/<int:user_id>")
@require_roles(*USER_ADMIN_ROLES)
def user_unlock_post(user_id: int):
    ctx = get_context(request)
    client: EditUserClient = platform_client()
    user = client.user(ctx, user_id)
    try:
        client.edit_user(ctx, replace(user, locked=False))
    except ValidationError as e:
        return render_template("users/unlock.html", user=user, errors=e.errors), 400
    except ClientError as e:
        return render_template("users/unlock.html", user=user, errors={"": {"": e.message}}), 400

    raise RedirectError(f"/edit-user/{user_id}")


# ---------- Delete ----------
@bp.get("/delete-user/<int:user_id>")
@require_roles(*USER_ADMIN_ROLES)
def user_delete_get(user_id: int):
    client: DeleteUserClient = platform_client()
    user = client.user(get_context(request), user_id)
    return render_template("users/delete.html", user=user, success=False, errors=None)


@bp.post("/delete-user/<int:user_id>")
@require_roles(*USER_ADMIN_ROLES)
def user_delete_post(user_id: int):
    ctx = get_context(request)
    client: DeleteUserClient = platform_client()
    user = client.user(ctx, user_id)

    try:
        client.delete_user(ctx, user_id)
    except ClientError as e:
        return render_template("users/delete.html", user=user, success=False, errors={"": {"": e.message}}), 400

    return render_template("users/delete.html", user=user, success=True, errors=None)


# ---------- Resend confirmation ----------
@bp.get("/resend-confirmation")
@require_roles(*USER_ADMIN_ROLES)
def resend_confirmation_get():
    raise RedirectError("/users")


@bp.post("/resend-confirmation")
@require_roles(*USER_ADMIN_ROLES)
def resend_confirmation_post():
    client: ResendConfirmationClient = platform_client()
    user_id = request.form.get("id") or ""
    email = request.form.get("email") or ""
    client.resend_confirmation(get_context(request), email)
    return render_template("users/resend_confirmation.html", id=user_id, email=email)
