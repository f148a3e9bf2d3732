from __future__ import annotations

from typing import Protocol

from flask import Blueprint, redirect, render_template, request, url_for

from app.usermgmt.context import get_context
from app.usermgmt.platform import ClientError, Context, ValidationError, platform_client
from app.usermgmt.platform.models import MyDetails, split_organisation

bp = Blueprint("account", __name__)


class MyDetailsClient(Protocol):
    def my_details(self, ctx: Context) -> MyDetails: ...
    def has_permission(self, ctx: Context, group: str, method: str) -> bool: ...


class EditMyDetailsClient(Protocol):
    def my_details(self, ctx: Context) -> MyDetails: ...
    def edit_my_details(self, ctx: Context, user_id: int, phone_number: str) -> None: ...


class ChangePasswordClient(Protocol):
    def change_password(self, ctx: Context, existing_password: str, password: str, confirm_password: str) -> None: ...


@bp.get("/my-details")
def my_details():
    ctx = get_context(request)
    client: MyDetailsClient = platform_client()
    details = client.my_details(ctx)
    can_edit_phone_number = client.has_permission(ctx, "user", "patch")

    organisation, roles = split_organisation(details.roles)
    return render_template(
        "account/my_details.html",
        details=details,
        organisation=organisation,
        roles=roles,
        teams=details.teams,
        can_edit_phone_number=can_edit_phone_number,
    )


@bp.get("/my-details/edit")
def my_details_edit_get():
    client: EditMyDetailsClient = platform_client()
    details = client.my_details(get_context(request))
    return render_template("account/edit_my_details.html", phone_number=details.phone_number, errors=None)


@bp.post("/my-details/edit")
def my_details_edit_post():
    ctx = get_context(request)
    client: EditMyDetailsClient = platform_client()
    details = client.my_details(ctx)
    phone_number = request.form.get("phonenumber") or ""

    try:
        client.edit_my_details(ctx, details.id, phone_number)
    except ValidationError as e:
        return render_template("account/edit_my_details.html", phone_number=phone_number, errors=e.errors), 400

    return redirect(url_for("account.my_details"))


@bp.get("/change-password")
def change_password_get():
    return render_template("account/change_password.html", success=False, errors=None)


@bp.post("/change-password")
def change_password_post():
    client: ChangePasswordClient = platform_client()
    try:
        client.change_password(
            get_context(request),
            request.form.get("currentpassword") or "",
            request.form.get("password1") or "",
            request.form.get("password2") or "",
        )
    except ClientError as e:
        return (
            render_template(
                "account/change_password.html",
                success=False,
                errors={"currentpassword": {"": e.message}},
            ),
            400,
        )

    return render_template("account/change_password.html", success=True, errors=None)
