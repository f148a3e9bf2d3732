from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, field
from http.cookiejar import DefaultCookiePolicy
from typing import Any

import requests

from app.usermgmt.platform.errors import ClientError, StatusError, Unauthorized, ValidationError
from app.usermgmt.platform.models import AuthUser, MyDetails, Team, TeamType, User

MIN_SEARCH_LENGTH = 3
SEARCH_TOO_SHORT = "Search term must be at least three characters"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True)
class Context:
    """Credentials forwarded from the inbound request for a single platform call."""

    cookies: dict[str, str] = field(default_factory=dict)
    xsrf_token: str = ""


def _header_token(raw: str) -> str:
    if _BAD_ESCAPE.search(raw):
        raise Unauthorized()
    try:
        return urllib.parse.unquote_plus(raw, errors="strict")
    except UnicodeDecodeError as e:
        raise Unauthorized() from e


def _json_object(resp: requests.Response) -> dict[str, Any] | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _raise_client_message(resp: requests.Response) -> None:
    """A 400 carrying {"message": ...} is a plain rejection meant for the user."""
    if resp.status_code != 400:
        return
    body = _json_object(resp)
    if body and isinstance(body.get("message"), str) and body["message"]:
        raise ClientError(body["message"])


def _validation_body(resp: requests.Response) -> ValidationError | None:
    body = _json_object(resp)
    if body is None:
        return None

    if isinstance(body.get("validation_errors"), dict):
        return ValidationError(body.get("detail") or "", body["validation_errors"])

    data = body.get("data")
    if isinstance(data, dict) and isinstance(data.get("errorMessages"), dict):
        return ValidationError(body.get("detail") or "", data["errorMessages"])

    return None


@dataclass(frozen=True)
class PlatformClient:
    base_url: str
    timeout_seconds: float = 30
    session: requests.Session = field(default_factory=requests.Session, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Credentials belong to the inbound request, never to the shared session.
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

    def _headers(self, ctx: Context) -> dict[str, str]:
        headers = {
            "OPG-Bypass-Membrane": "1",
            "X-XSRF-TOKEN": _header_token(ctx.xsrf_token),
        }
        if ctx.cookies:
            headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in ctx.cookies.items())
        return headers

    def request(
        self,
        ctx: Context,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        data: Any = None,
        json: Any = None,
    ) -> requests.Response:
        """Send one request to the platform. A 401 always raises Unauthorized."""
        url = self.base_url.rstrip("/") + path
        resp = self.session.request(
            method,
            url,
            params=params,
            data=data,
            json=json,
            headers=self._headers(ctx),
            timeout=self.timeout_seconds,
            allow_redirects=False,
        )
        if resp.status_code == 401:
            raise Unauthorized()
        return resp

    def _raise_for_status(self, resp: requests.Response, method: str) -> None:
        if 200 <= resp.status_code < 300:
            return
        verr = _validation_body(resp)
        if verr is not None:
            raise verr
        raise StatusError(resp.status_code, method, resp.url)

    def _get_json(self, ctx: Context, path: str, *, params: dict[str, Any] | None = None) -> Any:
        resp = self.request(ctx, "GET", path, params=params)
        self._raise_for_status(resp, "GET")
        return resp.json()

    # ---------- Current user ----------
    def my_details(self, ctx: Context) -> MyDetails:
        return MyDetails.from_json(self._get_json(ctx, "/api/v1/users/current"))

    def edit_my_details(self, ctx: Context, user_id: int, phone_number: str) -> None:
        resp = self.request(
            ctx,
            "PUT",
            f"/api/v1/users/{user_id}/updateTelephoneNumber",
            json={"phoneNumber": phone_number},
        )
        self._raise_for_status(resp, "PUT")

    def has_permission(self, ctx: Context, group: str, method: str) -> bool:
        j = self._get_json(ctx, "/api/v1/permissions")
        perms = (j.get(group) or {}).get("permissions") or [] if isinstance(j, dict) else []
        return method.upper() in {str(p).upper() for p in perms}

    def change_password(self, ctx: Context, existing_password: str, password: str, confirm_password: str) -> None:
        resp = self.request(
            ctx,
            "POST",
            "/auth/change-password",
            data={
                "existingPassword": existing_password,
                "password": password,
                "confirmPassword": confirm_password,
            },
        )
        if resp.status_code != 200:
            # Any JSON object is the platform's own rejection; "errors" may be absent.
            body = _json_object(resp)
            if body is not None and isinstance(body.get("errors", ""), str):
                raise ClientError(body.get("errors") or "")
            raise StatusError(resp.status_code, "POST", resp.url)

    def resend_confirmation(self, ctx: Context, email: str) -> None:
        resp = self.request(ctx, "POST", "/auth/resend-confirmation", data={"email": email})
        self._raise_for_status(resp, "POST")

    # ---------- Users ----------
    def search_users(self, ctx: Context, search: str) -> list[User]:
        if len(search) < MIN_SEARCH_LENGTH:
            raise ClientError(SEARCH_TOO_SHORT)
        j = self._get_json(ctx, "/api/v1/search/users", params={"query": search})
        return [User.from_json(u) for u in j or []]

    def user(self, ctx: Context, user_id: int) -> AuthUser:
        return AuthUser.from_json(self._get_json(ctx, f"/auth/user/{user_id}"))

    def add_user(
        self,
        ctx: Context,
        email: str,
        firstname: str,
        surname: str,
        organisation: str,
        roles: list[str],
    ) -> None:
        form: list[tuple[str, str]] = [
            ("email", email),
            ("firstname", firstname),
            ("surname", surname),
        ]
        form += [("roles", r) for r in ([organisation] if organisation else []) + list(roles)]
        resp = self.request(ctx, "POST", "/auth/user", data=form)
        self._raise_for_status(resp, "POST")

    def edit_user(self, ctx: Context, user: AuthUser) -> None:
        form: list[tuple[str, str]] = [
            ("id", str(user.id)),
            ("firstname", user.firstname),
            ("surname", user.surname),
        ]
        form += [("roles", r) for r in ([user.organisation] if user.organisation else []) + list(user.roles)]
        form += [
            ("locked", "true" if user.locked else "false"),
            ("suspended", "true" if user.suspended else "false"),
        ]
        resp = self.request(ctx, "PUT", f"/auth/user/{user.id}", data=form)
        _raise_client_message(resp)
        self._raise_for_status(resp, "PUT")

    def delete_user(self, ctx: Context, user_id: int) -> None:
        resp = self.request(ctx, "DELETE", f"/auth/user/{user_id}")
        _raise_client_message(resp)
        self._raise_for_status(resp, "DELETE")

    # ---------- Teams ----------
    def teams(self, ctx: Context) -> list[Team]:
        return [Team.from_json(t) for t in self._get_json(ctx, "/api/v1/teams") or []]

    def team(self, ctx: Context, team_id: int) -> Team:
        return Team.from_json(self._get_json(ctx, f"/api/v1/teams/{team_id}"))

    def team_types(self, ctx: Context) -> list[TeamType]:
        j = self._get_json(ctx, "/api/v1/reference-data", params={"filter": "teamType"})
        items = j.get("teamType") or [] if isinstance(j, dict) else []
        return [TeamType(handle=t.get("handle") or "", label=t.get("label") or "") for t in items]

    def add_team(self, ctx: Context, name: str, team_type: str, phone: str, email: str) -> int:
        form: list[tuple[str, str]] = [
            ("email", email),
            ("name", name),
            ("phone", phone),
            ("type", ""),
            ("teamType", ""),
        ]
        if team_type:
            form.append(("teamType[handle]", team_type))
        resp = self.request(ctx, "POST", "/api/team", data=form)
        self._raise_for_status(resp, "POST")
        return int(((resp.json() or {}).get("data") or {}).get("id") or 0)

    def edit_team(self, ctx: Context, team: Team) -> None:
        """Replace the team, including its full member list."""
        body: dict[str, Any] = {
            "email": team.email,
            "name": team.display_name,
            "phoneNumber": team.phone_number,
            "type": "SUPERVISION" if team.type else "",
            "memberIds": [m.id for m in team.members],
        }
        if team.type:
            body["teamType"] = {"handle": team.type}
        resp = self.request(ctx, "PUT", f"/api/v1/teams/{team.id}", json=body)
        _raise_client_message(resp)
        self._raise_for_status(resp, "PUT")
