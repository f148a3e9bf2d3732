from dataclasses import replace

import pytest
from flask import template_rendered

from app.usermgmt import create_app
from app.usermgmt.platform import StatusError
from app.usermgmt.platform.models import AuthUser, MyDetails, Team, TeamMember, TeamType, User


class FakePlatformClient:
    """In-memory stand-in for PlatformClient.

    Every call is recorded as (name, *args) without the Context; contexts are
    kept separately. Set errors[name] to make a call raise.
    """

    def __init__(self):
        self.calls = []
        self.contexts = []
        self.errors = {}

        self.details = MyDetails(id=1, firstname="Ada", surname="Admin", roles=["System Admin"])
        self.permissions = {"user": ["PATCH"], "team": ["POST"]}
        self.search_results = []
        self.users = {}
        self.teams_by_id = {}
        self.team_type_options = [TeamType(handle="COMPLEX", label="Complex")]
        self.next_team_id = 50

    def _call(self, ctx, name, *args):
        self.calls.append((name, *args))
        self.contexts.append(ctx)
        err = self.errors.get(name)
        if err is not None:
            raise err

    def call_names(self):
        return [c[0] for c in self.calls]

    def calls_to(self, name):
        return [c[1:] for c in self.calls if c[0] == name]

    # ---------- Current user ----------
    def my_details(self, ctx):
        self._call(ctx, "my_details")
        return self.details

    def edit_my_details(self, ctx, user_id, phone_number):
        self._call(ctx, "edit_my_details", user_id, phone_number)

    def has_permission(self, ctx, group, method):
        self._call(ctx, "has_permission", group, method)
        return method.upper() in self.permissions.get(group, [])

    def change_password(self, ctx, existing_password, password, confirm_password):
        self._call(ctx, "change_password", existing_password, password, confirm_password)

    def resend_confirmation(self, ctx, email):
        self._call(ctx, "resend_confirmation", email)

    # ---------- Users ----------
    def search_users(self, ctx, search):
        self._call(ctx, "search_users", search)
        return list(self.search_results)

    def user(self, ctx, user_id):
        self._call(ctx, "user", user_id)
        if user_id not in self.users:
            raise StatusError(404, "GET", f"http://sirius.internal/auth/user/{user_id}")
        return self.users[user_id]

    def add_user(self, ctx, email, firstname, surname, organisation, roles):
        self._call(ctx, "add_user", email, firstname, surname, organisation, list(roles))

    def edit_user(self, ctx, user):
        self._call(ctx, "edit_user", user)
        self.users[user.id] = user

    def delete_user(self, ctx, user_id):
        self._call(ctx, "delete_user", user_id)
        self.users.pop(user_id, None)

    # ---------- Teams ----------
    def teams(self, ctx):
        self._call(ctx, "teams")
        return list(self.teams_by_id.values())

    def team(self, ctx, team_id):
        self._call(ctx, "team", team_id)
        if team_id not in self.teams_by_id:
            raise StatusError(404, "GET", f"http://sirius.internal/api/v1/teams/{team_id}")
        return self.teams_by_id[team_id]

    def team_types(self, ctx):
        self._call(ctx, "team_types")
        return list(self.team_type_options)

    def add_team(self, ctx, name, team_type, phone, email):
        self._call(ctx, "add_team", name, team_type, phone, email)
        team_id = self.next_team_id
        self.teams_by_id[team_id] = Team(id=team_id, display_name=name, phone_number=phone, email=email, type=team_type)
        return team_id

    def edit_team(self, ctx, team):
        self._call(ctx, "edit_team", team)
        self.teams_by_id[team.id] = team


def make_team(team_id=7, member_ids=(), **kwargs):
    members = [TeamMember(id=i, display_name=f"User {i}", email=f"user{i}@example.com") for i in member_ids]
    return Team(id=team_id, display_name=kwargs.pop("display_name", "Casework Team"), members=members, **kwargs)


def make_user(user_id=123, **kwargs):
    defaults = {
        "firstname": "John",
        "surname": "Doe",
        "email": "john@example.com",
        "organisation": "OPG User",
        "roles": ["Case Manager"],
    }
    defaults.update(kwargs)
    return AuthUser(id=user_id, **defaults)


def make_search_result(user_id, **kwargs):
    return User(id=user_id, display_name=kwargs.get("display_name", f"User {user_id}"), email=f"user{user_id}@example.com")


@pytest.fixture()
def platform():
    return FakePlatformClient()


@pytest.fixture()
def app(monkeypatch, platform):
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("SIRIUS_URL", "http://sirius.internal")
    monkeypatch.setenv("SIRIUS_PUBLIC_URL", "https://sirius.example")
    for k in ("PREFIX", "PORT", "PLATFORM_TIMEOUT_SECONDS"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    app.extensions["platform_client"] = platform
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def rendered(app):
    """Templates rendered during the test, as (name, context) pairs."""
    recorded = []

    def record(sender, template, context, **extra):
        recorded.append((template.name, context))

    template_rendered.connect(record, app)
    yield recorded
    template_rendered.disconnect(record, app)


@pytest.fixture()
def manager(platform):
    platform.details = replace(platform.details, roles=["Manager"])
    return platform
