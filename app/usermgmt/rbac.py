from collections.abc import Callable
from functools import wraps
from typing import Any, Protocol

from flask import abort, g, request

from app.usermgmt.context import get_context
from app.usermgmt.platform import Context, platform_client
from app.usermgmt.platform.models import MyDetails

SYSTEM_ADMIN = "System Admin"
MANAGER = "Manager"

USER_ADMIN_ROLES = frozenset({SYSTEM_ADMIN})
TEAM_ADMIN_ROLES = frozenset({SYSTEM_ADMIN, MANAGER})


class MyDetailsClient(Protocol):
    def my_details(self, ctx: Context) -> MyDetails: ...


def user_has_role(details: MyDetails | None, permitted: frozenset[str]) -> bool:
    if not details:
        return False
    return not permitted.isdisjoint(details.roles)


def require_roles(*roles: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    permitted = frozenset(roles)

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            client: MyDetailsClient = platform_client()
            # Roles are fetched on every request; errors (including Unauthorized) propagate.
            details = client.my_details(get_context(request))
            g.current_user = details
            if not user_has_role(details, permitted):
                g.missing_roles = sorted(permitted)
                abort(403)
            return fn(*args, **kwargs)

        return wrapped

    return decorator
