from __future__ import annotations

from flask import Flask, current_app

from app.usermgmt.platform.client import Context, PlatformClient
from app.usermgmt.platform.errors import (
    ClientError,
    PlatformError,
    StatusError,
    Unauthorized,
    ValidationError,
    ValidationErrors,
)


def init_platform(app: Flask) -> None:
    app.extensions["platform_client"] = PlatformClient(
        base_url=app.config["SIRIUS_URL"],
        timeout_seconds=app.config["PLATFORM_TIMEOUT_SECONDS"],
    )


def platform_client(app: Flask | None = None):
    """
    Shared platform client. Safe to reuse across requests; holds no per-user state.
    """
    if app is None:
        app = current_app
    return app.extensions["platform_client"]


__all__ = [
    "ClientError",
    "Context",
    "PlatformClient",
    "PlatformError",
    "StatusError",
    "Unauthorized",
    "ValidationError",
    "ValidationErrors",
    "init_platform",
    "platform_client",
]
