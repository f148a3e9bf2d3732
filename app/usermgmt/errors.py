from __future__ import annotations

from flask import Flask, current_app, g, redirect, render_template, request
from werkzeug.exceptions import HTTPException

from app.usermgmt.platform import StatusError, Unauthorized

# Codes shown to the user as-is; everything else becomes a 500.
PASS_THROUGH_PLATFORM_CODES = frozenset({403, 404})
PASS_THROUGH_HTTP_CODES = frozenset({400, 403, 404, 405})


class RedirectError(Exception):
    """Stop handling the request and redirect to a path under the mount prefix."""

    def __init__(self, to: str) -> None:
        super().__init__(f"redirect to {to}")
        self.to = to


def _render_error(code: int, message: str):
    return render_template("errors/error.html", code=code, error=message), code


def _log(e: BaseException, *, trace: bool = False) -> None:
    name = request.endpoint or request.path
    if trace:
        current_app.logger.exception("%s: %s", name, e)
    else:
        current_app.logger.error("%s: %s", name, e)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(Unauthorized)
    def _unauthorized(e: Unauthorized):
        return redirect(current_app.config["SIRIUS_PUBLIC_URL"] + "/auth", 302)

    @app.errorhandler(RedirectError)
    def _redirect(e: RedirectError):
        return redirect(current_app.config["PREFIX"] + e.to, 302)

    @app.errorhandler(StatusError)
    def _platform_status(e: StatusError):
        _log(e)
        if e.code in PASS_THROUGH_PLATFORM_CODES:
            return _render_error(e.code, e.title)
        return _render_error(500, e.title)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        code = e.code or 500
        title = f"{code} {e.name}"
        if code == 403:
            missing = getattr(g, "missing_roles", None)
            if missing:
                current_app.logger.warning("Forbidden: endpoint=%s requires one of %s", request.endpoint, missing)
            return _render_error(code, title)
        if code in PASS_THROUGH_HTTP_CODES:
            return _render_error(code, title)
        _log(e)
        return _render_error(500, title)

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        _log(e, trace=True)
        return _render_error(500, "500 Internal Server Error")
