from flask import Blueprint, redirect, url_for

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    return redirect(url_for("account.my_details"))


@bp.get("/health-check")
def health_check():
    """Liveness probe. Never touches the platform."""
    return "ok", 200
