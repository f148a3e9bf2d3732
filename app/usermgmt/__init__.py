import logging
import os

from flask import Flask, request
from dotenv import load_dotenv

from app.usermgmt.config import load_config
from app.usermgmt.context import get_context
from app.usermgmt.errors import register_error_handlers
from app.usermgmt.platform import init_platform
from app.usermgmt.routes import bp as routes_bp
from app.usermgmt.modules.account.admin import bp as account_bp
from app.usermgmt.modules.users.admin import bp as users_bp
from app.usermgmt.modules.teams.admin import bp as teams_bp


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder=None)
    app.config.from_mapping(load_config())

    @app.context_processor
    def _inject_page() -> dict:
        return {
            "sirius_url": app.config["SIRIUS_PUBLIC_URL"],
            "prefix": app.config["PREFIX"],
            "path": request.path,
            "xsrf_token": get_context(request).xsrf_token,
        }

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not (os.environ.get("SIRIUS_URL") or "").strip():
            raise RuntimeError("SIRIUS_URL is required in production.")

    init_platform(app)

    prefix = app.config["PREFIX"]
    app.register_blueprint(routes_bp, url_prefix=prefix)
    app.register_blueprint(account_bp, url_prefix=prefix)
    app.register_blueprint(users_bp, url_prefix=prefix)
    app.register_blueprint(teams_bp, url_prefix=prefix)

    register_error_handlers(app)

    logging.getLogger(__name__).info(
        "create_app() complete; prefix=%r platform=%s", prefix, app.config["SIRIUS_URL"]
    )

    return app
