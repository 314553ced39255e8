"""HabitLoop application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from flask import Flask, jsonify

from . import cli as _cli
from .config import BaseConfig, DevConfig, TestConfig

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestConfig,
    "default": BaseConfig,
}


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    """Yield blueprint import paths in registration order.

    Shared habits go before habits so ``/habits/shared`` is not read as a
    habit id.
    """

    yield "habitloop.blueprints.shared"
    yield "habitloop.blueprints.habits"
    yield "habitloop.blueprints.bad_habits"
    yield "habitloop.blueprints.distractions"
    yield "habitloop.blueprints.notifications"


def create_app(config_name: str | None = None, config: BaseConfig | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_obj = config or _resolve_config(config_name)()
    app.config.from_object(config_obj)
    app.config["HABITLOOP_CONFIG"] = config_obj

    # Import lazily so importing the package does not build the engine.
    from .context import create_app_context
    from .extensions import init_app
    from .logging_config import setup_logging

    setup_logging(config_obj)
    init_app(app, create_app_context(config_obj))
    _register_error_handlers(app)
    _register_blueprints(app)
    _cli.init_app(app)

    @app.get("/health")
    def health():
        return jsonify({"success": True, "status": "ok"})

    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


def _register_error_handlers(app: Flask) -> None:
    from werkzeug.exceptions import HTTPException

    from .devtools import error_detail, in_dev_mode
    from .errors import HabitLoopError
    from .logging_config import get_logger

    logger = get_logger("http")

    @app.errorhandler(HabitLoopError)
    def _handle_domain_error(exc: HabitLoopError):
        payload = exc.to_dict()
        if exc.client_error:
            logger.warning(
                "Request rejected", extra={"code": exc.code, "error_message": exc.message}
            )
        else:
            logger.error("Request failed", extra={"code": exc.code}, exc_info=exc)
            config = app.config["HABITLOOP_CONFIG"]
            if in_dev_mode(config):
                payload["detail"] = error_detail(exc)
            else:
                payload["message"] = "Something went wrong. Please try again later."
        return jsonify(payload), exc.status_code

    @app.errorhandler(HTTPException)
    def _handle_http_error(exc: HTTPException):
        return (
            jsonify(
                {
                    "success": False,
                    "code": exc.name.upper().replace(" ", "_"),
                    "kind": "client" if (exc.code or 500) < 500 else "server",
                    "message": exc.description,
                }
            ),
            exc.code or 500,
        )

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        logger.error("Unhandled error", exc_info=exc)
        payload = {
            "success": False,
            "code": "SERVER_ERROR",
            "kind": "server",
            "message": "Something went wrong. Please try again later.",
        }
        if in_dev_mode(app.config["HABITLOOP_CONFIG"]):
            payload["detail"] = error_detail(exc)
        return jsonify(payload), 500


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "create_app"]
