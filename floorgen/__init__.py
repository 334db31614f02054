"""
project: floorgen
module: __init__.py
License: MIT

Flask application factory for the floor generation service.

Configuration is sourced from environment variables (optionally loaded from a
``.env`` file) with defaults suitable for development. A local ``instance/``
directory holds runtime files such as the rotating log.
"""

import os

from dotenv import load_dotenv
from flask import Flask, jsonify

from floorgen.generation import ConfigError, FloorConfig, GenerationFailed

__version__ = "0.1.0"

# Load .env if present so SECRET_KEY / FLOORGEN_* can be supplied without
# exporting shell variables during development.
load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def create_app(config_overrides=None) -> Flask:
    """Build the Flask app, register the floor API blueprint and JSON error handlers."""
    app = Flask(__name__, instance_relative_config=True)
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        # Read-only checkouts still serve requests; only file logging is lost.
        pass

    app.config.update(
        SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
        FLOORGEN_CACHE_SIZE=int(os.getenv("FLOORGEN_CACHE_SIZE", "8")),
        FLOORGEN_DISABLE_CACHE=_env_flag("FLOORGEN_DISABLE_CACHE"),
        # Generation defaults for requests that omit a field.
        FLOORGEN_DEFAULTS=FloorConfig.from_env(),
    )
    if config_overrides:
        app.config.update(config_overrides)

    from floorgen.routes.floor_api import bp_floor

    app.register_blueprint(bp_floor)

    @app.errorhandler(ConfigError)
    def _config_error(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(GenerationFailed)
    def _generation_failed(e):
        return jsonify({"error": str(e), "seed": e.seed, "attempts": e.attempts}), 422

    return app


__all__ = ["create_app", "__version__"]
