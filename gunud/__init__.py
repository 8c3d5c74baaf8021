"""
project: Gunud
module: __init__.py
License: MIT

Flask application factory and configuration.

The puzzle engine itself lives in :mod:`gunud.dungeon` and is pure; this
module wires it to a small JSON API. Configuration is sourced from
environment variables (optionally via a local ``.env``) with development
defaults.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify

# Load .env if present so GUNUD_* settings can be supplied without exporting
# shell variables during development.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

app.config.update(
    SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
    # Generation overrides read by gunud.dungeon.config.resolve_config
    GUNUD_INCLUDE_HAZARD=os.getenv("GUNUD_INCLUDE_HAZARD", "1") == "1",
    GUNUD_PAR_BUFFER=int(os.getenv("GUNUD_PAR_BUFFER", "1")),
    GUNUD_STRICT_GENERATION=os.getenv("GUNUD_STRICT_GENERATION", "0") == "1",
)

# Register HTTP blueprints once the app object exists
from gunud.routes.puzzle_api import bp_puzzle  # noqa: E402

app.register_blueprint(bp_puzzle)


def create_app():
    """Return the Flask app instance, making sure the instance folder exists."""
    os.makedirs(app.instance_path, exist_ok=True)
    return app


@app.errorhandler(404)
def not_found(e):
    return jsonify({"error": "not found"}), 404


@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal error", "error_id": error_id}), 500
