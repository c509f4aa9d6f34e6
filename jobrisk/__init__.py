# jobrisk/__init__.py
from __future__ import annotations
import logging
from datetime import datetime, timezone
from flask import Flask, flash, jsonify, redirect, request, url_for
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

from .config import get_config
from .extensions import init_openai, init_assessment_client, init_view_states
from .routes import register_routes

def create_app(env: str | None = None, openai_client=None) -> Flask:
    app = Flask(__name__, static_folder="static", static_url_path="/static")
    app.config.from_object(get_config(env))

    # CORS (JSON API only) & logging
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"] or "*"}})
    logging.basicConfig(level=logging.INFO)

    # Clients: the API key is read once here and injected everywhere else
    if openai_client is None:
        openai_client = init_openai(app.config["OPENAI_API_KEY"], timeout=app.config["ASSESSMENT_TIMEOUT_SECONDS"])
    app.config["OPENAI_CLIENT"] = openai_client
    app.config["ASSESSMENT_CLIENT"] = init_assessment_client(openai_client, app.config)
    app.config["VIEW_STATES"] = init_view_states(app.config["ASSESSMENT_CLIENT"], app.config)

    # ---------- Blueprints ----------
    register_routes(app)

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_e):
        message = "The screenshot is too large."
        if request.path.startswith("/api/"):
            return jsonify(error="payload_too_large", message=message), 413
        flash(message, "error")
        return redirect(url_for("main.index"))

    @app.get("/healthz")
    def health():
        return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}

    app.logger.info(
        "jobrisk ready: model=%s grounded_search=%s strict_host_match=%s",
        app.config["OPENAI_MODEL"], app.config["GROUNDED_SEARCH"], app.config["STRICT_HOST_MATCH"],
    )
    return app
