"""
Flask application factory and server entry-point.
"""

import sys
import time
import traceback

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from medbook.config import Settings, load_settings
from medbook.database import DocumentStore, init_engine
from medbook.api.routes import register_routes
from medbook.responses import ApiError, UnclassifiedError, error_body


def register_error_handlers(app):
    """Re-express every failure as an error envelope."""

    @app.errorhandler(ApiError)
    def api_error(e):
        body, status = e.to_response()
        return jsonify(body), status

    @app.errorhandler(404)
    def not_found(e):
        return jsonify(error_body("Endpoint not found")), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify(error_body("Method not allowed")), 405

    @app.errorhandler(SQLAlchemyError)
    def persistence_error(e):
        print(f"[ERROR] Persistence failure on {request.method} {request.path}: {e}",
              file=sys.stderr)
        traceback.print_exc()
        body, status = UnclassifiedError().to_response()
        return jsonify(body), status

    @app.errorhandler(Exception)
    def unhandled(e):
        if isinstance(e, HTTPException):
            return jsonify(error_body(e.description or e.name)), e.code
        print(f"[ERROR] Unhandled error on {request.method} {request.path}: {e}",
              file=sys.stderr)
        traceback.print_exc()
        body, status = UnclassifiedError().to_response()
        return jsonify(body), status


def register_request_logging(app):
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get("request_started")
        elapsed = (time.perf_counter() - started) * 1000 if started else 0.0
        line = f"{request.method} {request.path} -> {response.status_code} ({elapsed:.1f} ms)"
        if response.status_code >= 400:
            print(f"[WARN] {line}", file=sys.stderr)
        else:
            print(f"[request] {line}")
        return response


def create_app(settings: Settings = None):
    """Build and return a fully configured Flask application."""
    settings = settings or load_settings()

    app = Flask(__name__)
    CORS(app, origins=[settings.frontend_url], supports_credentials=True)

    # ── Initialise shared resources ──────────────────────────────────
    try:
        print("[init] Initializing document store...")
        engine = init_engine(settings.db_uri)
        store = DocumentStore(engine)
        print("[init] ✓ API server ready")
    except Exception as e:
        print(f"[FATAL] Failed to initialize: {e}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)

    app.config["SETTINGS"] = settings
    app.config["STORE"] = store

    # ── Register routes ──────────────────────────────────────────────
    register_routes(app, store)
    register_error_handlers(app)
    register_request_logging(app)

    return app


def main():
    """Run the development server."""
    print("=" * 60)
    print("MedBook Portal – REST API Server")
    print("=" * 60)

    settings = load_settings()
    app = create_app(settings)

    debug = settings.env == "development"

    print(f"\n[server] Starting Flask API on {settings.host}:{settings.port}")
    print(f"[server] Environment: {settings.env}")
    print(f"[server] CORS origin: {settings.frontend_url}")
    print(f"[server] Token expiry: {settings.token_expiry_hours} hours")
    print("\n" + "=" * 60)

    app.run(host=settings.host, port=settings.port, debug=debug, threaded=True)


if __name__ == "__main__":
    main()
