import logging
import time

import click
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from digital_library.config import Config
from digital_library.errors import AppError
from digital_library.extensions import db, migrate, jwt
from digital_library.utils.timeutil import utcnow, to_iso

__version__ = "2.0.0"


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.config.setdefault("STARTED_AT", time.monotonic())

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # 1) db first, models register their tables on import
    db.init_app(app)
    from digital_library import models  # noqa: F401

    # 2) the rest of the extensions
    migrate.init_app(app, db)
    jwt.init_app(app)
    _register_jwt_handlers()

    # 3) blueprints
    from digital_library.controllers.book_controller import book_bp
    from digital_library.controllers.user_controller import user_bp
    app.register_blueprint(book_bp)
    app.register_blueprint(user_bp)

    _register_index_routes(app)
    _register_error_handlers(app)
    _register_request_logging(app)
    _register_cli(app)

    return app


def _register_jwt_handlers():
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify({"success": False, "message": "Access token is required"}), 401

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return jsonify({"success": False, "message": "Invalid or expired token"}), 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify({"success": False, "message": "Invalid or expired token"}), 401


def _register_index_routes(app):
    @app.get("/")
    def index():
        return jsonify({
            "success": True,
            "message": "Welcome to Digital Library API",
            "version": __version__,
            "description": "A REST API for managing books and users in a digital library",
            "endpoints": {
                "health": "/health",
                "books": "/books",
                "users": "/users",
                "search": "/books/search",
            },
        })

    @app.get("/health")
    def health():
        return jsonify({
            "success": True,
            "status": "healthy",
            "message": "Digital Library API is running",
            "timestamp": to_iso(utcnow()),
            "uptime": round(time.monotonic() - app.config["STARTED_AT"], 3),
            "environment": app.config.get("ENV_NAME", "development"),
        })


def _register_error_handlers(app):
    @app.errorhandler(AppError)
    def _app_error(e):
        if e.status_code >= 500:
            app.logger.error("Error occurred: %s (%s %s)", e.message, request.method, request.path)
        else:
            app.logger.warning("Request failed: %s (%s %s)", e.message, request.method, request.path)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def _not_found(e):
        return jsonify({
            "success": False,
            "message": f"Route {request.method} {request.path} not found",
        }), 404

    @app.errorhandler(HTTPException)
    def _http_error(e):
        return jsonify({"success": False, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def _unexpected(e):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"success": False, "message": "Internal Server Error"}), 500


def _register_request_logging(app):
    @app.before_request
    def _log_request():
        app.logger.info(
            "Incoming request %s %s ip=%s ua=%s",
            request.method,
            request.path,
            request.remote_addr,
            request.headers.get("User-Agent"),
        )


def _register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (development helper; use `flask db upgrade` otherwise)."""
        db.create_all()
        click.echo("Database tables initialized")

    @app.cli.command("create-admin")
    @click.argument("username")
    @click.argument("email")
    @click.password_option()
    def create_admin(username, email, password):
        """Register an admin account."""
        from digital_library.services.auth_service import AuthService

        user = AuthService().register(username, email, password, role="admin")
        click.echo(f"Admin {user.username} created (id={user.id})")
