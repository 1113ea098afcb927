# backend/sanctus/__init__.py
import time
from datetime import timedelta

from flask import Flask, g, request

from .config import Config
from .errors import register_error_handlers
from .extensions import db, migrate
from .logging_setup import bind_request_context, clear_request_context, configure_logging, get_logger
from .services.token_service import TokenService


logger = get_logger(__name__)


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Refuse to start without a signing secret
    if not app.config.get("JWT_SECRET"):
        raise RuntimeError("JWT_SECRET must be set")

    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if not uri.startswith("sqlite"):
        app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", {
            "pool_size": app.config["DB_POOL_SIZE"],
            "pool_pre_ping": True,
        })

    configure_logging(app.config["LOG_LEVEL"], app.config["LOG_FORMAT"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Signing secret is frozen here; nothing reads it from the environment later
    app.extensions["sanctus_tokens"] = TokenService(
        app.config["JWT_SECRET"],
        algorithm=app.config["JWT_ALGORITHM"],
        ttl=timedelta(hours=app.config.get("JWT_TTL_HOURS", 24)),
    )

    register_error_handlers(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.structure import structure_bp
    from .routes.parishioners import parishioners_bp
    from .routes.finance import finance_bp
    from .routes.users import users_bp
    from .routes.rbac import rbac_bp
    from .routes.audit import audit_bp
    from .routes.sync import sync_bp
    from .routes.settings import settings_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(structure_bp)
    app.register_blueprint(parishioners_bp)
    app.register_blueprint(finance_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(rbac_bp)
    app.register_blueprint(audit_bp)
    app.register_blueprint(sync_bp)
    app.register_blueprint(settings_bp)

    @app.before_request
    def start_request_log():
        g.request_started = time.time()
        bind_request_context(request.method, request.path, request.headers.get("X-Request-ID"))

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    @app.after_request
    def log_request(response):
        started = g.get("request_started")
        logger.info(
            "request_finished",
            status=response.status_code,
            duration_ms=round((time.time() - started) * 1000, 2) if started else None,
        )
        return response

    @app.teardown_request
    def end_request_log(exc):
        clear_request_context()

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
