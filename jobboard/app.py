import logging
from typing import Any, Mapping, Optional

from flask import Flask, jsonify
from flask_cors import CORS
from flasgger import Swagger
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from jobboard import config
from jobboard.db import Base, init_engine
from jobboard.errors import ApiError, StoreError
from jobboard.logging_config import setup_logging
from jobboard.routes.admin_routes import bp as admin_bp
from jobboard.routes.analytics_routes import bp as analytics_bp
from jobboard.routes.job_routes import bp as job_bp
from jobboard.routes.upload_routes import bp as upload_bp
from jobboard.routes.visitor_routes import bp as visitor_bp
from jobboard.services.cleanup import start_cleanup_scheduler
import jobboard.models  # noqa: F401  registers tables on Base.metadata

logger = logging.getLogger(__name__)

def _failure(message: str, status: int):
    return jsonify({"success": False, "message": message}), status

def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        return _failure(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return _failure(e.description or e.name, e.code or 500)

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(e: SQLAlchemyError):
        logger.exception("Store error")
        err = StoreError("Database error")
        return _failure(err.message, err.status_code)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        return _failure("Internal server error", 500)

def create_app(overrides: Optional[Mapping[str, Any]] = None):
    app = Flask(__name__)
    app.config.update(
        DB_URL=config.DB_URL,
        JWT_SECRET=config.JWT_SECRET,
        TOKEN_MAX_AGE=config.TOKEN_MAX_AGE,
        CORS_ORIGINS=config.CORS_ORIGINS,
        UPLOAD_DIR=config.UPLOAD_DIR,
        SITE_NAME=config.SITE_NAME,
        RETENTION_DAYS=config.RETENTION_DAYS,
        CLEANUP_HOUR=config.CLEANUP_HOUR,
        CLEANUP_MINUTE=config.CLEANUP_MINUTE,
        CLEANUP_TIMEZONE=config.CLEANUP_TIMEZONE,
        SCHEDULER_ENABLED=config.SCHEDULER_ENABLED,
        LOG_LEVEL=config.LOG_LEVEL,
        LOG_DIR=config.LOG_DIR,
    )
    if overrides:
        app.config.update(overrides)

    setup_logging(app.config["LOG_LEVEL"], app.config["LOG_DIR"])
    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)

    engine = init_engine(app.config["DB_URL"])
    Base.metadata.create_all(engine)

    app.register_blueprint(job_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(visitor_bp)
    app.register_blueprint(analytics_bp)
    register_error_handlers(app)

    @app.get("/")
    def index():
        return jsonify({"success": True, "message": "Job board API is running"})

    # simple Swagger config (shows at /apidocs)
    Swagger(app, template={
        "info": {"title": "Job Board API", "version": "1.0.0"},
        "basePath": "/",
        "securityDefinitions": {
            "Bearer": {"type": "apiKey", "name": "Authorization", "in": "header"},
        },
    })

    if app.config["SCHEDULER_ENABLED"]:
        app.extensions["cleanup_scheduler"] = start_cleanup_scheduler(
            hour=app.config["CLEANUP_HOUR"],
            minute=app.config["CLEANUP_MINUTE"],
            timezone=app.config["CLEANUP_TIMEZONE"],
            days=app.config["RETENTION_DAYS"],
        )

    logger.info("App created, store at %s", engine.url.render_as_string(hide_password=True))
    return app
