# app.py

import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from sqlalchemy import event

# Load environment variables from .env file first
load_dotenv()

# Module imports after load_dotenv() - E402 is intentional
from config import DevelopmentConfig, ProductionConfig, TestingConfig  # noqa: E402
from config.monitoring import (  # noqa: E402
    DevelopmentMonitoringConfig,
    ProductionMonitoringConfig,
    TestingMonitoringConfig,
)
from config.validation import validate_and_exit  # noqa: E402
from peoplefinder.models import db  # noqa: E402
from peoplefinder.routes import init_routes  # noqa: E402
from peoplefinder.services.completion_service import init_completion_service  # noqa: E402
from peoplefinder.utils.logging_config import setup_logging  # noqa: E402

logger = logging.getLogger(__name__)

CONFIGS = {
    "production": (ProductionConfig, ProductionMonitoringConfig),
    "testing": (TestingConfig, TestingMonitoringConfig),
    "development": (DevelopmentConfig, DevelopmentMonitoringConfig),
}


def _configure_sqlite_connection_factory(*, enable_foreign_keys: bool):
    """Return a connection hook applying concurrency-friendly pragmas."""

    def _configure_sqlite_connection(dbapi_connection, connection_record):  # pragma: no cover - instrumentation
        try:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            if enable_foreign_keys:
                cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
        except Exception as exc:
            logger.warning("Failed to apply SQLite PRAGMAs: %s", exc)

    return _configure_sqlite_connection


def create_app(flask_env=None, config_overrides=None):
    """
    Application factory.

    Args:
        flask_env: development, testing or production; defaults to FLASK_ENV
        config_overrides: Mapping applied on top of the environment config
    """
    flask_env = flask_env or os.environ.get("FLASK_ENV", "development")
    if flask_env == "production":
        validate_and_exit(flask_env)

    app = Flask(__name__)
    config_class, monitoring_class = CONFIGS.get(flask_env, CONFIGS["development"])
    app.config.from_object(config_class)
    app.config.from_object(monitoring_class)
    if config_overrides:
        app.config.update(config_overrides)

    if flask_env == "development":
        os.makedirs(DevelopmentConfig.instance_path, exist_ok=True)

    setup_logging(app)
    db.init_app(app)

    with app.app_context():
        engine = db.engine
        if engine.url.drivername.startswith("sqlite"):
            if not getattr(engine, "_sqlite_pragmas_configured", False):
                pragma_hook = _configure_sqlite_connection_factory(
                    enable_foreign_keys=not app.config.get("TESTING", False)
                )
                event.listen(engine, "connect", pragma_hook)
                engine._sqlite_pragmas_configured = True  # type: ignore[attr-defined]
        if app.config.get("CREATE_TABLES_ON_STARTUP", False):
            db.create_all()

    # Registry, policy and buckets are built once here; bad configuration fails startup
    init_completion_service(app)
    init_routes(app)
    _register_error_handlers(app)
    return app


def _register_error_handlers(app):
    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Unhandled error: {error}")
        return jsonify({"error": "Internal server error"}), 500


if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port)
