# peoplefinder/utils/logging_config.py
"""
Logging setup for the Flask application.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per log record"""

    def format(self, record):
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _build_formatter(log_format):
    if log_format == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(app):
    """
    Configure ``app.logger`` from LOG_* settings.

    Safe to call more than once; handlers installed by a previous call are
    replaced rather than duplicated.
    """
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = _build_formatter(app.config.get("LOG_FORMAT", "text"))

    for handler in list(app.logger.handlers):
        if getattr(handler, "_peoplefinder_handler", False):
            app.logger.removeHandler(handler)
            handler.close()

    handlers = []
    if app.config.get("ENABLE_CONSOLE_LOGGING", True):
        handlers.append(logging.StreamHandler())

    if app.config.get("ENABLE_FILE_LOGGING", False):
        log_dir = app.config.get("LOG_DIR", "logs")
        try:
            os.makedirs(log_dir, exist_ok=True)
            handlers.append(
                RotatingFileHandler(
                    os.path.join(log_dir, "peoplefinder.log"),
                    maxBytes=app.config.get("LOG_FILE_MAX_BYTES", 10485760),
                    backupCount=app.config.get("LOG_FILE_BACKUP_COUNT", 10),
                )
            )
        except OSError as exc:
            app.logger.warning("File logging disabled, cannot write to %s: %s", log_dir, exc)

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler._peoplefinder_handler = True
        app.logger.addHandler(handler)

    app.logger.setLevel(level)
    return app.logger
