# logger.py - Centralized logging configuration
import os
import logging
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"


def _file_handler(log_file, level):
    handler = RotatingFileHandler(
        log_file,
        maxBytes=10240,
        backupCount=10,
        encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(level)
    return handler


def _console_handler():
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(
        "%(name)s - %(levelname)s - %(message)s"
    ))
    return handler


def setup_logger(name, log_dir="logs", level=logging.INFO, to_file=True, console=None):
    """Set up a logger with file rotation"""
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if not logger.handlers:
        logger.setLevel(level)

        if to_file:
            os.makedirs(log_dir, exist_ok=True)
            logger.addHandler(_file_handler(os.path.join(log_dir, f"{name}.log"), level))

        if console is None:
            console = os.environ.get("FLASK_ENV") != "production"
        if console:
            logger.addHandler(_console_handler())

    return logger


def setup_app_logging(app):
    """Wire app.logger and the blueprint loggers from the app config."""
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    app.logger.handlers.clear()
    app.logger.setLevel(level)
    app.logger.propagate = False  # Prevent duplicate logs

    if app.config.get("LOG_TO_FILE", True):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)
        app.logger.addHandler(_file_handler(os.path.join(log_dir, "app.log"), level))

    if app.debug or app.config.get("FLASK_ENV") != "production":
        app.logger.addHandler(_console_handler())

    # Blueprint modules log through logging.getLogger(__name__) under "blueprints"
    setup_logger(
        "blueprints",
        log_dir=app.config.get("LOG_DIR", "logs"),
        level=level,
        to_file=app.config.get("LOG_TO_FILE", True),
        console=not app.config.get("TESTING", False),
    )
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    return app.logger
