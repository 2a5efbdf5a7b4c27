"""Logging configuration for the storefront.

Levels, file locations and the renderer come from ``Settings``; the
environment name (``ENV``, ``ENVIRONMENT`` or ``PROTEAN_ENV``) picks the
default level and switches to JSON output in production and staging.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

from storefront.config import Settings, load_settings

LOG_FILE = "storefront.log"
ERROR_LOG_FILE = "storefront_error.log"

_LEVEL_BY_ENVIRONMENT = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

# Request lines from the service client are noise below WARNING
_QUIET_LOGGERS = ("httpx", "httpcore", "protean")


def current_environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level(settings: Settings | None = None) -> str:
    """An explicit level in settings wins; otherwise the environment decides."""
    settings = settings or load_settings()
    if settings.log_level:
        return settings.log_level.upper()
    return _LEVEL_BY_ENVIRONMENT.get(current_environment(), "INFO")


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(settings: Settings | None = None) -> None:
    """Route the root logger to stdout and to rotating files under ``settings.log_dir``."""
    settings = settings or load_settings()
    log_level = get_log_level(settings)

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [
        console_handler,
        _rotating_handler(log_dir / LOG_FILE, log_level),
        _rotating_handler(log_dir / ERROR_LOG_FILE, logging.ERROR),
    ]

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def build_processors(environment: str) -> list:
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
    ]

    if environment in ("production", "staging"):
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def setup_structlog() -> None:
    structlog.configure(
        processors=build_processors(current_environment()),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(settings: Settings | None = None) -> None:
    """Configure all logging for the storefront."""
    setup_stdlib_logging(settings)
    setup_structlog()


def add_context(**kwargs: Any) -> None:
    """Bind values (the shopper session id, for one) onto every later log line."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
