"""
Logging Configuration
====================

Structured logging with structlog on top of the standard library.
Console output is human readable outside production and JSON in production;
rotating log files are written only when a log directory is configured.
Request-scoped values bound with ``structlog.contextvars`` are merged into
every event.
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Dict, Any, List, Optional, TYPE_CHECKING
import structlog
from structlog.types import Processor

from .settings import get_settings

if TYPE_CHECKING:
    from .settings import Settings

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Chatty third-party loggers and the level they are capped at
LIBRARY_LOG_LEVELS = {
    "uvicorn": "INFO",
    "aiohttp": "WARNING",
    "playwright": "WARNING",
    "celery": "WARNING",
}


def setup_logging(settings: Optional["Settings"] = None) -> None:
    """Configure structlog and standard library logging."""
    settings = settings or get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.environment == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.environment == "development"))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    ensure_log_directories(settings)
    logging.config.dictConfig(get_logging_config(settings))


def _file_handler(path: Path, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filename": str(path),
        "maxBytes": LOG_FILE_MAX_BYTES,
        "backupCount": LOG_FILE_BACKUPS,
    }


def get_logging_config(settings: "Settings") -> Dict[str, Any]:
    """
    Build the ``logging.config.dictConfig`` dictionary.

    Args:
        settings: Application settings

    Returns:
        Logging configuration dictionary
    """
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.log_level,
            "formatter": "json" if settings.environment == "production" else "plain",
            "stream": sys.stdout,
        },
    }
    root_handlers: List[str] = ["console"]

    if settings.log_dir is not None and settings.environment != "testing":
        handlers["file"] = _file_handler(settings.log_dir / "wallpaper.log", settings.log_level)
        handlers["error_file"] = _file_handler(settings.log_dir / "error.log", "ERROR")
        root_handlers.extend(["file", "error_file"])

    loggers: Dict[str, Any] = {
        "": {
            "level": settings.log_level,
            "handlers": root_handlers,
            "propagate": False,
        },
    }
    for name, level in LIBRARY_LOG_LEVELS.items():
        loggers[name] = {"level": level, "handlers": ["console"], "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            # structlog has already rendered the event
            "plain": {"format": "%(message)s"},
            "detailed": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": loggers,
    }


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def ensure_log_directories(settings: Optional["Settings"] = None) -> None:
    """Create the log directory when file logging is enabled."""
    settings = settings or get_settings()
    if settings.log_dir is not None and settings.environment != "testing":
        settings.log_dir.mkdir(parents=True, exist_ok=True)
