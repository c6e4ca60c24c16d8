"""
Logging configuration and utilities for Entity Intelligence.

Every degraded path in the pipeline (a knowledge source timing out, an
LLM answer that cannot be parsed) is reported through these loggers
rather than raised. All loggers hang off the "entity_intel" root so one
call to setup_logging configures the whole package.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

from entity_intel.config.settings import LoggingSettings

ROOT_LOGGER_NAME = "entity_intel"

_logging_configured = False


def _build_handlers(settings: LoggingSettings, level: int) -> list[logging.Handler]:
    """Handlers for the configured destinations, sharing one formatter."""
    formatter = logging.Formatter(fmt=settings.format, datefmt=settings.date_format)
    handlers: list[logging.Handler] = []

    if settings.log_to_console:
        # stderr keeps stdout clean for JSON output
        handlers.append(logging.StreamHandler(sys.stderr))

    if settings.file_path is not None:
        settings.file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=str(settings.file_path),
            maxBytes=settings.max_file_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        ))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    settings: LoggingSettings | None = None,
    level: str | None = None,
) -> logging.Logger:
    """
    Configure the package logger.

    The first call wins; later calls return the configured logger
    untouched, so library code may call this defensively.

    Args:
        settings: Logging configuration, console-only defaults when None
        level: Level name overriding settings.level (the CLI's --verbose)

    Returns:
        The package root logger.
    """
    global _logging_configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if _logging_configured:
        return logger

    settings = settings or LoggingSettings()
    resolved_level = getattr(logging, (level or settings.level).upper(), logging.INFO)

    logger.handlers.clear()
    logger.setLevel(resolved_level)
    for handler in _build_handlers(settings, resolved_level):
        logger.addHandler(handler)
    logger.propagate = False

    _logging_configured = True
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger under the package root.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Enrichment started")
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Close and drop the package handlers so setup_logging can run again."""
    global _logging_configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    logger.propagate = True
    _logging_configured = False


class LoggerAdapter(logging.LoggerAdapter):
    """
    Appends the adapter's context as [key=value] pairs to each message.

    Example:
        >>> logger = LoggerAdapter(get_logger(__name__), {"candidate": "Python"})
        >>> logger.info("No Wikipedia match")  # "No Wikipedia match [candidate=Python]"
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        if self.extra:
            context = " ".join(f"[{key}={value}]" for key, value in self.extra.items())
            msg = f"{msg} {context}"
        return msg, kwargs


def get_logger_with_context(name: str | None = None, **context: str) -> LoggerAdapter:
    """Get a logger whose messages all carry ``context``."""
    return LoggerAdapter(get_logger(name), context)
