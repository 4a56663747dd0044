"""Logging setup for the metrics dashboard."""

import logging
import sys
from typing import Optional
from pythonjsonlogger import jsonlogger

from ..config import config

ROOT_LOGGER_NAME = "metrics_dashboard"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Optional[str] = None) -> int:
    return getattr(logging, (level or config.log_level).upper(), logging.INFO)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name. If None, uses the package logger.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name or ROOT_LOGGER_NAME)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    log_level = _resolve_level()
    logger.setLevel(log_level)

    # stderr keeps stdout clean for JSON output
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)

    # JSON lines in prod, readable lines in dev
    if config.environment == "prod":
        formatter = jsonlogger.JsonFormatter(JSON_LOG_FORMAT, datefmt=DATE_FORMAT)
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def set_log_level(level: str) -> None:
    """Change the level of every logger created by get_logger in this package."""
    log_level = _resolve_level(level)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if not isinstance(logger, logging.Logger):
            continue
        if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
            logger.setLevel(log_level)
            for handler in logger.handlers:
                handler.setLevel(log_level)
