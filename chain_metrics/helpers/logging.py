"""Logger module."""

import logging
import os
import sys

import colorlog

from chain_metrics.helpers.constants import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV


loggers: dict[str, logging.Logger] = {}

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _resolve_level(log_level: str | None) -> int:
    # Unrecognised LOG_LEVEL values fall back to the default
    if not log_level:
        env_level = (os.getenv(LOG_LEVEL_ENV) or "").upper()
        return LOG_LEVELS.get(env_level, LOG_LEVELS[DEFAULT_LOG_LEVEL])

    name = log_level.upper()
    if name not in LOG_LEVELS:
        err_msg = f"Invalid log level: {name}"
        raise ValueError(err_msg)
    return LOG_LEVELS[name]


def get_logger(
    name: str,
    log_handler: str = "stderr",
    log_level: str | None = None,
    log_color: bool = False,
) -> logging.Logger:
    """Get logger.

    Args:
        name: The name of the logger.
        log_handler: The log handler type ('stdout' or 'stderr').
        log_level: The logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR',
            'CRITICAL'). Falls back to the LOG_LEVEL environment variable,
            then to WARNING. An unrecognised LOG_LEVEL is ignored.
        log_color: Whether to use colored output.

    Returns:
        logging.Logger: Configured logger instance.

    Raises:
        ValueError: If invalid handler or log level is provided.
    """
    if name in loggers:
        return loggers[name]

    streams = {"stdout": sys.stdout, "stderr": sys.stderr}
    if log_handler not in streams:
        err_msg = f"Invalid handler: {log_handler}"
        raise ValueError(err_msg)

    level = _resolve_level(log_level)

    logger = logging.getLogger(name) if not log_color else colorlog.getLogger(name)

    if not log_color:
        handler = logging.StreamHandler(streams[log_handler])
    else:
        handler = colorlog.StreamHandler(streams[log_handler])

    logger.setLevel(level)
    handler.setLevel(level)

    if not log_color:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s %(asctime)s - %(name)s - %(levelname)s - %(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    loggers[name] = logger
    return logger


def set_log_level(log_level: str | None = None) -> None:
    """Change the level of every logger created through get_logger.

    Args:
        log_level: The new logging level name. When omitted the level is
            re-read from LOG_LEVEL, falling back to WARNING.

    Raises:
        ValueError: If an explicit log level is not recognised.
    """
    level = _resolve_level(log_level)
    for logger in loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


__all__ = ["LOG_LEVELS", "get_logger", "set_log_level"]
