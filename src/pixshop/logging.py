"""Centralized logging configuration using loguru.

The studio logs through loguru everywhere. ``setup_logging`` installs the
sinks once at startup and routes records emitted by libraries that use the
standard ``logging`` module (httpx, httpcore) into the same sinks.

Example:
    from pixshop.logging import setup_logging

    setup_logging(level="DEBUG")

    from loguru import logger
    logger.info("Studio started")

"""

import logging
import sys
from typing import Any

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Library loggers that are chatty at INFO and below
QUIET_LIBRARIES = ("httpx", "httpcore")


class InterceptHandler(logging.Handler):
    """Forward standard-library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: str | None = None,
) -> Any:
    """Configure loguru for the studio.

    Args:
        level: Minimum log level to capture. One of: DEBUG, INFO, WARNING, ERROR, CRITICAL.
        json_output: If True, serialize records as JSON lines.
        log_file: Optional file path to also write logs to.

    Returns:
        The configured loguru logger instance.

    """
    logger.remove()

    if json_output:
        logger.add(sys.stderr, format="{message}", serialize=True, level=level)
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        logger.add(
            log_file,
            format=CONSOLE_FORMAT,
            level=level,
            rotation="10 MB",
            retention="7 days",
            compression="gz",
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.DEBUG if level == "DEBUG" else logging.WARNING)

    return logger


def operation_logger(operation: str, token: int) -> Any:
    """Return a logger bound to one edit operation.

    Args:
        operation: Short operation name (e.g. "filter", "preset").
        token: Session token the operation was started under.

    """
    return logger.bind(operation=operation, session_token=token)
