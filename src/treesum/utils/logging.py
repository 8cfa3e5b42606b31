"""Logging configuration using loguru.

Console logging goes to stderr: stdout is reserved for the
checksum report so it can be piped or redirected cleanly.
"""

import logging
import sys

from loguru import logger

from treesum.config.models import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class _InterceptHandler(logging.Handler):
    """Route standard library logging (asyncio, concurrent.futures) through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging-module frames so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(config: LoggingConfig, verbosity: int = 0) -> None:
    """
    Configure loguru logger based on configuration.

    Args:
        config: LoggingConfig with level, format, and file settings.
        verbosity: Count of ``-v`` flags; 1 lowers the console level to
            INFO, 2 or more to DEBUG. Never raises the configured level.
    """
    logger.remove()

    level = config.level
    if verbosity >= 2:
        level = "DEBUG"
    elif verbosity == 1 and level in ("WARNING", "ERROR"):
        level = "INFO"

    serialize = config.format == "json"
    fmt = "{message}" if serialize else CONSOLE_FORMAT

    logger.add(
        sys.stderr,
        format=fmt,
        level=level,
        serialize=serialize,
        colorize=not serialize,
    )

    if config.file:
        logger.add(
            config.file,
            format=fmt,
            level=config.level,
            serialize=serialize,
            rotation=config.rotation,
            retention=config.retention,
            compression="gz",
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    logger.debug("Logging configured: level={} format={}", level, config.format)
