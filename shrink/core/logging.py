"""
Logging setup.

Everything ends up in loguru: application modules log through
``logging.getLogger(__name__)`` and an ``InterceptHandler`` forwards those
records, along with uvicorn's, to the loguru sinks configured here.
"""

import logging
import os
import sys
from typing import Any, Dict

from loguru import logger

from shrink.core.config import settings

# Loggers that install their own handlers and must be pointed at loguru explicitly
SERVER_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi")


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _file_sink_options(level: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "level": level,
        "rotation": settings.LOG_ROTATION,
        "retention": settings.LOG_RETENTION,
        "compression": "gz",
        "enqueue": True,
    }
    if settings.LOG_JSON:
        options["serialize"] = True
    else:
        options["format"] = settings.LOG_FORMAT
    return options


def setup_logging():
    """
    Configure loguru sinks and route standard logging into them.

    Returns the loguru logger so callers can use it directly.
    """
    level = settings.LOG_LEVEL.upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=settings.LOG_FORMAT,
        backtrace=settings.DEBUG,
        diagnose=settings.DEBUG,
    )

    if settings.LOG_TO_FILE:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        logger.add(os.path.join(settings.LOG_DIR, settings.LOG_FILENAME), **_file_sink_options(level))

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Loggers created before this point keep their own handlers unless reset
    for name, existing in logging.root.manager.loggerDict.items():
        if isinstance(existing, logging.Logger):
            existing.handlers = []
            existing.propagate = True

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = [InterceptHandler()]
        server_logger.propagate = False

    # SQL echo is controlled by DB_ECHO on the engine
    if not settings.DB_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logger
