"""
Loguru setup shared by the CLI and the web app.

Nothing here runs on import; entry points call ``configure_logger`` (or
``setup_default_logging``) once at startup.
"""

import logging
import sys
from pathlib import Path

from loguru import logger

from lawrence_gis import config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# Libraries that log through the standard logging module
STDLIB_LOGGERS = ("playwright", "uvicorn", "uvicorn.access", "uvicorn.error", "asyncio")


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to loguru."""

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


def intercept_stdlib_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
    for name in STDLIB_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]
        logging.getLogger(name).propagate = False


def configure_logger(log_file: str = config.LOG_FILE, level: str | None = None, log_dir: str = "logs"):
    """
    Replace loguru's default sink with a coloured stderr sink and a rotating
    file sink under ``log_dir``. ``level`` defaults to ``LOG_LEVEL``.
    """
    level = (level or config.LOG_LEVEL).upper()

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level)
    logger.add(
        log_path / log_file,
        rotation="10 MB",
        retention="10 days",
        level=level,
        format=FILE_FORMAT,
        backtrace=True,
        diagnose=True,
    )
    logger.debug("Logging to {path} at {level}", path=log_path / log_file, level=level)


_configured = False


def setup_default_logging():
    global _configured
    if not _configured:
        configure_logger()
        intercept_stdlib_logging()
        _configured = True
