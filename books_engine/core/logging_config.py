# books_engine/core/logging_config.py

import logging
import sys

from loguru import logger

from books_engine.config.settings import settings

# stdlib logger names used by the domain models and services
ENGINE_LOGGERS = (
    "amounts",
    "documents",
    "line_calculator",
    "tax_split",
    "document_totals",
    "payment_allocation",
)


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record):
        level = record.levelname
        try:
            level = logger.level(level).name
        except Exception:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(level: str | None = None, sink=sys.stdout) -> None:
    """
    Configure loguru as the main logger with colored, structured logs.
    Also redirect stdlib logging (the engine's service loggers) to loguru.
    """
    if level is None:
        level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL
    level = level.upper()

    # Remove default loguru handler
    logger.remove()

    logger.add(
        sink,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
        "<level>{message}</level>",
        level=level,
        colorize=sink is sys.stdout,
        backtrace=False,
        diagnose=False,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.NOTSET, force=True)
    for name in ENGINE_LOGGERS:
        engine_logger = logging.getLogger(name)
        engine_logger.handlers = [InterceptHandler()]
        engine_logger.propagate = False
        engine_logger.setLevel(level)
