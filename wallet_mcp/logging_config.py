"""
Structured logging configuration using structlog.

Every log line carries the correlation fields bound through
``structlog.contextvars`` (``http_request_id`` from the HTTP middleware,
``request_id``/``method``/``tool`` from the dispatcher). Output is JSON lines
unless the console renderer is requested or the level is DEBUG.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import settings

_NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def _select_renderer(level: int, log_format: str) -> structlog.types.Processor:
    if log_format == "console" or level == logging.DEBUG:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Override log level (default: ``settings.log_level``)
        log_format: ``json`` or ``console`` (default: ``settings.log_format``)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    renderer = _select_renderer(level, (log_format or settings.log_format).lower())

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # uvicorn and httpx log through stdlib; render them the same way
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
