"""Structured logging setup."""

import logging
import sys
from typing import Union

import structlog


def configure_logging(level: Union[str, int] = logging.INFO) -> None:
    """Configure structlog and the stdlib root handler.

    Library modules only call ``structlog.get_logger()``; applications
    (the CLI, services embedding the core) call this once at startup.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer()
            if sys.stderr.isatty()
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
