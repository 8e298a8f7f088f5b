"""Structured logging configuration for the BusTracker API"""

import logging
import sys
from typing import Optional

import structlog

from .config import settings


def configure_logging(service_name: str, level: Optional[str] = None):
    """Configure structured logging for the service

    Args:
        service_name: Name bound to every log line (e.g., "bustracker-api")
        level: Log level (default: settings.log_level)
    """
    log_level = (level or settings.log_level).upper()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service=service_name)

    return structlog.get_logger()


def get_logger(name: Optional[str] = None):
    """Get a logger instance"""
    return structlog.get_logger(name)
