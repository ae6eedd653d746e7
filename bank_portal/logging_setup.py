"""
Structured logging configuration.

structlog is configured once, when this module is first imported (main.py
imports it before anything else logs). Every module then grabs a logger with
``structlog.get_logger()`` and logs key/value events:

    logger.info("transfer_submitted", transfer_id=str(transfer.id), amount_cents=500)

Request-scoped values (request_id, method, path) are bound into structlog's
contextvars by RequestIDMiddleware (middleware.py), so they appear on every event
logged while that request is being served.

Never pass passwords, tokens, card numbers or CVVs as log fields.
"""

import logging

import structlog

from bank_portal.config import settings

_LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _get_log_level() -> int:
    return _LOG_LEVEL_MAP.get(settings.LOG_LEVEL.upper(), logging.INFO)


def configure_logging() -> None:
    """Install the processor chain: contextvars, level, ISO timestamp, renderer."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
            if settings.LOG_FORMAT == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()
