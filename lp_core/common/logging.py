# lp_core/common/logging.py
"""
Structured logging for the learning platform core.

Every module logs through ``get_logger(__name__)`` and emits key/value events:

    log = get_logger(__name__)
    log.info("ruleset.activated", domain="scoring", ruleset_id=str(rs.id))

Rendering is JSON in production (``LOG_JSON=1``) and console-friendly otherwise.
"""
from __future__ import annotations

import logging
import sys

import structlog

_configured = False


def configure_logging(*, level: str = "info", json: bool = False) -> None:
    global _configured

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Django may already have attached handlers; only add ours once.
    if not _configured:
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=getattr(logging, level.upper(), logging.INFO),
        )
    logging.getLogger("lp_core").setLevel(getattr(logging, level.upper(), logging.INFO))
    _configured = True


def get_logger(name: str):
    return structlog.get_logger(name)
