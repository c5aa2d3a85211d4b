"""
Structured Logging

Every ledger mutation emits one structured event so a run can be
reconstructed from the log alone. Logging is local only; there is no
persisted history of balances.
"""

import logging
from typing import Optional

import structlog

from pocketledger.config import LedgerSettings, get_settings


_configured = False


def configure_logging(settings: Optional[LedgerSettings] = None) -> None:
    """
    Configure structlog for the process.
    
    Safe to call more than once; the last call wins.
    """
    global _configured
    
    settings = settings or get_settings().ledger
    logging.basicConfig(format="%(message)s", level=settings.log_level)
    logging.getLogger("pocketledger").setLevel(settings.log_level)
    
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
    
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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger, configuring structlog on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
