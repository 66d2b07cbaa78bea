"""
Structured Logging Setup

Configures structlog on top of the standard library logging module.
Production uses a lean JSON pipeline; other environments add logger
names and stack info.
"""

import logging
import sys
from typing import Optional

import structlog

from energy_ai.config.settings import Settings, settings as default_settings


def configure_logging(config: Optional[Settings] = None) -> None:
    """Configure structlog and the root stdlib logger."""
    config = config or default_settings

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.log_level),
    )

    # Use simpler processors in production to reduce overhead
    if config.is_production:
        log_processors = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        log_processors = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=log_processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
