"""Structured logging configuration for sitegraph.

Planning runs inside CDK synthesis and CI jobs whose output is collected as
JSON lines, so logs are rendered as JSON with ISO timestamps.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def configure_logging(level: str | None = None) -> None:
    """Configure structured JSON logging.

    Sets up:
    - JSON output on stderr, keeping stdout free for rendered templates
    - ISO timestamp format
    - Log level filtering (INFO by default, configurable via LOG_LEVEL env var)
    - Exception formatting

    Args:
        level: Log level name; overrides the LOG_LEVEL environment variable
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level, logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("resource_graph_built", domain_name="example.com", resources=9)
    """
    return structlog.get_logger(name)
