# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: str | int = "INFO"):
    numeric = (
        level
        if isinstance(level, int)
        else getattr(logging, str(level).upper(), logging.INFO)
    )
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        stream=sys.stdout,
    )
    return structlog.get_logger("ebook")
