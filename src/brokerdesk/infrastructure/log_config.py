# src/brokerdesk/infrastructure/log_config.py
"""
Centralized logging configuration.

Usage:
    from brokerdesk.infrastructure.log_config import setup_logging
    setup_logging("DEBUG")   # Call once at startup
"""

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# HTTP client chatter from supabase-py; only warnings are interesting.
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def _parse_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: Union[str, int] = "INFO") -> None:
    """Configure the root logger once and quiet HTTP client loggers."""
    root = logging.getLogger()
    root.setLevel(_parse_level(level))

    if not any(getattr(h, "_brokerdesk", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._brokerdesk = True
        root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
