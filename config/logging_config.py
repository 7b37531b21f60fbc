"""Logging setup shared by the console and batch callers."""

import logging
from typing import Optional

from config.defaults import LOG_FORMAT, LOG_LEVEL


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a single stream handler to the root logger.

    Safe to call on every Streamlit rerun: an existing handler is reused.
    """
    root = logging.getLogger()
    root.setLevel((level or LOG_LEVEL).upper())

    if not any(getattr(h, "_seat_allocation", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._seat_allocation = True
        root.addHandler(handler)

    return root
