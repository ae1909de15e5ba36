"""Application logging setup.

Every module logs through ``logging.getLogger(__name__)``; this module is the
single place that decides format, level and handler.
"""

from __future__ import annotations

import logging
import sys
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOG_LEVELS: Final[dict] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(level: str = "INFO", name: str = "expense_dashboard") -> logging.Logger:
    """Configure root logging and return the package logger.

    Unknown level names fall back to ``INFO``. Streamlit reruns the page
    script on every interaction, so reconfiguring is forced rather than
    stacking handlers.
    """
    log_level = _LOG_LEVELS.get(level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(log_level, logging.INFO))

    return logging.getLogger(name)
