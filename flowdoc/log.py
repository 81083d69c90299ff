"""Logging configuration for FlowDoc."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(debug: Optional[bool] = None) -> None:
    """Configure stdout logging at DEBUG or INFO.

    When ``debug`` is None the level follows ``Settings.debug``.
    """
    if debug is None:
        from flowdoc.config import get_settings
        debug = get_settings().debug
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
