"""Logging configuration for the search backend."""

import logging
import sys

from settings.config import log_level


def setup_logging() -> None:
    """Configure process-wide logging.

    Level comes from FSCSEARCH_LOG_LEVEL (default INFO). Output goes to stdout.
    """
    logging.basicConfig(
        level=getattr(logging, log_level(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
