"""Logging setup for the command line tool."""
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """Send ``iam_dump`` log records at ``level`` or above to stderr."""

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level '{level}'")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)
    # botocore is chatty at DEBUG
    if numeric_level <= logging.DEBUG:
        logging.getLogger("botocore").setLevel(logging.INFO)


__all__ = ["LOG_FORMAT", "configure_logging"]
