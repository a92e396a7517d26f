"""Logging configuration."""

import logging


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger for the studio."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    # httpx logs every poll request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
