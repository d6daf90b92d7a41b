"""Geo-optimization engine for field sales visit planning."""

import logging

from .config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for scripts using the configured level."""

    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["configure_logging", "settings"]
