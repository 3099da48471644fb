"""Logging setup for applications embedding the parser.

The library itself only creates module loggers; call ``configure_logging``
once from the application entry point.
"""

import logging

from core.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging with the level from *settings*."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(settings.log_level)
