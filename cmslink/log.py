"""Logging setup for cms-link.

Modules log through ``logging.getLogger(__name__)``; this module only decides
where those records go and how they look.
"""

import json
import logging
from datetime import datetime, timezone

from cmslink.config import Settings, get_settings

ROOT_LOGGER = "cmslink"
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """
    Configure the package logger from settings.

    Args:
        settings: Settings to read log_level and log_format from. If None, uses get_settings().

    Returns:
        The configured ``cmslink`` logger
    """
    if settings is None:
        settings = get_settings()

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_cmslink_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._cmslink_handler = True  # type: ignore[attr-defined]
    if settings.log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    return logger
