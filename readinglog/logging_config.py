"""
Logging setup for readinglog entry points.

Library modules only call ``logging.getLogger(__name__)``. Whoever runs the
app (AppContext with ``configure_logging=True``, scripts/check_db.py) calls
``setup_logging`` once so every ``readinglog.*`` record goes through one
handler, either as prefixed text or as one JSON object per line.
"""

import logging
import os
import sys
import json
from datetime import datetime, timezone
from typing import Optional

ROOT_LOGGER = "readinglog"

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ('httpx', 'httpcore', 'asyncio')


class JSONFormatter(logging.Formatter):
    """One JSON object per record, tagged with the service name."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "service": self.service_name,
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def text_formatter(service_name: str) -> logging.Formatter:
    # [readinglog] 2026-01-26 19:45:00 - INFO - readinglog.search - Message
    return logging.Formatter(
        fmt=f'[{service_name}] %(asctime)s - %(levelname)s - %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def setup_logging(level: Optional[str] = None,
                  use_json: Optional[bool] = None,
                  service_name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Configure the ``readinglog`` logger.

    Args:
        level: Level name; defaults to LOG_LEVEL, then INFO.
        use_json: JSON lines instead of text; defaults to LOG_FORMAT=json.
        service_name: Logger to configure and the name written on each line.

    Calling it again replaces the handler rather than adding a second one.
    """
    level_name = (level or os.getenv('LOG_LEVEL') or 'INFO').upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    if use_json is None:
        use_json = os.getenv('LOG_FORMAT', '').lower() == 'json'

    logger = logging.getLogger(service_name)
    logger.setLevel(numeric_level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter(service_name) if use_json else text_formatter(service_name))
    logger.addHandler(handler)
    logger.propagate = False

    silence_noisy_loggers()
    return logger


def silence_noisy_loggers():
    """Raise chatty third-party loggers to WARNING."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
