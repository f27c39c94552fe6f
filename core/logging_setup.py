"""
Process-wide logging for the API server.

Level comes from ``LOG_LEVEL`` in settings unless the caller overrides it.
HTTP client and SDK chatter is held at WARNING so per-model fallback
messages from ``core.ai_service`` stay readable.
"""

from __future__ import annotations

import logging
import sys

from config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

# Third-party loggers that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "google_genai", "google.genai")


def setup_logging(level: int | str | None = None) -> logging.Logger:
    """Install a single stdout handler on the root logger and return it."""
    if level is None:
        level = settings.LOG_LEVEL

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # uvicorn runs with log_config=None, so route its loggers through root
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    return root
