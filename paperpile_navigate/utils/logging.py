"""Logging setup for paperpile-navigate.

The API server, the batch-import CLI and the tasks all log through
get_logger(__name__). Lines go to stdout as

    2026-01-01 12:00:00 | INFO     | paperpile_navigate.tasks.batch_import | ...

httpx and httpcore log every request at INFO; a batch import issues one
Semantic Scholar call per paper, so those loggers are held at WARNING and
the task's own progress lines stay readable.
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request chatter from the HTTP client stack
QUIET_LOGGERS = ("httpx", "httpcore")

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once; later calls are no-ops.

    Args:
        level: DEBUG/INFO/WARNING/ERROR. Defaults to settings.log_level.
    """
    global _configured
    if _configured:
        return

    if level is None:
        from paperpile_navigate.utils.config import settings
        level = settings.log_level

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Named logger; configures the root logger on first use."""
    setup_logging()
    return logging.getLogger(name)
