"""Logging setup for quill.

The editor owns the terminal while it runs, so records never go to stderr:
they go to a rotating file when one is configured and are dropped otherwise.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from typing import Any

logger = logging.getLogger("quill")

LOG_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"


def setup_logging(config: dict[str, Any] | None = None) -> None:
    """Attach handlers to the ``quill`` logger.

    Only the ``["logging"]`` section of ``config`` is read; recognised keys
    are ``file`` (path, or None to disable file logging) and ``file_level``
    (a level name, default ``DEBUG``). Calling this again replaces the
    handlers installed by a previous call.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})
    log_filename = logging_config.get("file")
    level_name = str(logging_config.get("file_level", "DEBUG")).upper()
    level = getattr(logging, level_name, logging.DEBUG)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    if not log_filename:
        logger.addHandler(logging.NullHandler())
        return

    log_dir = os.path.dirname(log_filename)
    try:
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
    except OSError as exc:
        print(f"quill: cannot open log file '{log_filename}': {exc}", file=sys.stderr)
        logger.addHandler(logging.NullHandler())
        return

    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    file_handler.setLevel(level)
    logger.addHandler(file_handler)
    logger.setLevel(level)
