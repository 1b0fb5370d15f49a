"""Runtime settings read from the environment.

``QUILL_TAB_STOP``
    Tab stop width in columns (positive integer, default 8).
``QUILL_LOG_FILE``
    Path of a rotating log file. Logging is disabled when unset.
``QUILL_LOG_LEVEL``
    Level name for the log file (default ``DEBUG``).

Malformed values are ignored and the defaults kept.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .constants import QUILL_TAB_STOP


@dataclass(slots=True, frozen=True)
class Settings:
    tab_stop: int = QUILL_TAB_STOP
    log_file: str | None = None
    log_level: str = "DEBUG"

    def as_logging_config(self) -> dict[str, Any]:
        return {"logging": {"file": self.log_file, "file_level": self.log_level}}


def _positive_int(value: str | None, default: int) -> int:
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        tab_stop=_positive_int(env.get("QUILL_TAB_STOP"), QUILL_TAB_STOP),
        log_file=env.get("QUILL_LOG_FILE") or None,
        log_level=(env.get("QUILL_LOG_LEVEL") or "DEBUG").upper(),
    )
