"""Row store operations.

Every function takes the :class:`EditorConfig` that owns the rows and addresses
rows by index. Out-of-range indexes and offsets are clamped or ignored rather
than raised, because cursor motion probes buffer boundaries all the time.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import EditorConfig, Row
from .render import render_chars
from .syntax import update_syntax


def update_row(cfg: EditorConfig, idx: int) -> None:
    row = cfg.rows[idx]
    row.render = render_chars(row.chars, cfg.tab_stop)
    update_syntax(cfg, idx)


def _renumber(cfg: EditorConfig, start: int) -> None:
    for j in range(start, cfg.numrows):
        cfg.rows[j].idx = j


def insert_row(cfg: EditorConfig, at: int, text: str) -> None:
    at = max(0, min(at, cfg.numrows))
    cfg.rows.insert(at, Row(idx=at, chars=text))
    _renumber(cfg, at + 1)
    update_row(cfg, at)
    # The following row now takes its carry-in state from the new row.
    if at + 1 < cfg.numrows:
        update_syntax(cfg, at + 1)
    cfg.dirty += 1


def delete_row(cfg: EditorConfig, at: int) -> None:
    if at < 0 or at >= cfg.numrows:
        return
    del cfg.rows[at]
    _renumber(cfg, at)
    if at < cfg.numrows:
        update_syntax(cfg, at)
    cfg.dirty += 1


def insert_char(cfg: EditorConfig, idx: int, at: int, ch: str) -> None:
    if idx < 0 or idx >= cfg.numrows:
        return
    row = cfg.rows[idx]
    at = max(0, min(at, row.size))
    row.chars = row.chars[:at] + ch + row.chars[at:]
    update_row(cfg, idx)
    cfg.dirty += 1


def delete_char(cfg: EditorConfig, idx: int, at: int) -> None:
    if idx < 0 or idx >= cfg.numrows:
        return
    row = cfg.rows[idx]
    if at < 0 or at >= row.size:
        return
    row.chars = row.chars[:at] + row.chars[at + 1 :]
    update_row(cfg, idx)
    cfg.dirty += 1


def append_text(cfg: EditorConfig, idx: int, text: str) -> None:
    if idx < 0 or idx >= cfg.numrows:
        return
    cfg.rows[idx].chars += text
    update_row(cfg, idx)
    cfg.dirty += 1


def split_row(cfg: EditorConfig, idx: int, at: int) -> None:
    """Break row ``idx`` at raw offset ``at``; the tail becomes row ``idx + 1``."""
    if idx < 0 or idx >= cfg.numrows:
        return
    row = cfg.rows[idx]
    at = max(0, min(at, row.size))
    tail = row.chars[at:]
    row.chars = row.chars[:at]
    update_row(cfg, idx)
    insert_row(cfg, idx + 1, tail)


def join_with_next(cfg: EditorConfig, idx: int) -> int:
    """Append row ``idx + 1`` onto row ``idx`` and drop it.

    Returns the raw offset where the two texts meet, which is where the
    caller should leave the cursor. Joining the last row is a no-op.
    """
    if idx < 0 or idx + 1 >= cfg.numrows:
        return cfg.rows[idx].size if 0 <= idx < cfg.numrows else 0
    join_at = cfg.rows[idx].size
    append_text(cfg, idx, cfg.rows[idx + 1].chars)
    delete_row(cfg, idx + 1)
    return join_at


def load_lines(cfg: EditorConfig, lines: Iterable[bytes]) -> None:
    """Replace the buffer with ``lines`` and mark it clean."""
    cfg.rows = []
    for line in lines:
        while line and line[-1] in (0x0A, 0x0D):
            line = line[:-1]
        insert_row(cfg, cfg.numrows, line.decode("latin-1"))
    cfg.dirty = 0


def rows_to_string(cfg: EditorConfig) -> str:
    return "".join(f"{row.chars}\n" for row in cfg.rows)


def serialize(cfg: EditorConfig) -> bytes:
    # Rows hold latin-1 decoded bytes, so this is an exact inverse of load_lines.
    return rows_to_string(cfg).encode("latin-1")
