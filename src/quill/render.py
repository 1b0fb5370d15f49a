"""Mapping between raw character offsets and on-screen render columns.

Tabs are the only characters wider than one cell; every other character,
control bytes included, occupies exactly one column.
"""

from __future__ import annotations

from .constants import QUILL_TAB_STOP
from .models import Row


def render_chars(chars: str, tab_stop: int = QUILL_TAB_STOP) -> str:
    out: list[str] = []
    idx = 0
    for ch in chars:
        if ch == "\t":
            out.append(" ")
            idx += 1
            while idx % tab_stop != 0:
                out.append(" ")
                idx += 1
        else:
            out.append(ch)
            idx += 1
    return "".join(out)


def char_to_render_col(row: Row, cx: int, tab_stop: int = QUILL_TAB_STOP) -> int:
    rx = 0
    for ch in row.chars[: max(0, cx)]:
        if ch == "\t":
            rx += (tab_stop - 1) - (rx % tab_stop)
        rx += 1
    return rx


def render_col_to_char(row: Row, rx: int, tab_stop: int = QUILL_TAB_STOP) -> int:
    """Return the raw offset of the character drawn at render column ``rx``.

    Columns inside a tab's expansion all map back to the tab itself, so this
    is only a left inverse of :func:`char_to_render_col`.
    """
    cur_rx = 0
    for cx, ch in enumerate(row.chars):
        if ch == "\t":
            cur_rx += (tab_stop - 1) - (cur_rx % tab_stop)
        cur_rx += 1
        if cur_rx > rx:
            return cx
    return row.size
