"""Incremental search driven by the prompt callback."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .constants import (
    FIND_CANCEL,
    FIND_CONFIRM,
    FIND_NEXT,
    FIND_PREVIOUS,
    HL_MATCH,
)
from .models import EditorConfig, SearchSnapshot
from .prompt import prompt
from .render import render_col_to_char

if TYPE_CHECKING:
    from .editor import Editor


@dataclass
class SearchState:
    last_match: int = -1
    direction: int = 1
    saved_hl_line: int = -1
    saved_hl: list[int] | None = None


def restore_highlight(cfg: EditorConfig, state: SearchState) -> None:
    if state.saved_hl is not None and 0 <= state.saved_hl_line < cfg.numrows:
        cfg.rows[state.saved_hl_line].hl = state.saved_hl
    state.saved_hl = None
    state.saved_hl_line = -1


def find_callback(cfg: EditorConfig, state: SearchState, query: str, trigger: int) -> None:
    restore_highlight(cfg, state)

    if trigger in (FIND_CONFIRM, FIND_CANCEL):
        state.last_match = -1
        state.direction = 1
        return
    if trigger == FIND_NEXT:
        state.direction = 1
    elif trigger == FIND_PREVIOUS:
        state.direction = -1
    else:
        state.last_match = -1
        state.direction = 1

    if state.last_match == -1:
        state.direction = 1
    if not query:
        return

    current = state.last_match
    for _ in range(cfg.numrows):
        current += state.direction
        if current == -1:
            current = cfg.numrows - 1
        elif current == cfg.numrows:
            current = 0

        row = cfg.rows[current]
        match = row.render.find(query)
        if match == -1:
            continue

        state.last_match = current
        cfg.cy = current
        cfg.cx = render_col_to_char(row, match, cfg.tab_stop)
        # Scrolling clamps this back so the match lands on the top line.
        cfg.rowoff = cfg.numrows

        state.saved_hl_line = current
        state.saved_hl = row.hl.copy()
        for i in range(match, min(match + len(query), row.rsize)):
            row.hl[i] = HL_MATCH
        break


def find(editor: Editor) -> None:
    cfg = editor.cfg
    saved = SearchSnapshot(cfg.cx, cfg.cy, cfg.coloff, cfg.rowoff)
    state = SearchState()

    query = prompt(
        editor,
        "Search: %s (Use ESC/Arrows/Enter)",
        lambda text, trigger: find_callback(cfg, state, text, trigger),
    )
    if query is None:
        cfg.cx = saved.cx
        cfg.cy = saved.cy
        cfg.coloff = saved.coloff
        cfg.rowoff = saved.rowoff
