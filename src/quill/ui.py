from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING

from .constants import (
    ANSI_CLEAR_LINE,
    ANSI_CURSOR_HOME,
    ANSI_DEFAULT_FG,
    ANSI_HIDE_CURSOR,
    ANSI_INVERT_OFF,
    ANSI_INVERT_ON,
    ANSI_SHOW_CURSOR,
    HL_NORMAL,
    MESSAGE_TIMEOUT,
    QUILL_VERSION,
)
from .models import EditorConfig, Row
from .syntax import syntax_to_color
from .viewport import scroll

if TYPE_CHECKING:
    from .editor import Editor


def is_control(ch: str) -> bool:
    code = ord(ch)
    return code < 32 or code == 127


def terminal_text(text: str) -> str:
    """Spell ``text`` as the latin-1 view of its filesystem-encoded bytes.

    Buffer rows already hold one character per byte. File names and OS
    messages are converted here so their original bytes reach the terminal.
    """
    return os.fsencode(text).decode("latin-1")


def refresh_screen(editor: Editor) -> None:
    scroll(editor.cfg)
    frame = compose_frame(editor.cfg)
    os.write(editor.stdout_fd, frame.encode("latin-1"))


def compose_frame(cfg: EditorConfig, now: float | None = None) -> str:
    """Build one complete frame; the caller is expected to have scrolled."""
    ab: list[str] = [ANSI_HIDE_CURSOR, ANSI_CURSOR_HOME]
    draw_rows(cfg, ab)
    draw_status_bar(cfg, ab)
    draw_message_bar(cfg, ab, time.time() if now is None else now)
    ab.append(ANSI_SHOW_CURSOR)
    ab.append(cursor_escape(cfg))
    return "".join(ab)


def draw_rows(cfg: EditorConfig, ab: list[str]) -> None:
    for y in range(cfg.screenrows):
        filerow = cfg.rowoff + y
        if filerow >= cfg.numrows:
            if cfg.numrows == 0 and y == cfg.screenrows // 3:
                draw_welcome(cfg, ab)
            else:
                ab.append("~")
        else:
            draw_row(cfg.rows[filerow], cfg.coloff, cfg.screencols, ab)
        ab.append(ANSI_CLEAR_LINE)
        ab.append("\r\n")


def draw_welcome(cfg: EditorConfig, ab: list[str]) -> None:
    welcome = f"Quill editor -- version {QUILL_VERSION}"
    if len(welcome) > cfg.screencols:
        welcome = welcome[: cfg.screencols]
    padding = (cfg.screencols - len(welcome)) // 2
    if padding:
        ab.append("~")
        padding -= 1
    if padding > 0:
        ab.append(" " * padding)
    ab.append(welcome)


def draw_row(row: Row, coloff: int, width: int, ab: list[str]) -> None:
    text = row.render[coloff : coloff + width]
    hl = row.hl[coloff : coloff + width]
    current_color = -1
    for ch, h in zip(text, hl):
        if is_control(ch):
            sym = chr(ord("@") + ord(ch)) if ord(ch) <= 26 else "?"
            ab.append(ANSI_INVERT_ON)
            ab.append(sym)
            ab.append(ANSI_INVERT_OFF)
            if current_color != -1:
                ab.append(f"\x1b[{current_color}m")
        elif h == HL_NORMAL:
            if current_color != -1:
                ab.append(ANSI_DEFAULT_FG)
                current_color = -1
            ab.append(ch)
        else:
            color = syntax_to_color(h)
            if color != current_color:
                ab.append(f"\x1b[{color}m")
                current_color = color
            ab.append(ch)
    ab.append(ANSI_DEFAULT_FG)


def draw_status_bar(cfg: EditorConfig, ab: list[str]) -> None:
    ab.append(ANSI_INVERT_ON)
    filename = terminal_text(cfg.filename) if cfg.filename else "[No Name]"
    modified = " (modified)" if cfg.dirty else ""
    status = f"{filename:.20} - {cfg.numrows} lines{modified}"
    filetype = cfg.syntax.filetype if cfg.syntax else "no ft"
    rstatus = f"{filetype} | {cfg.cy + 1}/{cfg.numrows}"
    if len(status) > cfg.screencols:
        status = status[: cfg.screencols]
    ab.append(status)
    fill = len(status)
    while fill < cfg.screencols:
        if cfg.screencols - fill == len(rstatus):
            ab.append(rstatus)
            break
        ab.append(" ")
        fill += 1
    ab.append(ANSI_INVERT_OFF)
    ab.append("\r\n")


def draw_message_bar(cfg: EditorConfig, ab: list[str], now: float) -> None:
    ab.append(ANSI_CLEAR_LINE)
    if cfg.statusmsg and now - cfg.statusmsg_time < MESSAGE_TIMEOUT:
        ab.append(terminal_text(cfg.statusmsg)[: cfg.screencols])


def cursor_escape(cfg: EditorConfig) -> str:
    return f"\x1b[{cfg.cy - cfg.rowoff + 1};{cfg.rx - cfg.coloff + 1}H"
