from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from .constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_H,
    DEL_KEY,
    ENTER,
    ESC,
    FIND_CANCEL,
    FIND_CONFIRM,
    FIND_KEYSTROKE,
    FIND_NEXT,
    FIND_PREVIOUS,
    QUILL_QUERY_LEN,
)
from .terminal import read_key

if TYPE_CHECKING:
    from .editor import Editor

PromptCallback = Callable[[str, int], None]


def key_to_trigger(c: int) -> int:
    if c == ENTER:
        return FIND_CONFIRM
    if c == ESC:
        return FIND_CANCEL
    if c in (ARROW_RIGHT, ARROW_DOWN):
        return FIND_NEXT
    if c in (ARROW_LEFT, ARROW_UP):
        return FIND_PREVIOUS
    return FIND_KEYSTROKE


def prompt(editor: Editor, template: str, callback: PromptCallback | None = None) -> str | None:
    """Read a line in the message bar.

    ``template`` is a %-format with one ``%s`` for the text typed so far.
    Returns the text on Enter, or None when the user presses ESC.
    """
    buf = ""
    while True:
        editor.set_status_message(template, buf)
        editor.refresh_screen()

        c = read_key(editor.stdin_fd)
        if c in (DEL_KEY, CTRL_H, BACKSPACE):
            buf = buf[:-1]
        elif c == ESC:
            editor.set_status_message("")
            if callback is not None:
                callback(buf, FIND_CANCEL)
            return None
        elif c == ENTER:
            if buf:
                editor.set_status_message("")
                if callback is not None:
                    callback(buf, FIND_CONFIRM)
                return buf
        elif 32 <= c <= 126 and len(buf) < QUILL_QUERY_LEN:
            buf += chr(c)

        if callback is not None:
            callback(buf, key_to_trigger(c))
