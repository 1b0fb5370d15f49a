from __future__ import annotations

from dataclasses import dataclass, field

from .constants import QUILL_TAB_STOP


@dataclass(slots=True, frozen=True)
class EditorSyntax:
    filetype: str
    filematch: tuple[str, ...]
    keywords: tuple[str, ...]
    singleline_comment_start: str
    multiline_comment_start: str
    multiline_comment_end: str
    flags: int


@dataclass(slots=True)
class Row:
    idx: int
    chars: str
    render: str = ""
    hl: list[int] = field(default_factory=list)
    hl_open_comment: bool = False

    @property
    def size(self) -> int:
        return len(self.chars)

    @property
    def rsize(self) -> int:
        return len(self.render)


@dataclass(slots=True)
class EditorConfig:
    cx: int = 0
    cy: int = 0
    rx: int = 0
    rowoff: int = 0
    coloff: int = 0
    screenrows: int = 0
    screencols: int = 0
    rows: list[Row] = field(default_factory=list)
    dirty: int = 0
    filename: str | None = None
    statusmsg: str = ""
    statusmsg_time: float = 0.0
    syntax: EditorSyntax | None = None
    tab_stop: int = QUILL_TAB_STOP

    @property
    def numrows(self) -> int:
        return len(self.rows)

    def current_row(self) -> Row | None:
        return self.rows[self.cy] if 0 <= self.cy < self.numrows else None


@dataclass(slots=True)
class SearchSnapshot:
    cx: int
    cy: int
    coloff: int
    rowoff: int
