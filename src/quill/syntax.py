from __future__ import annotations

import logging

from .constants import (
    C_HL_EXTENSIONS,
    C_HL_KEYWORDS,
    HL_COMMENT,
    HL_HIGHLIGHT_NUMBERS,
    HL_HIGHLIGHT_STRINGS,
    HL_KEYWORD1,
    HL_KEYWORD2,
    HL_MATCH,
    HL_MLCOMMENT,
    HL_NORMAL,
    HL_NUMBER,
    HL_STRING,
    PY_HL_EXTENSIONS,
    PY_HL_KEYWORDS,
    SEPARATORS,
)
from .models import EditorConfig, EditorSyntax

logger = logging.getLogger(__name__)


HLDB: tuple[EditorSyntax, ...] = (
    EditorSyntax(
        filetype="c",
        filematch=C_HL_EXTENSIONS,
        keywords=C_HL_KEYWORDS,
        singleline_comment_start="//",
        multiline_comment_start="/*",
        multiline_comment_end="*/",
        flags=HL_HIGHLIGHT_NUMBERS | HL_HIGHLIGHT_STRINGS,
    ),
    EditorSyntax(
        filetype="python",
        filematch=PY_HL_EXTENSIONS,
        keywords=PY_HL_KEYWORDS,
        singleline_comment_start="#",
        multiline_comment_start="",
        multiline_comment_end="",
        flags=HL_HIGHLIGHT_NUMBERS | HL_HIGHLIGHT_STRINGS,
    ),
)


def is_separator(c: str) -> bool:
    return not c or c in "\0 \t\n\r\v\f" or c in SEPARATORS


def syntax_to_color(hl: int) -> int:
    if hl in (HL_COMMENT, HL_MLCOMMENT):
        return 36
    if hl == HL_KEYWORD1:
        return 33
    if hl == HL_KEYWORD2:
        return 32
    if hl == HL_STRING:
        return 35
    if hl == HL_NUMBER:
        return 31
    if hl == HL_MATCH:
        return 34
    return 37


def find_syntax(filename: str) -> EditorSyntax | None:
    for syntax in HLDB:
        for pattern in syntax.filematch:
            if pattern.startswith("."):
                if filename.endswith(pattern):
                    return syntax
            elif pattern in filename:
                return syntax
    return None


def select_syntax_highlight(config: EditorConfig, filename: str | None) -> None:
    """Pick the profile for ``filename`` and re-highlight the whole buffer."""
    config.syntax = find_syntax(filename) if filename else None
    logger.debug(
        "syntax for %r: %s", filename, config.syntax.filetype if config.syntax else "none"
    )
    for row in config.rows:
        highlight_row(config, row.idx)


def highlight_row(config: EditorConfig, idx: int) -> bool:
    """Re-tag one row, returning True when its trailing comment state changed."""
    row = config.rows[idx]
    row.hl = [HL_NORMAL] * row.rsize
    syntax = config.syntax
    if syntax is None:
        changed = row.hl_open_comment
        row.hl_open_comment = False
        return changed

    keywords = syntax.keywords
    scs = syntax.singleline_comment_start
    mcs = syntax.multiline_comment_start
    mce = syntax.multiline_comment_end

    p = row.render
    hl = row.hl
    prev_sep = True
    in_string = ""
    in_comment = idx > 0 and config.rows[idx - 1].hl_open_comment

    i = 0
    while i < len(p):
        ch = p[i]
        prev_hl = hl[i - 1] if i > 0 else HL_NORMAL

        if scs and not in_string and not in_comment and p.startswith(scs, i):
            for h in range(i, len(hl)):
                hl[h] = HL_COMMENT
            break

        if mcs and mce and not in_string:
            if in_comment:
                hl[i] = HL_MLCOMMENT
                if p.startswith(mce, i):
                    for h in range(i, i + len(mce)):
                        hl[h] = HL_MLCOMMENT
                    i += len(mce)
                    in_comment = False
                    prev_sep = True
                else:
                    i += 1
                continue
            if p.startswith(mcs, i):
                for h in range(i, i + len(mcs)):
                    hl[h] = HL_MLCOMMENT
                i += len(mcs)
                in_comment = True
                continue

        if syntax.flags & HL_HIGHLIGHT_STRINGS:
            if in_string:
                hl[i] = HL_STRING
                if ch == "\\" and i + 1 < len(p):
                    hl[i + 1] = HL_STRING
                    i += 2
                    continue
                if ch == in_string:
                    in_string = ""
                i += 1
                prev_sep = True
                continue
            if ch in ("'", '"'):
                in_string = ch
                hl[i] = HL_STRING
                i += 1
                continue

        if syntax.flags & HL_HIGHLIGHT_NUMBERS:
            if ("0" <= ch <= "9" and (prev_sep or prev_hl == HL_NUMBER)) or (
                ch == "." and prev_hl == HL_NUMBER
            ):
                hl[i] = HL_NUMBER
                i += 1
                prev_sep = False
                continue

        if prev_sep:
            matched = False
            for kw in keywords:
                kw2 = kw.endswith("|")
                token = kw[:-1] if kw2 else kw
                klen = len(token)
                tail = p[i + klen] if i + klen < len(p) else ""
                if p.startswith(token, i) and is_separator(tail):
                    mark = HL_KEYWORD2 if kw2 else HL_KEYWORD1
                    for h in range(i, i + klen):
                        hl[h] = mark
                    i += klen
                    matched = True
                    break
            if matched:
                prev_sep = False
                continue

        prev_sep = is_separator(ch)
        i += 1

    changed = row.hl_open_comment != in_comment
    row.hl_open_comment = in_comment
    return changed


def update_syntax(config: EditorConfig, idx: int) -> None:
    """Highlight row ``idx`` and walk forward while the carry state keeps changing."""
    pending = [idx]
    while pending:
        current = pending.pop()
        if current >= config.numrows:
            break
        if highlight_row(config, current):
            pending.append(current + 1)
