from __future__ import annotations

from .models import EditorConfig
from .render import char_to_render_col


def scroll(cfg: EditorConfig) -> None:
    cfg.rx = 0
    row = cfg.current_row()
    if row is not None:
        cfg.rx = char_to_render_col(row, cfg.cx, cfg.tab_stop)

    if cfg.cy < cfg.rowoff:
        cfg.rowoff = cfg.cy
    if cfg.cy >= cfg.rowoff + cfg.screenrows:
        cfg.rowoff = cfg.cy - cfg.screenrows + 1
    if cfg.rx < cfg.coloff:
        cfg.coloff = cfg.rx
    if cfg.rx >= cfg.coloff + cfg.screencols:
        cfg.coloff = cfg.rx - cfg.screencols + 1
