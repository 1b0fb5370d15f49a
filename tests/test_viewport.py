"""Viewport scrolling keeps the cursor visible with minimal movement."""

from __future__ import annotations

from quill.viewport import scroll


def test_scrolls_down_just_enough(make_config) -> None:
    cfg = make_config(["line"] * 30, screenrows=10)
    cfg.cy = 25

    scroll(cfg)

    assert cfg.rowoff == 16


def test_scrolls_up_to_cursor_row(make_config) -> None:
    cfg = make_config(["line"] * 30, screenrows=10)
    cfg.rowoff = 20
    cfg.cy = 5

    scroll(cfg)

    assert cfg.rowoff == 5


def test_no_scroll_while_cursor_visible(make_config) -> None:
    cfg = make_config(["line"] * 30, screenrows=10)
    cfg.rowoff = 4
    cfg.cy = 13

    scroll(cfg)

    assert cfg.rowoff == 4


def test_horizontal_scroll_uses_render_column(make_config) -> None:
    cfg = make_config(["\tx"], screencols=5)
    cfg.cx = 1

    scroll(cfg)

    assert cfg.rx == 8
    assert cfg.coloff == 4

    cfg.cx = 0
    scroll(cfg)
    assert cfg.coloff == 0


def test_append_row_has_render_column_zero(make_config) -> None:
    cfg = make_config(["abc"])
    cfg.cy = 1
    cfg.cx = 0

    scroll(cfg)

    assert cfg.rx == 0
    assert cfg.rowoff == 0
