"""Render projector: tab expansion and raw offset <-> render column mapping."""

from __future__ import annotations

from quill.models import Row
from quill.render import char_to_render_col, render_chars, render_col_to_char


def test_single_tab_expands_to_full_stop() -> None:
    row = Row(idx=0, chars="\t", render=render_chars("\t"))

    assert row.render == " " * 8
    assert char_to_render_col(row, 1) == 8


def test_tab_stop_is_configurable() -> None:
    assert render_chars("a\tb", 4) == "a   b"
    assert render_chars("abcd\te", 4) == "abcd    e"


def test_render_col_grows_at_least_one_per_char() -> None:
    row = Row(idx=0, chars="a\tbc\t\td ")
    cols = [char_to_render_col(row, cx) for cx in range(row.size + 1)]

    assert cols[0] == 0
    for before, after in zip(cols, cols[1:]):
        assert after - before >= 1
    assert cols[-1] == len(render_chars(row.chars))


def test_render_col_clamps_past_end_of_row() -> None:
    row = Row(idx=0, chars="a\tb")

    assert char_to_render_col(row, 10) == char_to_render_col(row, 3) == 9


def test_inverse_is_exact_without_tabs() -> None:
    row = Row(idx=0, chars="abc def")

    for cx in range(row.size + 1):
        assert render_col_to_char(row, char_to_render_col(row, cx)) == cx


def test_columns_inside_a_tab_map_back_to_the_tab() -> None:
    row = Row(idx=0, chars="a\tb")

    assert render_col_to_char(row, 0) == 0
    for rx in range(1, 8):
        assert render_col_to_char(row, rx) == 1
    assert render_col_to_char(row, 8) == 2
    assert render_col_to_char(row, 100) == row.size
