"""Editor: key dispatch, cursor motion, file load/save and quitting."""

from __future__ import annotations

import errno
import os
import signal

import pytest

from quill.constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_Q,
    CTRL_S,
    DEL_KEY,
    END_KEY,
    ENTER,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
    QUILL_QUIT_TIMES,
    TAB,
)
from quill.editor import run


def type_text(editor, text: str) -> None:
    for ch in text:
        editor.handle_key(ord(ch))


def contents(editor) -> list[str]:
    return [row.chars for row in editor.cfg.rows]


def test_typing_into_empty_buffer(make_editor) -> None:
    editor = make_editor()

    type_text(editor, "hi")

    assert contents(editor) == ["hi"]
    assert editor.cfg.cx == 2
    assert editor.file_was_modified()


def test_tab_is_inserted_literally(make_editor) -> None:
    editor = make_editor(lines=["x"])

    editor.handle_key(TAB)

    assert contents(editor) == ["\tx"]
    assert editor.cfg.rows[0].render == "        x"


def test_control_bytes_are_ignored(make_editor) -> None:
    editor = make_editor(lines=["x"])

    editor.handle_key(1)
    editor.handle_key(ARROW_UP)

    assert contents(editor) == ["x"]
    assert not editor.file_was_modified()


def test_enter_splits_line(make_editor) -> None:
    editor = make_editor(lines=["hello"])
    editor.cfg.cx = 2

    editor.handle_key(ENTER)

    assert contents(editor) == ["he", "llo"]
    assert (editor.cfg.cy, editor.cfg.cx) == (1, 0)


def test_enter_at_line_start_inserts_row_above(make_editor) -> None:
    editor = make_editor(lines=["hello"])

    editor.handle_key(ENTER)

    assert contents(editor) == ["", "hello"]
    assert editor.cfg.cy == 1


def test_backspace_at_line_start_joins(make_editor) -> None:
    editor = make_editor(lines=["he", "llo"])
    editor.cfg.cy = 1

    editor.handle_key(BACKSPACE)

    assert contents(editor) == ["hello"]
    assert (editor.cfg.cy, editor.cfg.cx) == (0, 2)


def test_backspace_at_buffer_start_is_noop(make_editor) -> None:
    editor = make_editor(lines=["abc"])

    editor.handle_key(BACKSPACE)

    assert contents(editor) == ["abc"]
    assert not editor.file_was_modified()


def test_backspace_deletes_previous_char(make_editor) -> None:
    editor = make_editor(lines=["abc"])
    editor.cfg.cx = 2

    editor.handle_key(BACKSPACE)

    assert contents(editor) == ["ac"]
    assert editor.cfg.cx == 1


def test_delete_forward(make_editor) -> None:
    editor = make_editor(lines=["ab", "cd"])

    editor.handle_key(DEL_KEY)
    assert contents(editor) == ["b", "cd"]

    editor.cfg.cx = 1
    editor.handle_key(DEL_KEY)
    assert contents(editor) == ["bcd"]
    assert (editor.cfg.cy, editor.cfg.cx) == (0, 1)


def test_delete_forward_at_end_of_buffer_is_noop(make_editor) -> None:
    editor = make_editor(lines=["ab"])
    editor.cfg.cx = 2

    editor.handle_key(DEL_KEY)

    assert contents(editor) == ["ab"]
    assert (editor.cfg.cy, editor.cfg.cx) == (0, 2)
    assert not editor.file_was_modified()


def test_vertical_motion_clamps_column(make_editor) -> None:
    editor = make_editor(lines=["long line", "ab"])
    editor.cfg.cx = 9

    editor.handle_key(ARROW_DOWN)
    assert (editor.cfg.cy, editor.cfg.cx) == (1, 2)

    editor.handle_key(ARROW_DOWN)
    assert (editor.cfg.cy, editor.cfg.cx) == (2, 0)

    editor.handle_key(ARROW_DOWN)
    assert editor.cfg.cy == 2


def test_horizontal_motion_wraps_lines(make_editor) -> None:
    editor = make_editor(lines=["ab", "cd"])
    editor.cfg.cx = 2

    editor.handle_key(ARROW_RIGHT)
    assert (editor.cfg.cy, editor.cfg.cx) == (1, 0)

    editor.handle_key(ARROW_LEFT)
    assert (editor.cfg.cy, editor.cfg.cx) == (0, 2)

    editor.cfg.cx = 0
    editor.handle_key(ARROW_LEFT)
    assert (editor.cfg.cy, editor.cfg.cx) == (0, 0)


def test_home_and_end(make_editor) -> None:
    editor = make_editor(lines=["abcdef"])

    editor.handle_key(END_KEY)
    assert editor.cfg.cx == 6

    editor.handle_key(HOME_KEY)
    assert editor.cfg.cx == 0


def test_page_keys(make_editor) -> None:
    editor = make_editor(lines=[str(n) for n in range(50)], size=(12, 40))

    editor.handle_key(PAGE_DOWN)
    assert editor.cfg.cy == 19

    editor.cfg.rowoff = 10
    editor.handle_key(PAGE_UP)
    assert editor.cfg.cy == 0


def test_quit_requires_confirmation_when_dirty(make_editor) -> None:
    editor = make_editor(lines=["x"])
    type_text(editor, "y")

    for _ in range(QUILL_QUIT_TIMES):
        assert editor.handle_key(CTRL_Q) is False
        assert "unsaved changes" in editor.cfg.statusmsg
    assert editor.handle_key(CTRL_Q) is True


def test_other_key_resets_quit_counter(make_editor) -> None:
    editor = make_editor(lines=["x"])
    type_text(editor, "y")

    editor.handle_key(CTRL_Q)
    editor.handle_key(ARROW_LEFT)

    assert editor.quit_times == QUILL_QUIT_TIMES


def test_quit_clean_buffer_immediately(make_editor) -> None:
    editor = make_editor(lines=["x"])

    assert editor.handle_key(CTRL_Q) is True


def test_open_missing_file_gives_empty_buffer(make_editor, tmp_path) -> None:
    editor = make_editor()
    path = tmp_path / "new.c"

    editor.open_file(str(path))

    assert editor.cfg.numrows == 0
    assert editor.cfg.filename == str(path)
    assert editor.cfg.syntax is not None and editor.cfg.syntax.filetype == "c"
    assert not editor.file_was_modified()


def test_open_and_save_round_trip(make_editor, tmp_path) -> None:
    path = tmp_path / "notes.txt"
    path.write_bytes(b"first\r\nsecond\n\tthird")
    editor = make_editor()

    editor.open_file(str(path))
    assert contents(editor) == ["first", "second", "\tthird"]

    editor.cfg.cy = 1
    editor.cfg.cx = 6
    type_text(editor, "!")
    editor.handle_key(CTRL_S)

    assert path.read_bytes() == b"first\nsecond!\n\tthird\n"
    assert not editor.file_was_modified()
    assert editor.cfg.statusmsg == "21 bytes written to disk"


def test_save_truncates_longer_file(make_editor, tmp_path) -> None:
    path = tmp_path / "f.txt"
    path.write_bytes(b"a long line of text\n")
    editor = make_editor()
    editor.open_file(str(path))

    editor.cfg.cx = 1
    for _ in range(18):
        editor.handle_key(DEL_KEY)
    editor.save()

    assert path.read_bytes() == b"a\n"


def test_open_directory_is_fatal(make_editor, tmp_path) -> None:
    editor = make_editor()

    with pytest.raises(OSError):
        editor.open_file(str(tmp_path))


def test_save_as_prompts_for_name(make_editor, tmp_path) -> None:
    target = tmp_path / "out.c"
    editor = make_editor(keys=str(target).encode() + b"\r", lines=["int x;"])
    editor.cfg.dirty = 1

    editor.save()

    assert target.read_bytes() == b"int x;\n"
    assert editor.cfg.filename == str(target)
    assert editor.cfg.syntax is not None and editor.cfg.syntax.filetype == "c"
    assert not editor.file_was_modified()


def test_save_as_can_be_aborted(make_editor) -> None:
    editor = make_editor(keys=b"abc\x7f\x1b", lines=["x"])
    editor.cfg.dirty = 1

    editor.save()

    assert editor.cfg.filename is None
    assert editor.cfg.statusmsg == "Save aborted"
    assert editor.file_was_modified()


def test_save_failure_keeps_buffer_dirty(make_editor, tmp_path) -> None:
    editor = make_editor(lines=["x"], filename=str(tmp_path / "missing" / "f.txt"))
    editor.cfg.dirty = 1

    editor.save()

    assert editor.cfg.statusmsg.startswith("Can't save! I/O error:")
    assert editor.file_was_modified()


def test_process_keypress_reads_from_stdin(make_editor) -> None:
    editor = make_editor(keys=b"q\x1b[D\r")

    editor.process_keypress()
    editor.process_keypress()
    editor.process_keypress()

    assert contents(editor) == ["", "q"]


def test_refresh_screen_writes_frame(make_editor) -> None:
    read_fd, write_fd = os.pipe()
    editor = make_editor(lines=["hello"])
    editor.stdout_fd = write_fd
    try:
        editor.refresh_screen()
        frame = os.read(read_fd, 65536)
    finally:
        os.close(read_fd)
        os.close(write_fd)

    assert frame.startswith(b"\x1b[?25l\x1b[H")
    assert b"hello" in frame
    assert frame.endswith(b"\x1b[?25h\x1b[1;1H")


def test_window_resize_shrinks_text_area(make_editor, monkeypatch) -> None:
    read_fd, write_fd = os.pipe()
    editor = make_editor(lines=[f"line {n}" for n in range(30)])
    editor.stdout_fd = write_fd
    editor.cfg.cy = 25
    editor.refresh_screen()
    os.read(read_fd, 65536)
    monkeypatch.setattr("quill.editor.get_window_size", lambda _ifd, _ofd: (6, 20))
    try:
        editor.handle_sigwinch(signal.SIGWINCH, None)
        frame = os.read(read_fd, 65536)
    finally:
        os.close(read_fd)
        os.close(write_fd)

    assert editor.cfg.screenrows == 4
    assert editor.cfg.screencols == 20
    assert editor.cfg.rowoff == 22
    assert frame.startswith(b"\x1b[?25l\x1b[Hline 22")
    assert frame.endswith(b"\x1b[4;1H")


def test_window_size_failure_is_reported(make_editor, monkeypatch) -> None:
    editor = make_editor()

    def no_size(_ifd: int, _ofd: int) -> tuple[int, int]:
        raise OSError(errno.EIO, "invalid cursor position report")

    monkeypatch.setattr("quill.editor.get_window_size", no_size)

    with pytest.raises(OSError, match="Unable to query screen size"):
        editor.update_window_size()


def test_run_requires_filename(capsys) -> None:
    assert run([]) == 1
    assert "Usage" in capsys.readouterr().err


def test_run_requires_tty(monkeypatch, capsys) -> None:
    monkeypatch.setattr("quill.editor.os.isatty", lambda _fd: False)

    assert run(["file.txt"]) == 1
    assert "tty" in capsys.readouterr().err
