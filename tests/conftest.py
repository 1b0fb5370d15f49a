"""Shared fixtures for the quill test-suite.

Buffers are built directly on an :class:`EditorConfig`; editors that need to
read keys get the read end of an ``os.pipe()`` as stdin and ``/dev/null`` as
stdout, so no real terminal is involved.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator

import pytest

from quill.editor import Editor
from quill.models import EditorConfig
from quill.rows import load_lines
from quill.syntax import select_syntax_highlight


def encode_lines(lines: list[str]) -> list[bytes]:
    return [line.encode("latin-1") for line in lines]


@pytest.fixture
def make_config() -> Callable[..., EditorConfig]:
    def _make(
        lines: list[str] | None = None,
        filename: str | None = None,
        screenrows: int = 10,
        screencols: int = 40,
    ) -> EditorConfig:
        cfg = EditorConfig(screenrows=screenrows, screencols=screencols, filename=filename)
        select_syntax_highlight(cfg, filename)
        load_lines(cfg, encode_lines(lines or []))
        return cfg

    return _make


@pytest.fixture
def make_editor() -> Iterator[Callable[..., Editor]]:
    fds: list[int] = []

    def _make(
        keys: bytes = b"",
        lines: list[str] | None = None,
        filename: str | None = None,
        size: tuple[int, int] = (12, 40),
    ) -> Editor:
        read_fd, write_fd = os.pipe()
        os.write(write_fd, keys)
        os.close(write_fd)
        out_fd = os.open(os.devnull, os.O_WRONLY)
        fds.extend([read_fd, out_fd])

        editor = Editor(stdin_fd=read_fd, stdout_fd=out_fd, window_size=size)
        editor.cfg.filename = filename
        select_syntax_highlight(editor.cfg, filename)
        load_lines(editor.cfg, encode_lines(lines or []))
        return editor

    yield _make
    for fd in fds:
        os.close(fd)
