from __future__ import annotations

import logging
import os
import signal
import sys
import time
from collections.abc import Callable
from typing import Final

from . import rows
from .config import Settings, load_settings
from .constants import (
    ANSI_CLEAR_SCREEN,
    ANSI_CURSOR_HOME,
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_F,
    CTRL_H,
    CTRL_L,
    CTRL_Q,
    CTRL_S,
    DEL_KEY,
    END_KEY,
    ENTER,
    ESC,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
    QUILL_QUIT_TIMES,
    TAB,
)
from .logging_config import setup_logging
from .models import EditorConfig
from .prompt import prompt
from .search import find
from .syntax import select_syntax_highlight
from .terminal import RawMode, get_window_size, read_key
from .ui import refresh_screen

logger = logging.getLogger(__name__)

STDIN_FD: Final[int] = 0
STDOUT_FD: Final[int] = 1


class Editor:
    def __init__(
        self,
        stdin_fd: int = STDIN_FD,
        stdout_fd: int = STDOUT_FD,
        settings: Settings | None = None,
        window_size: tuple[int, int] | None = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self.cfg = EditorConfig(tab_stop=self.settings.tab_stop)
        self.quit_times = QUILL_QUIT_TIMES
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.key_handlers: dict[int, Callable[[], None]] = {
            CTRL_S: self.save,
            CTRL_F: self.find,
            CTRL_H: self.del_char,
            BACKSPACE: self.del_char,
            DEL_KEY: self.del_forward,
            ENTER: self.insert_newline,
            HOME_KEY: self.move_home,
            END_KEY: self.move_end,
            PAGE_UP: self.page_up,
            PAGE_DOWN: self.page_down,
            ARROW_UP: lambda: self.move_cursor(ARROW_UP),
            ARROW_DOWN: lambda: self.move_cursor(ARROW_DOWN),
            ARROW_LEFT: lambda: self.move_cursor(ARROW_LEFT),
            ARROW_RIGHT: lambda: self.move_cursor(ARROW_RIGHT),
            CTRL_L: self._noop,
            ESC: self._noop,
        }
        if window_size is None:
            self.update_window_size()
        else:
            self.set_window_size(*window_size)

    def set_window_size(self, height: int, width: int) -> None:
        # Two lines are reserved for the status and message bars.
        self.cfg.screenrows = max(1, height - 2)
        self.cfg.screencols = max(1, width)

    def update_window_size(self) -> None:
        try:
            height, width = get_window_size(self.stdin_fd, self.stdout_fd)
        except OSError as exc:
            raise OSError(exc.errno, "Unable to query screen size") from exc
        self.set_window_size(height, width)
        logger.debug("window size %dx%d", width, height)

    def handle_sigwinch(self, _signum: int, _frame) -> None:
        self.update_window_size()
        self.refresh_screen()

    def set_status_message(self, fmt: str, *args: object) -> None:
        self.cfg.statusmsg = fmt % args if args else fmt
        self.cfg.statusmsg_time = time.time()

    def refresh_screen(self) -> None:
        refresh_screen(self)

    def find(self) -> None:
        find(self)

    def open_file(self, filename: str) -> None:
        """Load ``filename``; a file that does not exist yet gives an empty buffer."""
        self.cfg.filename = filename
        select_syntax_highlight(self.cfg, filename)
        try:
            with open(filename, "rb") as f:
                rows.load_lines(self.cfg, f)
        except FileNotFoundError:
            rows.load_lines(self.cfg, [])
            logger.info("new file %s", filename)
            return
        except OSError as exc:
            raise OSError(exc.errno, f"Opening file failed: {filename}") from exc
        logger.info("opened %s (%d lines)", filename, self.cfg.numrows)

    def save(self) -> None:
        if not self.cfg.filename:
            filename = prompt(self, "Save as: %s (ESC to cancel)")
            if filename is None:
                self.set_status_message("Save aborted")
                return
            self.cfg.filename = filename
            select_syntax_highlight(self.cfg, filename)

        data = rows.serialize(self.cfg)
        try:
            fd = os.open(self.cfg.filename, os.O_RDWR | os.O_CREAT, 0o644)
            try:
                os.ftruncate(fd, len(data))
                written = 0
                while written < len(data):
                    written += os.write(fd, data[written:])
            finally:
                os.close(fd)
        except OSError as exc:
            logger.error("saving %s failed: %s", self.cfg.filename, exc)
            self.set_status_message("Can't save! I/O error: %s", exc.strerror or exc)
            return

        self.cfg.dirty = 0
        logger.info("wrote %d bytes to %s", len(data), self.cfg.filename)
        self.set_status_message("%d bytes written to disk", len(data))

    def move_cursor(self, key: int) -> None:
        cfg = self.cfg
        row = cfg.current_row()

        if key == ARROW_LEFT:
            if cfg.cx != 0:
                cfg.cx -= 1
            elif cfg.cy > 0:
                cfg.cy -= 1
                cfg.cx = cfg.rows[cfg.cy].size
        elif key == ARROW_RIGHT:
            if row is not None and cfg.cx < row.size:
                cfg.cx += 1
            elif row is not None and cfg.cx == row.size:
                cfg.cy += 1
                cfg.cx = 0
        elif key == ARROW_UP:
            if cfg.cy != 0:
                cfg.cy -= 1
        elif key == ARROW_DOWN:
            if cfg.cy < cfg.numrows:
                cfg.cy += 1

        row = cfg.current_row()
        rowlen = row.size if row is not None else 0
        if cfg.cx > rowlen:
            cfg.cx = rowlen

    def move_home(self) -> None:
        self.cfg.cx = 0

    def move_end(self) -> None:
        row = self.cfg.current_row()
        if row is not None:
            self.cfg.cx = row.size

    def page_up(self) -> None:
        self.cfg.cy = self.cfg.rowoff
        for _ in range(self.cfg.screenrows):
            self.move_cursor(ARROW_UP)

    def page_down(self) -> None:
        cfg = self.cfg
        cfg.cy = min(cfg.rowoff + cfg.screenrows - 1, cfg.numrows)
        for _ in range(cfg.screenrows):
            self.move_cursor(ARROW_DOWN)

    def insert_char(self, c: str) -> None:
        cfg = self.cfg
        if cfg.cy == cfg.numrows:
            rows.insert_row(cfg, cfg.numrows, "")
        rows.insert_char(cfg, cfg.cy, cfg.cx, c)
        cfg.cx += 1

    def insert_newline(self) -> None:
        cfg = self.cfg
        if cfg.cx == 0:
            rows.insert_row(cfg, cfg.cy, "")
        else:
            rows.split_row(cfg, cfg.cy, cfg.cx)
        cfg.cy += 1
        cfg.cx = 0

    def del_char(self) -> None:
        cfg = self.cfg
        if cfg.cy == cfg.numrows:
            return
        if cfg.cx == 0 and cfg.cy == 0:
            return
        if cfg.cx > 0:
            rows.delete_char(cfg, cfg.cy, cfg.cx - 1)
            cfg.cx -= 1
        else:
            cfg.cx = rows.join_with_next(cfg, cfg.cy - 1)
            cfg.cy -= 1

    def del_forward(self) -> None:
        cfg = self.cfg
        row = cfg.current_row()
        if row is None:
            return
        if cfg.cx < row.size:
            rows.delete_char(cfg, cfg.cy, cfg.cx)
        else:
            rows.join_with_next(cfg, cfg.cy)

    def _noop(self) -> None:
        return

    def file_was_modified(self) -> bool:
        return bool(self.cfg.dirty)

    def handle_key(self, c: int) -> bool:
        """Apply one key event. Returns True once the editor should exit."""
        if c == CTRL_Q:
            if self.file_was_modified() and self.quit_times > 0:
                self.set_status_message(
                    "WARNING!!! File has unsaved changes. Press Ctrl-Q %d more times to quit.",
                    self.quit_times,
                )
                self.quit_times -= 1
                return False
            return True

        handler = self.key_handlers.get(c)
        if handler is not None:
            handler()
        elif c == TAB or (32 <= c <= 255 and c != BACKSPACE):
            self.insert_char(chr(c))

        self.quit_times = QUILL_QUIT_TIMES
        return False

    def process_keypress(self) -> bool:
        return self.handle_key(read_key(self.stdin_fd))


def run(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("Usage: quill <filename>", file=sys.stderr)
        return 1
    if not os.isatty(STDIN_FD) or not os.isatty(STDOUT_FD):
        print("quill: stdin/stdout must be a tty", file=sys.stderr)
        return 1

    settings = load_settings()
    setup_logging(settings.as_logging_config())

    try:
        with RawMode(STDIN_FD):
            try:
                editor = Editor(settings=settings)
                editor.open_file(args[0])
                signal.signal(signal.SIGWINCH, editor.handle_sigwinch)
                editor.set_status_message("HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find")
                while True:
                    editor.refresh_screen()
                    if editor.process_keypress():
                        break
            finally:
                os.write(STDOUT_FD, (ANSI_CLEAR_SCREEN + ANSI_CURSOR_HOME).encode())
    except OSError as exc:
        logger.exception("quill aborted")
        print(f"quill: {exc}", file=sys.stderr)
        return 1
    return 0
