from __future__ import annotations

import errno
import fcntl
import os
import re
import struct
import termios
from contextlib import AbstractContextManager
from typing import NamedTuple

from .constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    DEL_KEY,
    END_KEY,
    ESC,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
)

CSI_SIMPLE_MAP = {
    ord("A"): ARROW_UP,
    ord("B"): ARROW_DOWN,
    ord("C"): ARROW_RIGHT,
    ord("D"): ARROW_LEFT,
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}
CSI_TILDE_MAP = {
    ord("1"): HOME_KEY,
    ord("3"): DEL_KEY,
    ord("4"): END_KEY,
    ord("5"): PAGE_UP,
    ord("6"): PAGE_DOWN,
    ord("7"): HOME_KEY,
    ord("8"): END_KEY,
}
SS3_SIMPLE_MAP = {
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}
CURSOR_REPORT = re.compile(rb"\x1b\[(\d+);(\d+)R")
CURSOR_REPORT_LIMIT = 32


class WindowSize(NamedTuple):
    rows: int
    cols: int


def _read_byte(fd: int) -> int | None:
    """Next input byte, or None once the raw-mode read timeout expires."""
    try:
        data = os.read(fd, 1)
    except InterruptedError:
        return None
    return data[0] if data else None


def _wait_byte(fd: int) -> int:
    c = _read_byte(fd)
    while c is None:
        c = _read_byte(fd)
    return c


def _send(fd: int, seq: bytes) -> None:
    if os.write(fd, seq) != len(seq):
        raise OSError(errno.EIO, f"short write of {seq!r} to terminal")


def read_key(fd: int) -> int:
    """Read one key event, decoding VT100 escape sequences.

    A sequence that is cut short or not recognised comes back as a bare ESC.
    """
    c = _wait_byte(fd)
    if c != ESC:
        return c

    seq0 = _read_byte(fd)
    if seq0 is None:
        return ESC
    seq1 = _read_byte(fd)
    if seq1 is None:
        return ESC

    if seq0 == ord("["):
        if ord("0") <= seq1 <= ord("9"):
            if _read_byte(fd) == ord("~"):
                return CSI_TILDE_MAP.get(seq1, ESC)
            return ESC
        return CSI_SIMPLE_MAP.get(seq1, ESC)
    if seq0 == ord("O"):
        return SS3_SIMPLE_MAP.get(seq1, ESC)
    return ESC


def parse_cursor_report(report: bytes) -> tuple[int, int]:
    """Decode an ``ESC [ row ; col R`` reply into a 1-based (row, col)."""
    match = CURSOR_REPORT.fullmatch(report)
    if match is None:
        raise OSError(errno.EIO, f"invalid cursor position report {report!r}")
    return int(match.group(1)), int(match.group(2))


def _read_report(fd: int) -> bytes:
    report = bytearray()
    while len(report) < CURSOR_REPORT_LIMIT:
        c = _read_byte(fd)
        if c is None:
            break
        report.append(c)
        if c == ord("R"):
            break
    return bytes(report)


def get_cursor_position(ifd: int, ofd: int) -> tuple[int, int]:
    _send(ofd, b"\x1b[6n")
    return parse_cursor_report(_read_report(ifd))


def _ioctl_window_size(fd: int) -> WindowSize | None:
    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, bytes(8))
    except OSError:
        return None
    height, width = struct.unpack("HHHH", packed)[:2]
    if not height or not width:
        return None
    return WindowSize(height, width)


def get_window_size(ifd: int, ofd: int) -> WindowSize:
    """Terminal size in character cells.

    ``TIOCGWINSZ`` on the output descriptor is tried first. Without it the
    cursor is parked in the bottom-right corner, its reported position is
    taken as the size, and it is then moved back where it was.
    """
    size = _ioctl_window_size(ofd)
    if size is not None:
        return size

    home = get_cursor_position(ifd, ofd)
    _send(ofd, b"\x1b[999C\x1b[999B")
    size = WindowSize(*get_cursor_position(ifd, ofd))
    _send(ofd, b"\x1b[%d;%dH" % home)
    return size


def raw_attributes(attrs: list) -> list:
    """Copy of ``tcgetattr`` attributes switched to byte-at-a-time raw input.

    Reads return after at most a tenth of a second so escape sequences can be
    told apart from a lone ESC.
    """
    iflag, oflag, cflag, lflag, ispeed, ospeed, cc = attrs
    cc = list(cc)
    cc[termios.VMIN] = 0
    cc[termios.VTIME] = 1
    return [
        iflag & ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON),
        oflag & ~termios.OPOST,
        cflag | termios.CS8,
        lflag & ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG),
        ispeed,
        ospeed,
        cc,
    ]


class RawMode(AbstractContextManager["RawMode"]):
    """Hold ``fd`` in raw mode for the life of the ``with`` block."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._saved: list | None = None

    def __enter__(self) -> "RawMode":
        if not os.isatty(self.fd):
            raise OSError(errno.ENOTTY, "stdin is not a tty")
        self._saved = termios.tcgetattr(self.fd)
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, raw_attributes(self._saved))
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._saved is not None:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._saved)
            self._saved = None
