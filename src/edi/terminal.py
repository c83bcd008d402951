from __future__ import annotations

import errno
import fcntl
import os
import re
import struct
import termios
from collections.abc import Iterable
from contextlib import AbstractContextManager

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
from .render import (
    ClearLine,
    HideCursor,
    Instruction,
    MoveCursor,
    ResetColor,
    SetColor,
    ShowCursor,
    Text,
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


CURSOR_QUERY = b"\x1b[6n"
CURSOR_FAR_CORNER = b"\x1b[999C\x1b[999B"
CURSOR_REPORT = re.compile(rb"\x1b\[(\d+);(\d+)R")
REPORT_MAX_LEN = 31
WINSIZE = struct.Struct("HHHH")

# Slots of the termios attribute list.
IFLAG, OFLAG, CFLAG, LFLAG, CC = 0, 1, 2, 3, 6
RAW_IFLAG_OFF = termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON
RAW_OFLAG_OFF = termios.OPOST
RAW_CFLAG_ON = termios.CS8
RAW_LFLAG_OFF = termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG


def _read_byte_once(fd: int) -> int | None:
    try:
        data = os.read(fd, 1)
    except InterruptedError:
        return None
    return data[0] if data else None


def _read_byte_blocking(fd: int) -> int:
    c = _read_byte_once(fd)
    while c is None:
        c = _read_byte_once(fd)
    return c


def read_key(fd: int) -> int:
    c = _read_byte_blocking(fd)
    if c != ESC:
        return c

    seq0 = _read_byte_once(fd)
    if seq0 is None:
        return ESC
    seq1 = _read_byte_once(fd)
    if seq1 is None:
        return ESC

    if seq0 == ord("["):
        simple = CSI_SIMPLE_MAP.get(seq1)
        if simple is not None:
            return simple
        if ord("0") <= seq1 <= ord("9"):
            seq2 = _read_byte_once(fd)
            if seq2 == ord("~"):
                return CSI_TILDE_MAP.get(seq1, ESC)
    elif seq0 == ord("O"):
        return SS3_SIMPLE_MAP.get(seq1, ESC)
    return ESC


def serialize(frame: Iterable[Instruction]) -> bytes:
    out: list[str] = []
    for op in frame:
        if isinstance(op, Text):
            out.append(op.text)
        elif isinstance(op, HideCursor):
            out.append("\x1b[?25l")
        elif isinstance(op, ShowCursor):
            out.append("\x1b[?25h")
        elif isinstance(op, MoveCursor):
            out.append(f"\x1b[{op.row + 1};{op.col + 1}H")
        elif isinstance(op, SetColor):
            out.append(f"\x1b[{op.code}m")
        elif isinstance(op, ResetColor):
            out.append("\x1b[39m")
        elif isinstance(op, ClearLine):
            out.append("\x1b[K")
        else:
            raise TypeError(f"unknown frame instruction: {op!r}")
    return "".join(out).encode("latin-1", errors="replace")


def write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        n = os.write(fd, view)
        if n <= 0:
            raise OSError(errno.EIO, "short write")
        view = view[n:]


def _read_report(fd: int) -> bytes:
    buf = bytearray()
    while len(buf) < REPORT_MAX_LEN:
        c = _read_byte_once(fd)
        if c is None:
            break
        buf.append(c)
        if c == ord("R"):
            break
    return bytes(buf)


def _write_exact(fd: int, data: bytes, what: str) -> None:
    if os.write(fd, data) != len(data):
        raise OSError(errno.EIO, f"{what} write failed")


def get_cursor_position(ifd: int, ofd: int) -> tuple[int, int]:
    _write_exact(ofd, CURSOR_QUERY, "cursor query")
    match = CURSOR_REPORT.match(_read_report(ifd))
    if match is None:
        raise OSError(errno.EIO, "invalid cursor position response")
    return int(match.group(1)), int(match.group(2))


def _ioctl_window_size(fd: int) -> tuple[int, int] | None:
    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, WINSIZE.pack(0, 0, 0, 0))
    except OSError:
        return None
    rows, cols, _, _ = WINSIZE.unpack(packed)
    if not cols:
        return None
    return rows, cols


def get_window_size(ifd: int, ofd: int) -> tuple[int, int]:
    size = _ioctl_window_size(ofd)
    if size is not None:
        return size

    # No ioctl answer: park the cursor in the far corner and ask where it is.
    orig_row, orig_col = get_cursor_position(ifd, ofd)
    _write_exact(ofd, CURSOR_FAR_CORNER, "window query")
    try:
        return get_cursor_position(ifd, ofd)
    finally:
        write_all(ofd, f"\x1b[{orig_row};{orig_col}H".encode())


def make_raw(attrs: list) -> list:
    raw = list(attrs)
    raw[CC] = list(attrs[CC])
    raw[IFLAG] &= ~RAW_IFLAG_OFF
    raw[OFLAG] &= ~RAW_OFLAG_OFF
    raw[CFLAG] |= RAW_CFLAG_ON
    raw[LFLAG] &= ~RAW_LFLAG_OFF
    # Reads return after at most a tenth of a second, with or without input.
    raw[CC][termios.VMIN] = 0
    raw[CC][termios.VTIME] = 1
    return raw


class RawMode(AbstractContextManager["RawMode"]):
    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._orig: list | None = None

    def __enter__(self) -> "RawMode":
        if not os.isatty(self.fd):
            raise OSError(errno.ENOTTY, "stdin is not a tty")
        self._orig = termios.tcgetattr(self.fd)
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, make_raw(self._orig))
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._orig is not None:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._orig)
