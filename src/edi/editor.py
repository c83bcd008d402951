from __future__ import annotations

import argparse
import errno
import logging
import os
import signal
import sys
import time
from collections.abc import Callable

from .constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_A,
    CTRL_C,
    CTRL_E,
    CTRL_F,
    CTRL_H,
    CTRL_L,
    CTRL_Q,
    CTRL_S,
    DEL_KEY,
    EDI_QUERY_LEN,
    EDI_QUIT_TIMES,
    END_KEY,
    ENTER,
    ESC,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
)
from .log import configure_logging
from .render import build_frame
from .search import SearchEngine
from .state import EditorConfig
from .syntax import select_syntax
from .terminal import RawMode, get_window_size, read_key, serialize, write_all

log = logging.getLogger(__name__)

HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find"


class Editor:
    def __init__(
        self,
        stdin_fd: int = 0,
        stdout_fd: int = 1,
        *,
        keys: Callable[[], int] | None = None,
        writer: Callable[[bytes], None] | None = None,
        window_size: Callable[[], tuple[int, int]] | None = None,
    ) -> None:
        self.cfg = EditorConfig()
        self.quit_times = EDI_QUIT_TIMES
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._keys = keys or (lambda: read_key(self.stdin_fd))
        self._writer = writer or (lambda data: write_all(self.stdout_fd, data))
        self._window_size = window_size or (lambda: get_window_size(self.stdin_fd, self.stdout_fd))
        self.key_handlers: dict[int, Callable[[], None]] = {
            ENTER: self.insert_newline,
            CTRL_S: self.save,
            CTRL_F: self.find,
            BACKSPACE: self.del_char,
            CTRL_H: self.del_char,
            DEL_KEY: self.del_forward,
            HOME_KEY: self.move_home,
            CTRL_A: self.move_home,
            END_KEY: self.move_end,
            CTRL_E: self.move_end,
            PAGE_UP: self.page_up,
            PAGE_DOWN: self.page_down,
            CTRL_C: self._noop,
            CTRL_L: self._noop,
            ESC: self._noop,
        }
        self.update_window_size()

    def update_window_size(self) -> None:
        try:
            rows, cols = self._window_size()
        except OSError as exc:
            raise OSError(exc.errno, "Unable to query screen size") from exc
        self.cfg.screenrows = max(1, rows - 2)
        self.cfg.screencols = max(1, cols)
        log.debug("window size %dx%d", rows, cols)

    def handle_sigwinch(self, _signum: int, _frame) -> None:
        self.update_window_size()
        self.refresh_screen()

    def set_status_message(self, msg: str) -> None:
        self.cfg.statusmsg = msg
        self.cfg.statusmsg_time = time.time()

    def select_syntax_highlight(self, filename: str | None) -> None:
        self.cfg.buffer.set_syntax(select_syntax(filename))

    def read_key(self) -> int:
        return self._keys()

    def refresh_screen(self) -> None:
        self._writer(serialize(build_frame(self.cfg)))

    def open_file(self, filename: str) -> bool:
        cfg = self.cfg
        cfg.filename = filename
        self.select_syntax_highlight(filename)
        try:
            with open(filename, "rb") as f:
                lines = [line.rstrip(b"\r\n").decode("latin-1") for line in f]
        except FileNotFoundError:
            log.info("%s does not exist, starting empty", filename)
            return False
        except OSError as exc:
            log.error("opening %s failed: %s", filename, exc)
            self.set_status_message(f"Can't open {filename}! I/O error: {exc.strerror or exc}")
            return False

        for line in lines:
            cfg.buffer.insert_row(cfg.numrows, line)
        cfg.buffer.dirty = 0
        log.info("opened %s (%d lines)", filename, cfg.numrows)
        return True

    def save(self) -> bool:
        cfg = self.cfg
        if not cfg.filename:
            filename = self.prompt("Save as: {} (ESC to cancel)")
            if filename is None:
                self.set_status_message("Save aborted")
                return False
            cfg.filename = filename
            self.select_syntax_highlight(filename)

        data, length = cfg.buffer.linearize()
        try:
            fd = os.open(cfg.filename, os.O_RDWR | os.O_CREAT, 0o644)
            try:
                os.ftruncate(fd, length)
                write_all(fd, data)
            finally:
                os.close(fd)
        except OSError as exc:
            log.error("saving %s failed: %s", cfg.filename, exc)
            self.set_status_message(
                f"Can't save! I/O error: {os.strerror(exc.errno or errno.EIO)}"
            )
            return False

        cfg.buffer.dirty = 0
        log.info("wrote %d bytes to %s", length, cfg.filename)
        self.set_status_message(f"{length} bytes written on disk")
        return True

    def prompt(self, template: str) -> str | None:
        buf = ""
        while True:
            self.set_status_message(template.format(buf))
            self.refresh_screen()
            c = self.read_key()
            if c in (DEL_KEY, CTRL_H, BACKSPACE):
                buf = buf[:-1]
            elif c == ESC:
                self.set_status_message("")
                return None
            elif c == ENTER:
                if buf:
                    self.set_status_message("")
                    return buf
            elif 32 <= c <= 126:
                buf += chr(c)

    def find(self) -> None:
        cfg = self.cfg
        saved = cfg.snapshot()
        engine = SearchEngine(cfg)
        query = ""

        while True:
            self.set_status_message(f"Search: {query} (Use ESC/Arrows/Enter)")
            self.refresh_screen()

            c = self.read_key()
            if c in (DEL_KEY, CTRL_H, BACKSPACE):
                query = query[:-1]
            elif 32 <= c <= 126:
                if len(query) >= EDI_QUERY_LEN:
                    continue
                query += chr(c)

            engine.feed(query, c)
            if c in (ESC, ENTER):
                if c == ESC:
                    cfg.restore(saved)
                self.set_status_message("")
                return

    def insert_char(self, c: int) -> None:
        cfg = self.cfg
        cfg.cx, cfg.cy = cfg.buffer.insert_char_at(cfg.cx, cfg.cy, chr(c & 0xFF))

    def insert_newline(self) -> None:
        cfg = self.cfg
        cfg.cx, cfg.cy = cfg.buffer.insert_newline(cfg.cx, cfg.cy)

    def del_char(self) -> None:
        cfg = self.cfg
        cfg.cx, cfg.cy = cfg.buffer.delete_char_at(cfg.cx, cfg.cy)

    def del_forward(self) -> None:
        self.move_cursor(ARROW_RIGHT)
        self.del_char()

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

    def _noop(self) -> None:
        return

    def process_keypress(self) -> None:
        c = self.read_key()
        if c == CTRL_Q:
            if self.cfg.buffer.dirty and self.quit_times > 0:
                self.set_status_message(
                    "WARNING!!! File has unsaved changes. "
                    f"Press Ctrl-Q {self.quit_times} more times to quit."
                )
                self.quit_times -= 1
                return
            raise SystemExit(0)

        handler = self.key_handlers.get(c)
        if handler is not None:
            handler()
        elif c in (ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT):
            self.move_cursor(c)
        elif c < 256:
            self.insert_char(c)

        self.quit_times = EDI_QUIT_TIMES

    def file_was_modified(self) -> bool:
        return bool(self.cfg.buffer.dirty)


def run(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="edi", description="Minimal terminal text editor")
    parser.add_argument("file", nargs="?", default=None, help="file to open or create")
    args = parser.parse_args(argv)

    configure_logging()
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    if not os.isatty(stdin_fd) or not os.isatty(stdout_fd):
        print("edi: stdin/stdout must be a tty", file=sys.stderr)
        return 1

    editor = Editor(stdin_fd, stdout_fd)
    if args.file:
        editor.open_file(args.file)

    signal.signal(signal.SIGWINCH, editor.handle_sigwinch)
    try:
        with RawMode(stdin_fd):
            if not editor.cfg.statusmsg:
                editor.set_status_message(HELP_MESSAGE)
            while True:
                editor.refresh_screen()
                editor.process_keypress()
    except SystemExit as exc:
        write_all(stdout_fd, b"\x1b[2J\x1b[H")
        if isinstance(exc.code, int):
            return exc.code
        return 0


def main() -> None:
    raise SystemExit(run())
