"""Tests for the Editor key loop, driven without a terminal."""

import os

import pytest

from edi.constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_F,
    CTRL_Q,
    CTRL_S,
    DEL_KEY,
    EDI_QUIT_TIMES,
    END_KEY,
    ENTER,
    ESC,
    HL_MATCH,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
    TAB,
)
from edi.editor import Editor


def text_keys(text: str) -> list[int]:
    return [ord(c) for c in text]


def make_editor(keys: list[int] | None = None, *lines: str, size=(12, 40)) -> tuple[Editor, list[bytes]]:
    frames: list[bytes] = []
    pending = iter(keys or [])
    editor = Editor(keys=lambda: next(pending), writer=frames.append, window_size=lambda: size)
    for line in lines:
        editor.cfg.buffer.insert_row(editor.cfg.numrows, line)
    editor.cfg.buffer.dirty = 0
    return editor, frames


def run_keys(editor: Editor, count: int) -> None:
    for _ in range(count):
        editor.process_keypress()


def chars(editor: Editor) -> list[str]:
    return [row.chars for row in editor.cfg.rows]


class TestWindow:
    def test_reserves_two_rows(self):
        editor, _ = make_editor(size=(24, 80))
        assert editor.cfg.screenrows == 22
        assert editor.cfg.screencols == 80

    def test_tiny_window(self):
        editor, _ = make_editor(size=(1, 0))
        assert editor.cfg.screenrows == 1
        assert editor.cfg.screencols == 1

    def test_size_failure(self):
        def broken():
            raise OSError(5, "nope")

        with pytest.raises(OSError, match="Unable to query screen size"):
            Editor(keys=lambda: 0, writer=lambda data: None, window_size=broken)

    def test_refresh_writes_frame(self):
        editor, frames = make_editor([], "abc")
        editor.refresh_screen()
        assert frames[0].startswith(b"\x1b[?25l")
        assert frames[0].endswith(b"\x1b[?25h")


class TestTyping:
    def test_type_lines(self):
        keys = text_keys("hi") + [ENTER] + text_keys("x")
        editor, _ = make_editor(keys)
        run_keys(editor, len(keys))
        assert chars(editor) == ["hi", "x"]
        assert (editor.cfg.cx, editor.cfg.cy) == (1, 1)
        assert editor.file_was_modified()

    def test_tab_is_inserted_raw(self):
        editor, _ = make_editor([TAB, ord("a")])
        run_keys(editor, 2)
        assert chars(editor) == ["\ta"]
        assert editor.cfg.rows[0].render == " " * 8 + "a"

    def test_backspace_merges_rows(self):
        editor, _ = make_editor([ARROW_DOWN, BACKSPACE], "ab", "cd")
        run_keys(editor, 2)
        assert chars(editor) == ["abcd"]
        assert (editor.cfg.cx, editor.cfg.cy) == (2, 0)

    def test_backspace_on_only_row_start_is_noop(self):
        editor, _ = make_editor([BACKSPACE], "ab")
        run_keys(editor, 1)
        assert chars(editor) == ["ab"]
        assert not editor.file_was_modified()

    def test_delete_key_removes_char_under_cursor(self):
        editor, _ = make_editor([DEL_KEY], "abc")
        run_keys(editor, 1)
        assert chars(editor) == ["bc"]
        assert editor.cfg.cx == 0

    def test_escape_is_ignored(self):
        editor, _ = make_editor([ESC], "abc")
        run_keys(editor, 1)
        assert chars(editor) == ["abc"]


class TestMovement:
    def test_right_at_row_end_wraps(self):
        editor, _ = make_editor([END_KEY, ARROW_RIGHT], "ab", "cd")
        run_keys(editor, 2)
        assert (editor.cfg.cx, editor.cfg.cy) == (0, 1)

    def test_left_at_row_start_wraps(self):
        editor, _ = make_editor([ARROW_DOWN, ARROW_LEFT], "ab", "cd")
        run_keys(editor, 2)
        assert (editor.cfg.cx, editor.cfg.cy) == (2, 0)

    def test_column_snaps_to_shorter_row(self):
        editor, _ = make_editor([END_KEY, ARROW_DOWN], "abcdef", "ab")
        run_keys(editor, 2)
        assert (editor.cfg.cx, editor.cfg.cy) == (2, 1)

    def test_up_at_top_stays(self):
        editor, _ = make_editor([ARROW_UP], "ab")
        run_keys(editor, 1)
        assert editor.cfg.cy == 0

    def test_down_stops_at_virtual_row(self):
        editor, _ = make_editor([ARROW_DOWN] * 5, "ab")
        run_keys(editor, 5)
        assert (editor.cfg.cx, editor.cfg.cy) == (0, 1)

    def test_home_and_end(self):
        editor, _ = make_editor([END_KEY], "abc")
        run_keys(editor, 1)
        assert editor.cfg.cx == 3
        editor, _ = make_editor([END_KEY, HOME_KEY], "abc")
        run_keys(editor, 2)
        assert editor.cfg.cx == 0

    def test_page_down_and_up(self):
        lines = [f"{i}" for i in range(50)]
        editor, _ = make_editor([PAGE_DOWN, PAGE_UP], *lines, size=(12, 40))
        run_keys(editor, 1)
        # Bottom of the screen, then one screen further.
        assert editor.cfg.cy == 19
        editor.cfg.rowoff = 10
        run_keys(editor, 1)
        assert editor.cfg.cy == 0

    def test_split_then_rejoin_with_arrows(self):
        keys = [ARROW_DOWN, ENTER, ARROW_UP, END_KEY, BACKSPACE]
        editor, _ = make_editor(keys, "first", "second")
        run_keys(editor, len(keys))
        assert chars(editor) == ["first", "second"]


class TestFile:
    def test_open_strips_line_endings(self, tmp_path):
        path = tmp_path / "in.c"
        path.write_bytes(b"int x;\r\n\tret\n\nlast")
        editor, _ = make_editor()
        assert editor.open_file(str(path)) is True
        assert chars(editor) == ["int x;", "\tret", "", "last"]
        assert editor.cfg.buffer.dirty == 0
        assert editor.cfg.buffer.syntax is not None
        assert editor.cfg.buffer.syntax.name == "c"

    def test_open_missing_file_starts_empty(self, tmp_path):
        editor, _ = make_editor()
        assert editor.open_file(str(tmp_path / "new.txt")) is False
        assert editor.cfg.numrows == 0
        assert editor.cfg.filename == str(tmp_path / "new.txt")

    def test_open_directory_reports_error(self, tmp_path):
        editor, _ = make_editor()
        assert editor.open_file(str(tmp_path)) is False
        assert editor.cfg.statusmsg.startswith("Can't open")
        assert editor.cfg.numrows == 0

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / "out.txt"
        path.write_bytes(b"a\tb\nc\n")
        editor, _ = make_editor(text_keys("z") + [CTRL_S])
        editor.open_file(str(path))
        run_keys(editor, 2)
        assert path.read_bytes() == b"za\tb\nc\n"
        assert editor.cfg.buffer.dirty == 0
        assert editor.cfg.statusmsg == "7 bytes written on disk"

    def test_save_truncates_longer_file(self, tmp_path):
        path = tmp_path / "out.txt"
        path.write_bytes(b"long line here\n")
        editor, _ = make_editor([], "x")
        editor.cfg.filename = str(path)
        assert editor.save() is True
        assert path.read_bytes() == b"x\n"

    def test_save_failure_keeps_dirty(self, tmp_path):
        editor, _ = make_editor([ord("a")])
        editor.cfg.filename = str(tmp_path)
        run_keys(editor, 1)
        assert editor.save() is False
        assert editor.cfg.buffer.dirty > 0
        assert editor.cfg.statusmsg.startswith("Can't save! I/O error:")

    def test_save_as_prompt(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        keys = [ord("q"), CTRL_S, ENTER] + text_keys("new.c") + [BACKSPACE] + text_keys("c") + [ENTER]
        editor, frames = make_editor(keys)
        run_keys(editor, 2)
        assert (tmp_path / "new.c").read_bytes() == b"q\n"
        assert editor.cfg.filename == "new.c"
        assert editor.cfg.buffer.syntax is not None
        assert frames

    def test_save_as_cancelled(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        editor, _ = make_editor([ord("q"), CTRL_S, ord("x"), ESC])
        run_keys(editor, 2)
        assert editor.cfg.filename is None
        assert editor.cfg.statusmsg == "Save aborted"
        assert editor.file_was_modified()
        assert os.listdir(tmp_path) == []


class TestQuit:
    def test_clean_buffer_quits_at_once(self):
        editor, _ = make_editor([CTRL_Q], "a")
        with pytest.raises(SystemExit):
            run_keys(editor, 1)

    def test_dirty_buffer_needs_confirmation(self):
        editor, _ = make_editor([ord("x")] + [CTRL_Q] * (EDI_QUIT_TIMES + 1))
        run_keys(editor, 1 + EDI_QUIT_TIMES)
        assert editor.quit_times == 0
        assert "unsaved changes" in editor.cfg.statusmsg
        with pytest.raises(SystemExit):
            run_keys(editor, 1)

    def test_other_key_resets_counter(self):
        editor, _ = make_editor([ord("x"), CTRL_Q, CTRL_Q, ARROW_LEFT])
        run_keys(editor, 4)
        assert editor.quit_times == EDI_QUIT_TIMES


class TestFind:
    def test_enter_keeps_match_position(self):
        keys = [CTRL_F] + text_keys("cd") + [ENTER]
        editor, _ = make_editor(keys, "ab", "cd")
        run_keys(editor, 1)
        assert (editor.cfg.cx, editor.cfg.cy) == (0, 1)
        assert all(HL_MATCH not in row.hl for row in editor.cfg.rows)
        assert editor.cfg.statusmsg == ""

    def test_escape_restores_cursor(self):
        keys = [CTRL_F] + text_keys("cd") + [ESC]
        editor, _ = make_editor(keys, "ab", "xx cd")
        run_keys(editor, 1)
        assert (editor.cfg.cx, editor.cfg.cy) == (0, 0)
        assert all(HL_MATCH not in row.hl for row in editor.cfg.rows)

    def test_escape_restores_viewport(self):
        lines = ["a" * 60] + [f"row {i}" for i in range(1, 40)] + ["needle"]
        editor, _ = make_editor([], *lines, size=(12, 40))
        cfg = editor.cfg
        cfg.cx, cfg.cy, cfg.rowoff, cfg.coloff = 55, 0, 0, 16

        pending = iter([CTRL_F] + text_keys("needle") + [ESC])
        seen: list[tuple[int, int, int]] = []

        def keys() -> int:
            seen.append((cfg.cy, cfg.rowoff, cfg.coloff))
            return next(pending)

        editor._keys = keys
        run_keys(editor, 1)
        # Just before ESC the match had moved cursor and viewport.
        assert seen[-1] == (40, 40, 0)
        assert (cfg.cx, cfg.cy, cfg.rowoff, cfg.coloff) == (55, 0, 0, 16)

    def test_up_after_missing_query(self):
        keys = [CTRL_F, ord("z"), ARROW_UP, ARROW_LEFT, ENTER]
        editor, _ = make_editor(keys, "abc")
        run_keys(editor, 1)
        assert (editor.cfg.cx, editor.cfg.cy) == (0, 0)
        assert editor.cfg.statusmsg == ""

    def test_key_past_query_limit_is_ignored(self, monkeypatch):
        monkeypatch.setattr("edi.editor.EDI_QUERY_LEN", 2)
        keys = [CTRL_F, ord("a"), ord("b"), ARROW_DOWN, ord("z"), ENTER]
        editor, _ = make_editor(keys, "ab", "ab", "ab")
        run_keys(editor, 1)
        assert editor.cfg.cy == 1

    def test_arrows_move_between_matches(self):
        keys = [CTRL_F, ord("x"), ARROW_DOWN, ARROW_DOWN, ENTER]
        editor, _ = make_editor(keys, "x0", "x1", "x2")
        run_keys(editor, 1)
        assert editor.cfg.cy == 2

    def test_backspace_edits_query(self):
        keys = [CTRL_F] + text_keys("cz") + [BACKSPACE, ARROW_RIGHT, ENTER]
        editor, _ = make_editor(keys, "c1", "c2")
        run_keys(editor, 1)
        assert editor.cfg.cy == 1

    def test_prompt_shows_query(self):
        keys = [CTRL_F, ord("a"), ENTER]
        editor, frames = make_editor(keys, "abc")
        run_keys(editor, 1)
        assert any(b"Search: a (Use ESC/Arrows/Enter)" in frame for frame in frames)
