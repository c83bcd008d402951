from __future__ import annotations

from .constants import EDI_TAB_STOP
from .errors import OutOfRangeError
from .models import EditorSyntax, Row
from .syntax import update_syntax


class TextBuffer:
    """Ordered rows of the document plus the unsaved-changes counter.

    Rows are addressed by index. Any call that inserts or deletes rows may
    shift the rows after it, so callers look rows up again afterwards instead
    of holding on to them.
    """

    def __init__(self, syntax: EditorSyntax | None = None) -> None:
        self.rows: list[Row] = []
        self.dirty = 0
        self.syntax = syntax

    @property
    def numrows(self) -> int:
        return len(self.rows)

    def set_syntax(self, syntax: EditorSyntax | None) -> None:
        self.syntax = syntax
        for row in self.rows:
            update_syntax(row, syntax)

    def update_row(self, row: Row) -> None:
        out: list[str] = []
        idx = 0
        for ch in row.chars:
            if ch == "\t":
                out.append(" ")
                idx += 1
                while idx % EDI_TAB_STOP != 0:
                    out.append(" ")
                    idx += 1
            else:
                out.append(ch)
                idx += 1
        row.render = "".join(out)
        update_syntax(row, self.syntax)

    def insert_row(self, at: int, s: str) -> None:
        if at < 0 or at > self.numrows:
            raise OutOfRangeError("row", at, self.numrows)
        row = Row(chars=s)
        self.rows.insert(at, row)
        self.update_row(row)
        self.dirty += 1

    def delete_row(self, at: int) -> None:
        if at < 0 or at >= self.numrows:
            return
        del self.rows[at]
        self.dirty += 1

    def row_insert_char(self, row: Row, at: int, c: str) -> None:
        if at < 0 or at > row.size:
            at = row.size
        row.chars = row.chars[:at] + c + row.chars[at:]
        self.update_row(row)
        self.dirty += 1

    def row_append_string(self, row: Row, s: str) -> None:
        row.chars += s
        self.update_row(row)
        self.dirty += 1

    def row_delete_char(self, row: Row, at: int) -> None:
        if at < 0 or at >= row.size:
            return
        row.chars = row.chars[:at] + row.chars[at + 1 :]
        self.update_row(row)
        self.dirty += 1

    def insert_char_at(self, cx: int, cy: int, c: str) -> tuple[int, int]:
        if cy == self.numrows:
            self.insert_row(self.numrows, "")
        self.row_insert_char(self.rows[cy], cx, c)
        return cx + 1, cy

    def insert_newline(self, cx: int, cy: int) -> tuple[int, int]:
        if cx == 0 or cy >= self.numrows:
            self.insert_row(min(cy, self.numrows), "")
        else:
            row = self.rows[cy]
            cx = min(cx, row.size)
            self.insert_row(cy + 1, row.chars[cx:])
            row = self.rows[cy]
            row.chars = row.chars[:cx]
            self.update_row(row)
        return 0, cy + 1

    def delete_char_at(self, cx: int, cy: int) -> tuple[int, int]:
        if cy >= self.numrows or (cx == 0 and cy == 0):
            return cx, cy

        row = self.rows[cy]
        if cx > 0:
            self.row_delete_char(row, cx - 1)
            return cx - 1, cy

        prev = self.rows[cy - 1]
        join = prev.size
        self.row_append_string(prev, row.chars)
        self.delete_row(cy)
        return join, cy - 1

    def rows_to_string(self) -> str:
        return "".join(f"{row.chars}\n" for row in self.rows)

    def linearize(self) -> tuple[bytes, int]:
        # Rows hold bytes decoded one-to-one, so latin-1 gives them back unchanged.
        data = self.rows_to_string().encode("latin-1")
        return data, len(data)
