from __future__ import annotations

from dataclasses import dataclass, field

from .buffer import TextBuffer
from .models import Row


@dataclass
class SearchSnapshot:
    cx: int
    cy: int
    coloff: int
    rowoff: int


@dataclass(slots=True)
class EditorConfig:
    cx: int = 0
    cy: int = 0
    rx: int = 0
    rowoff: int = 0
    coloff: int = 0
    screenrows: int = 0
    screencols: int = 0
    buffer: TextBuffer = field(default_factory=TextBuffer)
    filename: str | None = None
    statusmsg: str = ""
    statusmsg_time: float = 0.0

    @property
    def numrows(self) -> int:
        return self.buffer.numrows

    @property
    def rows(self) -> list[Row]:
        return self.buffer.rows

    def current_row(self) -> Row | None:
        if self.cy < self.buffer.numrows:
            return self.buffer.rows[self.cy]
        return None

    def snapshot(self) -> SearchSnapshot:
        return SearchSnapshot(self.cx, self.cy, self.coloff, self.rowoff)

    def restore(self, saved: SearchSnapshot) -> None:
        self.cx = saved.cx
        self.cy = saved.cy
        self.coloff = saved.coloff
        self.rowoff = saved.rowoff
