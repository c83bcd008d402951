from __future__ import annotations

import logging

from .constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    ENTER,
    ESC,
    HL_MATCH,
)
from .coords import rx_to_cx
from .state import EditorConfig

log = logging.getLogger(__name__)


class SearchEngine:
    """Incremental search driven one key at a time by the find prompt.

    The prompt owns the query text; after every key it calls :meth:`feed`
    with the current query and the key it just read. A match is shown by
    overlaying ``HL_MATCH`` on the matched span; the row's previous
    highlight is kept aside and put back at the start of the next step.
    """

    def __init__(self, cfg: EditorConfig) -> None:
        self.cfg = cfg
        self.searching = True
        self.last_match = -1
        self.direction = 1
        self.saved_hl_line = -1
        self.saved_hl: list[int] | None = None

    def feed(self, query: str, key: int) -> None:
        if key in (ENTER, ESC):
            self.searching = False
            self.last_match = -1
            self.direction = 1
        elif key in (ARROW_RIGHT, ARROW_DOWN):
            self.direction = 1
        elif key in (ARROW_LEFT, ARROW_UP):
            self.direction = -1
        else:
            self.searching = True
            self.last_match = -1
            self.direction = 1
        self.step(query)

    def restore(self) -> None:
        if self.saved_hl is not None and 0 <= self.saved_hl_line < self.cfg.numrows:
            self.cfg.rows[self.saved_hl_line].hl = self.saved_hl
        self.saved_hl = None
        self.saved_hl_line = -1

    def find_next(self, query: str) -> tuple[int, int] | None:
        rows = self.cfg.rows
        current = self.last_match
        for _ in range(len(rows)):
            current = (current + self.direction) % len(rows)
            offset = rows[current].render.find(query)
            if offset != -1:
                return current, offset
        return None

    def step(self, query: str) -> None:
        self.restore()
        if not self.searching or not query:
            return
        if self.last_match == -1:
            self.direction = 1

        match = self.find_next(query)
        if match is None:
            log.debug("no match for %r", query)
            return

        match_row, offset = match
        cfg = self.cfg
        row = cfg.rows[match_row]
        self.last_match = match_row
        cfg.cy = match_row
        cfg.cx = rx_to_cx(row, offset)
        cfg.rowoff = match_row
        cfg.coloff = 0

        self.saved_hl_line = match_row
        self.saved_hl = row.hl.copy()
        for i in range(offset, min(offset + len(query), row.rsize)):
            row.hl[i] = HL_MATCH
        log.debug("match for %r at row %d offset %d", query, match_row, offset)
