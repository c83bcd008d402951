"""Conversions between raw character indexes and render columns."""

from __future__ import annotations

from .constants import EDI_TAB_STOP
from .models import Row


def _advance(col: int, ch: str) -> int:
    if ch == "\t":
        col += (EDI_TAB_STOP - 1) - (col % EDI_TAB_STOP)
    return col + 1


def cx_to_rx(row: Row, cx: int) -> int:
    rx = 0
    for ch in row.chars[:cx]:
        rx = _advance(rx, ch)
    return rx


def rx_to_cx(row: Row, rx: int) -> int:
    """Return the first character index whose render column passes ``rx``.

    Used to turn an offset found in ``row.render`` back into an editable
    column. Returns ``row.size`` when ``rx`` lies past the end of the row.
    """
    cur_rx = 0
    for cx, ch in enumerate(row.chars):
        cur_rx = _advance(cur_rx, ch)
        if cur_rx > rx:
            return cx
    return row.size
