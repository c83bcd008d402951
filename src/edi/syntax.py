from __future__ import annotations

import logging
import string

from .constants import (
    C_HL_EXTENSIONS,
    HL_COMMENT,
    HL_HIGHLIGHT_NUMBERS,
    HL_HIGHLIGHT_STRINGS,
    HL_MATCH,
    HL_NORMAL,
    HL_NUMBER,
    HL_STRING,
    PY_HL_EXTENSIONS,
    SEPARATORS,
)
from .models import EditorSyntax, Row

log = logging.getLogger(__name__)


HLDB: tuple[EditorSyntax, ...] = (
    EditorSyntax(
        name="c",
        filematch=C_HL_EXTENSIONS,
        singleline_comment_start="//",
        flags=HL_HIGHLIGHT_STRINGS | HL_HIGHLIGHT_NUMBERS,
    ),
    EditorSyntax(
        name="python",
        filematch=PY_HL_EXTENSIONS,
        singleline_comment_start="#",
        flags=HL_HIGHLIGHT_STRINGS | HL_HIGHLIGHT_NUMBERS,
    ),
)


def is_separator(c: str) -> bool:
    return not c or c == "\0" or c in string.whitespace or c in SEPARATORS


def syntax_to_color(hl: int) -> int:
    if hl == HL_COMMENT:
        return 36
    if hl == HL_STRING:
        return 35
    if hl == HL_NUMBER:
        return 31
    if hl == HL_MATCH:
        return 34
    return 37


def select_syntax(filename: str | None) -> EditorSyntax | None:
    if not filename:
        return None
    for syntax in HLDB:
        for pattern in syntax.filematch:
            if pattern.startswith("."):
                if filename.endswith(pattern):
                    log.debug("selected %s syntax for %s", syntax.name, filename)
                    return syntax
            elif pattern in filename:
                log.debug("selected %s syntax for %s", syntax.name, filename)
                return syntax
    return None


def update_syntax(row: Row, syntax: EditorSyntax | None) -> None:
    # Each row is scanned on its own: an unterminated string ends with its row.
    row.hl = [HL_NORMAL] * row.rsize
    if syntax is None:
        return

    scs = syntax.singleline_comment_start
    strings = bool(syntax.flags & HL_HIGHLIGHT_STRINGS)
    numbers = bool(syntax.flags & HL_HIGHLIGHT_NUMBERS)

    p = row.render
    prev_sep = True
    in_string = ""
    i = 0
    while i < len(p):
        ch = p[i]
        prev_hl = row.hl[i - 1] if i > 0 else HL_NORMAL

        if scs and not in_string and p.startswith(scs, i):
            for h in range(i, len(row.hl)):
                row.hl[h] = HL_COMMENT
            break

        if strings:
            if in_string:
                row.hl[i] = HL_STRING
                if ch == "\\" and i + 1 < len(p):
                    row.hl[i + 1] = HL_STRING
                    i += 2
                    continue
                if ch == in_string:
                    in_string = ""
                i += 1
                prev_sep = True
                continue
            if ch in ('"', "'"):
                in_string = ch
                row.hl[i] = HL_STRING
                i += 1
                continue

        if numbers:
            if (ch in string.digits and (prev_sep or prev_hl == HL_NUMBER)) or (
                ch == "." and prev_hl == HL_NUMBER
            ):
                row.hl[i] = HL_NUMBER
                i += 1
                prev_sep = False
                continue

        prev_sep = is_separator(ch)
        i += 1
