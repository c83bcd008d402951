from __future__ import annotations

import time
from dataclasses import dataclass

from .constants import EDI_MESSAGE_TIMEOUT, EDI_VERSION, HL_NORMAL
from .coords import cx_to_rx
from .state import EditorConfig
from .syntax import syntax_to_color


@dataclass(frozen=True, slots=True)
class Text:
    text: str


@dataclass(frozen=True, slots=True)
class HideCursor:
    pass


@dataclass(frozen=True, slots=True)
class ShowCursor:
    pass


@dataclass(frozen=True, slots=True)
class MoveCursor:
    row: int
    col: int


@dataclass(frozen=True, slots=True)
class SetColor:
    code: int


@dataclass(frozen=True, slots=True)
class ResetColor:
    pass


@dataclass(frozen=True, slots=True)
class ClearLine:
    pass


Instruction = Text | HideCursor | ShowCursor | MoveCursor | SetColor | ResetColor | ClearLine

INVERT = 7
ATTR_OFF = 0
NEWLINE = Text("\r\n")


def scroll(cfg: EditorConfig) -> None:
    row = cfg.current_row()
    cfg.rx = cx_to_rx(row, cfg.cx) if row is not None else 0

    if cfg.cy < cfg.rowoff:
        cfg.rowoff = cfg.cy
    if cfg.cy >= cfg.rowoff + cfg.screenrows:
        cfg.rowoff = cfg.cy - cfg.screenrows + 1
    if cfg.rx < cfg.coloff:
        cfg.coloff = cfg.rx
    if cfg.rx >= cfg.coloff + cfg.screencols:
        cfg.coloff = cfg.rx - cfg.screencols + 1


def draw_welcome(cfg: EditorConfig, out: list[Instruction]) -> None:
    welcome = f"Edi editor -- version {EDI_VERSION}"
    if len(welcome) > cfg.screencols:
        welcome = welcome[: cfg.screencols]
    padding = (cfg.screencols - len(welcome)) // 2
    if padding:
        out.append(Text("~"))
        padding -= 1
    if padding > 0:
        out.append(Text(" " * padding))
    out.append(Text(welcome))


def is_control(ch: str) -> bool:
    # C0 controls, DEL and the C1 range, which terminals also act on.
    code = ord(ch)
    return code < 32 or 127 <= code < 160


def control_symbol(ch: str) -> str:
    code = ord(ch)
    if code <= 26:
        return chr(ord("@") + code)
    return "?"


def draw_row(cfg: EditorConfig, filerow: int, out: list[Instruction]) -> None:
    row = cfg.rows[filerow]
    chars = row.render[cfg.coloff : cfg.coloff + cfg.screencols]
    hl = row.hl[cfg.coloff : cfg.coloff + cfg.screencols]

    current_color = -1
    run: list[str] = []
    for ch, h in zip(chars, hl):
        if is_control(ch):
            if run:
                out.append(Text("".join(run)))
                run = []
            out.append(SetColor(INVERT))
            out.append(Text(control_symbol(ch)))
            out.append(SetColor(ATTR_OFF))
            if current_color != -1:
                out.append(SetColor(current_color))
            continue
        if h == HL_NORMAL:
            if current_color != -1:
                out.append(Text("".join(run)))
                run = []
                out.append(ResetColor())
                current_color = -1
        else:
            color = syntax_to_color(h)
            if color != current_color:
                if run:
                    out.append(Text("".join(run)))
                    run = []
                out.append(SetColor(color))
                current_color = color
        run.append(ch)
    if run:
        out.append(Text("".join(run)))
    if current_color != -1:
        out.append(ResetColor())


def draw_rows(cfg: EditorConfig, out: list[Instruction]) -> None:
    for y in range(cfg.screenrows):
        filerow = cfg.rowoff + y
        if filerow < cfg.numrows:
            draw_row(cfg, filerow, out)
        elif cfg.numrows == 0 and y == cfg.screenrows // 3:
            draw_welcome(cfg, out)
        else:
            out.append(Text("~"))
        out.append(ClearLine())
        out.append(NEWLINE)


def draw_status_bar(cfg: EditorConfig, out: list[Instruction]) -> None:
    filename = cfg.filename if cfg.filename else "[No Name]"
    modified = " (modified)" if cfg.buffer.dirty else ""
    status = f"{filename:.20} - {cfg.numrows} lines{modified}"
    filetype = cfg.buffer.syntax.name if cfg.buffer.syntax is not None else "no ft"
    rstatus = f"{filetype} | {cfg.cy + 1}/{cfg.numrows}"
    if len(status) > cfg.screencols:
        status = status[: cfg.screencols]

    line = [status]
    fill = len(status)
    while fill < cfg.screencols:
        if cfg.screencols - fill == len(rstatus):
            line.append(rstatus)
            break
        line.append(" ")
        fill += 1

    out.append(SetColor(INVERT))
    out.append(Text("".join(line)))
    out.append(SetColor(ATTR_OFF))
    out.append(NEWLINE)


def draw_message_bar(cfg: EditorConfig, out: list[Instruction], now: float) -> None:
    out.append(ClearLine())
    if cfg.statusmsg and now - cfg.statusmsg_time < EDI_MESSAGE_TIMEOUT:
        out.append(Text(cfg.statusmsg[: cfg.screencols]))


def build_frame(cfg: EditorConfig, now: float | None = None) -> list[Instruction]:
    scroll(cfg)
    out: list[Instruction] = [HideCursor(), MoveCursor(0, 0)]
    draw_rows(cfg, out)
    draw_status_bar(cfg, out)
    draw_message_bar(cfg, out, time.time() if now is None else now)
    out.append(MoveCursor(cfg.cy - cfg.rowoff, cfg.rx - cfg.coloff))
    out.append(ShowCursor())
    return out
