from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class EditorSyntax:
    name: str
    filematch: tuple[str, ...]
    singleline_comment_start: str
    flags: int


@dataclass(slots=True)
class Row:
    chars: str
    render: str = ""
    hl: list[int] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.chars)

    @property
    def rsize(self) -> int:
        return len(self.render)
