from __future__ import annotations

from .buffer import TextBuffer
from .constants import EDI_VERSION as __version__
from .editor import Editor, run
from .models import EditorSyntax, Row
from .search import SearchEngine
from .state import EditorConfig

__all__ = [
    "Editor",
    "EditorConfig",
    "EditorSyntax",
    "Row",
    "SearchEngine",
    "TextBuffer",
    "__version__",
    "run",
]
