from __future__ import annotations


class EditorError(Exception):
    pass


class OutOfRangeError(EditorError, IndexError):
    def __init__(self, what: str, index: int, limit: int) -> None:
        super().__init__(f"{what} index {index} out of range [0, {limit}]")
        self.index = index
        self.limit = limit
