"""Position cursor shared by the hand-written parsers."""

from typing import Callable, Optional

from dep_inspector.errors import ParseFailure


class Cursor:
    """A read position over an in-memory text.

    Lookahead helpers (``peek``, ``startswith``) never move the position;
    callers backtrack explicitly with ``mark``/``reset``.
    """

    __slots__ = ("text", "pos")

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, n: int = 1, ahead: int = 0) -> str:
        start = self.pos + ahead
        return self.text[start:start + n]

    def startswith(self, chunk: str, ahead: int = 0) -> bool:
        return self.text.startswith(chunk, self.pos + ahead)

    def advance(self, n: int = 1) -> str:
        taken = self.text[self.pos:self.pos + n]
        self.pos += len(taken)
        return taken

    def take_while(self, pred: Callable[[str], bool]) -> str:
        start = self.pos
        end = len(self.text)
        while self.pos < end and pred(self.text[self.pos]):
            self.pos += 1
        return self.text[start:self.pos]

    def take_until(self, chunk: str) -> str:
        """Consume up to (not including) ``chunk``, or to the end."""
        idx = self.text.find(chunk, self.pos)
        if idx < 0:
            idx = len(self.text)
        taken = self.text[self.pos:idx]
        self.pos = idx
        return taken

    def mark(self) -> int:
        return self.pos

    def reset(self, mark: int) -> None:
        self.pos = mark

    def location(self, offset: Optional[int] = None) -> tuple[int, int]:
        """1-based ``(line, column)`` of ``offset`` (default: current position)."""
        offset = self.pos if offset is None else offset
        line = self.text.count("\n", 0, offset) + 1
        column = offset - (self.text.rfind("\n", 0, offset) + 1) + 1
        return line, column

    def failure(self, reason: str, offset: Optional[int] = None) -> ParseFailure:
        """Build a ``ParseFailure`` pointing at ``offset``."""
        offset = self.pos if offset is None else offset
        line, column = self.location(offset)
        return ParseFailure(reason, offset=offset, line=line, column=column)


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, dropping a ``\\r`` before it.

    Unlike ``str.splitlines`` this keeps form feeds and other Unicode line
    separators inside a line.
    """
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
