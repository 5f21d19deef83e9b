"""Exception types raised by the parsers.

Parse problems are ordinary, catchable exceptions: a caller that scans many
files turns them into values (see ``parsers.try_parse``) and moves on.
"""

from typing import Optional


class DepInspectorError(Exception):
    """Base class for dep-inspector errors."""


class ParseFailure(DepInspectorError):
    """A metadata file violated its format's grammar or lacked a required field."""

    def __init__(
        self,
        reason: str,
        *,
        offset: Optional[int] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.offset = offset
        self.line = line
        self.column = column
        self.recoverable = recoverable

    @property
    def location(self) -> str:
        """``line:column`` when known, else an empty string."""
        if self.line is None:
            return ""
        if self.column is None:
            return str(self.line)
        return f"{self.line}:{self.column}"

    def __str__(self) -> str:
        if self.location:
            return f"{self.reason} (at {self.location})"
        return self.reason


class MalformedInputFailure(ParseFailure):
    """Input bytes are not valid text in the expected encoding."""


def decode_input(raw: bytes, encoding: str = "utf-8") -> str:
    """Decode raw file bytes, raising ``MalformedInputFailure`` on bad input."""
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise MalformedInputFailure(
            f"input is not valid {encoding}: {e.reason}",
            offset=e.start,
        ) from e
