"""Parser for the dpkg status database (``/var/lib/dpkg/status``).

The file is a list of stanzas separated by a single blank line. Each stanza
is a list of ``Key: value`` properties. A value runs until a line break that
is *not* followed by a space; a break followed by a space continues the
value on the next line, and a continuation line holding a single ``.``
stands for an empty line.

Values are returned raw, continuation breaks and indent included. Use
``fold_value`` to decode a multi-line value.
"""

from collections.abc import Iterable, Mapping
from typing import Callable, Optional, TypeVar

from dep_inspector.errors import ParseFailure
from dep_inspector.models import DpkgEntry
from dep_inspector.parsers.cursor import Cursor

REQUIRED_KEYS = ("Package", "Version", "Architecture")

T = TypeVar("T")


# ── Grammar ───────────────────────────────────────────────────────────────

def _eol_length(cur: Cursor, ahead: int = 0) -> int:
    """Length of the line break at the cursor (0 if there is none)."""
    if cur.startswith("\r\n", ahead):
        return 2
    if cur.startswith("\n", ahead):
        return 1
    return 0


def _end_of_value(cur: Cursor) -> Optional[int]:
    """Length of the end-of-value marker at the cursor, or ``None``.

    The marker is a line break not followed by a space, or end of input
    (length 0). Lookahead only: the cursor does not move.
    """
    n = _eol_length(cur)
    if n and cur.peek(1, ahead=n) != " ":
        return n
    if cur.at_end:
        return 0
    return None


def _skip_blanks(cur: Cursor) -> None:
    cur.take_while(lambda c: c in " \t")


def _value(cur: Cursor) -> str:
    """At least one character, then everything up to the end-of-value marker.

    The first character is taken unconditionally, so a value may start with
    a line break (``Conffiles:`` followed by indented lines).
    """
    if cur.at_end:
        raise cur.failure("expected a property value, found end of input")
    start = cur.pos
    text = cur.text
    search = start + 1
    while True:
        nl = text.find("\n", search)
        if nl < 0:
            end, marker = len(text), 0
            break
        if text[nl + 1:nl + 2] != " ":
            # "\r\n" starting inside the value ends it one character earlier
            if nl - 1 >= search and text[nl - 1] == "\r":
                end, marker = nl - 1, 2
            else:
                end, marker = nl, 1
            break
        search = nl + 1
    cur.pos = end + marker
    return text[start:end]


def _property(cur: Cursor) -> tuple[str, str]:
    start = cur.pos
    key = cur.take_until(":")
    if cur.at_end:
        raise cur.failure(f"expected ':' after key {key!r}", offset=start)
    cur.advance()
    _skip_blanks(cur)
    return key, _value(cur)


def _properties(cur: Cursor) -> dict[str, str]:
    """Properties until the end-of-value marker that closes the stanza.

    Duplicate keys keep the last value.
    """
    props: dict[str, str] = {}
    while True:
        marker = _end_of_value(cur)
        if marker is not None:
            cur.advance(marker)
            return props
        key, value = _property(cur)
        props[key] = value
        _skip_blanks(cur)


def _entry(cur: Cursor) -> DpkgEntry:
    start = cur.pos
    props = _properties(cur)
    package = props.get("Package")
    version = props.get("Version")
    arch = props.get("Architecture")
    if package is None or version is None or arch is None:
        raise cur.failure(_missing_keys_message(package, version, arch), offset=start)
    return DpkgEntry(architecture=arch, package=package, version=version)


def _missing_keys_message(
    package: Optional[str], version: Optional[str], arch: Optional[str]
) -> str:
    values = dict(zip(REQUIRED_KEYS, (package, version, arch)))
    found = "; ".join(f"{k}: {v!r}" for k, v in values.items() if v is not None)
    missing = ", ".join(k for k, v in values.items() if v is None)
    return (
        "stanza must have all of required 'Package', 'Version', 'Architecture' keys."
        f" Found: {found or 'none'}. Missing: {missing}"
    )


def _fields(cur: Cursor) -> dict[str, str]:
    start = cur.pos
    props = _properties(cur)
    if not props:
        raise cur.failure("expected a stanza, found an empty one", offset=start)
    return props


def _many(cur: Cursor, item: Callable[[Cursor], T]) -> list[T]:
    """Repeat ``item`` until it fails without consuming input, then require end of input.

    A failure after consuming input is a real error and propagates.
    """
    out: list[T] = []
    while True:
        start = cur.mark()
        try:
            out.append(item(cur))
        except ParseFailure:
            if cur.pos != start:
                raise
            cur.reset(start)
            break
    if not cur.at_end:
        raise cur.failure("unexpected trailing input after last stanza")
    return out


# ── Public API ────────────────────────────────────────────────────────────

def parse(text: str) -> list[DpkgEntry]:
    """Parse a whole status file.

    An empty text yields no entries. Any stanza that fails, or input left
    over after the last stanza, fails the whole parse.
    """
    return _many(Cursor(text), _entry)


def parse_fields(text: str) -> list[dict[str, str]]:
    """Parse every stanza into its raw ``key -> value`` map, keeping all keys."""
    return _many(Cursor(text), _fields)


def parse_entry(text: str) -> DpkgEntry:
    """Parse the first stanza of ``text``; later input is ignored."""
    return _entry(Cursor(text))


def fold_value(raw: str) -> str:
    """Decode a raw multi-line value.

    ``"first\\n second\\n ."`` becomes ``"first\\nsecond\\n"``: the single
    indent space is dropped and a lone ``.`` line becomes an empty line.
    """
    lines = raw.replace("\r\n", "\n").split("\n")
    out = lines[:1]
    for line in lines[1:]:
        if line.startswith(" "):
            line = line[1:]
        out.append("" if line == "." else line)
    return "\n".join(out)


def render_stanza(fields: Mapping[str, str]) -> str:
    """Render fields back into status-file syntax (no trailing blank line).

    Multi-line values are written with single-space continuation lines and
    ``.`` for empty lines, so ``fold_value`` of the parsed value gives the
    input back. Values must be non-empty and must not start with a blank.
    """
    lines: list[str] = []
    for key, value in fields.items():
        first, *rest = value.split("\n")
        lines.append(f"{key}: {first}")
        lines.extend(f" {line or '.'}" for line in rest)
    return "\n".join(lines) + "\n"


def render_entries(entries: Iterable[DpkgEntry]) -> str:
    """Render entries as a status file, stanzas separated by one blank line."""
    return "\n".join(
        render_stanza({
            "Package": e.package,
            "Version": e.version,
            "Architecture": e.architecture,
        })
        for e in entries
    )


def relationships(entries: list[DpkgEntry]) -> list[tuple[DpkgEntry, DpkgEntry]]:
    """The status fields kept here carry no dependency links."""
    return []


def direct_entries(entries: list[DpkgEntry]) -> list[DpkgEntry]:
    """Installed packages are not declared direct by the database itself."""
    return []
