"""Parser for the Alpine installed-package database (``lib/apk/db/installed``).

Records are separated by blank lines; every other line is ``X:value`` with
a single-letter field tag. Only the fields used for the graph are kept:
``P`` package, ``V`` version, ``A`` architecture, ``D`` dependencies and
``p`` provides.
"""

import re

from dep_inspector.errors import ParseFailure
from dep_inspector.models import ApkEntry
from dep_inspector.parsers.cursor import split_lines

_FIELD_RE = re.compile(r"^([A-Za-z]):(.*)$")
_CONSTRAINT_RE = re.compile(r"[<>=~].*$")


def _record(fields: dict[str, str], line_no: int) -> ApkEntry:
    missing = [tag for tag in ("P", "V") if not fields.get(tag)]
    if missing:
        found = ", ".join(f"{t}={v!r}" for t, v in sorted(fields.items()) if t in "PVA")
        raise ParseFailure(
            "record must have required 'P' (package) and 'V' (version) fields;"
            f" missing {', '.join(missing)} (found {found or 'none'})",
            line=line_no,
        )
    return ApkEntry(
        package=fields["P"],
        version=fields["V"],
        architecture=fields.get("A") or None,
        depends=tuple(fields.get("D", "").split()),
        provides=tuple(fields.get("p", "").split()),
    )


def parse(text: str) -> list[ApkEntry]:
    """Parse an installed database. Repeated tags keep the last value."""
    entries: list[ApkEntry] = []
    fields: dict[str, str] = {}
    start_line = 1
    for line_no, line in enumerate(split_lines(text), start=1):
        if not line.strip():
            if fields:
                entries.append(_record(fields, start_line))
                fields = {}
            continue
        match = _FIELD_RE.match(line)
        if not match:
            raise ParseFailure(
                f"expected 'X:value' field line, got {line[:40]!r}",
                line=line_no,
                column=1,
            )
        if not fields:
            start_line = line_no
        fields[match.group(1)] = match.group(2)
    if fields:
        entries.append(_record(fields, start_line))
    return entries


def _dependency_name(token: str) -> str:
    return _CONSTRAINT_RE.sub("", token)


def relationships(entries: list[ApkEntry]) -> list[tuple[ApkEntry, ApkEntry]]:
    """Link each record to the installed records satisfying its ``D`` field.

    Dependencies resolve by package name first, then by a ``p`` provide
    (``so:``, ``cmd:``, ``pc:`` names). Conflicts (``!name``) and names
    nothing provides are skipped.
    """
    providers: dict[str, ApkEntry] = {}
    for e in entries:
        for token in e.provides:
            providers.setdefault(_dependency_name(token), e)
    for e in entries:
        providers[e.package] = e

    hints: list[tuple[ApkEntry, ApkEntry]] = []
    for e in entries:
        for token in e.depends:
            if token.startswith("!"):
                continue
            target = providers.get(_dependency_name(token))
            if target is not None and target is not e:
                hints.append((e, target))
    return hints


def direct_entries(entries: list[ApkEntry]) -> list[ApkEntry]:
    """World-file selections live outside this database."""
    return []
