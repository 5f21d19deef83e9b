"""Parser for pip requirements files."""

import re
from typing import Optional

from dep_inspector.errors import ParseFailure
from dep_inspector.models import PipRequirement
from dep_inspector.parsers.cursor import split_lines

_REQUIREMENT_RE = re.compile(
    r"""^(?P<name>[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)
        \s*(?:\[(?P<extras>[^\]]*)\])?
        \s*(?:@\s*(?P<url>\S+)|(?P<spec>\(?\s*[<>=!~][^;]*?\)?))?
        \s*(?:;\s*(?P<marker>.*?))?
        \s*$""",
    re.VERBOSE,
)
_COMMENT_RE = re.compile(r"(^|\s)#.*$")
_TRAILING_OPTIONS_RE = re.compile(r"\s+--?[A-Za-z].*$")
_EXTRA_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?$")
_URL_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
_EGG_RE = re.compile(r"[#&]egg=([A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)")
_MARKER_SPLIT_RE = re.compile(r"\s+;\s*|;\s+")
_ARCHIVE_RE = re.compile(
    r"(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*?)-(?P<version>\d[^-]*?)(?:-[^/\\]*)?"
    r"\.(?:whl|tar\.gz|tar\.bz2|tgz|zip)"
)


def _logical_lines(text: str) -> list[tuple[int, str]]:
    """Join backslash continuations; yield ``(first line number, text)``."""
    out: list[tuple[int, str]] = []
    buf: list[str] = []
    start = 0
    for line_no, raw in enumerate(split_lines(text), start=1):
        if not buf:
            start = line_no
        stripped = raw.rstrip()
        if stripped.endswith("\\"):
            buf.append(stripped[:-1])
            continue
        buf.append(raw)
        out.append((start, " ".join(buf)))
        buf = []
    if buf:
        out.append((start, " ".join(buf)))
    return out


def _looks_like_reference(line: str) -> bool:
    return bool(_URL_RE.match(line)) or line.startswith((".", "~")) or "/" in line or "\\" in line


def _direct_reference(line: str) -> Optional[PipRequirement]:
    """A bare URL or local path, named by ``#egg=`` or its archive file name.

    An unnamed reference (a source tree without ``#egg=``) gives ``None``.
    """
    location, marker = line, ""
    parts = _MARKER_SPLIT_RE.split(line, maxsplit=1)
    if len(parts) == 2:
        location, marker = parts
    egg = _EGG_RE.search(location)
    if egg:
        return PipRequirement(name=egg.group(1), url=location, marker=marker.strip())
    filename = re.split(r"[/\\]", re.split(r"[#?]", location, maxsplit=1)[0])[-1]
    archive = _ARCHIVE_RE.fullmatch(filename)
    if archive:
        return PipRequirement(
            name=archive.group("name"),
            specifier=f"=={archive.group('version')}",
            url=location,
            marker=marker.strip(),
        )
    return None


def _requirement(line: str, line_no: int) -> Optional[PipRequirement]:
    match = _REQUIREMENT_RE.match(line)
    if not match:
        if _looks_like_reference(line):
            ref = _direct_reference(line)
            return ref.model_copy(update={"line": line_no}) if ref else None
        raise ParseFailure(
            f"expected 'name[extras] [specifier] [; marker]', got {line[:60]!r}",
            line=line_no,
        )
    extras = tuple(x.strip() for x in (match.group("extras") or "").split(",") if x.strip())
    for extra in extras:
        if not _EXTRA_RE.match(extra):
            raise ParseFailure(f"invalid extra name {extra!r}", line=line_no)
    spec = match.group("spec") or ""
    spec = re.sub(r"\s+", "", spec.strip().lstrip("(").rstrip(")"))
    return PipRequirement(
        name=match.group("name"),
        specifier=spec,
        extras=extras,
        marker=(match.group("marker") or "").strip(),
        url=match.group("url") or "",
        line=line_no,
    )


def parse(text: str) -> list[PipRequirement]:
    """Parse a requirements file.

    Comments, blank lines and option lines (``-r``, ``-e``, ``--index-url``,
    ...) are skipped; per-requirement options such as ``--hash`` are dropped.
    URL and path lines are kept when a name can be read from ``#egg=`` or
    the archive file name, and skipped otherwise.
    """
    reqs: list[PipRequirement] = []
    for line_no, line in _logical_lines(text):
        line = _COMMENT_RE.sub("", line).strip()
        if not line or line.startswith("-"):
            continue
        line = _TRAILING_OPTIONS_RE.sub("", line)
        req = _requirement(line, line_no)
        if req is not None:
            reqs.append(req)
    return reqs


def relationships(entries: list[PipRequirement]) -> list[tuple[PipRequirement, PipRequirement]]:
    """Requirements files are flat."""
    return []


def direct_entries(entries: list[PipRequirement]) -> list[PipRequirement]:
    """Every listed requirement is declared by the project."""
    return list(entries)
