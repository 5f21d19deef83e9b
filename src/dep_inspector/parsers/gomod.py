"""Parser for Go ``go.mod`` files."""

import re
from typing import Optional

from dep_inspector.errors import ParseFailure
from dep_inspector.models import GoRequirement
from dep_inspector.parsers.cursor import split_lines

_SKIPPED = {"go", "toolchain", "exclude", "retract", "godebug", "tool", "ignore"}
_KNOWN = _SKIPPED | {"module", "require", "replace"}
_INDIRECT_RE = re.compile(r"//\s*indirect\b")


def _unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "\"`":
        return token[1:-1]
    return token


def _split_comment(line: str) -> tuple[str, str]:
    idx = line.find("//")
    if idx < 0:
        return line.strip(), ""
    return line[:idx].strip(), line[idx:]


def _require(args: list[str], comment: str, line_no: int) -> GoRequirement:
    if len(args) != 2:
        raise ParseFailure(f"require expects 'path version', got {' '.join(args)!r}", line=line_no)
    return GoRequirement(
        path=_unquote(args[0]),
        version=_unquote(args[1]),
        indirect=bool(_INDIRECT_RE.search(comment)),
    )


def _replace(args: list[str], line_no: int) -> tuple[tuple[str, Optional[str]], tuple[str, Optional[str]]]:
    """``old [v] => new [v]`` -> ``((old, old_version), (new, new_version))``."""
    if "=>" not in args:
        raise ParseFailure("replace expects 'old [version] => new [version]'", line=line_no)
    arrow = args.index("=>")
    old, new = args[:arrow], args[arrow + 1:]
    if len(old) not in (1, 2) or len(new) not in (1, 2):
        raise ParseFailure(f"malformed replace {' '.join(args)!r}", line=line_no)
    old_version = _unquote(old[1]) if len(old) == 2 else None
    new_version = _unquote(new[1]) if len(new) == 2 else None
    return (_unquote(old[0]), old_version), (_unquote(new[0]), new_version)


def parse(text: str) -> list[GoRequirement]:
    """Parse requirements; module replacements rewrite the reported module.

    A replacement by another module version reports that module path and
    version. A replacement by a local directory (no version) keeps the
    required module.
    """
    module: Optional[str] = None
    requires: list[GoRequirement] = []
    replaces: dict[tuple[str, Optional[str]], tuple[str, Optional[str]]] = {}
    block: Optional[str] = None

    for line_no, raw in enumerate(split_lines(text), start=1):
        body, comment = _split_comment(raw)
        if not body:
            continue
        if block is not None:
            if body == ")":
                block = None
                continue
            verb, args = block, body.split()
        else:
            verb, *args = body.split()
            if verb not in _KNOWN:
                raise ParseFailure(f"unknown directive {verb!r}", line=line_no, column=1)
            if args == ["("]:
                block = verb
                continue
        if verb == "module":
            if len(args) != 1:
                raise ParseFailure("module expects exactly one path", line=line_no)
            module = _unquote(args[0])
        elif verb == "require":
            requires.append(_require(args, comment, line_no))
        elif verb == "replace":
            old, new = _replace(args, line_no)
            replaces[old] = new

    if block is not None:
        raise ParseFailure(f"unterminated {block!r} block at end of input")
    if module is None:
        raise ParseFailure("missing required 'module' directive")

    out: list[GoRequirement] = []
    for req in requires:
        new = replaces.get((req.path, req.version)) or replaces.get((req.path, None))
        if new is not None and new[1]:
            req = req.model_copy(update={"path": new[0], "version": new[1]})
        out.append(req)
    return out


def relationships(entries: list[GoRequirement]) -> list[tuple[GoRequirement, GoRequirement]]:
    """go.mod lists the build list flat; edges need go.sum/``go mod graph``."""
    return []


def direct_entries(entries: list[GoRequirement]) -> list[GoRequirement]:
    return [e for e in entries if not e.indirect]
