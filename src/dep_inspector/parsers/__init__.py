"""Format parsers, one module per ecosystem, behind a closed registry.

Every parser module exposes the same three pure functions:

* ``parse(text)`` -> native entries, raising ``ParseFailure``
* ``relationships(entries)`` -> ``(parent, child)`` entry pairs
* ``direct_entries(entries)`` -> entries the project declares itself
"""

from collections.abc import Callable, Sequence
from typing import Any, NamedTuple

from dep_inspector.errors import ParseFailure
from dep_inspector.models import Ecosystem, NativeEntry, ParseOutcome
from dep_inspector.parsers import apk, dpkg, gomod, npm, pip


class EcosystemFormat(NamedTuple):
    """The parsing functions registered for one ecosystem."""

    ecosystem: Ecosystem
    parse: Callable[[str], list[Any]]
    relationships: Callable[[list[Any]], list[tuple[Any, Any]]]
    direct_entries: Callable[[list[Any]], list[Any]]


FORMATS: dict[Ecosystem, EcosystemFormat] = {
    eco: EcosystemFormat(eco, mod.parse, mod.relationships, mod.direct_entries)
    for eco, mod in (
        (Ecosystem.dpkg, dpkg),
        (Ecosystem.apk, apk),
        (Ecosystem.pip, pip),
        (Ecosystem.npm, npm),
        (Ecosystem.gomod, gomod),
    )
}


def get_format(ecosystem: Ecosystem | str) -> EcosystemFormat:
    """Look up a registered format; unknown tags raise ``ValueError``."""
    return FORMATS[Ecosystem(ecosystem)]


def parse(ecosystem: Ecosystem | str, text: str) -> list[NativeEntry]:
    """Parse ``text`` with the ecosystem's parser. Raises ``ParseFailure``."""
    return get_format(ecosystem).parse(text)


def try_parse(ecosystem: Ecosystem | str, text: str) -> ParseOutcome:
    """Like ``parse`` but returns the failure as a value."""
    eco = Ecosystem(ecosystem)
    try:
        return ParseOutcome(ecosystem=eco, entries=parse(eco, text))
    except ParseFailure as e:
        return ParseOutcome(ecosystem=eco, failure=e)


def relationships(ecosystem: Ecosystem | str, entries: Sequence[Any]) -> list[tuple[Any, Any]]:
    return get_format(ecosystem).relationships(list(entries))


def direct_entries(ecosystem: Ecosystem | str, entries: Sequence[Any]) -> list[Any]:
    return get_format(ecosystem).direct_entries(list(entries))


__all__ = [
    "EcosystemFormat",
    "FORMATS",
    "direct_entries",
    "get_format",
    "parse",
    "relationships",
    "try_parse",
]
