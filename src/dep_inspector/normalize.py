"""Entry normalizer: native parser entries -> canonical ``DependencyRecord``s."""

import re
from collections.abc import Callable
from typing import Any

from dep_inspector.models import (
    ApkEntry,
    DependencyRecord,
    DpkgEntry,
    Ecosystem,
    GoRequirement,
    NpmPackage,
    PipRequirement,
)

_PEP503_RE = re.compile(r"[-_.]+")


def canonical_pip_name(name: str) -> str:
    """PEP 503 normalized project name (``Foo_Bar.baz`` -> ``foo-bar-baz``)."""
    return _PEP503_RE.sub("-", name).lower()


def _dpkg(entry: DpkgEntry) -> DependencyRecord:
    return DependencyRecord(
        ecosystem=Ecosystem.dpkg,
        name=entry.package,
        version=entry.version,
        classifier=entry.architecture,
    )


def _apk(entry: ApkEntry) -> DependencyRecord:
    return DependencyRecord(
        ecosystem=Ecosystem.apk,
        name=entry.package,
        version=entry.version,
        classifier=entry.architecture,
    )


def _pip(entry: PipRequirement) -> DependencyRecord:
    # Unpinned requirements keep their specifier (or url) as the version text
    version = entry.pinned_version or entry.specifier or entry.url
    return DependencyRecord(
        ecosystem=Ecosystem.pip,
        name=canonical_pip_name(entry.name),
        version=version,
    )


def _npm(entry: NpmPackage) -> DependencyRecord:
    return DependencyRecord(ecosystem=Ecosystem.npm, name=entry.name, version=entry.version)


def _gomod(entry: GoRequirement) -> DependencyRecord:
    return DependencyRecord(ecosystem=Ecosystem.gomod, name=entry.path, version=entry.version)


_NORMALIZERS: dict[Ecosystem, tuple[type, Callable[[Any], DependencyRecord]]] = {
    Ecosystem.dpkg: (DpkgEntry, _dpkg),
    Ecosystem.apk: (ApkEntry, _apk),
    Ecosystem.pip: (PipRequirement, _pip),
    Ecosystem.npm: (NpmPackage, _npm),
    Ecosystem.gomod: (GoRequirement, _gomod),
}


def normalize(ecosystem: Ecosystem | str, entry: Any) -> DependencyRecord:
    """Lift one native entry to its canonical record.

    Raises ``TypeError`` when ``entry`` is not the native type of
    ``ecosystem``; that is a wiring bug, not bad input.
    """
    eco = Ecosystem(ecosystem)
    entry_type, fn = _NORMALIZERS[eco]
    if not isinstance(entry, entry_type):
        raise TypeError(
            f"{eco.value} normalizer expects {entry_type.__name__}, got {type(entry).__name__}"
        )
    return fn(entry)


def normalize_all(ecosystem: Ecosystem | str, entries: list[Any]) -> list[DependencyRecord]:
    return [normalize(ecosystem, e) for e in entries]
