"""Parser for npm ``package-lock.json`` (lockfile versions 1, 2 and 3)."""

import json
from typing import Any

from dep_inspector.errors import ParseFailure
from dep_inspector.models import NpmPackage

_DEP_SECTIONS = ("dependencies", "optionalDependencies", "peerDependencies")
_ROOT_SECTIONS = _DEP_SECTIONS + ("devDependencies",)


def _load(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseFailure(f"invalid JSON: {e.msg}", offset=e.pos, line=e.lineno, column=e.colno) from e
    if not isinstance(data, dict):
        raise ParseFailure("lockfile must be a JSON object")
    return data


def _object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseFailure(f"{what} must be a JSON object, got {type(value).__name__}")
    return value


def _name_from_path(path: str) -> str:
    return path.rsplit("node_modules/", 1)[-1]


def _requires(meta: dict[str, Any], sections: tuple[str, ...], where: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for section in sections:
        for name, spec in _object(meta.get(section), f"{where} '{section}'").items():
            out[name] = str(spec)
    return out


def _resolve(path: str, name: str, by_path: dict[str, Any]) -> str | None:
    """node_modules lookup: nearest ``node_modules/<name>`` walking up from ``path``."""
    parts = path.split("/") if path else []
    while True:
        base = "/".join(parts)
        candidate = f"{base}/node_modules/{name}" if base else f"node_modules/{name}"
        if candidate in by_path:
            return candidate
        if not parts:
            return None
        parts.pop()


def _parse_packages(data: dict[str, Any]) -> list[NpmPackage]:
    packages = _object(data.get("packages"), "'packages'")
    root = _object(packages.get(""), "root package")
    root_requires = _requires(root, _ROOT_SECTIONS, "root package")

    metas: dict[str, dict[str, Any]] = {}
    for path, meta in packages.items():
        if path == "":
            continue
        meta = _object(meta, f"package {path!r}")
        if meta.get("link"):
            continue
        metas[path] = meta

    direct_paths = {
        p for p in (_resolve("", name, metas) for name in root_requires) if p is not None
    }
    out: list[NpmPackage] = []
    for path, meta in metas.items():
        version = meta.get("version")
        if not isinstance(version, str) or not version:
            raise ParseFailure(f"package {path!r} has no 'version'")
        out.append(NpmPackage(
            name=str(meta.get("name") or _name_from_path(path)),
            version=version,
            path=path,
            dev=bool(meta.get("dev") or meta.get("devOptional")),
            optional=bool(meta.get("optional") or meta.get("devOptional")),
            direct=path in direct_paths,
            requires=_requires(meta, _DEP_SECTIONS, f"package {path!r}"),
        ))
    return out


def _walk_v1(deps: dict[str, Any], prefix: str, out: list[NpmPackage]) -> None:
    for name, meta in deps.items():
        path = f"{prefix}node_modules/{name}"
        meta = _object(meta, f"dependency {path!r}")
        version = meta.get("version")
        if not isinstance(version, str) or not version:
            raise ParseFailure(f"dependency {path!r} has no 'version'")
        out.append(NpmPackage(
            name=name,
            version=version,
            path=path,
            dev=bool(meta.get("dev")),
            optional=bool(meta.get("optional")),
            requires={k: str(v) for k, v in _object(meta.get("requires"), f"{path!r} 'requires'").items()},
        ))
        _walk_v1(_object(meta.get("dependencies"), f"{path!r} 'dependencies'"), path + "/", out)


def _parse_v1(data: dict[str, Any]) -> list[NpmPackage]:
    flat: list[NpmPackage] = []
    _walk_v1(_object(data.get("dependencies"), "'dependencies'"), "", flat)
    # v1 has no root manifest: top-level packages nothing else requires are direct
    by_path = {p.path: p for p in flat}
    required: set[str] = set()
    for p in flat:
        for name in p.requires:
            target = _resolve(p.path, name, by_path)
            if target is not None:
                required.add(target)
    return [
        p.model_copy(update={"direct": True})
        if p.path.count("node_modules/") == 1 and p.path not in required
        else p
        for p in flat
    ]


def parse(text: str) -> list[NpmPackage]:
    """Parse a lockfile into installed packages, in file order."""
    data = _load(text)
    version = data.get("lockfileVersion")
    if isinstance(version, bool) or not isinstance(version, int):
        raise ParseFailure("missing or non-integer 'lockfileVersion'")
    if version == 1:
        return _parse_v1(data)
    if version in (2, 3):
        return _parse_packages(data)
    raise ParseFailure(f"unsupported lockfileVersion {version}")


def relationships(entries: list[NpmPackage]) -> list[tuple[NpmPackage, NpmPackage]]:
    """Resolve every package's declared dependencies to installed packages.

    Names that resolve to nothing (e.g. optional packages skipped on this
    platform) produce no link.
    """
    by_path = {e.path: e for e in entries}
    hints: list[tuple[NpmPackage, NpmPackage]] = []
    for e in entries:
        for name in e.requires:
            target = _resolve(e.path, name, by_path)
            if target is not None:
                hints.append((e, by_path[target]))
    return hints


def direct_entries(entries: list[NpmPackage]) -> list[NpmPackage]:
    return [e for e in entries if e.direct]
