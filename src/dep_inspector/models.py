"""Data models for dep-inspector."""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dep_inspector.errors import ParseFailure


# ── Ecosystems ────────────────────────────────────────────────────────────

class Ecosystem(str, Enum):
    """Package-management systems with a supported metadata format."""

    dpkg = "dpkg"
    apk = "apk"
    pip = "pip"
    npm = "npm"
    gomod = "gomod"


# ── Native entries (one shape per format) ─────────────────────────────────

class DpkgEntry(BaseModel):
    """One package stanza of a dpkg status file."""

    model_config = ConfigDict(frozen=True)

    architecture: str
    package: str
    version: str


class ApkEntry(BaseModel):
    """One package record of an Alpine installed database."""

    model_config = ConfigDict(frozen=True)

    package: str
    version: str
    architecture: Optional[str] = None
    depends: tuple[str, ...] = ()
    provides: tuple[str, ...] = ()


class PipRequirement(BaseModel):
    """One requirement line of a requirements file."""

    model_config = ConfigDict(frozen=True)

    name: str
    specifier: str = ""
    extras: tuple[str, ...] = ()
    marker: str = ""
    url: str = ""
    line: int = 0

    @property
    def pinned_version(self) -> Optional[str]:
        """The exact version for ``==``/``===`` pins, else ``None``."""
        spec = self.specifier.strip()
        if "," in spec:
            return None
        for op in ("===", "=="):
            if spec.startswith(op):
                version = spec[len(op):].strip()
                if version and "*" not in version:
                    return version
        return None


class NpmPackage(BaseModel):
    """One installed package from a package-lock.json."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    path: str  # e.g. "node_modules/a/node_modules/b"
    dev: bool = False
    optional: bool = False
    direct: bool = False  # declared by the root package
    requires: dict[str, str] = Field(default_factory=dict)


class GoRequirement(BaseModel):
    """One ``require`` line of a go.mod file."""

    model_config = ConfigDict(frozen=True)

    path: str
    version: str
    indirect: bool = False


NativeEntry = DpkgEntry | ApkEntry | PipRequirement | NpmPackage | GoRequirement


# ── Canonical records ─────────────────────────────────────────────────────

class RecordKey(NamedTuple):
    """Deduplication identity of a dependency."""

    ecosystem: Ecosystem
    name: str
    version: str
    classifier: Optional[str] = None

    @property
    def order(self) -> tuple[str, str, str, str]:
        """Total sort order (``None`` classifiers sort first)."""
        return (self.ecosystem.value, self.name, self.version, self.classifier or "")

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``dpkg:curl@7.68.0 [amd64]``."""
        text = f"{self.ecosystem.value}:{self.name}@{self.version}"
        if self.classifier:
            text += f" [{self.classifier}]"
        return text


class DependencyRecord(BaseModel):
    """Ecosystem-agnostic identity of one dependency."""

    model_config = ConfigDict(frozen=True)

    ecosystem: Ecosystem
    name: str
    version: str
    classifier: Optional[str] = None  # e.g. architecture

    @property
    def key(self) -> RecordKey:
        return RecordKey(self.ecosystem, self.name, self.version, self.classifier)


# ── Graph ─────────────────────────────────────────────────────────────────

class DependencyNode(BaseModel):
    """A record placed in a graph, with direct flag and provenance."""

    model_config = ConfigDict(frozen=True)

    record: DependencyRecord
    is_direct: bool = False
    provenance: frozenset[str] = frozenset()

    @property
    def key(self) -> RecordKey:
        return self.record.key


class DependencyEdge(BaseModel):
    """``parent`` depends on ``child``."""

    model_config = ConfigDict(frozen=True)

    parent: RecordKey
    child: RecordKey


class NodeReport(BaseModel):
    """Serializable view of one node."""

    ecosystem: str
    name: str
    version: str
    classifier: Optional[str] = None
    is_direct: bool = False
    provenance: list[str] = Field(default_factory=list)
    depends_on: list[str] = Field(default_factory=list)


class GraphReport(BaseModel):
    """Serializable summary of a dependency graph."""

    ecosystems: list[str] = Field(default_factory=list)
    total_nodes: int = 0
    direct_nodes: int = 0
    total_edges: int = 0
    nodes: list[NodeReport] = Field(default_factory=list)


class DependencyGraph(BaseModel):
    """Immutable node set plus depends-on edges.

    Nodes are keyed by ``RecordKey`` and exposed as a read-only mapping.
    Every edge endpoint must be a node and edges form a set, so duplicates
    cannot occur. Cycles are allowed. A graph without nodes carries no
    ecosystem tag: all empty graphs are the same value.
    """

    model_config = ConfigDict(frozen=True)

    nodes: Mapping[RecordKey, DependencyNode] = Field(default_factory=dict, validate_default=True)
    edges: frozenset[DependencyEdge] = frozenset()
    ecosystem: Optional[Ecosystem] = None

    @model_validator(mode="before")
    @classmethod
    def _untag_empty(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("nodes") and data.get("ecosystem") is not None:
            data = {**data, "ecosystem": None}
        return data

    @field_validator("nodes", mode="after")
    @classmethod
    def _read_only(cls, v: Mapping[RecordKey, DependencyNode]) -> Mapping[RecordKey, DependencyNode]:
        return MappingProxyType(dict(v))

    @model_validator(mode="after")
    def _check_invariants(self) -> "DependencyGraph":
        for key, node in self.nodes.items():
            if node.key != key:
                raise ValueError(f"node {node.key.label} stored under key {key.label}")
        for edge in self.edges:
            for end in (edge.parent, edge.child):
                if end not in self.nodes:
                    raise ValueError(f"edge endpoint {end.label} is not a node")
        return self

    def __hash__(self) -> int:
        return hash((frozenset(self.nodes.items()), self.edges, self.ecosystem))

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def direct(self) -> list[DependencyNode]:
        return [n for n in self.nodes.values() if n.is_direct]

    @property
    def ecosystems(self) -> list[str]:
        return sorted({k.ecosystem.value for k in self.nodes})

    def children(self, key: RecordKey) -> list[RecordKey]:
        """Keys ``key`` depends on, sorted."""
        return sorted((e.child for e in self.edges if e.parent == key), key=lambda k: k.order)

    def parents(self, key: RecordKey) -> list[RecordKey]:
        """Keys depending on ``key``, sorted."""
        return sorted((e.parent for e in self.edges if e.child == key), key=lambda k: k.order)

    def find(self, name: str, ecosystem: Optional[Ecosystem] = None) -> list[DependencyNode]:
        """All nodes named ``name`` (any version/classifier)."""
        return [
            n for k, n in sorted(self.nodes.items(), key=lambda kv: kv[0].order)
            if k.name == name and (ecosystem is None or k.ecosystem == ecosystem)
        ]

    def to_report(self) -> GraphReport:
        """Build a JSON-ready summary, nodes sorted by identity."""
        children: dict[RecordKey, list[str]] = {k: [] for k in self.nodes}
        for e in sorted(self.edges, key=lambda e: (e.parent.order, e.child.order)):
            children[e.parent].append(e.child.label)
        nodes = [
            NodeReport(
                ecosystem=k.ecosystem.value,
                name=k.name,
                version=k.version,
                classifier=k.classifier,
                is_direct=n.is_direct,
                provenance=sorted(n.provenance),
                depends_on=children[k],
            )
            for k, n in sorted(self.nodes.items(), key=lambda kv: kv[0].order)
        ]
        return GraphReport(
            ecosystems=self.ecosystems,
            total_nodes=len(nodes),
            direct_nodes=sum(1 for n in nodes if n.is_direct),
            total_edges=len(self.edges),
            nodes=nodes,
        )


# ── Parse outcomes ────────────────────────────────────────────────────────

class ParseOutcome(BaseModel):
    """Entries parsed from one file, or the failure that stopped the parse."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    ecosystem: Ecosystem
    entries: list[Any] = Field(default_factory=list)
    failure: Optional[ParseFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


# ── Scan input / output ───────────────────────────────────────────────────

class SourceFile(BaseModel):
    """A metadata file already read into memory by the caller."""

    ecosystem: Ecosystem
    path: str
    text: str

    @property
    def descriptor(self) -> str:
        """Provenance descriptor, e.g. ``dpkg:/var/lib/dpkg/status``."""
        return f"{self.ecosystem.value}:{self.path}"


class SourceFailure(BaseModel):
    """A parse failure annotated with the file it came from."""

    ecosystem: Ecosystem
    path: str
    reason: str
    location: str = ""
    recoverable: bool = True

    @property
    def display(self) -> str:
        where = f" ({self.location})" if self.location else ""
        return f"{self.ecosystem.value} {self.path}: {self.reason}{where}"


class ScanResult(BaseModel):
    """Merged graph for a project plus per-file failures."""

    graph: DependencyGraph = Field(default_factory=DependencyGraph)
    failures: list[SourceFailure] = Field(default_factory=list)
    parsed_files: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
