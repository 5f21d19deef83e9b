"""Graph builder — turn canonical records and link hints into a DependencyGraph."""

from collections.abc import Iterable
from typing import Optional, Union

from dep_inspector.models import (
    DependencyEdge,
    DependencyGraph,
    DependencyNode,
    DependencyRecord,
    Ecosystem,
    RecordKey,
)

# A direct-dependency seed: an exact identity, or a name (optionally
# scoped to one ecosystem) matching every version of that package.
DirectSeed = Union[RecordKey, DependencyRecord, tuple[Union[Ecosystem, str], str], str]


class GraphBuilder:
    """Accumulates records and edges, then freezes them into a graph.

    Every node added through this builder carries ``source`` in its
    provenance. Nodes are non-direct unless marked.
    """

    def __init__(self, source: Optional[str] = None, ecosystem: Optional[Ecosystem] = None) -> None:
        self.source = source
        self.ecosystem = ecosystem
        self._records: dict[RecordKey, DependencyRecord] = {}
        self._direct: set[RecordKey] = set()
        self._direct_names: set[tuple[Optional[Ecosystem], str]] = set()
        self._edges: set[tuple[RecordKey, RecordKey]] = set()

    def add_record(self, record: DependencyRecord, direct: bool = False) -> RecordKey:
        key = record.key
        self._records.setdefault(key, record)
        if direct:
            self._direct.add(key)
        return key

    def add_edge(self, parent: DependencyRecord, child: DependencyRecord) -> None:
        """Link ``parent`` -> ``child``; unseen endpoints become nodes first."""
        self._edges.add((self.add_record(parent), self.add_record(child)))

    def mark_direct(self, seed: DirectSeed) -> None:
        if isinstance(seed, DependencyRecord):
            self._direct.add(seed.key)
        elif isinstance(seed, tuple) and len(seed) == 4:
            eco, name, version, classifier = seed
            self._direct.add(RecordKey(Ecosystem(eco), name, version, classifier))
        elif isinstance(seed, str):
            self._direct_names.add((None, seed))
        else:
            eco, name = seed
            self._direct_names.add((Ecosystem(eco), name))

    def _is_direct(self, key: RecordKey) -> bool:
        return (
            key in self._direct
            or (None, key.name) in self._direct_names
            or (key.ecosystem, key.name) in self._direct_names
        )

    def _graph_ecosystem(self) -> Optional[Ecosystem]:
        if self.ecosystem is not None:
            return self.ecosystem
        ecosystems = {k.ecosystem for k in self._records}
        return ecosystems.pop() if len(ecosystems) == 1 else None

    def build(self) -> DependencyGraph:
        provenance = frozenset([self.source]) if self.source else frozenset()
        nodes = {
            key: DependencyNode(
                record=record,
                is_direct=self._is_direct(key),
                provenance=provenance,
            )
            for key, record in self._records.items()
        }
        edges = frozenset(DependencyEdge(parent=p, child=c) for p, c in self._edges)
        return DependencyGraph(nodes=nodes, edges=edges, ecosystem=self._graph_ecosystem())


def build_graph(
    records: Iterable[DependencyRecord],
    hints: Optional[Iterable[tuple[DependencyRecord, DependencyRecord]]] = None,
    direct: Optional[Iterable[DirectSeed]] = None,
    source: Optional[str] = None,
    ecosystem: Optional[Ecosystem] = None,
) -> DependencyGraph:
    """Build one graph from a record sequence.

    ``hints`` are ``(parent, child)`` pairs from the source format; with no
    hints the graph is a set of isolated nodes. ``direct`` seeds the
    direct flag (see ``DirectSeed``); everything else is transitive.
    """
    builder = GraphBuilder(source=source, ecosystem=ecosystem)
    for record in records:
        builder.add_record(record)
    for parent, child in hints or ():
        builder.add_edge(parent, child)
    for seed in direct or ():
        builder.mark_direct(seed)
    return builder.build()
