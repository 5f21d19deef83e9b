"""Merge/dedup engine — fold many dependency graphs into one.

``merge`` is commutative, associative and idempotent, so graphs produced
concurrently can be reduced in any order.
"""

from collections.abc import Iterable
from functools import reduce
from typing import Optional

from dep_inspector.models import DependencyGraph, DependencyNode, Ecosystem


def _merge_nodes(a: DependencyNode, b: DependencyNode) -> DependencyNode:
    if a == b:
        return a
    return DependencyNode(
        record=a.record,
        is_direct=a.is_direct or b.is_direct,
        provenance=a.provenance | b.provenance,
    )


def _merge_tags(left: DependencyGraph, right: DependencyGraph) -> Optional[Ecosystem]:
    # An empty graph has no say in the tag
    if not left.nodes:
        return right.ecosystem
    if not right.nodes:
        return left.ecosystem
    return left.ecosystem if left.ecosystem == right.ecosystem else None


def merge(left: DependencyGraph, right: DependencyGraph) -> DependencyGraph:
    """Union two graphs into a new one.

    Nodes with the same identity merge: the direct flag is OR-ed and
    provenance unioned. Same name with another version or classifier is a
    separate node. The ecosystem tag survives only if every non-empty side
    carries the same one; the empty graph is the identity.
    """
    nodes = dict(left.nodes)
    for key, node in right.nodes.items():
        mine = nodes.get(key)
        nodes[key] = node if mine is None else _merge_nodes(mine, node)
    return DependencyGraph(
        nodes=nodes,
        edges=left.edges | right.edges,
        ecosystem=_merge_tags(left, right),
    )


def merge_all(graphs: Iterable[DependencyGraph]) -> DependencyGraph:
    """Reduce any number of graphs; no graphs gives the empty graph."""
    return reduce(merge, graphs, DependencyGraph())
