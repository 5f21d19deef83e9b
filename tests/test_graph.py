"""Tests for graph.py — building dependency graphs."""

import pytest
from pydantic import ValidationError

from dep_inspector.graph import GraphBuilder, build_graph
from dep_inspector.models import (
    DependencyEdge,
    DependencyGraph,
    DependencyNode,
    DependencyRecord,
    Ecosystem,
    RecordKey,
)


def rec(name, version="1.0", eco=Ecosystem.npm, classifier=None):
    return DependencyRecord(ecosystem=eco, name=name, version=version, classifier=classifier)


class TestBuildGraph:
    def test_flat_records_are_isolated_transitive_nodes(self):
        g = build_graph([rec("a"), rec("b")])
        assert len(g) == 2
        assert g.edges == frozenset()
        assert not g.direct
        assert g.ecosystem == Ecosystem.npm

    def test_duplicate_records_collapse(self):
        g = build_graph([rec("a"), rec("a"), rec("a", "2.0")])
        assert len(g) == 2

    def test_mixed_ecosystems_untagged(self):
        g = build_graph([rec("a"), rec("a", eco=Ecosystem.pip)])
        assert g.ecosystem is None
        assert len(g) == 2

    def test_explicit_tag_wins(self):
        g = build_graph([rec("a"), rec("a", eco=Ecosystem.pip)], ecosystem=Ecosystem.npm)
        assert g.ecosystem == Ecosystem.npm

    def test_empty_graph_is_untagged(self):
        assert build_graph([], ecosystem=Ecosystem.dpkg) == DependencyGraph()

    def test_source_becomes_provenance(self):
        g = build_graph([rec("a")], source="npm:package-lock.json")
        assert g.nodes[rec("a").key].provenance == frozenset({"npm:package-lock.json"})

    def test_edges_from_hints(self):
        a, b = rec("a"), rec("b")
        g = build_graph([a, b], hints=[(a, b), (a, b)])
        assert g.edges == frozenset({DependencyEdge(parent=a.key, child=b.key)})
        assert g.children(a.key) == [b.key]
        assert g.parents(b.key) == [a.key]

    def test_hint_to_unknown_child_inserts_placeholder(self):
        a, ghost = rec("a"), rec("ghost")
        g = build_graph([a], hints=[(a, ghost)])
        assert ghost.key in g.nodes
        assert g.nodes[ghost.key].is_direct is False

    def test_cycles_are_kept(self):
        a, b = rec("a"), rec("b")
        g = build_graph([a, b], hints=[(a, b), (b, a)])
        assert len(g.edges) == 2


class TestDirectSeeds:
    def test_exact_key(self):
        a = rec("a")
        g = build_graph([a, rec("b")], direct=[a.key])
        assert [n.record.name for n in g.direct] == ["a"]

    def test_plain_tuple_key(self):
        g = build_graph([rec("a")], direct=[("npm", "a", "1.0", None)])
        assert g.nodes[rec("a").key].is_direct

    def test_record_seed(self):
        g = build_graph([rec("a")], direct=[rec("a")])
        assert g.nodes[rec("a").key].is_direct

    def test_name_matches_every_version(self):
        g = build_graph([rec("a", "1"), rec("a", "2"), rec("b")], direct=["a"])
        assert sorted(n.record.version for n in g.direct) == ["1", "2"]

    def test_scoped_name(self):
        g = build_graph([rec("a"), rec("a", eco=Ecosystem.pip)], direct=[("pip", "a")])
        assert [n.record.ecosystem for n in g.direct] == [Ecosystem.pip]

    def test_seed_without_node_is_ignored(self):
        g = build_graph([rec("a")], direct=[rec("missing").key])
        assert len(g) == 1
        assert not g.direct


class TestGraphBuilder:
    def test_incremental(self):
        b = GraphBuilder(source="s")
        a = rec("a")
        b.add_record(a, direct=True)
        b.add_edge(a, rec("b"))
        g = b.build()
        assert g.nodes[a.key].is_direct
        assert len(g.edges) == 1
        assert all(n.provenance == frozenset({"s"}) for n in g.nodes.values())

    def test_build_twice_is_stable(self):
        b = GraphBuilder()
        b.add_record(rec("a"))
        assert b.build() == b.build()


class TestGraphInvariants:
    def test_dangling_edge_rejected(self):
        a = rec("a")
        with pytest.raises(ValidationError):
            DependencyGraph(
                nodes={a.key: DependencyNode(record=a)},
                edges=frozenset({DependencyEdge(parent=a.key, child=rec("b").key)}),
            )

    def test_key_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            DependencyGraph(nodes={rec("a").key: DependencyNode(record=rec("b"))})

    def test_graph_is_frozen(self):
        g = build_graph([rec("a")])
        with pytest.raises(ValidationError):
            g.ecosystem = None  # type: ignore[misc]

    def test_nodes_are_read_only(self):
        a, b = rec("a"), rec("b")
        g = build_graph([a, b], hints=[(a, b)])
        with pytest.raises(TypeError):
            g.nodes[a.key] = DependencyNode(record=a, is_direct=True)  # type: ignore[index]
        with pytest.raises(AttributeError):
            g.nodes.clear()  # type: ignore[attr-defined]
        assert len(g) == 2

    def test_builder_changes_do_not_leak(self):
        b = GraphBuilder()
        b.add_record(rec("a"))
        g = b.build()
        b.add_record(rec("b"))
        assert len(g) == 1

    def test_graph_is_hashable(self):
        assert hash(build_graph([rec("a")])) == hash(build_graph([rec("a")]))
        assert len({build_graph([rec("a")]), build_graph([rec("a")])}) == 1

    def test_record_key_label(self):
        key = RecordKey(Ecosystem.dpkg, "curl", "7.68.0", "amd64")
        assert key.label == "dpkg:curl@7.68.0 [amd64]"
