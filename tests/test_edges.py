"""Tests for edge kinds, auto-edge derivation and ancestor filtering."""

from dataclasses import replace

from outliner.outline.links import derive_auto_edges, filter_ancestor_edges
from outliner.outline.relations import Edge, EdgeKind
from tests.helpers import make_table


def _tree():
    """root -> [c1, c2, c3], c1 -> [g1]."""
    return make_table(
        ("root", "Root", None),
        ("c1", "one", "root"),
        ("c2", "two", "root"),
        ("c3", "three", "root"),
        ("g1", "grand", "c1"),
    )


class TestEdgeKind:
    def test_values(self):
        assert EdgeKind.SIBLING.value == "sibling"
        assert EdgeKind.PARENT_PRIMARY.value == "parent-primary"
        assert EdgeKind.MANUAL.value == "manual"
        assert EdgeKind.AUTO.value == "auto"


class TestEdge:
    def test_to_dict(self):
        edge = Edge("a", "b", EdgeKind.MANUAL)
        assert edge.to_dict() == {"from": "a", "to": "b", "kind": "manual"}

    def test_str(self):
        assert str(Edge("a", "b", EdgeKind.SIBLING)) == "a --[sibling]--> b"

    def test_edges_are_hashable_values(self):
        assert {Edge("a", "b", EdgeKind.SIBLING), Edge("a", "b", EdgeKind.SIBLING)} == {
            Edge("a", "b", EdgeKind.SIBLING)
        }


class TestDeriveAutoEdges:
    def test_structural_edges(self):
        assert derive_auto_edges(_tree()) == [
            Edge("root", "c1", EdgeKind.PARENT_PRIMARY),
            Edge("c1", "c2", EdgeKind.SIBLING),
            Edge("c2", "c3", EdgeKind.SIBLING),
            Edge("c1", "g1", EdgeKind.PARENT_PRIMARY),
        ]

    def test_manual_edges_follow_structure(self):
        nodes = _tree()
        nodes["c3"] = nodes["c3"].with_links(("g1", "c1"))
        edges = derive_auto_edges(nodes)
        manual = [e for e in edges if e.kind == EdgeKind.MANUAL]
        assert manual == [Edge("c3", "g1", EdgeKind.MANUAL), Edge("c3", "c1", EdgeKind.MANUAL)]

    def test_only_first_child_gets_parent_edge(self):
        edges = derive_auto_edges(_tree())
        parent_edges = [e for e in edges if e.kind == EdgeKind.PARENT_PRIMARY and e.source == "root"]
        assert [e.target for e in parent_edges] == ["c1"]

    def test_never_emits_auto(self):
        nodes = _tree()
        nodes["g1"] = nodes["g1"].with_links(("c3",))
        assert all(e.kind != EdgeKind.AUTO for e in derive_auto_edges(nodes))

    def test_deterministic(self):
        nodes = _tree()
        assert derive_auto_edges(nodes) == derive_auto_edges(dict(nodes))

    def test_edge_count_is_linear(self):
        specs = [("root", "Root", None)] + [(f"n{i}", str(i), "root") for i in range(200)]
        nodes = make_table(*specs)
        # one parent-primary plus 199 sibling edges
        assert len(derive_auto_edges(nodes)) == 200

    def test_leaf_only_table(self):
        nodes = {"root": replace(_tree()["root"], children=())}
        assert derive_auto_edges(nodes) == []


class TestFilterAncestorEdges:
    def test_drops_manual_links_along_ancestry(self):
        nodes = _tree()
        nodes["g1"] = nodes["g1"].with_links(("c1", "c2"))
        nodes["c1"] = nodes["c1"].with_links(("g1",))
        kept = filter_ancestor_edges(derive_auto_edges(nodes), nodes)
        manual = [e for e in kept if e.kind == EdgeKind.MANUAL]
        assert manual == [Edge("g1", "c2", EdgeKind.MANUAL)]

    def test_structural_edges_kept_by_default(self):
        nodes = _tree()
        edges = derive_auto_edges(nodes)
        assert filter_ancestor_edges(edges, nodes) == edges

    def test_custom_kinds(self):
        nodes = _tree()
        kept = filter_ancestor_edges(derive_auto_edges(nodes), nodes, kinds=[EdgeKind.PARENT_PRIMARY])
        assert all(e.kind == EdgeKind.SIBLING for e in kept)
