"""Graph view - renderable elements for the outline graph.

Turns a document into the node and edge lists a graph renderer draws.
The root is hidden, the root's parent-primary arc is skipped, and
manual links to missing nodes or to the source itself are dropped.
Edge ids are stable so renderers can key elements across refreshes.
"""

from __future__ import annotations

from typing import Any

from outliner.outline.links import derive_auto_edges, filter_ancestor_edges
from outliner.outline.OutlineNode import OutlineDocument
from outliner.outline.relations import Edge, EdgeKind

_EDGE_ID_PREFIX = {
    EdgeKind.PARENT_PRIMARY: "pc",
    EdgeKind.SIBLING: "sib",
    EdgeKind.MANUAL: "man",
    EdgeKind.AUTO: "auto",
}


def edge_id(edge: Edge) -> str:
    """Return the stable element id of an edge, e.g. ``sib:a->b``."""
    return f"{_EDGE_ID_PREFIX[edge.kind]}:{edge.source}->{edge.target}"


def build_graph_view(doc: OutlineDocument, suppress_ancestor_links: bool = False) -> dict[str, Any]:
    """Build graph elements for a document.

    Args:
        doc: The document to render.
        suppress_ancestor_links: Drop manual edges between an ancestor
            and its own descendant.

    Returns:
        Dict with ``nodes`` (id, label) and ``edges`` (id, source,
        target, kind) lists, both in deterministic order.
    """
    nodes = doc.nodes
    elements_nodes = [
        {"id": node.id, "label": node.name or node.id}
        for node in doc.iter_nodes()
        if node.id != doc.root_id
    ]

    edges = derive_auto_edges(nodes)
    if suppress_ancestor_links:
        edges = filter_ancestor_edges(edges, nodes)

    elements_edges: list[dict[str, str]] = []
    for edge in edges:
        if edge.source == doc.root_id:
            continue
        if edge.source not in nodes or edge.target not in nodes:
            continue
        if edge.kind == EdgeKind.MANUAL and edge.source == edge.target:
            continue
        elements_edges.append(
            {
                "id": edge_id(edge),
                "source": edge.source,
                "target": edge.target,
                "kind": edge.kind.value,
            }
        )

    return {"nodes": elements_nodes, "edges": elements_edges}


__all__ = ["edge_id", "build_graph_view"]
