"""OutlineNode - Node and document values for the outline tree.

This module provides the core data structures of an outline document:
- OutlineNode: One line of the outline (immutable value)
- OutlineDocument: A rooted ordered tree of nodes plus a selection cursor

Both types are frozen. Mutations build a new value with
``dataclasses.replace`` and a shallow copy of the node table, so
untouched nodes are shared between successive document versions.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterator, Mapping

from outliner.utilities.ids import IdGenerator, new_id, root_id

ROOT_NAME = "Root"


@dataclass(frozen=True)
class OutlineNode:
    """A single entry in the outline tree.

    Attributes:
        id: Unique identifier, immutable for the node's lifetime.
        name: User-editable display text.
        parent_id: Identifier of the parent, or None for the root.
        children: Ordered child identifiers (rendering order).
        manual_links: User-declared link targets, insertion ordered, no duplicates.
    """

    id: str
    name: str = ""
    parent_id: str | None = None
    children: tuple[str, ...] = ()
    manual_links: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        """True if this node has no parent."""
        return self.parent_id is None

    def has_child(self, node_id: str) -> bool:
        """Check if an id is among this node's children."""
        return node_id in self.children

    def links_to(self, node_id: str) -> bool:
        """Check if this node carries a manual link to node_id."""
        return node_id in self.manual_links

    def with_children(self, children: list[str] | tuple[str, ...]) -> OutlineNode:
        """Return a copy with a replaced children sequence."""
        return replace(self, children=tuple(children))

    def with_links(self, links: list[str] | tuple[str, ...]) -> OutlineNode:
        """Return a copy with a replaced manual link sequence."""
        return replace(self, manual_links=tuple(links))


def make_node(node_id: str, name: str = "", parent_id: str | None = None) -> OutlineNode:
    """Create a childless, unlinked node."""
    return OutlineNode(id=node_id, name=name, parent_id=parent_id)


@dataclass(frozen=True)
class OutlineDocument:
    """One rooted ordered tree of nodes plus a selected-node cursor.

    The ``nodes`` table is authoritative. Its insertion order is the
    iteration order used by every query (creation order for nodes
    added through the engine).

    Attributes:
        root_id: Identifier of the single root node.
        nodes: Mapping from node id to OutlineNode.
        selected_id: Currently focused node id, or None.
    """

    root_id: str
    nodes: dict[str, OutlineNode] = field(default_factory=dict)
    selected_id: str | None = None

    def get(self, node_id: str | None) -> OutlineNode | None:
        """Find node by ID, or None if unknown."""
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        """Check if a node exists in the table."""
        return node_id in self.nodes

    def iter_nodes(self) -> Iterator[OutlineNode]:
        """Iterate all nodes in table order."""
        yield from self.nodes.values()

    def node_count(self) -> int:
        """Return total number of nodes, root included."""
        return len(self.nodes)

    def view(self) -> Mapping[str, OutlineNode]:
        """Return a read-only view of the node table."""
        return MappingProxyType(self.nodes)

    def evolve(
        self,
        updates: Mapping[str, OutlineNode] | None = None,
        removed: set[str] | frozenset[str] = frozenset(),
        **changes,
    ) -> OutlineDocument:
        """Return the next document version.

        Args:
            updates: Nodes to insert or replace (appended in table order when new).
            removed: Node ids to drop from the table.
            **changes: Other document fields to replace (e.g. selected_id).

        Returns:
            A new OutlineDocument sharing all untouched node values.
        """
        if updates or removed:
            if removed:
                nodes = {k: v for k, v in self.nodes.items() if k not in removed}
            else:
                nodes = dict(self.nodes)
            if updates:
                nodes.update(updates)
            changes["nodes"] = nodes
        return replace(self, **changes)


def blank_document(generate: IdGenerator = new_id) -> OutlineDocument:
    """Create a fresh document: a root plus one empty, selected line."""
    rid = root_id(generate)
    first = generate()
    root = OutlineNode(id=rid, name=ROOT_NAME, children=(first,))
    return OutlineDocument(
        root_id=rid,
        nodes={rid: root, first: make_node(first, "", rid)},
        selected_id=first,
    )


__all__ = [
    "ROOT_NAME",
    "OutlineNode",
    "OutlineDocument",
    "make_node",
    "blank_document",
]
