"""Test helpers for outline engine tests.

Factories that build stores with deterministic ids, plus small readers
that turn store state into plain lists for assertions.
"""

from __future__ import annotations

from outliner.outline.OutlineNode import OutlineNode, make_node
from outliner.outline.store import OutlineStore


class SequentialIds:
    """Deterministic id generator: n1, n2, n3, ..."""

    def __init__(self, prefix: str = "n"):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}{self.count}"


def make_store(*names: str, **kwargs) -> tuple[OutlineStore, list[str]]:
    """Create a store whose root holds one line per name, in order.

    Returns:
        (store, ids) where ids[i] is the line named names[i]. With no
        names, ids holds the single blank line.
    """
    store = OutlineStore(generate=SequentialIds(), **kwargs)
    ids = [store.selected_id]
    if names:
        store.rename(ids[0], names[0])
    for name in names[1:]:
        ids.append(store.create_sibling_after(ids[-1], name))
    return store, ids


def child_ids(store: OutlineStore, node_id: str) -> list[str]:
    """Children of a node as a list."""
    return list(store.nodes[node_id].children)


def child_names(store: OutlineStore, node_id: str) -> list[str]:
    """Names of a node's children, in order."""
    return [store.nodes[c].name for c in store.nodes[node_id].children]


def make_table(*specs: tuple) -> dict[str, OutlineNode]:
    """Build a node table from (id, name, parent_id) tuples.

    Children lists are filled in from parent_id, in argument order.
    """
    nodes: dict[str, OutlineNode] = {}
    for node_id, name, parent_id in specs:
        nodes[node_id] = make_node(node_id, name, parent_id)
    for node_id, _, parent_id in specs:
        if parent_id is not None:
            parent = nodes[parent_id]
            nodes[parent_id] = parent.with_children(parent.children + (node_id,))
    return nodes
