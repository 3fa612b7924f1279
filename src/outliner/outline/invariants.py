"""Invariant checks and tree walks for outline documents.

The engine checks every candidate document before committing it: the
nodes a change replaced go through ``find_change_violations``, and
removals plus every restored snapshot get the full ``find_violations``
scan. Tests use the same helpers to assert well-formedness.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from outliner.outline.OutlineNode import OutlineDocument, OutlineNode


def non_root_count(doc: OutlineDocument) -> int:
    """Return the number of nodes other than the root."""
    return sum(1 for k in doc.nodes if k != doc.root_id)


def scan_parent_id(nodes: Mapping[str, OutlineNode], node_id: str) -> str | None:
    """Find the parent holding node_id by scanning every children list.

    This is the slow, structure-only lookup. The engine trusts the stored
    ``parent_id`` field; this scan exists to cross-check it.

    Args:
        nodes: The node table.
        node_id: The id to look for.

    Returns:
        The id of the first node listing node_id as a child, or None.
    """
    for pid, node in nodes.items():
        if node_id in node.children:
            return pid
    return None


def is_ancestor(nodes: Mapping[str, OutlineNode], ancestor_id: str, node_id: str) -> bool:
    """Check whether ancestor_id is a proper ancestor of node_id.

    Follows ``parent_id`` upwards. Stops on unknown ids and on revisits,
    so a corrupted table cannot loop forever.
    """
    seen: set[str] = set()
    node = nodes.get(node_id)
    cur = node.parent_id if node else None
    while cur is not None and cur not in seen:
        if cur == ancestor_id:
            return True
        seen.add(cur)
        parent = nodes.get(cur)
        cur = parent.parent_id if parent else None
    return False


def iter_subtree(nodes: Mapping[str, OutlineNode], node_id: str) -> Iterator[str]:
    """Yield node_id and all of its descendants, pre-order."""
    seen: set[str] = set()
    stack = [node_id]
    while stack:
        cur = stack.pop()
        if cur in seen or cur not in nodes:
            continue
        seen.add(cur)
        yield cur
        stack.extend(reversed(nodes[cur].children))


def iter_outline(doc: OutlineDocument, include_root: bool = False) -> Iterator[tuple[OutlineNode, int]]:
    """Walk the outline in display order.

    Yields (node, depth) pairs, pre-order. Depth 0 is the root's
    children (or the root itself when include_root is set). A visited
    set guards against cycles in a corrupted table.

    Args:
        doc: The document to walk.
        include_root: Whether to yield the root node itself.

    Yields:
        (OutlineNode, depth) tuples.
    """
    root = doc.get(doc.root_id)
    if root is None:
        return
    visited: set[str] = {root.id}
    offset = 1 if include_root else 0
    if include_root:
        yield root, 0
    stack = [(cid, offset) for cid in reversed(root.children)]
    while stack:
        node_id, depth = stack.pop()
        if node_id in visited:
            continue
        node = doc.get(node_id)
        if node is None:
            continue
        visited.add(node_id)
        yield node, depth
        stack.extend((cid, depth + 1) for cid in reversed(node.children))


def _node_violations(nodes: Mapping[str, OutlineNode], node_id: str, node: OutlineNode) -> list[str]:
    """Checks that only need one node and the nodes it points at."""
    errors: list[str] = []
    if node.id != node_id:
        errors.append(f"node stored under '{node_id}' has id '{node.id}'")
    if len(set(node.children)) != len(node.children):
        errors.append(f"node '{node_id}' has duplicate children")
    for cid in node.children:
        child = nodes.get(cid)
        if child is None:
            errors.append(f"node '{node_id}' lists unknown child '{cid}'")
        elif child.parent_id != node_id:
            errors.append(
                f"node '{cid}' records parent '{child.parent_id}' but is listed under '{node_id}'"
            )
    if len(set(node.manual_links)) != len(node.manual_links):
        errors.append(f"node '{node_id}' has duplicate manual links")
    for target in node.manual_links:
        if target == node_id:
            errors.append(f"node '{node_id}' links to itself")
        elif target not in nodes:
            errors.append(f"node '{node_id}' links to unknown node '{target}'")
    return errors


def _ancestry_cycles(nodes: Mapping[str, OutlineNode]) -> set[str]:
    """Return ids lying on a parent_id cycle. Each node is walked once."""
    settled: set[str] = set()
    cyclic: set[str] = set()
    for start in nodes:
        path: list[str] = []
        on_path: set[str] = set()
        cur: str | None = start
        while cur is not None and cur in nodes and cur not in settled:
            if cur in on_path:
                cyclic.update(path[path.index(cur):])
                break
            on_path.add(cur)
            path.append(cur)
            cur = nodes[cur].parent_id
        settled.update(path)
    return cyclic


def find_violations(doc: OutlineDocument) -> list[str]:
    """Check every structural invariant of a document.

    Linear in the size of the node table.

    Returns:
        A list of human-readable violations; empty when the document is well-formed.
    """
    errors: list[str] = []
    nodes = doc.nodes

    root = nodes.get(doc.root_id)
    if root is None:
        return [f"root '{doc.root_id}' missing from node table"]
    if not root.is_root:
        errors.append(f"root '{doc.root_id}' has parent '{root.parent_id}'")

    seen_as_child: dict[str, str] = {}
    for node_id, node in nodes.items():
        if node_id != doc.root_id and node.is_root:
            errors.append(f"non-root node '{node_id}' has no parent")
        errors.extend(_node_violations(nodes, node_id, node))
        for cid in node.children:
            if cid in seen_as_child and seen_as_child[cid] != node_id:
                errors.append(
                    f"node '{cid}' is a child of both '{seen_as_child[cid]}' and '{node_id}'"
                )
            seen_as_child[cid] = node_id

    reachable = set(iter_subtree(nodes, doc.root_id))
    cyclic = _ancestry_cycles(nodes)
    for node_id in nodes:
        if node_id not in reachable:
            errors.append(f"node '{node_id}' is not reachable from root")
        if node_id in cyclic:
            errors.append(f"node '{node_id}' is its own ancestor")

    if doc.node_count() - 1 < 1:
        errors.append("document has no non-root nodes")

    return errors


def find_change_violations(
    previous: OutlineDocument,
    doc: OutlineDocument,
    touched: Iterable[str],
) -> list[str]:
    """Check a candidate that replaced or added the touched nodes only.

    ``previous`` must be well-formed and ``doc`` must differ from it only
    in the touched nodes (no removals). Cost is proportional to the
    touched nodes and their depth, not to the document size.

    Args:
        previous: The committed document the change started from.
        doc: The candidate document.
        touched: Ids of the nodes the change inserted or replaced.

    Returns:
        A list of human-readable violations; empty when the candidate is well-formed.
    """
    nodes = doc.nodes
    if doc.root_id not in nodes:
        return [f"root '{doc.root_id}' missing from node table"]

    errors: list[str] = []
    for node_id in touched:
        node = nodes.get(node_id)
        if node is None:
            errors.append(f"node '{node_id}' missing from node table")
            continue
        errors.extend(_node_violations(nodes, node_id, node))
        if node_id == doc.root_id:
            if not node.is_root:
                errors.append(f"root '{node_id}' has parent '{node.parent_id}'")
            continue
        if node.is_root:
            errors.append(f"non-root node '{node_id}' has no parent")
            continue

        parent = nodes.get(node.parent_id)
        if parent is None:
            errors.append(f"node '{node_id}' records unknown parent '{node.parent_id}'")
        elif not parent.has_child(node_id):
            errors.append(f"node '{node_id}' is missing from its parent's children")

        old = previous.get(node_id)
        if old is None or old.parent_id != node.parent_id:
            former = doc.get(old.parent_id) if old is not None else None
            if former is not None and former.has_child(node_id):
                errors.append(
                    f"node '{node_id}' is a child of both '{former.id}' and '{node.parent_id}'"
                )
            if not is_ancestor(nodes, doc.root_id, node_id):
                errors.append(f"node '{node_id}' is not reachable from root")

    if doc.node_count() - 1 < 1:
        errors.append("document has no non-root nodes")

    return errors


__all__ = [
    "non_root_count",
    "scan_parent_id",
    "is_ancestor",
    "iter_subtree",
    "iter_outline",
    "find_violations",
    "find_change_violations",
]
