"""Links - Wiki-link resolution and auto-edge derivation.

Pure functions over a node table. Nothing here mutates a document:

- resolve_wiki_link: ``[[id:...]]`` or ``[[Name]]`` to a node id
- tokenize_links / resolve_many: several references in one string
- lift_inline_links: extract references from a title and strip the markup
- derive_auto_edges: sibling chain, parent-to-first-child and manual edges
- filter_ancestor_edges: drop arcs between an ancestor and its descendant
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping

from outliner.outline.invariants import is_ancestor
from outliner.outline.OutlineNode import OutlineNode
from outliner.outline.relations import Edge, EdgeKind

ID_LINK_PATTERN = re.compile(r"\[\[\s*id:([a-z0-9-]+)\s*\]\]", re.IGNORECASE)
NAME_LINK_PATTERN = re.compile(r"\[\[\s*([^\]]+?)\s*\]\]")
# Either a bracketed span or a bare token delimited by commas/whitespace
TOKEN_PATTERN = re.compile(r"\[\[(.+?)\]\]|([^,\s]+)")
BRACKET_SPAN_PATTERN = re.compile(r"\[\[(.+?)\]\]")
_MULTI_SPACE = re.compile(r"\s{2,}")


def resolve_wiki_link(text: str, nodes: Mapping[str, OutlineNode]) -> str | None:
    """Resolve a textual reference to a node id.

    Two forms are accepted, checked in order:

    1. ``[[id:<identifier>]]`` returns the identifier verbatim. Whether the
       node exists is the caller's concern.
    2. ``[[<name>]]`` returns the id of the first node, in table order,
       whose name equals the trimmed text exactly.

    Args:
        text: Arbitrary, possibly partial, user input.
        nodes: The node table to search by name.

    Returns:
        The resolved id, or None when nothing matches or input is malformed.
    """
    if not text:
        return None

    match = ID_LINK_PATTERN.search(text)
    if match:
        return match.group(1)

    match = NAME_LINK_PATTERN.search(text)
    if match:
        name = match.group(1).strip()
        for node in nodes.values():
            if node.name == name:
                return node.id
    return None


def tokenize_links(raw: str) -> list[str]:
    """Split a string into candidate reference tokens.

    Bracketed ``[[...]]`` spans yield their inner text; everything else
    is split on commas and whitespace. ``"[[A]] [[B]] C, D"`` yields
    ``["A", "B", "C", "D"]``.
    """
    tokens: list[str] = []
    for match in TOKEN_PATTERN.finditer(raw or ""):
        token = (match.group(1) or match.group(2) or "").strip()
        if token:
            tokens.append(token)
    return tokens


def resolve_many(raw: str, nodes: Mapping[str, OutlineNode]) -> list[str]:
    """Resolve every reference token in raw.

    Each token is resolved as if it had been written ``[[token]]``, so
    both ``id:<x>`` tokens and exact names work.

    Returns:
        Resolved ids, de-duplicated, in first-seen order.
    """
    ids: list[str] = []
    for token in tokenize_links(raw):
        target = resolve_wiki_link(f"[[{token}]]", nodes)
        if target and target not in ids:
            ids.append(target)
    return ids


def lift_inline_links(title: str, nodes: Mapping[str, OutlineNode]) -> tuple[str, list[str]]:
    """Extract link markup from a title.

    Only bracketed spans are lifted; bare words stay part of the title.

    Args:
        title: The edited title text.
        nodes: The node table used for name resolution.

    Returns:
        (cleaned title, resolved ids). The cleaned title has every
        ``[[...]]`` span removed, runs of whitespace collapsed, and is
        trimmed.
    """
    ids: list[str] = []
    for span in BRACKET_SPAN_PATTERN.findall(title or ""):
        target = resolve_wiki_link(f"[[{span.strip()}]]", nodes)
        if target and target not in ids:
            ids.append(target)
    cleaned = BRACKET_SPAN_PATTERN.sub("", title or "")
    cleaned = _MULTI_SPACE.sub(" ", cleaned).strip()
    return cleaned, ids


def derive_auto_edges(nodes: Mapping[str, OutlineNode]) -> list[Edge]:
    """Compute the graph edges implied by a node table.

    For every node with children: one PARENT_PRIMARY edge to the first
    child, and one SIBLING edge per consecutive pair of children. For
    every manual link: one MANUAL edge from the node to the target.

    Iteration follows table order then children order, so the result is
    deterministic for a given table. Edge count is linear in node count
    plus link count.
    """
    edges: list[Edge] = []
    for node in nodes.values():
        kids = node.children
        if kids:
            edges.append(Edge(node.id, kids[0], EdgeKind.PARENT_PRIMARY))
            for a, b in zip(kids, kids[1:]):
                edges.append(Edge(a, b, EdgeKind.SIBLING))
        for target in node.manual_links:
            edges.append(Edge(node.id, target, EdgeKind.MANUAL))
    return edges


def filter_ancestor_edges(
    edges: Iterable[Edge],
    nodes: Mapping[str, OutlineNode],
    kinds: Iterable[EdgeKind] = (EdgeKind.MANUAL,),
) -> list[Edge]:
    """Drop edges of the given kinds that join a node to its own ancestor.

    Structural edges are untouched by default; they already follow the
    tree. Used when overlaying manual links on a tree rendering.
    """
    kinds = frozenset(kinds)
    kept: list[Edge] = []
    for edge in edges:
        if edge.kind in kinds and (
            is_ancestor(nodes, edge.source, edge.target)
            or is_ancestor(nodes, edge.target, edge.source)
        ):
            continue
        kept.append(edge)
    return kept


__all__ = [
    "resolve_wiki_link",
    "tokenize_links",
    "resolve_many",
    "lift_inline_links",
    "derive_auto_edges",
    "filter_ancestor_edges",
]
