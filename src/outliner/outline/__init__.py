"""Outline module - Document model, mutation engine and link graph.

Exports:
- OutlineNode, OutlineDocument: Immutable tree values
- Edge, EdgeKind: Derived graph edges
- MutationEntry, MutationLog: Audit trail and undo
- Project, ProjectContainer: Named documents
- OutlineStore, OutlineMirror: The mutation engine and its read view
- resolve_wiki_link, tokenize_links, resolve_many, lift_inline_links
- derive_auto_edges, filter_ancestor_edges, build_graph_view
- find_violations, iter_outline: Invariant checks and display walk
"""

from outliner.outline.graph_view import build_graph_view
from outliner.outline.invariants import find_violations, iter_outline
from outliner.outline.links import (
    derive_auto_edges,
    filter_ancestor_edges,
    lift_inline_links,
    resolve_many,
    resolve_wiki_link,
    tokenize_links,
)
from outliner.outline.mutations import MutationEntry, MutationLog
from outliner.outline.OutlineNode import OutlineDocument, OutlineNode, blank_document
from outliner.outline.projects import Project, ProjectContainer
from outliner.outline.relations import Edge, EdgeKind
from outliner.outline.store import OutlineMirror, OutlineStore

__all__ = [
    "OutlineNode",
    "OutlineDocument",
    "blank_document",
    "Edge",
    "EdgeKind",
    "MutationEntry",
    "MutationLog",
    "Project",
    "ProjectContainer",
    "OutlineStore",
    "OutlineMirror",
    "resolve_wiki_link",
    "tokenize_links",
    "resolve_many",
    "lift_inline_links",
    "derive_auto_edges",
    "filter_ancestor_edges",
    "build_graph_view",
    "find_violations",
    "iter_outline",
]
