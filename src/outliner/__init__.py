"""
outliner - Outline documents with a derived link graph

An outline is a tree of named lines. Lines may carry manual links to
other lines, and a graph view is derived from tree shape plus those
links. Several independent outlines ("projects") live side by side.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("outliner")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from outliner.outline import (
    Edge,
    EdgeKind,
    OutlineDocument,
    OutlineNode,
    OutlineStore,
    derive_auto_edges,
    resolve_wiki_link,
)

__all__ = [
    "__version__",
    "Edge",
    "EdgeKind",
    "OutlineDocument",
    "OutlineNode",
    "OutlineStore",
    "derive_auto_edges",
    "resolve_wiki_link",
]
