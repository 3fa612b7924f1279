"""Relations - Edge types for the derived outline graph.

This module defines the typed edges between outline nodes:
- EdgeKind: Enum of relationship types
- Edge: A directed, typed edge between two node ids

Edges are never stored on documents. They are derived from tree shape
and manual links on every read.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EdgeKind(Enum):
    """Types of edges in the outline graph.

    - SIBLING: Consecutive children of one parent (a chain, not a clique)
    - PARENT_PRIMARY: Parent to its first child only
    - MANUAL: User-declared link, independent of tree position
    - AUTO: Consumer-computed association (never emitted by the core deriver)
    """

    SIBLING = "sibling"
    PARENT_PRIMARY = "parent-primary"
    MANUAL = "manual"
    AUTO = "auto"


@dataclass(frozen=True)
class Edge:
    """A directed, typed edge between two outline nodes.

    Attributes:
        source: Id of the node the edge leaves.
        target: Id of the node the edge enters.
        kind: The type of relationship.
    """

    source: str
    target: str
    kind: EdgeKind

    def to_dict(self) -> dict[str, str]:
        """Serialize to the JSON shape consumers render from."""
        return {"from": self.source, "to": self.target, "kind": self.kind.value}

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.source} --[{self.kind.value}]--> {self.target}"


__all__ = ["EdgeKind", "Edge"]
