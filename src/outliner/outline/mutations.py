"""Mutation records for outline documents.

This module provides the audit trail kept by the store: one entry per
document mutation that took effect, enough to undo it.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

if TYPE_CHECKING:
    from outliner.outline.OutlineNode import OutlineDocument


@dataclass
class MutationEntry:
    """Single mutation operation record.

    The ``previous`` document is the exact value replaced by the
    mutation; restoring it undoes the operation.

    Attributes:
        operation: Operation type (e.g., "indent", "add_manual_link").
        target_id: Primary node the operation acted on.
        project_id: Project whose document was replaced.
        before_state: Summary of the relevant state before the mutation.
        after_state: Summary of the relevant state after the mutation.
        previous: The document value before the mutation.
        id: Unique mutation ID (UUID4).
        timestamp: When the mutation occurred.
    """

    operation: str
    target_id: str
    project_id: str
    before_state: dict[str, Any]
    after_state: dict[str, Any]
    previous: OutlineDocument | None = field(default=None, repr=False)
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API output (the previous document is omitted)."""
        return {
            "id": self.id,
            "operation": self.operation,
            "target_id": self.target_id,
            "project_id": self.project_id,
            "before_state": self.before_state,
            "after_state": self.after_state,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"[{self.id[:8]}] {self.operation}({self.target_id})"


class MutationLog:
    """Bounded mutation history, oldest first.

    Example:
        >>> log = MutationLog(max_entries=2)
        >>> for op in ("rename", "indent", "outdent"):
        ...     log.append(MutationEntry(op, "n1", "p-1", {}, {}))
        >>> [e.operation for e in log.iter_entries()]
        ['indent', 'outdent']
    """

    def __init__(self, max_entries: int | None = None) -> None:
        """Initialize an empty mutation log.

        Args:
            max_entries: Oldest entries are dropped beyond this size.
                None keeps everything; 0 keeps nothing.
        """
        self._entries: list[MutationEntry] = []
        self._max_entries = max_entries

    def append(self, entry: MutationEntry) -> None:
        """Append a mutation entry, trimming the oldest beyond the bound."""
        if self._max_entries == 0:
            return
        self._entries.append(entry)
        if self._max_entries is not None and len(self._entries) > self._max_entries:
            del self._entries[: len(self._entries) - self._max_entries]

    def iter_entries(self) -> Iterator[MutationEntry]:
        """Iterate over all entries in chronological order."""
        yield from self._entries

    def __len__(self) -> int:
        """Return the number of entries in the log."""
        return len(self._entries)

    def pop(self) -> MutationEntry | None:
        """Remove and return the most recent entry, or None if empty."""
        return self._entries.pop() if self._entries else None

    def discard_project(self, project_id: str) -> None:
        """Drop every entry recorded against a project."""
        self._entries = [e for e in self._entries if e.project_id != project_id]


__all__ = ["MutationEntry", "MutationLog"]
