"""Outline Store - the mutation engine for outline documents.

OutlineStore is the only writer of OutlineDocument values. Every
operation works on the current project's document and either leaves it
untouched (a silent no-op) or commits one new document that satisfies
all structural invariants. There is no partially applied mutation.

Consumers read the current document through ``store.mirror`` (or the
``root_id`` / ``nodes`` / ``selected_id`` shortcuts). The mirror is
replaced in a single assignment after every change, and its node table
is a read-only view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, Mapping, NamedTuple

from outliner.outline.invariants import (
    find_change_violations,
    find_violations,
    is_ancestor,
    iter_subtree,
    non_root_count,
)
from outliner.outline.links import lift_inline_links
from outliner.outline.mutations import MutationEntry, MutationLog
from outliner.outline.OutlineNode import OutlineDocument, OutlineNode, make_node
from outliner.outline.projects import Project, ProjectContainer
from outliner.utilities.ids import IdGenerator

logger = logging.getLogger(__name__)


class _Change(NamedTuple):
    """A candidate document plus before/after summaries for the log.

    ``touched`` lists the node ids the change inserted or replaced and
    ``removed`` the ids it dropped.
    """

    doc: OutlineDocument
    before: dict[str, Any]
    after: dict[str, Any]
    touched: frozenset[str] = frozenset()
    removed: frozenset[str] = frozenset()


@dataclass(frozen=True)
class OutlineMirror:
    """Read-only snapshot of the current project's document.

    Valid until the next mutation call; re-read after every operation.
    """

    project_id: str
    root_id: str
    nodes: Mapping[str, OutlineNode]
    selected_id: str | None


# ─────────────────────────────────────────────────────────────────────────────
# Document transforms (pure: document in, candidate change or None out)
# ─────────────────────────────────────────────────────────────────────────────


def _without(ids: tuple[str, ...], node_id: str) -> list[str]:
    return [x for x in ids if x != node_id]


def _change(
    doc: OutlineDocument,
    updates: dict[str, OutlineNode],
    before: dict[str, Any],
    after: dict[str, Any],
    removed: frozenset[str] = frozenset(),
    **changes,
) -> _Change:
    return _Change(
        doc.evolve(updates, removed, **changes), before, after, frozenset(updates), removed
    )


def _create_child(doc: OutlineDocument, parent_id: str, new_id: str, name: str) -> _Change | None:
    parent = doc.get(parent_id)
    if parent is None:
        return None
    updates = {
        parent_id: parent.with_children(parent.children + (new_id,)),
        new_id: make_node(new_id, name, parent_id),
    }
    return _change(
        doc,
        updates,
        {"parent_id": parent_id},
        {"id": new_id, "name": name, "index": len(parent.children)},
        selected_id=new_id,
    )


def _create_sibling_after(doc: OutlineDocument, node_id: str, new_id: str, name: str) -> _Change | None:
    node = doc.get(node_id)
    if node is None or node.is_root:
        return None
    parent = doc.nodes[node.parent_id]
    kids = list(parent.children)
    index = kids.index(node_id) + 1
    kids.insert(index, new_id)
    updates = {
        parent.id: parent.with_children(kids),
        new_id: make_node(new_id, name, parent.id),
    }
    return _change(
        doc,
        updates,
        {"parent_id": parent.id, "after": node_id},
        {"id": new_id, "name": name, "index": index},
        selected_id=new_id,
    )


def _rename(doc: OutlineDocument, node_id: str, name: str) -> _Change | None:
    node = doc.get(node_id)
    if node is None or node.name == name:
        return None
    return _change(
        doc,
        {node_id: replace(node, name=name)},
        {"name": node.name},
        {"name": name},
    )


def _indent(doc: OutlineDocument, node_id: str) -> _Change | None:
    node = doc.get(node_id)
    if node is None or node.is_root:
        return None
    parent = doc.nodes[node.parent_id]
    index = parent.children.index(node_id)
    if index <= 0:
        return None
    new_parent = doc.nodes[parent.children[index - 1]]
    updates = {
        node_id: replace(node, parent_id=new_parent.id),
        parent.id: parent.with_children(_without(parent.children, node_id)),
        new_parent.id: new_parent.with_children(new_parent.children + (node_id,)),
    }
    return _change(
        doc,
        updates,
        {"parent_id": parent.id, "index": index},
        {"parent_id": new_parent.id, "index": len(new_parent.children)},
    )


def _outdent(doc: OutlineDocument, node_id: str) -> _Change | None:
    node = doc.get(node_id)
    if node is None or node.is_root:
        return None
    parent = doc.nodes[node.parent_id]
    if parent.is_root:
        return None
    grand = doc.nodes[parent.parent_id]
    grand_kids = list(grand.children)
    index = grand_kids.index(parent.id) + 1
    grand_kids.insert(index, node_id)
    updates = {
        node_id: replace(node, parent_id=grand.id),
        parent.id: parent.with_children(_without(parent.children, node_id)),
        grand.id: grand.with_children(grand_kids),
    }
    return _change(
        doc,
        updates,
        {"parent_id": parent.id, "index": parent.children.index(node_id)},
        {"parent_id": grand.id, "index": index},
    )


def _remove(doc: OutlineDocument, node_id: str) -> _Change | None:
    node = doc.get(node_id)
    if node is None or node.is_root:
        return None
    doomed = set(iter_subtree(doc.nodes, node_id))
    if non_root_count(doc) - len(doomed) < 1:
        return None

    parent = doc.nodes[node.parent_id]
    index = parent.children.index(node_id)
    kids = _without(parent.children, node_id)
    updates: dict[str, OutlineNode] = {parent.id: parent.with_children(kids)}

    # Links into the removed subtree would dangle
    for other in doc.iter_nodes():
        if other.id in doomed:
            continue
        if any(t in doomed for t in other.manual_links):
            base = updates.get(other.id, other)
            updates[other.id] = base.with_links([t for t in other.manual_links if t not in doomed])

    selected = kids[0] if kids else parent.id
    return _change(
        doc,
        updates,
        {"parent_id": parent.id, "index": index, "subtree": [n for n in doc.nodes if n in doomed]},
        {"selected_id": selected},
        removed=frozenset(doomed),
        selected_id=selected,
    )


def _move_before(doc: OutlineDocument, target_id: str, drop_before_id: str) -> _Change | None:
    if target_id == drop_before_id:
        return None
    target = doc.get(target_id)
    anchor = doc.get(drop_before_id)
    if target is None or anchor is None:
        return None
    if target.is_root or target.parent_id != anchor.parent_id:
        return None

    parent = doc.nodes[target.parent_id]
    kids = list(parent.children)
    from_idx = kids.index(target_id)
    to_idx = kids.index(drop_before_id)
    kids.pop(from_idx)
    insert_at = to_idx - 1 if from_idx < to_idx else to_idx
    kids.insert(insert_at, target_id)
    if tuple(kids) == parent.children:
        return None
    return _change(
        doc,
        {parent.id: parent.with_children(kids)},
        {"parent_id": parent.id, "index": from_idx},
        {"parent_id": parent.id, "index": insert_at},
    )


def _move_to_end(doc: OutlineDocument, target_id: str, parent_id: str) -> _Change | None:
    parent = doc.get(parent_id)
    if parent is None or not parent.has_child(target_id):
        return None
    if parent.children[-1] == target_id:
        return None
    kids = _without(parent.children, target_id) + [target_id]
    return _change(
        doc,
        {parent_id: parent.with_children(kids)},
        {"parent_id": parent_id, "index": parent.children.index(target_id)},
        {"parent_id": parent_id, "index": len(kids) - 1},
    )


def _move_node(doc: OutlineDocument, node_id: str, new_parent_id: str) -> _Change | None:
    node = doc.get(node_id)
    new_parent = doc.get(new_parent_id)
    if node is None or new_parent is None or node.is_root:
        return None
    if node_id == new_parent_id or is_ancestor(doc.nodes, node_id, new_parent_id):
        return None
    if node.parent_id == new_parent_id:
        return _move_to_end(doc, node_id, new_parent_id)

    old_parent = doc.nodes[node.parent_id]
    updates = {
        node_id: replace(node, parent_id=new_parent_id),
        old_parent.id: old_parent.with_children(_without(old_parent.children, node_id)),
        new_parent_id: new_parent.with_children(new_parent.children + (node_id,)),
    }
    return _change(
        doc,
        updates,
        {"parent_id": old_parent.id, "index": old_parent.children.index(node_id)},
        {"parent_id": new_parent_id, "index": len(new_parent.children)},
    )


def _add_manual_link(doc: OutlineDocument, from_id: str, to_id: str) -> _Change | None:
    node = doc.get(from_id)
    if node is None or to_id == from_id or not doc.has_node(to_id):
        return None
    if node.links_to(to_id):
        return None
    return _change(
        doc,
        {from_id: node.with_links(node.manual_links + (to_id,))},
        {"manual_links": list(node.manual_links)},
        {"manual_links": list(node.manual_links) + [to_id]},
    )


def _remove_manual_link(doc: OutlineDocument, from_id: str, to_id: str) -> _Change | None:
    node = doc.get(from_id)
    if node is None or not node.links_to(to_id):
        return None
    links = _without(node.manual_links, to_id)
    return _change(
        doc,
        {from_id: node.with_links(links)},
        {"manual_links": list(node.manual_links)},
        {"manual_links": links},
    )


def _edit_title(doc: OutlineDocument, node_id: str, text: str) -> _Change | None:
    node = doc.get(node_id)
    if node is None:
        return None
    cleaned, targets = lift_inline_links(text, doc.nodes)
    links = list(node.manual_links)
    for target in targets:
        if target != node_id and doc.has_node(target) and target not in links:
            links.append(target)
    if cleaned == node.name and len(links) == len(node.manual_links):
        return None
    return _change(
        doc,
        {node_id: replace(node, name=cleaned, manual_links=tuple(links))},
        {"name": node.name, "manual_links": list(node.manual_links)},
        {"name": cleaned, "manual_links": links},
    )


# ─────────────────────────────────────────────────────────────────────────────
# Store
# ─────────────────────────────────────────────────────────────────────────────


class OutlineStore:
    """Mutation engine over a ProjectContainer.

    Example:
        >>> store = OutlineStore()
        >>> first = store.selected_id
        >>> second = store.create_sibling_after(first, "B")
        >>> store.indent(second) is not None
        True
        >>> store.get_parent_id(second) == first
        True
    """

    def __init__(
        self,
        container: ProjectContainer | None = None,
        generate: IdGenerator | None = None,
        check_invariants: bool = True,
        history_limit: int | None = 200,
    ) -> None:
        """Initialize the store.

        Args:
            container: Projects to manage. A fresh container with one
                blank project is created when omitted.
            generate: Id generator for new nodes. Defaults to the
                container's generator.
            check_invariants: Validate every candidate document before
                committing it; invalid candidates become no-ops.
            history_limit: Maximum number of undoable mutations kept.
        """
        if container is None:
            container = ProjectContainer(generate=generate) if generate else ProjectContainer()
        self._container = container
        self._generate: IdGenerator = generate or container.generate
        self._check_invariants = check_invariants
        self._log = MutationLog(max_entries=history_limit)
        self._mirror = self._mirror_from(container.current)

    # ─────────────────────────────────────────────────────────────────────────
    # Mirror (read access for consumers)
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _mirror_from(project: Project) -> OutlineMirror:
        doc = project.doc
        return OutlineMirror(
            project_id=project.id,
            root_id=doc.root_id,
            nodes=doc.view(),
            selected_id=doc.selected_id,
        )

    def _refresh(self) -> None:
        self._mirror = self._mirror_from(self._container.current)

    @property
    def mirror(self) -> OutlineMirror:
        """Read-only view of the current project's document."""
        return self._mirror

    @property
    def root_id(self) -> str:
        """Root id of the current document."""
        return self._mirror.root_id

    @property
    def nodes(self) -> Mapping[str, OutlineNode]:
        """Read-only node table of the current document."""
        return self._mirror.nodes

    @property
    def selected_id(self) -> str | None:
        """Selected node of the current document."""
        return self._mirror.selected_id

    @property
    def document(self) -> OutlineDocument:
        """The current document value."""
        return self._container.current.doc

    @property
    def container(self) -> ProjectContainer:
        """The managed project container."""
        return self._container

    @property
    def current_project_id(self) -> str:
        """Id of the current project."""
        return self._container.current_project_id

    def iter_projects(self) -> Iterator[Project]:
        """Iterate all projects in creation order."""
        return self._container.iter_projects()

    @property
    def mutation_log(self) -> MutationLog:
        """Access the mutation log."""
        return self._log

    # ─────────────────────────────────────────────────────────────────────────
    # Commit pipeline
    # ─────────────────────────────────────────────────────────────────────────

    def _apply(
        self,
        operation: str,
        target_id: str,
        transform: Callable[[OutlineDocument], _Change | None],
    ) -> MutationEntry | None:
        """Run a transform on the current document and commit the result.

        Returns:
            The recorded MutationEntry, or None when the operation was a no-op.
        """
        pid = self._container.current_project_id
        doc = self._container.current.doc
        change = transform(doc)
        if change is None:
            return None

        if self._check_invariants:
            if change.removed:
                violations = find_violations(change.doc)
            else:
                violations = find_change_violations(doc, change.doc, change.touched)
            if violations:
                logger.warning(
                    "rejected %s(%s): %s", operation, target_id, "; ".join(violations)
                )
                return None

        entry = MutationEntry(
            operation=operation,
            target_id=target_id,
            project_id=pid,
            before_state=change.before,
            after_state=change.after,
            previous=doc,
        )
        self._container.replace_document(pid, change.doc)
        self._log.append(entry)
        self._refresh()
        logger.debug("applied %s", entry)
        return entry

    # ─────────────────────────────────────────────────────────────────────────
    # Node operations
    # ─────────────────────────────────────────────────────────────────────────

    def create_child(self, parent_id: str, name: str = "") -> str | None:
        """Append a new node as the last child of parent_id and select it.

        Returns:
            The new node id, or None if parent_id is unknown.
        """
        new_id = self._generate()
        entry = self._apply(
            "create_child", new_id, lambda d: _create_child(d, parent_id, new_id, name)
        )
        return new_id if entry else None

    def create_sibling_after(self, node_id: str, name: str = "") -> str:
        """Insert a new node right after node_id under the same parent and select it.

        Returns:
            The new node id, or node_id unchanged when node_id is the root or unknown.
        """
        new_id = self._generate()
        entry = self._apply(
            "create_sibling_after",
            new_id,
            lambda d: _create_sibling_after(d, node_id, new_id, name),
        )
        return new_id if entry else node_id

    def rename(self, node_id: str, name: str) -> MutationEntry | None:
        """Replace a node's name. No structural effect."""
        return self._apply("rename", node_id, lambda d: _rename(d, node_id, name))

    def apply_title_edit(self, node_id: str, text: str) -> MutationEntry | None:
        """Commit an edited title, lifting ``[[...]]`` references into manual links.

        Resolved references become manual links (self-links and unknown
        ids are skipped), the markup is stripped from the name, and the
        cleaned text becomes the node's name, all in one mutation.
        """
        return self._apply("edit_title", node_id, lambda d: _edit_title(d, node_id, text))

    def indent(self, node_id: str) -> MutationEntry | None:
        """Move node_id to the end of its previous sibling's children."""
        return self._apply("indent", node_id, lambda d: _indent(d, node_id))

    def outdent(self, node_id: str) -> MutationEntry | None:
        """Move node_id to its grandparent, right after its old parent."""
        return self._apply("outdent", node_id, lambda d: _outdent(d, node_id))

    def remove(self, node_id: str) -> MutationEntry | None:
        """Delete node_id and its subtree, keeping at least one non-root node."""
        return self._apply("remove", node_id, lambda d: _remove(d, node_id))

    def move_before(self, target_id: str, drop_before_id: str) -> MutationEntry | None:
        """Reorder target_id to sit right before drop_before_id (same parent only)."""
        return self._apply(
            "move_before", target_id, lambda d: _move_before(d, target_id, drop_before_id)
        )

    def move_to_end(self, target_id: str, parent_id: str) -> MutationEntry | None:
        """Move target_id to the last position among parent_id's children."""
        return self._apply(
            "move_to_end", target_id, lambda d: _move_to_end(d, target_id, parent_id)
        )

    def move_node(self, node_id: str, new_parent_id: str) -> MutationEntry | None:
        """Reparent node_id as the last child of new_parent_id.

        Refused for the root, for moves onto itself, and for moves under
        one of its own descendants.
        """
        return self._apply(
            "move_node", node_id, lambda d: _move_node(d, node_id, new_parent_id)
        )

    def add_manual_link(self, from_id: str, to_id: str) -> MutationEntry | None:
        """Add to_id to from_id's manual links (idempotent)."""
        return self._apply(
            "add_manual_link", from_id, lambda d: _add_manual_link(d, from_id, to_id)
        )

    def remove_manual_link(self, from_id: str, to_id: str) -> MutationEntry | None:
        """Remove to_id from from_id's manual links, if present."""
        return self._apply(
            "remove_manual_link", from_id, lambda d: _remove_manual_link(d, from_id, to_id)
        )

    def get_parent_id(self, node_id: str) -> str | None:
        """Return the parent of node_id, or None for the root or unknown ids."""
        node = self.document.get(node_id)
        return node.parent_id if node else None

    def select(self, node_id: str | None) -> None:
        """Set the selected node. Unknown ids are tolerated; not logged."""
        pid = self._container.current_project_id
        doc = self._container.current.doc
        if doc.selected_id == node_id:
            return
        self._container.replace_document(pid, doc.evolve(selected_id=node_id))
        self._refresh()

    def undo_last(self) -> MutationEntry | None:
        """Undo the most recent document mutation.

        Restores the document the mutation replaced, in whichever
        project it was recorded against.

        Returns:
            The undone MutationEntry, or None if there is nothing to undo.
        """
        entry = self._log.pop()
        if entry is None or entry.previous is None or entry.project_id not in self._container:
            return None
        self._container.replace_document(entry.project_id, entry.previous)
        self._refresh()
        logger.debug("undid %s", entry)
        return entry

    # ─────────────────────────────────────────────────────────────────────────
    # Project operations
    # ─────────────────────────────────────────────────────────────────────────

    def create_project(self, name: str | None = None) -> str:
        """Create a project with a blank document and switch to it."""
        pid = self._container.create_project(name)
        self._refresh()
        return pid

    def switch_project(self, pid: str) -> str:
        """Switch the current project; unknown ids fall back to an existing one."""
        current = self._container.switch_project(pid)
        self._refresh()
        return current

    def rename_project(self, pid: str, name: str) -> bool:
        """Rename a project."""
        return self._container.rename_project(pid, name)

    def delete_project(self, pid: str) -> bool:
        """Delete a project unless it is the last one."""
        deleted = self._container.delete_project(pid)
        if deleted:
            self._log.discard_project(pid)
            self._refresh()
        return deleted


__all__ = ["OutlineMirror", "OutlineStore"]
