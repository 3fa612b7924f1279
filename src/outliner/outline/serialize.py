"""Serialization - Convert projects and documents to JSON-compatible dicts.

The wire format keeps the camelCase keys of the persisted application
state so existing snapshots load unchanged:

    {"projects": {pid: {"id", "name", "doc": {...}}}, "currentProjectId": pid}

Deserialization is strict: malformed input raises ``SnapshotError``.
"""

from __future__ import annotations

from typing import Any

from outliner.outline.OutlineNode import OutlineDocument, OutlineNode
from outliner.outline.projects import Project, ProjectContainer
from outliner.utilities.ids import IdGenerator, new_id


class SnapshotError(ValueError):
    """Raised when serialized state does not have the expected shape."""


def serialize_node(node: OutlineNode) -> dict[str, Any]:
    """Serialize an OutlineNode."""
    return {
        "id": node.id,
        "name": node.name,
        "parentId": node.parent_id,
        "children": list(node.children),
        "manualLinks": list(node.manual_links),
    }


def serialize_document(doc: OutlineDocument) -> dict[str, Any]:
    """Serialize an OutlineDocument, preserving node table order."""
    return {
        "rootId": doc.root_id,
        "nodes": {node_id: serialize_node(node) for node_id, node in doc.nodes.items()},
        "selectedId": doc.selected_id,
    }


def serialize_container(container: ProjectContainer) -> dict[str, Any]:
    """Serialize every project plus the current-project cursor."""
    return {
        "projects": {
            p.id: {"id": p.id, "name": p.name, "doc": serialize_document(p.doc)}
            for p in container.iter_projects()
        },
        "currentProjectId": container.current_project_id,
    }


def _require(data: Any, key: str, kind: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise SnapshotError(f"{where}: missing '{key}'")
    value = data[key]
    if not isinstance(value, kind):
        raise SnapshotError(f"{where}: '{key}' has type {type(value).__name__}")
    return value


def _string_list(data: dict[str, Any], key: str, where: str) -> tuple[str, ...]:
    values = data.get(key, [])
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise SnapshotError(f"{where}: '{key}' must be a list of strings")
    return tuple(values)


def deserialize_node(data: Any, where: str = "node") -> OutlineNode:
    """Rebuild an OutlineNode."""
    node_id = _require(data, "id", str, where)
    parent_id = data.get("parentId")
    if parent_id is not None and not isinstance(parent_id, str):
        raise SnapshotError(f"{where}: 'parentId' must be a string or null")
    name = data.get("name", "")
    if not isinstance(name, str):
        raise SnapshotError(f"{where}: 'name' must be a string")
    return OutlineNode(
        id=node_id,
        name=name,
        parent_id=parent_id,
        children=_string_list(data, "children", where),
        manual_links=_string_list(data, "manualLinks", where),
    )


def deserialize_document(data: Any, where: str = "doc") -> OutlineDocument:
    """Rebuild an OutlineDocument. Structural invariants are not checked here."""
    root_id = _require(data, "rootId", str, where)
    raw_nodes = _require(data, "nodes", dict, where)
    selected_id = data.get("selectedId")
    if selected_id is not None and not isinstance(selected_id, str):
        raise SnapshotError(f"{where}: 'selectedId' must be a string or null")
    nodes = {
        key: deserialize_node(value, f"{where}.nodes.{key}") for key, value in raw_nodes.items()
    }
    return OutlineDocument(root_id=root_id, nodes=nodes, selected_id=selected_id)


def deserialize_container(
    data: Any,
    generate: IdGenerator = new_id,
    first_name: str | None = None,
    default_name: str | None = None,
) -> ProjectContainer:
    """Rebuild a ProjectContainer.

    Raises:
        SnapshotError: If the data is malformed or holds no projects.
    """
    raw_projects = _require(data, "projects", dict, "state")
    if not raw_projects:
        raise SnapshotError("state: no projects")
    projects: dict[str, Project] = {}
    for pid, raw in raw_projects.items():
        where = f"projects.{pid}"
        name = _require(raw, "name", str, where)
        doc = deserialize_document(_require(raw, "doc", dict, where), f"{where}.doc")
        projects[pid] = Project(id=pid, name=name, doc=doc)

    current = data.get("currentProjectId")
    kwargs: dict[str, Any] = {}
    if first_name is not None:
        kwargs["first_name"] = first_name
    if default_name is not None:
        kwargs["default_name"] = default_name
    return ProjectContainer(
        projects=projects,
        current_project_id=current if isinstance(current, str) else None,
        generate=generate,
        **kwargs,
    )


__all__ = [
    "SnapshotError",
    "serialize_node",
    "serialize_document",
    "serialize_container",
    "deserialize_node",
    "deserialize_document",
    "deserialize_container",
]
