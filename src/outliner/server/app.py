"""outliner.server.app - Flask app factory and REST API routes.

This is a THIN REST wrapper: every route delegates to one OutlineStore
operation or one pure query. No tree logic lives here.

State pattern:
    _state = {"store": store, "config": config, "snapshot": path}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from flask import Flask, jsonify, request
from flask_cors import CORS

from outliner.outline.graph_view import build_graph_view
from outliner.outline.links import derive_auto_edges, filter_ancestor_edges, resolve_wiki_link
from outliner.outline.mutations import MutationEntry
from outliner.outline.serialize import serialize_document
from outliner.outline.store import OutlineStore
from outliner.server.persistence import save_snapshot

logger = logging.getLogger(__name__)


def _serialize_mirror(store: OutlineStore) -> dict[str, Any]:
    """Serialize the store's mirror (current project's document)."""
    doc = serialize_document(store.document)
    doc["projectId"] = store.current_project_id
    return doc


def _serialize_projects(store: OutlineStore) -> dict[str, Any]:
    return {
        "projects": [{"id": p.id, "name": p.name} for p in store.iter_projects()],
        "currentProjectId": store.current_project_id,
    }


def _outcome(entry: MutationEntry | None, message: str) -> dict[str, Any]:
    """Wrap an engine result; None means the engine refused the operation."""
    if entry is None:
        return {"success": False, "error": f"No change: {message}"}
    return {"success": True, "mutation": entry.to_dict(), "message": message}


def create_app(
    store: OutlineStore,
    config: dict[str, Any],
    snapshot_file: Path | None = None,
) -> Flask:
    """Create the Flask application with REST API routes.

    Args:
        store: The OutlineStore to expose.
        config: outliner configuration dict.
        snapshot_file: Where ``/api/save`` (and autosave) write the snapshot.
            Saving is disabled when None.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)
    CORS(app)

    _state: dict[str, Any] = {
        "store": store,
        "config": config,
        "snapshot": snapshot_file,
    }
    autosave = bool(config.get("storage", {}).get("autosave", False))

    def _save() -> dict[str, Any]:
        path = _state["snapshot"]
        if path is None:
            return {"success": False, "error": "No snapshot file configured"}
        save_snapshot(_state["store"].container, path)
        return {"success": True, "path": str(path)}

    def _respond(result: dict[str, Any]):
        if result.get("success"):
            if autosave and _state["snapshot"] is not None:
                _save()
            result["outline"] = _serialize_mirror(_state["store"])
            return jsonify(result), 200
        return jsonify(result), 409

    def _bad_request(message: str):
        return jsonify({"success": False, "error": message}), 400

    def _body(*required: str, optional: tuple[str, ...] = ()) -> tuple[dict[str, Any], Any]:
        """Parse a JSON object body; required fields must be non-empty strings.

        Optional fields may be absent or null, otherwise they must be strings.
        """
        data = request.get_json(force=True, silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return {}, _bad_request("request body must be a JSON object")
        missing = [k for k in required if not data.get(k)]
        if missing:
            return data, _bad_request(f"{', '.join(missing)} required")
        invalid = [
            k for k in (*required, *optional)
            if data.get(k) is not None and not isinstance(data[k], str)
        ]
        if invalid:
            return data, _bad_request(f"{', '.join(invalid)} must be a string")
        return data, None

    # ─────────────────────────────────────────────────────────────────
    # Read-only GET endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/outline")
    def api_outline():
        """GET /api/outline - The current project's document."""
        return jsonify(_serialize_mirror(_state["store"]))

    @app.route("/api/edges")
    def api_edges():
        """GET /api/edges - Derived edges; ?suppress=1 drops ancestor manual links."""
        nodes = _state["store"].nodes
        edges = derive_auto_edges(nodes)
        if request.args.get("suppress"):
            edges = filter_ancestor_edges(edges, nodes)
        return jsonify({"edges": [e.to_dict() for e in edges], "count": len(edges)})

    @app.route("/api/graph")
    def api_graph():
        """GET /api/graph - Renderable graph elements."""
        suppress = bool(request.args.get("suppress"))
        return jsonify(build_graph_view(_state["store"].document, suppress))

    @app.route("/api/resolve")
    def api_resolve():
        """GET /api/resolve?text=[[...]] - Resolve a wiki link."""
        text = request.args.get("text", "")
        target = resolve_wiki_link(text, _state["store"].nodes)
        return jsonify({"text": text, "id": target})

    @app.route("/api/mutations")
    def api_mutations():
        """GET /api/mutations - Undoable mutation history, oldest first."""
        limit = max(request.args.get("limit", default=50, type=int), 0)
        entries = [e.to_dict() for e in _state["store"].mutation_log.iter_entries()]
        return jsonify({"mutations": entries[-limit:] if limit else [], "count": len(entries)})

    # ─────────────────────────────────────────────────────────────────
    # Project endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/projects", methods=["GET"])
    def api_projects():
        """GET /api/projects - All projects and the current one."""
        return jsonify(_serialize_projects(_state["store"]))

    @app.route("/api/projects", methods=["POST"])
    def api_project_create():
        """POST /api/projects - Create a project and switch to it."""
        data, error = _body(optional=("name",))
        if error:
            return error
        pid = _state["store"].create_project(data.get("name"))
        return _respond({"success": True, "project_id": pid, **_serialize_projects(_state["store"])})

    @app.route("/api/projects/<pid>/switch", methods=["POST"])
    def api_project_switch(pid: str):
        """POST /api/projects/<id>/switch - Make a project current."""
        if pid not in _state["store"].container:
            return jsonify({"success": False, "error": f"Project '{pid}' not found"}), 404
        _state["store"].switch_project(pid)
        return _respond({"success": True, **_serialize_projects(_state["store"])})

    @app.route("/api/projects/<pid>/rename", methods=["POST"])
    def api_project_rename(pid: str):
        """POST /api/projects/<id>/rename - Rename a project."""
        data, error = _body("name")
        if error:
            return error
        if not _state["store"].rename_project(pid, data["name"]):
            return jsonify({"success": False, "error": f"Project '{pid}' not found"}), 404
        return _respond({"success": True, **_serialize_projects(_state["store"])})

    @app.route("/api/projects/<pid>", methods=["DELETE"])
    def api_project_delete(pid: str):
        """DELETE /api/projects/<id> - Delete a project (never the last one)."""
        if pid not in _state["store"].container:
            return jsonify({"success": False, "error": f"Project '{pid}' not found"}), 404
        if not _state["store"].delete_project(pid):
            return _respond({"success": False, "error": "Cannot delete the last project"})
        return _respond({"success": True, **_serialize_projects(_state["store"])})

    # ─────────────────────────────────────────────────────────────────
    # Mutation POST endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/mutate/create-child", methods=["POST"])
    def api_create_child():
        """POST /api/mutate/create-child - Append a child line."""
        data, error = _body("parent_id", optional=("name",))
        if error:
            return error
        new_id = _state["store"].create_child(data["parent_id"], data.get("name") or "")
        if new_id is None:
            return _respond({"success": False, "error": f"Parent '{data['parent_id']}' not found"})
        return _respond({"success": True, "id": new_id})

    @app.route("/api/mutate/create-sibling", methods=["POST"])
    def api_create_sibling():
        """POST /api/mutate/create-sibling - Insert a line after another."""
        data, error = _body("node_id", optional=("name",))
        if error:
            return error
        node_id = data["node_id"]
        new_id = _state["store"].create_sibling_after(node_id, data.get("name") or "")
        if new_id == node_id:
            return _respond({"success": False, "error": f"Cannot add a sibling to '{node_id}'"})
        return _respond({"success": True, "id": new_id})

    @app.route("/api/mutate/rename", methods=["POST"])
    def api_rename():
        """POST /api/mutate/rename - Replace a line's name."""
        data, error = _body("node_id", optional=("name",))
        if error:
            return error
        entry = _state["store"].rename(data["node_id"], data.get("name") or "")
        return _respond(_outcome(entry, f"renamed {data['node_id']}"))

    @app.route("/api/mutate/title", methods=["POST"])
    def api_title():
        """POST /api/mutate/title - Commit an edited title, lifting [[links]]."""
        data, error = _body("node_id", optional=("text",))
        if error:
            return error
        entry = _state["store"].apply_title_edit(data["node_id"], data.get("text") or "")
        return _respond(_outcome(entry, f"edited title of {data['node_id']}"))

    def _single(operation: str):
        data, error = _body("node_id")
        if error:
            return error
        entry = getattr(_state["store"], operation)(data["node_id"])
        return _respond(_outcome(entry, f"{operation} {data['node_id']}"))

    @app.route("/api/mutate/indent", methods=["POST"])
    def api_indent():
        """POST /api/mutate/indent - Nest a line under its previous sibling."""
        return _single("indent")

    @app.route("/api/mutate/outdent", methods=["POST"])
    def api_outdent():
        """POST /api/mutate/outdent - Move a line up one level."""
        return _single("outdent")

    @app.route("/api/mutate/remove", methods=["POST"])
    def api_remove():
        """POST /api/mutate/remove - Delete a line and its subtree."""
        return _single("remove")

    @app.route("/api/mutate/move-before", methods=["POST"])
    def api_move_before():
        """POST /api/mutate/move-before - Reorder within one parent."""
        data, error = _body("target_id", "before_id")
        if error:
            return error
        entry = _state["store"].move_before(data["target_id"], data["before_id"])
        return _respond(_outcome(entry, f"moved {data['target_id']}"))

    @app.route("/api/mutate/move-to-end", methods=["POST"])
    def api_move_to_end():
        """POST /api/mutate/move-to-end - Move a line past its last sibling."""
        data, error = _body("target_id", "parent_id")
        if error:
            return error
        entry = _state["store"].move_to_end(data["target_id"], data["parent_id"])
        return _respond(_outcome(entry, f"moved {data['target_id']}"))

    @app.route("/api/mutate/move", methods=["POST"])
    def api_move():
        """POST /api/mutate/move - Reparent a line under another."""
        data, error = _body("node_id", "parent_id")
        if error:
            return error
        entry = _state["store"].move_node(data["node_id"], data["parent_id"])
        return _respond(_outcome(entry, f"moved {data['node_id']}"))

    @app.route("/api/mutate/link", methods=["POST"])
    def api_link():
        """POST /api/mutate/link - Add a manual link."""
        data, error = _body("from_id", "to_id")
        if error:
            return error
        entry = _state["store"].add_manual_link(data["from_id"], data["to_id"])
        return _respond(_outcome(entry, f"linked {data['from_id']} -> {data['to_id']}"))

    @app.route("/api/mutate/unlink", methods=["POST"])
    def api_unlink():
        """POST /api/mutate/unlink - Remove a manual link."""
        data, error = _body("from_id", "to_id")
        if error:
            return error
        entry = _state["store"].remove_manual_link(data["from_id"], data["to_id"])
        return _respond(_outcome(entry, f"unlinked {data['from_id']} -> {data['to_id']}"))

    @app.route("/api/mutate/select", methods=["POST"])
    def api_select():
        """POST /api/mutate/select - Move the selection cursor (null clears it)."""
        data, error = _body(optional=("node_id",))
        if error:
            return error
        _state["store"].select(data.get("node_id"))
        return _respond({"success": True})

    @app.route("/api/mutate/undo", methods=["POST"])
    def api_undo():
        """POST /api/mutate/undo - Undo the most recent mutation."""
        entry = _state["store"].undo_last()
        if entry is None:
            return _respond({"success": False, "error": "No mutations to undo"})
        return _respond(
            {
                "success": True,
                "mutation": entry.to_dict(),
                "message": f"Undid {entry.operation} on {entry.target_id}",
            }
        )

    # ─────────────────────────────────────────────────────────────────
    # Persistence endpoint
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/save", methods=["POST"])
    def api_save():
        """POST /api/save - Write the snapshot to disk."""
        result = _save()
        return jsonify(result), 200 if result["success"] else 400

    logger.debug("created app (snapshot=%s, autosave=%s)", snapshot_file, autosave)
    return app


__all__ = ["create_app"]
