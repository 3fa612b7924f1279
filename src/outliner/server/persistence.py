"""Persistence layer - one opaque snapshot per running instance.

The whole ProjectContainer is written as a single JSON file named after
the configured storage key, and restored verbatim at startup. There is
no partial load or save.

Public API
----------
- ``snapshot_path`` - where the snapshot lives for a config
- ``save_snapshot`` - write the container atomically
- ``load_snapshot`` - read the container, falling back to a fresh default
- ``load_store`` - build an OutlineStore from config and snapshot
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from outliner.config import DEFAULT_CONFIG
from outliner.outline.invariants import find_violations
from outliner.outline.projects import ProjectContainer
from outliner.outline.serialize import SnapshotError, deserialize_container, serialize_container
from outliner.outline.store import OutlineStore
from outliner.utilities.ids import IdGenerator, new_id

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def snapshot_path(config: dict[str, Any], directory: Path | None = None) -> Path:
    """Resolve the snapshot file for a configuration.

    Args:
        config: Configuration dict (``storage.name`` / ``storage.directory``).
        directory: Overrides ``storage.directory`` when given.

    Returns:
        Path to ``<directory>/<name>.json``.
    """
    storage = config.get("storage", DEFAULT_CONFIG["storage"])
    name = storage.get("name", DEFAULT_CONFIG["storage"]["name"])
    base = directory or Path(storage.get("directory", DEFAULT_CONFIG["storage"]["directory"]))
    return base.expanduser() / f"{name}.json"


def save_snapshot(container: ProjectContainer, path: Path) -> Path:
    """Write the container to path atomically.

    The JSON is written to a temporary file in the same directory and
    moved into place, so a crash never leaves a half-written snapshot.

    Returns:
        The path written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"version": SNAPSHOT_VERSION, "state": serialize_container(container)}
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("saved %d project(s) to %s", container.project_count(), path)
    return path


def _default_container(config: dict[str, Any], generate: IdGenerator) -> ProjectContainer:
    projects = config.get("projects", DEFAULT_CONFIG["projects"])
    return ProjectContainer(
        generate=generate,
        first_name=projects.get("first_name", DEFAULT_CONFIG["projects"]["first_name"]),
        default_name=projects.get("default_name", DEFAULT_CONFIG["projects"]["default_name"]),
    )


def load_snapshot(
    path: Path,
    config: dict[str, Any] | None = None,
    generate: IdGenerator = new_id,
) -> ProjectContainer:
    """Restore a container from path.

    A missing file yields a fresh default container. A corrupted file
    (bad encoding or JSON, wrong shape, or any document breaking a
    structural invariant) is logged and also yields a fresh default container; the
    file itself is left untouched.

    Args:
        path: Snapshot file.
        config: Configuration for project naming defaults.
        generate: Id generator handed to the container.

    Returns:
        The restored or default ProjectContainer.
    """
    config = config or DEFAULT_CONFIG
    if not path.exists():
        return _default_container(config, generate)

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise SnapshotError("snapshot is not an object")
        state = payload.get("state", payload)
        projects = config.get("projects", {})
        container = deserialize_container(
            state,
            generate=generate,
            first_name=projects.get("first_name"),
            default_name=projects.get("default_name"),
        )
        for project in container.iter_projects():
            violations = find_violations(project.doc)
            if violations:
                raise SnapshotError(f"project {project.id}: {violations[0]}")
    except (OSError, ValueError) as e:
        logger.warning("ignoring unreadable snapshot %s: %s", path, e)
        return _default_container(config, generate)

    logger.info("loaded %d project(s) from %s", container.project_count(), path)
    return container


def load_store(
    config: dict[str, Any],
    path: Path | None = None,
    generate: IdGenerator = new_id,
) -> OutlineStore:
    """Build an OutlineStore over the snapshot named by config.

    When no snapshot exists yet the default container is saved right
    away, so its project and node ids stay stable across runs.
    """
    path = path or snapshot_path(config)
    missing = not path.exists()
    container = load_snapshot(path, config, generate)
    if missing:
        save_snapshot(container, path)
    engine = config.get("engine", DEFAULT_CONFIG["engine"])
    return OutlineStore(
        container=container,
        check_invariants=engine.get("check_invariants", True),
        history_limit=engine.get("history_limit", 200),
    )


__all__ = ["SNAPSHOT_VERSION", "snapshot_path", "save_snapshot", "load_snapshot", "load_store"]
