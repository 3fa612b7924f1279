"""
outliner.commands - CLI command implementations

Every command module exposes ``run(args) -> int``. Commands that touch
outlines open the snapshot through ``open_store`` and, when they
mutate, write it back with ``commit``.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from outliner.config import load_config
from outliner.outline.store import OutlineStore
from outliner.server.persistence import load_store, save_snapshot, snapshot_path


def resolve_config(args: argparse.Namespace) -> dict[str, Any]:
    """Load configuration honoring ``--config``."""
    return load_config(getattr(args, "config", None))


def resolve_snapshot(args: argparse.Namespace, config: dict[str, Any]) -> Path:
    """Snapshot path honoring ``--data-dir``."""
    return snapshot_path(config, getattr(args, "data_dir", None))


def open_store(args: argparse.Namespace) -> tuple[OutlineStore, Path]:
    """Load config and snapshot into a store."""
    config = resolve_config(args)
    path = resolve_snapshot(args, config)
    return load_store(config, path), path


def commit(store: OutlineStore, path: Path) -> None:
    """Persist a mutated store."""
    save_snapshot(store.container, path)


__all__ = ["resolve_config", "resolve_snapshot", "open_store", "commit"]
