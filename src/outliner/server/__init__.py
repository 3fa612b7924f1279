"""outliner.server - REST surface and snapshot persistence.

Exports:
- create_app: Flask application factory
- load_store, save_snapshot, load_snapshot, snapshot_path: persistence boundary
"""

from outliner.server.app import create_app
from outliner.server.persistence import load_snapshot, load_store, save_snapshot, snapshot_path

__all__ = ["create_app", "load_store", "save_snapshot", "load_snapshot", "snapshot_path"]
