"""
outliner.config.defaults - Default configuration values.
"""

from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    "storage": {
        # Snapshot file is <directory>/<name>.json
        "name": "outline-projects-v1",
        "directory": "~/.local/share/outliner",
        "autosave": True,
    },
    "projects": {
        "first_name": "Project 1",
        "default_name": "New Project",
    },
    "engine": {
        "check_invariants": True,
        "history_limit": 200,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 5173,
    },
    "logging": {
        "level": "WARNING",
    },
}

CONFIG_FILENAME = ".outliner.toml"
ENV_PREFIX = "OUTLINER_"
