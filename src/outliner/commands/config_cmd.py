"""
outliner.commands.config_cmd - Inspect configuration.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import tomlkit

from outliner.config import find_config_file, load_config, validate_config


def run(args: argparse.Namespace) -> int:
    """Handle ``outliner config [show|path]``."""
    action = args.action or "show"

    if action == "path":
        path = args.config or find_config_file(Path.cwd())
        if path is None:
            print("No .outliner.toml found; using defaults.")
            return 1
        print(path)
        return 0

    config = load_config(args.config)
    errors = validate_config(config)
    print(tomlkit.dumps(config))
    for error in errors:
        print(f"Error: {error}", file=sys.stderr)
    return 1 if errors else 0
