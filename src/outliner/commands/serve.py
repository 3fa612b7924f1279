"""
outliner.commands.serve - Run the REST server.
"""

from __future__ import annotations

import argparse
import logging

from outliner.commands import resolve_config, resolve_snapshot
from outliner.server.app import create_app
from outliner.server.persistence import load_store

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace) -> int:
    """Start the Flask development server over the snapshot."""
    config = resolve_config(args)
    path = resolve_snapshot(args, config)
    store = load_store(config, path)
    app = create_app(store, config, snapshot_file=path)

    host = args.host or config["server"]["host"]
    port = args.port or config["server"]["port"]
    logger.info("serving %s on http://%s:%d", path, host, port)
    app.run(host=host, port=port, debug=False)
    return 0
