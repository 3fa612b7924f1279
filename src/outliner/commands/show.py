"""
outliner.commands.show - Print the current outline and its derived graph.
"""

from __future__ import annotations

import argparse
import json
import sys

from outliner.commands import open_store
from outliner.outline.graph_view import build_graph_view
from outliner.outline.invariants import iter_outline
from outliner.outline.links import derive_auto_edges


def run(args: argparse.Namespace) -> int:
    """Run the show command."""
    store, _ = open_store(args)
    if getattr(args, "project", None):
        if args.project not in store.container:
            print(f"Error: unknown project '{args.project}'", file=sys.stderr)
            return 1
        store.switch_project(args.project)

    doc = store.document
    project = store.container.current
    print(f"# {project.name} ({project.id})")
    for node, depth in iter_outline(doc):
        marker = ">" if node.id == doc.selected_id else "-"
        line = f"{'  ' * depth}{marker} {node.name or '(untitled)'}"
        if args.ids:
            line += f"  [{node.id}]"
        if node.manual_links:
            names = [doc.nodes[t].name or t for t in node.manual_links if t in doc.nodes]
            line += "  -> " + ", ".join(names)
        print(line)
    return 0


def run_edges(args: argparse.Namespace) -> int:
    """Run the edges command."""
    store, _ = open_store(args)
    if args.graph:
        print(json.dumps(build_graph_view(store.document), indent=2))
        return 0

    edges = derive_auto_edges(store.nodes)
    if args.json:
        print(json.dumps([e.to_dict() for e in edges], indent=2))
    else:
        for edge in edges:
            print(edge)
    return 0
