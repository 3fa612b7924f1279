"""
outliner.commands.edit - Add lines, manage links and resolve references.
"""

from __future__ import annotations

import argparse
import sys

from outliner.commands import commit, open_store
from outliner.outline.links import resolve_wiki_link


def run_add(args: argparse.Namespace) -> int:
    """Add a line under a parent (default: root) or after a sibling."""
    store, path = open_store(args)
    if args.after:
        new_id = store.create_sibling_after(args.after, args.text)
        if new_id == args.after:
            print(f"Error: cannot add a line after '{args.after}'", file=sys.stderr)
            return 1
    else:
        new_id = store.create_child(args.parent or store.root_id, args.text)
        if new_id is None:
            print(f"Error: unknown parent '{args.parent}'", file=sys.stderr)
            return 1
    commit(store, path)
    print(new_id)
    return 0


def run_link(args: argparse.Namespace) -> int:
    """Add or remove a manual link. Ends accept ids or [[references]]."""
    store, path = open_store(args)
    ends = []
    for ref in (args.source, args.target):
        target = resolve_wiki_link(ref, store.nodes) if ref.startswith("[[") else ref
        if target is None or target not in store.nodes:
            print(f"Error: cannot resolve '{ref}'", file=sys.stderr)
            return 1
        ends.append(target)

    if args.remove:
        entry = store.remove_manual_link(ends[0], ends[1])
    else:
        entry = store.add_manual_link(ends[0], ends[1])
    if entry is None:
        print("No change.")
        return 0
    commit(store, path)
    print(f"{'Unlinked' if args.remove else 'Linked'} {ends[0]} -> {ends[1]}")
    return 0


def run_resolve(args: argparse.Namespace) -> int:
    """Resolve a [[...]] reference against the current outline."""
    store, _ = open_store(args)
    target = resolve_wiki_link(args.text, store.nodes)
    if target is None:
        print("Not found.", file=sys.stderr)
        return 1
    print(target)
    return 0
