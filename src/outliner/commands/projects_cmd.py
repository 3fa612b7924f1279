"""
outliner.commands.projects_cmd - List and manage projects.
"""

from __future__ import annotations

import argparse
import sys

from outliner.commands import commit, open_store


def run(args: argparse.Namespace) -> int:
    """Dispatch ``outliner projects <action>``."""
    store, path = open_store(args)
    action = args.action or "list"

    if action == "list":
        for project in store.iter_projects():
            marker = "*" if project.id == store.current_project_id else " "
            print(f"{marker} {project.id}  {project.name}")
        return 0

    if action == "new":
        pid = store.create_project(args.name)
        commit(store, path)
        print(pid)
        return 0

    if args.id is None or args.id not in store.container:
        print(f"Error: unknown project '{args.id}'", file=sys.stderr)
        return 1

    if action == "switch":
        store.switch_project(args.id)
    elif action == "rename":
        if not args.name:
            print("Error: rename requires a name", file=sys.stderr)
            return 1
        store.rename_project(args.id, args.name)
    elif action == "delete":
        if not store.delete_project(args.id):
            print("Error: cannot delete the last project", file=sys.stderr)
            return 1
    commit(store, path)
    return 0
