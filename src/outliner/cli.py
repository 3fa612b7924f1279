"""
outliner.cli - Command-line interface.

Main entry point for the outliner CLI tool.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import argcomplete

from outliner import __version__
from outliner.commands import completion, config_cmd, edit, projects_cmd, serve, show
from outliner.config import load_config
from outliner.log import configure_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="outliner",
        description="Outline documents with a derived link graph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  outliner show                      # Print the current outline
  outliner add "Groceries"           # Add a top-level line
  outliner link "[[Milk]]" "[[Groceries]]"
  outliner edges --json              # Derived graph edges
  outliner projects new "Reading"    # Create and switch to a project
  outliner serve                     # REST API for editor front-ends

Configuration:
  outliner config path               # Show config file location
  outliner config show               # View all settings
""",
    )

    parser.add_argument("--version", action="version", version=f"outliner {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Override snapshot directory",
        metavar="PATH",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress non-error output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    show_parser = subparsers.add_parser("show", help="Print the current outline")
    show_parser.add_argument("--project", metavar="ID", help="Show another project")
    show_parser.add_argument("--ids", action="store_true", help="Print node ids")

    edges_parser = subparsers.add_parser("edges", help="Print derived graph edges")
    edges_parser.add_argument("--json", action="store_true", help="Output JSON")
    edges_parser.add_argument("--graph", action="store_true", help="Output graph view elements")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a [[...]] reference")
    resolve_parser.add_argument("text", help='Reference, e.g. "[[Groceries]]" or "[[id:abc]]"')

    add_parser = subparsers.add_parser("add", help="Add a line")
    add_parser.add_argument("text", nargs="?", default="", help="Line text")
    where = add_parser.add_mutually_exclusive_group()
    where.add_argument("--parent", metavar="ID", help="Parent line (default: root)")
    where.add_argument("--after", metavar="ID", help="Insert after this line")

    link_parser = subparsers.add_parser("link", help="Add or remove a manual link")
    link_parser.add_argument("source", help="Source id or [[reference]]")
    link_parser.add_argument("target", help="Target id or [[reference]]")
    link_parser.add_argument("--remove", action="store_true", help="Remove the link")

    projects_parser = subparsers.add_parser("projects", help="List and manage projects")
    projects_parser.add_argument(
        "action",
        nargs="?",
        choices=["list", "new", "switch", "rename", "delete"],
        help="Action (default: list)",
    )
    projects_parser.add_argument("id", nargs="?", help="Project id (or name for 'new')")
    projects_parser.add_argument("name", nargs="?", help="New name for 'rename'")

    serve_parser = subparsers.add_parser("serve", help="Run the REST API server")
    serve_parser.add_argument("--host", help="Bind address (default from config)")
    serve_parser.add_argument("--port", type=int, help="Port (default from config)")

    config_parser = subparsers.add_parser("config", help="Inspect configuration")
    config_parser.add_argument("action", nargs="?", choices=["show", "path"])

    completion_parser = subparsers.add_parser("completion", help="Shell tab-completion setup")
    completion_parser.add_argument("--shell", choices=["bash", "zsh", "fish", "tcsh"])

    subparsers.add_parser("version", help="Show version")

    return parser


def _log_level(args: argparse.Namespace) -> str:
    if args.verbose:
        return "DEBUG"
    if args.quiet:
        return "ERROR"
    return load_config(args.config)["logging"]["level"]


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    argcomplete.autocomplete(parser)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        configure_logging(_log_level(args))

        if args.command == "show":
            return show.run(args)
        elif args.command == "edges":
            return show.run_edges(args)
        elif args.command == "resolve":
            return edit.run_resolve(args)
        elif args.command == "add":
            return edit.run_add(args)
        elif args.command == "link":
            return edit.run_link(args)
        elif args.command == "projects":
            if args.action == "new":
                args.name = args.id
            return projects_cmd.run(args)
        elif args.command == "serve":
            return serve.run(args)
        elif args.command == "config":
            return config_cmd.run(args)
        elif args.command == "completion":
            return completion.run(args)
        elif args.command == "version":
            print(f"outliner {__version__}")
            return 0
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
