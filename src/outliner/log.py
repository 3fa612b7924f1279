"""Logging utilities."""

from __future__ import annotations

import logging

from rich.logging import RichHandler


def configure_logging(level: str | int = "WARNING") -> None:
    """Configure application logging.

    Installs one RichHandler on the root logger; repeated calls only
    update the level.

    Args:
        level: Logging level name or number.
    """
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)
    if any(isinstance(h, RichHandler) for h in root.handlers):
        return
    handler = RichHandler(rich_tracebacks=True, show_time=True, show_level=True, show_path=False)
    handler.setFormatter(logging.Formatter(fmt="%(name)s: %(message)s", datefmt="%H:%M:%S"))
    root.addHandler(handler)
