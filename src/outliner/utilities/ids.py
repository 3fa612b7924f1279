"""Identifier generation for nodes and projects.

The engine never invents identifiers itself; it consumes an injected
``IdGenerator`` (any zero-argument callable returning a fresh string).
Roots and projects carry a recognizable prefix on top of a generated id.
"""

from __future__ import annotations

from typing import Callable
from uuid import uuid4

IdGenerator = Callable[[], str]

ROOT_PREFIX = "root-"
PROJECT_PREFIX = "p-"


def new_id() -> str:
    """Return a fresh 32-char lowercase hex identifier."""
    return uuid4().hex


def root_id(generate: IdGenerator = new_id) -> str:
    """Return a generated id marked as a document root."""
    return ROOT_PREFIX + generate()


def project_id(generate: IdGenerator = new_id) -> str:
    """Return a generated id marked as a project."""
    return PROJECT_PREFIX + generate()


__all__ = [
    "IdGenerator",
    "ROOT_PREFIX",
    "PROJECT_PREFIX",
    "new_id",
    "root_id",
    "project_id",
]
