"""Shared pytest fixtures."""

import os

import pytest

from tests.helpers import SequentialIds, make_store


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep OUTLINER_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("OUTLINER_"):
            monkeypatch.delenv(name)


@pytest.fixture
def ids():
    """A fresh deterministic id generator."""
    return SequentialIds()


@pytest.fixture
def store():
    """A store holding one blank project."""
    return make_store()[0]


@pytest.fixture
def abcd():
    """A store whose root holds lines A, B, C, D; yields (store, ids)."""
    return make_store("A", "B", "C", "D")
