"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

import pytest

from ontogen.generator import GenerationCache, default_cache
from ontogen.graph import ConceptGraph, drop_keyspace
from ontogen.graph import session as session_module

if TYPE_CHECKING:
    from collections.abc import Iterator


def _reset() -> None:
    for keyspace in list(session_module._KEYSPACES):
        drop_keyspace(keyspace)
    default_cache.clear()


@pytest.fixture(autouse=True)
def isolated_keyspaces() -> Iterator[None]:
    """Give every test an empty keyspace registry and an empty default cache."""
    _reset()
    yield
    _reset()


@pytest.fixture(autouse=True)
def clear_generator_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ONTOGEN_* variables from the outer environment out of tests."""
    for name in ("ONTOGEN_OPEN", "ONTOGEN_MAX_ATTEMPTS", "ONTOGEN_SEED"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def graph() -> ConceptGraph:
    """Return a fresh, open graph with only the built-in concepts."""
    return ConceptGraph("test")


@pytest.fixture
def rng() -> random.Random:
    """Return a seeded random source."""
    return random.Random(1234)


@pytest.fixture
def cache() -> GenerationCache:
    """Return a private generation cache."""
    return GenerationCache()
