"""Keyspace sessions.

A session is keyed by a keyspace name and hands out ConceptGraph handles
over that keyspace's store. Stores live in a process-local registry, so two
sessions opened on the same keyspace see the same data.
"""

from __future__ import annotations

from ontogen.graph.graph import ConceptGraph, TxType
from ontogen.graph.store import DictGraphStore

_KEYSPACES: dict[str, DictGraphStore] = {}


class GraphSession:
    """Factory for graph handles on one keyspace."""

    def __init__(self, keyspace: str) -> None:
        self.keyspace = keyspace

    def open(self, tx_type: TxType = TxType.WRITE) -> ConceptGraph:
        """Open a new graph handle on this session's keyspace.

        An emptied keyspace (after ``ConceptGraph.delete``) is bootstrapped
        with the built-in concepts again when the next handle opens.
        """
        store = _KEYSPACES.setdefault(self.keyspace, DictGraphStore())
        return ConceptGraph(self.keyspace, store, tx_type)

    def __repr__(self) -> str:
        return f"GraphSession(keyspace={self.keyspace!r})"


def open_session(keyspace: str) -> GraphSession:
    """Open a session on *keyspace*, creating the keyspace if needed."""
    return GraphSession(keyspace)


def drop_keyspace(keyspace: str) -> bool:
    """Forget a keyspace's store. Return True if it existed."""
    return _KEYSPACES.pop(keyspace, None) is not None
