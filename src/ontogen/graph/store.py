"""Storage behind a ConceptGraph.

A GraphStore holds the raw nodes and edges of one keyspace. It knows nothing
about concept kinds or the rules between them; ConceptGraph reads and writes
plain dicts through it and turns invalid requests into GraphOperationError.

Node ids are allocated by the store from a counter that only grows until the
store is cleared, so a keyspace rebuilt by the same calls gets the same ids.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class GraphStore(Protocol):
    """Storage operations ConceptGraph relies on."""

    def get_node(self, node_id: str) -> dict[str, Any] | None: ...

    def has_node(self, node_id: str) -> bool: ...

    def set_node(self, node_id: str, data: dict[str, Any]) -> None: ...

    def update_node_fields(self, node_id: str, **updates: Any) -> None: ...

    def find_node(self, **fields: Any) -> str | None:
        """Return the id of the first node whose fields all match."""
        ...

    def all_node_ids(self) -> list[str]:
        """Return every node id in creation order."""
        ...

    def node_count(self) -> int: ...

    def next_id(self, prefix: str) -> str: ...

    def add_edge(self, edge: dict[str, Any]) -> None: ...

    def has_edge(self, edge_type: str, from_id: str, to_id: str) -> bool: ...

    def get_edges(
        self,
        from_id: str | None = None,
        to_id: str | None = None,
        edge_type: str | None = None,
    ) -> list[dict[str, Any]]:
        """Return edges matching every given filter, in creation order."""
        ...

    def edge_count(self) -> int: ...

    def savepoint(self, name: str) -> None: ...

    def rollback_to(self, name: str) -> None: ...

    def release(self, name: str) -> None: ...

    def clear(self) -> None: ...

    def to_dict(self) -> dict[str, Any]: ...


@dataclass
class _KeyspaceState:
    nodes: dict[str, dict[str, Any]] = field(default_factory=dict)
    edges: list[dict[str, Any]] = field(default_factory=list)
    id_counter: int = 0


class DictGraphStore:
    """In-memory store with deep-copy savepoints.

    Savepoints are named snapshots of the whole keyspace. ConceptGraph takes
    one around every mutating call and rolls back to it on failure.
    """

    def __init__(self) -> None:
        self._state = _KeyspaceState()
        self._savepoints: dict[str, _KeyspaceState] = {}

    @property
    def id_counter(self) -> int:
        return self._state.id_counter

    # -- Nodes -----------------------------------------------------------------

    def get_node(self, node_id: str) -> dict[str, Any] | None:
        return self._state.nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._state.nodes

    def set_node(self, node_id: str, data: dict[str, Any]) -> None:
        self._state.nodes[node_id] = data

    def update_node_fields(self, node_id: str, **updates: Any) -> None:
        self._state.nodes[node_id].update(updates)

    def find_node(self, **fields: Any) -> str | None:
        for node_id, data in self._state.nodes.items():
            if all(data.get(key) == value for key, value in fields.items()):
                return node_id
        return None

    def all_node_ids(self) -> list[str]:
        return list(self._state.nodes)

    def node_count(self) -> int:
        return len(self._state.nodes)

    def next_id(self, prefix: str) -> str:
        self._state.id_counter += 1
        return f"{prefix}{self._state.id_counter}"

    # -- Edges -----------------------------------------------------------------

    def add_edge(self, edge: dict[str, Any]) -> None:
        self._state.edges.append(edge)

    def has_edge(self, edge_type: str, from_id: str, to_id: str) -> bool:
        return bool(self.get_edges(from_id, to_id, edge_type))

    def get_edges(
        self,
        from_id: str | None = None,
        to_id: str | None = None,
        edge_type: str | None = None,
    ) -> list[dict[str, Any]]:
        wanted = {"from": from_id, "to": to_id, "type": edge_type}
        filters = {key: value for key, value in wanted.items() if value is not None}
        return [
            edge
            for edge in self._state.edges
            if all(edge.get(key) == value for key, value in filters.items())
        ]

    def edge_count(self) -> int:
        return len(self._state.edges)

    # -- Savepoints ------------------------------------------------------------

    def savepoint(self, name: str) -> None:
        self._savepoints[name] = copy.deepcopy(self._state)

    def rollback_to(self, name: str) -> None:
        try:
            snapshot = self._savepoints[name]
        except KeyError:
            raise ValueError(f"No savepoint named '{name}'") from None
        self._state = copy.deepcopy(snapshot)

    def release(self, name: str) -> None:
        self._savepoints.pop(name, None)

    # -- Lifecycle -------------------------------------------------------------

    def clear(self) -> None:
        """Drop all contents and restart id allocation."""
        self._state = _KeyspaceState()
        self._savepoints.clear()

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the nodes and edges."""
        return {
            "nodes": copy.deepcopy(self._state.nodes),
            "edges": copy.deepcopy(self._state.edges),
        }
