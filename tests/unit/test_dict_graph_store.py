"""Tests for DictGraphStore, the in-memory storage behind ConceptGraph.

These tests exercise the GraphStore protocol through DictGraphStore directly,
independent of the ConceptGraph facade.
"""

from __future__ import annotations

import pytest

from ontogen.graph.store import DictGraphStore, GraphStore


class TestDictGraphStoreProtocol:
    """Verify DictGraphStore satisfies the GraphStore protocol."""

    def test_is_runtime_checkable(self) -> None:
        """DictGraphStore passes isinstance check for GraphStore."""
        store = DictGraphStore()
        assert isinstance(store, GraphStore)

    def test_default_state(self) -> None:
        """Default store has no nodes, no edges and a zero id counter."""
        store = DictGraphStore()
        assert store.node_count() == 0
        assert store.edge_count() == 0
        assert store.id_counter == 0


class TestDictGraphStoreNodes:
    """Test node operations on DictGraphStore."""

    def test_set_and_get_node(self) -> None:
        """Can set and retrieve a node."""
        store = DictGraphStore()
        store.set_node("V1", {"kind": "entity_type", "label": "person"})

        node = store.get_node("V1")
        assert node is not None
        assert node["label"] == "person"

    def test_get_missing_node_returns_none(self) -> None:
        store = DictGraphStore()
        assert store.get_node("missing") is None

    def test_update_node_fields(self) -> None:
        """update_node_fields merges into existing data."""
        store = DictGraphStore()
        store.set_node("V1", {"kind": "entity_type", "abstract": False})
        store.update_node_fields("V1", abstract=True, sup="V2")

        node = store.get_node("V1")
        assert node is not None
        assert node["kind"] == "entity_type"  # preserved
        assert node["abstract"] is True
        assert node["sup"] == "V2"

    def test_find_node_matches_all_fields(self) -> None:
        """find_node returns the first node matching every given field."""
        store = DictGraphStore()
        store.set_node("V1", {"label": "entity", "meta": True})
        store.set_node("V2", {"label": "person", "meta": False})

        assert store.find_node(label="entity", meta=True) == "V1"
        assert store.find_node(label="entity", meta=False) is None
        assert store.find_node(label="person") == "V2"

    def test_all_node_ids_in_insertion_order(self) -> None:
        store = DictGraphStore()
        for node_id in ("V3", "V1", "V2"):
            store.set_node(node_id, {})
        assert store.all_node_ids() == ["V3", "V1", "V2"]

    def test_next_id_is_monotonic(self) -> None:
        """next_id never repeats within a store."""
        store = DictGraphStore()
        assert store.next_id("V") == "V1"
        assert store.next_id("V") == "V2"
        assert store.id_counter == 2


class TestDictGraphStoreEdges:
    """Test edge operations on DictGraphStore."""

    def test_get_edges_with_filters(self) -> None:
        """get_edges filters by from, to, and type."""
        store = DictGraphStore()
        store.add_edge({"type": "plays", "from": "V1", "to": "V5"})
        store.add_edge({"type": "plays", "from": "V2", "to": "V5"})
        store.add_edge({"type": "relates", "from": "V3", "to": "V5"})

        assert len(store.get_edges(edge_type="plays")) == 2
        assert len(store.get_edges(to_id="V5")) == 3
        assert len(store.get_edges(from_id="V3", edge_type="relates")) == 1
        assert store.edge_count() == 3

    def test_has_edge(self) -> None:
        store = DictGraphStore()
        store.add_edge({"type": "plays", "from": "V1", "to": "V5"})
        assert store.has_edge("plays", "V1", "V5")
        assert not store.has_edge("plays", "V5", "V1")
        assert not store.has_edge("relates", "V1", "V5")


class TestDictGraphStoreSavepoints:
    """Test snapshot and rollback."""

    def test_rollback_restores_snapshot(self) -> None:
        store = DictGraphStore()
        store.set_node("V1", {"kind": "entity_type"})
        store.savepoint("sp")

        store.set_node("V2", {"kind": "role"})
        store.add_edge({"type": "plays", "from": "V1", "to": "V2"})
        store.rollback_to("sp")

        assert store.all_node_ids() == ["V1"]
        assert store.edge_count() == 0

    def test_rollback_restores_id_counter(self) -> None:
        """Ids handed out inside a rolled-back block are handed out again."""
        store = DictGraphStore()
        store.savepoint("sp")
        assert store.next_id("V") == "V1"
        store.rollback_to("sp")
        assert store.next_id("V") == "V1"

    def test_rollback_unknown_savepoint_raises(self) -> None:
        store = DictGraphStore()
        with pytest.raises(ValueError, match="No savepoint named"):
            store.rollback_to("missing")

    def test_release_discards_savepoint(self) -> None:
        store = DictGraphStore()
        store.savepoint("sp")
        store.release("sp")
        with pytest.raises(ValueError):
            store.rollback_to("sp")


class TestDictGraphStoreLifecycle:
    """Test clearing and serialization."""

    def test_clear_resets_everything(self) -> None:
        store = DictGraphStore()
        store.set_node(store.next_id("V"), {})
        store.add_edge({"type": "t", "from": "a", "to": "b"})
        store.clear()

        assert store.node_count() == 0
        assert store.edge_count() == 0
        assert store.next_id("V") == "V1"

    def test_to_dict_is_a_copy(self) -> None:
        """Mutating the serialized dict does not touch the store."""
        store = DictGraphStore()
        store.set_node("V1", {"label": "person"})

        data = store.to_dict()
        data["nodes"]["V1"]["label"] = "changed"

        node = store.get_node("V1")
        assert node is not None
        assert node["label"] == "person"
