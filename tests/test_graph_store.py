"""Tests for graph store protocol and NetworkX implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from sc_component_manager.entities.graph import EdgeType, GraphEdge, GraphNode, NodeType
from sc_component_manager.memory.graph_store import GraphStore, NetworkXGraphStore

if TYPE_CHECKING:
    from pathlib import Path


def _make_edge(
    src: str,
    tgt: str,
    etype: EdgeType = EdgeType.MEMBERSHIP,
    relation: str = "",
    order: int | None = None,
) -> GraphEdge:
    """Helper to build a GraphEdge with minimal boilerplate."""
    return GraphEdge(source_id=src, target_id=tgt, edge_type=etype, relation=relation, order=order)


@pytest.fixture
def store() -> NetworkXGraphStore:
    store = NetworkXGraphStore()
    for nid in ("concept_repository", "sc-web", "sc-web_address"):
        store.add_node(GraphNode(id=nid))
    store.add_node(
        GraphNode(id="url", node_type=NodeType.LINK, content="https://github.com/ostis-ai/sc-web")
    )
    store.add_edge(_make_edge("concept_repository", "sc-web"))
    store.add_edge(
        _make_edge("sc-web", "sc-web_address", EdgeType.RELATION, "nrel_repository_address")
    )
    store.add_edge(_make_edge("sc-web_address", "url"))
    return store


class TestNodes:
    def test_satisfies_protocol(self, store: NetworkXGraphStore) -> None:
        assert isinstance(store, GraphStore)

    def test_add_and_retrieve(self, store: NetworkXGraphStore) -> None:
        node = store.get_node("url")
        assert node is not None
        assert node.node_type == NodeType.LINK
        assert node.content == "https://github.com/ostis-ai/sc-web"

    def test_get_nonexistent_returns_none(self, store: NetworkXGraphStore) -> None:
        assert store.get_node("missing") is None

    def test_counts(self, store: NetworkXGraphStore) -> None:
        assert store.node_count() == 4
        assert store.edge_count() == 3


class TestEdges:
    def test_out_edges_filtered_by_type_and_relation(self, store: NetworkXGraphStore) -> None:
        relations = store.out_edges("sc-web", EdgeType.RELATION, "nrel_repository_address")
        assert [e.target_id for e in relations] == ["sc-web_address"]
        assert store.out_edges("sc-web", EdgeType.MEMBERSHIP) == []
        assert store.out_edges("sc-web", EdgeType.RELATION, "nrel_other") == []

    def test_get_edges_includes_incoming(self, store: NetworkXGraphStore) -> None:
        edges = store.get_edges("sc-web")
        assert {(e.source_id, e.target_id) for e in edges} == {
            ("concept_repository", "sc-web"),
            ("sc-web", "sc-web_address"),
        }

    def test_membership_and_relation_between_same_pair(self) -> None:
        store = NetworkXGraphStore()
        store.add_node(GraphNode(id="a"))
        store.add_node(GraphNode(id="b"))
        store.add_edge(_make_edge("a", "b", EdgeType.RELATION, "nrel_x"))
        assert not store.has_membership("a", "b")

        store.add_edge(_make_edge("a", "b"))
        assert store.has_membership("a", "b")
        assert store.edge_count() == 2

    def test_has_membership_unknown_nodes(self, store: NetworkXGraphStore) -> None:
        assert not store.has_membership("concept_missing", "sc-web")

    def test_edge_to_unknown_node_rejected(self, store: NetworkXGraphStore) -> None:
        with pytest.raises(ValueError, match="unknown node"):
            store.add_edge(_make_edge("sc-web", "ghost"))

    def test_metadata_preserved(self, store: NetworkXGraphStore) -> None:
        store.add_edge(
            GraphEdge(
                source_id="sc-web",
                target_id="url",
                edge_type=EdgeType.RELATION,
                relation="nrel_note",
                metadata={"origin": "kb/sc-web.scs"},
            )
        )
        edge = store.out_edges("sc-web", relation="nrel_note")[0]
        assert edge.metadata == {"origin": "kb/sc-web.scs"}

    @pytest.mark.parametrize("key", ["order", "relation", "edge_type", "role", "source", "key"])
    def test_reserved_metadata_key_rejected(self, store: NetworkXGraphStore, key: str) -> None:
        edge = GraphEdge(
            source_id="sc-web",
            target_id="url",
            edge_type=EdgeType.RELATION,
            relation="nrel_installation_script",
            order=1,
            metadata={key: "7"},
        )
        with pytest.raises(ValueError, match=f"Reserved arc metadata keys: {key}"):
            store.add_edge(edge)
        assert store.out_edges("sc-web", relation="nrel_installation_script") == []


class TestPersistence:
    def test_save_and_load(self, store: NetworkXGraphStore, tmp_path: Path) -> None:
        store.add_edge(_make_edge("sc-web", "url", EdgeType.RELATION, "nrel_installation_script", order=2))
        path = tmp_path / "kb.json"
        store.save(path)

        loaded = NetworkXGraphStore()
        loaded.load(path)

        assert loaded.node_count() == store.node_count()
        assert loaded.edge_count() == store.edge_count()
        assert loaded.has_membership("concept_repository", "sc-web")
        script_edge = loaded.out_edges("sc-web", relation="nrel_installation_script")[0]
        assert script_edge.order == 2
        link = loaded.get_node("url")
        assert link is not None
        assert link.node_type == NodeType.LINK
