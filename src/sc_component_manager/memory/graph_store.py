"""Graph store protocol and NetworkX implementation for the knowledge base."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import networkx as nx

from sc_component_manager.entities.graph import EdgeType, GraphEdge, GraphNode, NodeType

if TYPE_CHECKING:
    from pathlib import Path

_RESERVED_EDGE_KEYS = ("edge_type", "relation", "role", "order")
# Also taken by the node-link JSON arc fields
_RESERVED_METADATA_KEYS = (*_RESERVED_EDGE_KEYS, "source", "target", "key")


@runtime_checkable
class GraphStore(Protocol):
    """Protocol for knowledge graph storage backends."""

    def add_node(self, node: GraphNode) -> None: ...

    def add_edge(self, edge: GraphEdge) -> None: ...

    def get_node(self, node_id: str) -> GraphNode | None: ...

    def get_edges(self, node_id: str) -> list[GraphEdge]: ...

    def out_edges(
        self,
        node_id: str,
        edge_type: EdgeType | None = None,
        relation: str | None = None,
    ) -> list[GraphEdge]: ...

    def has_membership(self, class_id: str, element_id: str) -> bool: ...

    def node_count(self) -> int: ...

    def edge_count(self) -> int: ...

    def save(self, path: str | Path) -> None: ...

    def load(self, path: str | Path) -> None: ...


def _edge_from_data(source: str, target: str, data: dict[str, Any]) -> GraphEdge:
    meta = {k: str(v) for k, v in data.items() if k not in _RESERVED_EDGE_KEYS}
    order = data.get("order")
    return GraphEdge(
        source_id=source,
        target_id=target,
        edge_type=EdgeType(data["edge_type"]),
        relation=data.get("relation", ""),
        role=data.get("role", ""),
        order=int(order) if order is not None else None,
        metadata=meta,
    )


class NetworkXGraphStore:
    """NetworkX-backed directed multigraph store.

    A multigraph is needed because one element can both belong to a class
    and be the target of a relation from the same source.
    """

    def __init__(self) -> None:
        self._graph: nx.MultiDiGraph[str] = nx.MultiDiGraph()

    def add_node(self, node: GraphNode) -> None:
        """Add a node to the graph, storing attributes as plain values."""
        self._graph.add_node(
            node.id,
            node_type=str(node.node_type),
            label=node.label,
            content=node.content,
        )

    def add_edge(self, edge: GraphEdge) -> None:
        """Add a directed arc; both endpoints must already exist.

        Raises:
            ValueError: If an endpoint is missing or a metadata key clashes
                with a stored arc attribute.
        """
        clashing = sorted(k for k in edge.metadata if k in _RESERVED_METADATA_KEYS)
        if clashing:
            msg = f"Reserved arc metadata keys: {', '.join(clashing)}"
            raise ValueError(msg)
        for endpoint in (edge.source_id, edge.target_id):
            if endpoint not in self._graph:
                msg = f"Cannot add arc to unknown node: {endpoint}"
                raise ValueError(msg)
        attrs: dict[str, Any] = {
            "edge_type": str(edge.edge_type),
            "relation": edge.relation,
            "role": edge.role,
            "order": edge.order,
        }
        for k, v in edge.metadata.items():
            attrs[k] = v
        self._graph.add_edge(edge.source_id, edge.target_id, **attrs)

    def get_node(self, node_id: str) -> GraphNode | None:
        """Reconstruct a GraphNode from stored NX node data, or None if not found."""
        if node_id not in self._graph:
            return None
        data: dict[str, Any] = dict(self._graph.nodes[node_id])
        return GraphNode(
            id=node_id,
            node_type=NodeType(data.get("node_type", NodeType.NODE)),
            label=data.get("label", ""),
            content=data.get("content", ""),
        )

    def get_edges(self, node_id: str) -> list[GraphEdge]:
        """Return all arcs where node_id is source or target."""
        if node_id not in self._graph:
            return []
        edges = self.out_edges(node_id)
        in_edges: Any = self._graph.in_edges(node_id, data=True)
        for source, _, data in in_edges:
            edges.append(_edge_from_data(str(source), node_id, data))
        return edges

    def out_edges(
        self,
        node_id: str,
        edge_type: EdgeType | None = None,
        relation: str | None = None,
    ) -> list[GraphEdge]:
        """Return outgoing arcs in insertion order, optionally filtered."""
        if node_id not in self._graph:
            return []
        edges: list[GraphEdge] = []
        out_edges: Any = self._graph.out_edges(node_id, data=True)
        for _, target, data in out_edges:
            if edge_type is not None and data["edge_type"] != str(edge_type):
                continue
            if relation is not None and data.get("relation", "") != relation:
                continue
            edges.append(_edge_from_data(node_id, str(target), data))
        return edges

    def has_membership(self, class_id: str, element_id: str) -> bool:
        """Return True if a membership arc leads from class_id to element_id."""
        if not self._graph.has_edge(class_id, element_id):
            return False
        arcs: dict[Any, dict[str, Any]] = self._graph.get_edge_data(class_id, element_id)
        return any(d["edge_type"] == str(EdgeType.MEMBERSHIP) for d in arcs.values())

    def node_count(self) -> int:
        """Return the number of nodes in the graph."""
        return int(self._graph.number_of_nodes())

    def edge_count(self) -> int:
        """Return the number of arcs in the graph."""
        return int(self._graph.number_of_edges())

    def save(self, path: str | Path) -> None:
        """Serialize graph to JSON file using node-link format."""
        data: dict[str, Any] = nx.node_link_data(self._graph, edges="links")  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def load(self, path: str | Path) -> None:
        """Deserialize graph from JSON file using node-link format."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        self._graph = nx.node_link_graph(  # pyright: ignore[reportUnknownMemberType]
            data, directed=True, multigraph=True, edges="links"
        )
