"""Domain models for the knowledge graph nodes and arcs the manager reads."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class NodeType(StrEnum):
    """Kinds of element stored in the knowledge graph."""

    NODE = "node"
    TUPLE = "tuple"  # A set of elements, e.g. dependencies or alternative addresses
    LINK = "link"  # Literal carrying text content (URLs, scripts)


class EdgeType(StrEnum):
    """Arc kinds between graph elements."""

    MEMBERSHIP = "membership"  # class/set -> element
    RELATION = "relation"  # element -> element under a named nrel_* relation


class GraphNode(BaseModel):
    """A node in the knowledge graph, keyed by its system identifier."""

    model_config = ConfigDict(frozen=True)

    id: str
    node_type: NodeType = NodeType.NODE
    label: str = ""
    content: str = ""


class GraphEdge(BaseModel):
    """A directed arc in the knowledge graph.

    ``relation`` names the ``nrel_*`` relation for RELATION arcs. ``role``
    marks a membership role (e.g. ``rrel_1``) and ``order`` positions the
    arc among its siblings when order matters.
    """

    model_config = ConfigDict(frozen=True)

    source_id: str
    target_id: str
    edge_type: EdgeType
    relation: str = ""
    role: str = ""
    order: int | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
