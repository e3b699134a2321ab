"""Entity models for the component manager domain layer."""

from sc_component_manager.entities.components import (
    AddressLink,
    AddressNode,
    ComponentKind,
    ComponentOutcome,
    InstallStatus,
    SourceAddress,
)
from sc_component_manager.entities.graph import EdgeType, GraphEdge, GraphNode, NodeType
from sc_component_manager.entities.results import (
    ComponentError,
    ErrorKind,
    Result,
)

__all__ = [
    "AddressLink",
    "AddressNode",
    "ComponentError",
    "ComponentKind",
    "ComponentOutcome",
    "EdgeType",
    "ErrorKind",
    "GraphEdge",
    "GraphNode",
    "InstallStatus",
    "NodeType",
    "Result",
    "SourceAddress",
]
