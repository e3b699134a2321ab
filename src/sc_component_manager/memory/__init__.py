"""Memory package."""

from sc_component_manager.memory.gateway import GraphQueryGateway, KnowledgeGraphGateway
from sc_component_manager.memory.graph_store import GraphStore, NetworkXGraphStore

__all__ = [
    "GraphQueryGateway",
    "GraphStore",
    "KnowledgeGraphGateway",
    "NetworkXGraphStore",
]
