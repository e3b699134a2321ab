"""Dependency resolution and cycle detection for component installation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import networkx as nx

from sc_component_manager.entities.components import ComponentKind
from sc_component_manager.entities.results import ErrorKind, Result

if TYPE_CHECKING:
    from sc_component_manager.memory.gateway import GraphQueryGateway

logger = logging.getLogger(__name__)


def build_dependency_graph(
    root_id: str,
    gateway: GraphQueryGateway,
) -> nx.DiGraph[str]:
    """Collect the transitive dependency closure of root_id.

    Depth-first walk over the dependency relation, visiting dependencies in
    sorted order. Each component is queried once. Arcs point from a
    component to the components it requires.

    Args:
        root_id: Component to start from.
        gateway: Knowledge base query gateway.

    Returns:
        Directed graph containing root_id and everything it reaches.
    """
    graph: nx.DiGraph[str] = nx.DiGraph()
    graph.add_node(root_id)

    visited: set[str] = set()
    stack = [root_id]
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)

        dependencies = sorted(gateway.get_dependencies(current))
        logger.debug("%s depends on %s", current, dependencies)
        # Reverse so the lowest id is popped first
        for dependency in reversed(dependencies):
            graph.add_edge(current, dependency)
            if dependency not in visited:
                stack.append(dependency)

    return graph


def resolve_install_order(
    root_id: str,
    gateway: GraphQueryGateway,
) -> Result[list[str]]:
    """Resolve root_id into an installation order.

    Every dependency precedes its dependents. Ties are broken by component
    id so the order is stable for an unchanged graph.

    Args:
        root_id: Component to install.
        gateway: Knowledge base query gateway.

    Returns:
        Result holding the ordered component ids, or a CYCLIC_DEPENDENCY or
        CLASS_NOT_FOUND error. No partial order is returned on failure.
    """
    graph = build_dependency_graph(root_id, gateway)

    if not nx.is_directed_acyclic_graph(graph):
        cycle_edges = nx.find_cycle(graph, source=root_id)
        members = tuple(source for source, _target in cycle_edges)
        path = " -> ".join([*members, members[0]])
        logger.error("Dependency cycle detected from %s: %s", root_id, path)
        return Result.failure(
            ErrorKind.CYCLIC_DEPENDENCY,
            f"Dependency cycle: {path}",
            component_id=root_id,
            members=members,
        )

    unknown = sorted(
        node
        for node in graph.nodes
        if gateway.classify_component(node) == ComponentKind.UNKNOWN
    )
    if unknown:
        logger.error("Components without a downloadable class: %s", unknown)
        return Result.failure(
            ErrorKind.CLASS_NOT_FOUND,
            f"Downloadable class not found for {', '.join(unknown)}",
            component_id=unknown[0],
            members=tuple(unknown),
        )

    # Reverse so arcs run dependency -> dependent
    order: list[str] = list(
        nx.lexicographical_topological_sort(graph.reverse(copy=False))  # pyright: ignore[reportUnknownMemberType]
    )
    logger.info("Resolved %d components for %s: %s", len(order), root_id, order)
    return Result.success(order)
