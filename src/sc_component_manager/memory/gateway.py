"""Typed read-only query gateway over the knowledge graph.

The pipeline only ever talks to the knowledge base through
:class:`GraphQueryGateway`. :class:`KnowledgeGraphGateway` answers those
queries from a :class:`GraphStore`, with every class and relation name taken
from the injected :class:`Keynodes`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sc_component_manager.entities.components import (
    AddressLink,
    AddressNode,
    ComponentKind,
)
from sc_component_manager.entities.graph import EdgeType, GraphEdge, NodeType

if TYPE_CHECKING:
    from sc_component_manager.config import Keynodes
    from sc_component_manager.memory.graph_store import GraphStore

logger = logging.getLogger(__name__)


@runtime_checkable
class GraphQueryGateway(Protocol):
    """Read-only queries the install pipeline needs from the knowledge base."""

    def classify_component(self, component_id: str) -> ComponentKind: ...

    def get_dependencies(self, component_id: str) -> set[str]: ...

    def get_alternative_addresses(self, component_id: str) -> list[AddressNode] | None: ...

    def get_repository_address(self, component_id: str) -> AddressNode | None: ...

    def get_address_links(self, address_id: str) -> list[AddressLink]: ...

    def is_reusable(self, component_id: str) -> bool: ...

    def get_installation_method(self, component_id: str) -> str | None: ...

    def get_install_scripts(self, component_id: str) -> list[str]: ...


class KnowledgeGraphGateway:
    """GraphQueryGateway implementation backed by a GraphStore."""

    def __init__(self, store: GraphStore, keynodes: Keynodes | None = None) -> None:
        from sc_component_manager.config import Keynodes

        self._store = store
        self._keynodes = keynodes or Keynodes()

    @property
    def keynodes(self) -> Keynodes:
        return self._keynodes

    def _relation_targets(self, source_id: str, relation: str) -> list[str]:
        edges = self._store.out_edges(source_id, EdgeType.RELATION, relation)
        return [e.target_id for e in edges]

    def _single_relation_target(self, source_id: str, relation: str) -> str | None:
        """Return the lowest-id target of a relation expected to be unique."""
        targets = sorted(self._relation_targets(source_id, relation))
        if not targets:
            return None
        if len(targets) > 1:
            logger.warning(
                "%s has %d %s targets, using %s",
                source_id,
                len(targets),
                relation,
                targets[0],
            )
        return targets[0]

    def _members(self, set_id: str) -> list[GraphEdge]:
        return self._store.out_edges(set_id, EdgeType.MEMBERSHIP)

    def classify_component(self, component_id: str) -> ComponentKind:
        """Classify by membership in the repository or specification class."""
        k = self._keynodes
        if self._store.has_membership(k.concept_repository, component_id):
            return ComponentKind.REPOSITORY
        if self._store.has_membership(k.concept_reusable_component_specification, component_id):
            return ComponentKind.REUSABLE_SPECIFICATION
        return ComponentKind.UNKNOWN

    def get_dependencies(self, component_id: str) -> set[str]:
        """Union the members of every dependency set of the component."""
        dependencies: set[str] = set()
        for set_id in self._relation_targets(
            component_id, self._keynodes.nrel_component_dependencies
        ):
            dependencies.update(edge.target_id for edge in self._members(set_id))
        return dependencies

    def get_alternative_addresses(self, component_id: str) -> list[AddressNode] | None:
        """Return the alternative address set, or None if the relation is absent.

        An existing but empty set yields an empty list.
        """
        set_id = self._single_relation_target(
            component_id, self._keynodes.nrel_alternative_addresses
        )
        if set_id is None:
            return None
        primary_role = self._keynodes.rrel_primary
        return [
            AddressNode(id=edge.target_id, primary=edge.role == primary_role)
            for edge in self._members(set_id)
        ]

    def get_repository_address(self, component_id: str) -> AddressNode | None:
        address_id = self._single_relation_target(
            component_id, self._keynodes.nrel_repository_address
        )
        if address_id is None:
            return None
        return AddressNode(id=address_id, primary=True)

    def get_address_links(self, address_id: str) -> list[AddressLink]:
        """Return literal links attached to an address node."""
        links: list[AddressLink] = []
        for edge in self._members(address_id):
            node = self._store.get_node(edge.target_id)
            if node is None or node.node_type != NodeType.LINK:
                continue
            links.append(
                AddressLink(
                    id=node.id,
                    url=node.content.strip(),
                    hosting_tag=self._hosting_tag(node.id, address_id),
                )
            )
        return links

    def _hosting_tag(self, link_id: str, address_id: str) -> str | None:
        """Known hosting classes win; otherwise the first other class the link is in."""
        for tag in self._keynodes.hosting_tags:
            if self._store.has_membership(tag, link_id):
                return tag
        classes = sorted(
            edge.source_id
            for edge in self._store.get_edges(link_id)
            if edge.target_id == link_id
            and edge.edge_type == EdgeType.MEMBERSHIP
            and edge.source_id != address_id
        )
        return classes[0] if classes else None

    def is_reusable(self, component_id: str) -> bool:
        return self._store.has_membership(
            self._keynodes.concept_reusable_component, component_id
        )

    def get_installation_method(self, component_id: str) -> str | None:
        return self._single_relation_target(
            component_id, self._keynodes.nrel_installation_method
        )

    def get_install_scripts(self, component_id: str) -> list[str]:
        """Return non-empty script contents in declared order.

        Arcs with an ``order`` attribute come first, sorted by it; the rest
        keep insertion order.
        """
        edges = self._store.out_edges(
            component_id, EdgeType.RELATION, self._keynodes.nrel_installation_script
        )
        indexed = sorted(
            enumerate(edges),
            key=lambda item: (item[1].order is None, item[1].order or 0, item[0]),
        )
        scripts: list[str] = []
        for _, edge in indexed:
            node = self._store.get_node(edge.target_id)
            if node is None or node.node_type != NodeType.LINK:
                continue
            if node.content.strip():
                scripts.append(node.content)
            logger.debug("Install script found for %s: %s", component_id, node.content)
        return scripts
