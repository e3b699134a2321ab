"""Locate and hosting-classify the remote address of a component."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sc_component_manager.entities.components import (
    AddressLink,
    AddressNode,
    ComponentKind,
    SourceAddress,
)
from sc_component_manager.entities.results import ErrorKind, Result

if TYPE_CHECKING:
    from sc_component_manager.memory.gateway import GraphQueryGateway
    from sc_component_manager.nodes.download.registry import DownloaderRegistry

logger = logging.getLogger(__name__)


def select_address(addresses: list[AddressNode]) -> AddressNode:
    """Pick the primary address, else the lowest id, from a non-empty set."""
    ordered = sorted(addresses, key=lambda a: a.id)
    for address in ordered:
        if address.primary:
            return address
    return ordered[0]


class SourceLocator:
    """Finds candidate remote addresses for a component.

    Specifications are looked up through their alternative address set,
    repositories through their single repository address. Links whose
    hosting tag has no registered downloader are discarded.
    """

    def __init__(self, gateway: GraphQueryGateway, registry: DownloaderRegistry) -> None:
        self._gateway = gateway
        self._registry = registry

    def locate(
        self, component_id: str, kind: ComponentKind | None = None
    ) -> Result[SourceAddress]:
        """Return the preferred downloadable address of the component."""
        candidates = self.candidates(component_id, kind)
        if candidates.error is not None:
            return Result.from_error(candidates.error)
        return Result.success(candidates.unwrap()[0])

    def candidates(
        self, component_id: str, kind: ComponentKind | None = None
    ) -> Result[list[SourceAddress]]:
        """Return every downloadable link of the chosen address, by link id.

        Args:
            component_id: Component to locate.
            kind: Known classification, looked up when omitted.

        Returns:
            Result holding at least one SourceAddress, or the reason none
            could be found.
        """
        if kind is None:
            kind = self._gateway.classify_component(component_id)

        if kind == ComponentKind.REUSABLE_SPECIFICATION:
            address = self._specification_address(component_id)
        elif kind == ComponentKind.REPOSITORY:
            address = self._repository_address(component_id)
        else:
            return Result.failure(
                ErrorKind.CLASS_NOT_FOUND,
                "Downloadable class not found",
                component_id=component_id,
            )
        if address.error is not None:
            return Result.from_error(address.error)

        address_node = address.unwrap()
        links = self._gateway.get_address_links(address_node.id)
        if not links:
            return Result.failure(
                ErrorKind.NO_ADDRESS_LINKS,
                f"No links connected with address node {address_node.id}",
                component_id=component_id,
            )

        supported: list[AddressLink] = []
        for link in sorted(links, key=lambda item: item.id):
            if self._registry.supports(link.hosting_tag):
                supported.append(link)
            else:
                logger.debug(
                    "Skipping %s for %s: hosting tag %s not supported",
                    link.url,
                    component_id,
                    link.hosting_tag,
                )
        if not supported:
            tags = sorted({str(link.hosting_tag) for link in links})
            return Result.failure(
                ErrorKind.UNSUPPORTED_HOSTING_SCHEME,
                f"No supported hosting scheme among {', '.join(tags)}",
                component_id=component_id,
                tags=", ".join(tags),
            )

        return Result.success(
            [
                SourceAddress(
                    component_id=component_id,
                    kind=kind,
                    address_id=address_node.id,
                    url=link.url,
                    hosting_tag=str(link.hosting_tag),
                )
                for link in supported
            ]
        )

    def _specification_address(self, component_id: str) -> Result[AddressNode]:
        addresses = self._gateway.get_alternative_addresses(component_id)
        if addresses is None:
            return Result.failure(
                ErrorKind.NO_ALTERNATIVE_ADDRESSES,
                "No alternative addresses set found",
                component_id=component_id,
            )
        if not addresses:
            return Result.failure(
                ErrorKind.EMPTY_ALTERNATIVE_SET,
                "Alternative addresses set is empty",
                component_id=component_id,
            )
        chosen = select_address(addresses)
        logger.debug(
            "Selected %s address %s for %s",
            "primary" if chosen.primary else "fallback",
            chosen.id,
            component_id,
        )
        return Result.success(chosen)

    def _repository_address(self, component_id: str) -> Result[AddressNode]:
        address = self._gateway.get_repository_address(component_id)
        if address is None:
            return Result.failure(
                ErrorKind.NO_REPOSITORY_ADDRESS,
                "No address found for repository",
                component_id=component_id,
            )
        return Result.success(address)
