"""Drive address lookup and the matching downloader for one component."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from sc_component_manager.entities.components import ComponentKind
from sc_component_manager.entities.results import ComponentError, ErrorKind, Result
from sc_component_manager.nodes.download.source_locator import SourceLocator

if TYPE_CHECKING:
    from sc_component_manager.config import ComponentManagerConfig
    from sc_component_manager.memory.gateway import GraphQueryGateway
    from sc_component_manager.nodes.download.registry import DownloaderRegistry

logger = logging.getLogger(__name__)


class DownloadOrchestrator:
    """Fetches a component's source material into its local directory.

    The destination is ``base_dir / <component id>``. Specifications fetch
    the specification file from the chosen address; repositories fetch the
    address as is. Candidate links are tried in order until one succeeds.
    """

    def __init__(
        self,
        gateway: GraphQueryGateway,
        registry: DownloaderRegistry,
        config: ComponentManagerConfig,
    ) -> None:
        self._gateway = gateway
        self._registry = registry
        self._config = config
        self._locator = SourceLocator(gateway, registry)

    def component_dir(self, component_id: str, base_dir: Path | None = None) -> Path:
        return Path(base_dir or self._config.download_dir) / component_id

    def acquire(self, component_id: str, base_dir: Path | None = None) -> Result[Path]:
        """Download one component.

        Args:
            component_id: Component to download.
            base_dir: Parent of the component directory, defaults to the
                configured download directory.

        Returns:
            Result holding the component's local directory, or the first
            lookup error, or the last download error.
        """
        kind = self._gateway.classify_component(component_id)
        if kind == ComponentKind.UNKNOWN:
            logger.error("Can't download %s: downloadable class not found", component_id)
            return Result.failure(
                ErrorKind.CLASS_NOT_FOUND,
                "Downloadable class not found",
                component_id=component_id,
            )

        candidates = self._locator.candidates(component_id, kind)
        if candidates.error is not None:
            logger.error("Can't download %s: %s", component_id, candidates.error.message)
            return Result.from_error(candidates.error)

        download_path = self.component_dir(component_id, base_dir)
        try:
            download_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Can't download %s: can't create %s: %s", component_id, download_path, e)
            return Result.failure(
                ErrorKind.DIRECTORY_CREATE_FAILED,
                f"Can't create folder {download_path}: {e}",
                component_id=component_id,
                path=str(download_path),
            )

        target_file = (
            self._config.specification_filename
            if kind == ComponentKind.REUSABLE_SPECIFICATION
            else None
        )

        last_error: ComponentError | None = None
        for source in candidates.unwrap():
            downloader = self._registry.get(source.hosting_tag)
            if downloader is None:
                continue
            source_url = downloader.resolve_url(source.url, target_file)
            logger.info("Downloading %s from %s", component_id, source_url)
            result = downloader.download(source_url, download_path, target_file)
            if result.error is None:
                return Result.success(download_path)
            last_error = replace(result.error, component_id=component_id)
            logger.warning(
                "Address %s failed for %s, trying next", source.url, component_id
            )

        if last_error is None:
            return Result.failure(
                ErrorKind.UNSUPPORTED_HOSTING_SCHEME,
                "No registered downloader for any address",
                component_id=component_id,
            )
        return Result.from_error(last_error)
