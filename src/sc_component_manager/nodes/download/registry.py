"""Registry mapping hosting-scheme tags to downloader strategies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sc_component_manager.config import ComponentManagerConfig
    from sc_component_manager.nodes.download.downloaders import Downloader

logger = logging.getLogger(__name__)


class DownloaderRegistry:
    """Maps hosting-scheme tags to Downloader implementations.

    New schemes are added with :meth:`register`; nothing downstream needs to
    change.
    """

    def __init__(self) -> None:
        self._downloaders: dict[str, Downloader] = {}

    def register(self, tag: str, downloader: Downloader) -> None:
        if tag in self._downloaders:
            logger.warning("Replacing downloader for %s", tag)
        self._downloaders[tag] = downloader

    def get(self, tag: str | None) -> Downloader | None:
        if tag is None:
            return None
        return self._downloaders.get(tag)

    def supports(self, tag: str | None) -> bool:
        return tag is not None and tag in self._downloaders

    @property
    def supported_tags(self) -> list[str]:
        return sorted(self._downloaders)

    def __len__(self) -> int:
        return len(self._downloaders)


def default_registry(config: ComponentManagerConfig) -> DownloaderRegistry:
    """Registry with the GitHub and Google Drive downloaders bound to config tags."""
    from sc_component_manager.nodes.download.downloaders import (
        GitHubDownloader,
        GoogleDriveDownloader,
    )

    registry = DownloaderRegistry()
    registry.register(
        config.keynodes.concept_github_url,
        GitHubDownloader(depth=config.git_clone_depth),
    )
    registry.register(
        config.keynodes.concept_google_drive_url,
        GoogleDriveDownloader(timeout=config.http_timeout_seconds),
    )
    return registry
