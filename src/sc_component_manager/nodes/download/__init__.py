"""Download stage: address lookup, hosting-scheme strategies, orchestration."""

from sc_component_manager.nodes.download.downloaders import (
    Downloader,
    GitHubDownloader,
    GoogleDriveDownloader,
    HttpDownloader,
    extract_drive_file_id,
    parse_github_url,
)
from sc_component_manager.nodes.download.orchestrator import DownloadOrchestrator
from sc_component_manager.nodes.download.registry import DownloaderRegistry, default_registry
from sc_component_manager.nodes.download.source_locator import SourceLocator, select_address

__all__ = [
    "DownloadOrchestrator",
    "Downloader",
    "DownloaderRegistry",
    "GitHubDownloader",
    "GoogleDriveDownloader",
    "HttpDownloader",
    "SourceLocator",
    "default_registry",
    "extract_drive_file_id",
    "parse_github_url",
    "select_address",
]
