"""Shared test fixtures for sc-component-manager."""

from __future__ import annotations

from pathlib import Path

import pytest

from sc_component_manager.config import Keynodes
from sc_component_manager.entities.graph import EdgeType, GraphEdge, GraphNode, NodeType
from sc_component_manager.entities.results import ErrorKind, Result
from sc_component_manager.memory.gateway import KnowledgeGraphGateway
from sc_component_manager.memory.graph_store import NetworkXGraphStore
from sc_component_manager.nodes.download.registry import DownloaderRegistry
from sc_component_manager.nodes.install.script_runner import ScriptResult

KEYNODES = Keynodes()
GITHUB = KEYNODES.concept_github_url
GDRIVE = KEYNODES.concept_google_drive_url


class KnowledgeBase:
    """Builds knowledge graph fixtures shaped like a real component KB."""

    def __init__(self) -> None:
        self.store = NetworkXGraphStore()
        self.k = KEYNODES

    def node(self, node_id: str, node_type: NodeType = NodeType.NODE, content: str = "") -> str:
        if self.store.get_node(node_id) is None:
            self.store.add_node(GraphNode(id=node_id, node_type=node_type, content=content))
        return node_id

    def member(self, set_id: str, element_id: str, role: str = "") -> None:
        self.node(set_id)
        self.node(element_id)
        self.store.add_edge(
            GraphEdge(
                source_id=set_id,
                target_id=element_id,
                edge_type=EdgeType.MEMBERSHIP,
                role=role,
            )
        )

    def relate(self, source_id: str, relation: str, target_id: str, order: int | None = None) -> None:
        self.node(source_id)
        self.node(target_id)
        self.store.add_edge(
            GraphEdge(
                source_id=source_id,
                target_id=target_id,
                edge_type=EdgeType.RELATION,
                relation=relation,
                order=order,
            )
        )

    def link(self, link_id: str, content: str, tag: str | None = None) -> str:
        self.node(link_id, NodeType.LINK, content)
        if tag is not None:
            self.member(tag, link_id)
        return link_id

    def installable(self, cid: str, scripts: tuple[str, ...] = (), reusable: bool = True, method: bool = True) -> None:
        if reusable:
            self.member(self.k.concept_reusable_component, cid)
        if method:
            self.relate(cid, self.k.nrel_installation_method, "concept_installation_method_build")
        for index, script in enumerate(scripts):
            link = self.link(f"{cid}_script_{index}", script)
            self.relate(cid, self.k.nrel_installation_script, link, order=index)

    def specification(
        self,
        cid: str,
        urls: list[str] | None = None,
        tag: str | None = GITHUB,
        primary: int | None = None,
        scripts: tuple[str, ...] = (),
        reusable: bool = True,
        method: bool = True,
    ) -> str:
        """Add a reusable specification with one address per URL."""
        self.member(self.k.concept_reusable_component_specification, cid)
        self.installable(cid, scripts, reusable, method)
        if urls is None:
            urls = [f"https://github.com/org/{cid}"]
        set_id = self.node(f"{cid}_addresses", NodeType.TUPLE)
        self.relate(cid, self.k.nrel_alternative_addresses, set_id)
        for index, url in enumerate(urls):
            address = f"{cid}_address_{index}"
            role = self.k.rrel_primary if index == primary else ""
            self.member(set_id, address, role=role)
            self.member(address, self.link(f"{address}_link", url, tag))
        return cid

    def repository(
        self,
        cid: str,
        url: str | None = None,
        tag: str | None = GITHUB,
        scripts: tuple[str, ...] = (),
    ) -> str:
        self.member(self.k.concept_repository, cid)
        self.installable(cid, scripts)
        address = self.node(f"{cid}_address")
        self.relate(cid, self.k.nrel_repository_address, address)
        self.member(address, self.link(f"{address}_link", url or f"https://github.com/org/{cid}", tag))
        return cid

    def depends(self, cid: str, *dependencies: str, set_id: str | None = None) -> None:
        set_id = self.node(set_id or f"{cid}_dependencies", NodeType.TUPLE)
        self.relate(cid, self.k.nrel_component_dependencies, set_id)
        for dependency in dependencies:
            self.member(set_id, dependency)

    @property
    def gateway(self) -> KnowledgeGraphGateway:
        return KnowledgeGraphGateway(self.store, self.k)


class RecordingDownloader:
    """Downloader double that writes the URL it was asked for."""

    def __init__(self, fail_urls: set[str] | None = None) -> None:
        self.fail_urls = fail_urls or set()
        self.calls: list[tuple[str, Path]] = []
        self.filenames: list[str | None] = []

    def resolve_url(self, address_url: str, target_file: str | None = None) -> str:
        return f"{address_url}/{target_file}" if target_file else address_url

    def download(
        self, source_url: str, dest_dir: Path, filename: str | None = None
    ) -> Result[Path]:
        self.calls.append((source_url, dest_dir))
        self.filenames.append(filename)
        if source_url in self.fail_urls:
            return Result.failure(
                ErrorKind.DOWNLOAD_FAILED, f"Failed to download {source_url}", url=source_url
            )
        dest_dir.mkdir(parents=True, exist_ok=True)
        (dest_dir / "source.txt").write_text(source_url, encoding="utf-8")
        return Result.success(dest_dir)


class RecordingRunner:
    """Script runner double; scripts listed in fail_on exit with status 1."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.calls: list[tuple[str, Path | None]] = []

    def run(self, script: str, cwd: Path | None = None) -> ScriptResult:
        self.calls.append((script, cwd))
        if script in self.fail_on:
            return ScriptResult(returncode=1, stderr=f"{script}: boom")
        return ScriptResult(returncode=0, stdout="ok")

    @property
    def scripts(self) -> list[str]:
        return [script for script, _cwd in self.calls]


@pytest.fixture
def kb() -> KnowledgeBase:
    """Empty knowledge base builder."""
    return KnowledgeBase()


@pytest.fixture
def downloader() -> RecordingDownloader:
    return RecordingDownloader()


@pytest.fixture
def registry(downloader: RecordingDownloader) -> DownloaderRegistry:
    """Registry serving GitHub and Google Drive tags with the recording double."""
    registry = DownloaderRegistry()
    registry.register(GITHUB, downloader)
    registry.register(GDRIVE, downloader)
    return registry


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()
