"""InstallPipeline coordinator: resolve, download and install in order."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from sc_component_manager.config import DEFAULT_CONFIG, FailurePolicy
from sc_component_manager.entities.components import ComponentOutcome, InstallStatus
from sc_component_manager.nodes.download.orchestrator import DownloadOrchestrator
from sc_component_manager.nodes.download.registry import default_registry
from sc_component_manager.nodes.install.installer import ComponentInstaller
from sc_component_manager.workflows.dependency_resolver import resolve_install_order
from sc_component_manager.workflows.models import PipelineReport

if TYPE_CHECKING:
    import threading
    from pathlib import Path

    from sc_component_manager.config import ComponentManagerConfig
    from sc_component_manager.memory.gateway import GraphQueryGateway
    from sc_component_manager.nodes.download.registry import DownloaderRegistry
    from sc_component_manager.nodes.install.script_runner import ScriptRunner

logger = logging.getLogger(__name__)


class InstallPipeline:
    """Coordinates dependency resolution, download and install.

    One run resolves the root once, then downloads and installs every
    component in dependency order, one at a time. Under FAIL_FAST the first
    failed component ends the run; under BEST_EFFORT every component is
    attempted.
    """

    def __init__(
        self,
        gateway: GraphQueryGateway,
        config: ComponentManagerConfig | None = None,
        registry: DownloaderRegistry | None = None,
        runner: ScriptRunner | None = None,
    ) -> None:
        """Initialize the pipeline with a gateway and configuration.

        Args:
            gateway: Knowledge base query gateway.
            config: Pipeline configuration, defaults to DEFAULT_CONFIG.
            registry: Downloader registry, defaults to GitHub + Google Drive.
            runner: Install script runner, defaults to a shell runner.
        """
        self._gateway = gateway
        self._config = config or DEFAULT_CONFIG
        self._registry = registry or default_registry(self._config)
        self._orchestrator = DownloadOrchestrator(gateway, self._registry, self._config)
        self._installer = ComponentInstaller(gateway, runner, self._config)

    @property
    def failure_policy(self) -> FailurePolicy:
        return self._config.failure_policy

    def run(
        self,
        root_id: str,
        base_dir: Path | None = None,
        cancel_event: threading.Event | None = None,
    ) -> PipelineReport:
        """Install root_id and everything it depends on.

        Args:
            root_id: Component to install.
            base_dir: Download directory, defaults to the configured one.
            cancel_event: Checked between components; once set, the
                remaining components are left unattempted.

        Returns:
            PipelineReport with either a resolution error or an outcome for
            every resolved component.
        """
        start = time.perf_counter()
        report = PipelineReport(root_id=root_id)

        resolved = resolve_install_order(root_id, self._gateway)
        if resolved.error is not None:
            logger.error("Aborting install of %s: %s", root_id, resolved.error)
            report.resolution_error = resolved.error
            report.latency_ms = (time.perf_counter() - start) * 1000
            return report

        report.order = resolved.unwrap()
        report.outcomes = {
            cid: ComponentOutcome(component_id=cid, status=InstallStatus.RESOLVED)
            for cid in report.order
        }

        for component_id in report.order:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Install of %s cancelled before %s", root_id, component_id)
                report.cancelled = True
                break

            outcome = report.outcomes[component_id]
            self._process(outcome, base_dir)

            if (
                outcome.status == InstallStatus.FAILED
                and self.failure_policy == FailurePolicy.FAIL_FAST
            ):
                logger.error(
                    "Stopping after %s failed, %d components not attempted",
                    component_id,
                    len(report.pending),
                )
                break

        report.latency_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Install of %s finished: %d installed, %d failed, %d not attempted",
            root_id,
            len(report.installed),
            len(report.failed),
            len(report.pending),
        )
        return report

    def _process(self, outcome: ComponentOutcome, base_dir: Path | None) -> None:
        """Download then install one component, recording where it ended up."""
        component_id = outcome.component_id

        downloaded = self._orchestrator.acquire(component_id, base_dir)
        if downloaded.error is not None:
            outcome.status = InstallStatus.FAILED
            outcome.error = downloaded.error
            return
        outcome.local_path = downloaded.unwrap()
        outcome.status = InstallStatus.DOWNLOADED

        installed = self._installer.install(component_id, workdir=outcome.local_path)
        if installed.error is not None:
            outcome.status = InstallStatus.FAILED
            outcome.error = installed.error
            return
        outcome.scripts_run = len(installed.unwrap().scripts_run)
        outcome.status = InstallStatus.INSTALLED
        logger.info("Installed %s", component_id)
