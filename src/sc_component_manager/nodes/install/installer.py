"""Component installation engine running declared install scripts in order."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sc_component_manager.entities.results import ComponentError, ErrorKind, Result
from sc_component_manager.nodes.install.script_runner import ShellScriptRunner

if TYPE_CHECKING:
    from pathlib import Path

    from sc_component_manager.config import ComponentManagerConfig
    from sc_component_manager.memory.gateway import GraphQueryGateway
    from sc_component_manager.nodes.install.script_runner import ScriptRunner

logger = logging.getLogger(__name__)


def dedupe_scripts(scripts: list[str]) -> tuple[list[str], int]:
    """Drop repeated scripts, keeping the first occurrence of each.

    Duplicate specification records for one repository make every script
    link appear twice.

    Args:
        scripts: Scripts in declared order.

    Returns:
        Tuple of (unique scripts in order, number of duplicates dropped).
    """
    seen: set[str] = set()
    unique: list[str] = []
    for script in scripts:
        if script in seen:
            continue
        seen.add(script)
        unique.append(script)
    return unique, len(scripts) - len(unique)


@dataclass
class InstallSummary:
    """What a successful install did."""

    component_id: str
    scripts_run: list[str] = field(
        default_factory=lambda: []  # pyright: ignore[reportUnknownLambdaType]
    )
    duplicates_skipped: int = 0


class ComponentInstaller:
    """Validates and installs a single component.

    A component is installable when it is flagged reusable and has an
    installation method. Scripts run strictly in declared order and the first
    failure stops the install. Nothing already run is rolled back.
    """

    def __init__(
        self,
        gateway: GraphQueryGateway,
        runner: ScriptRunner | None = None,
        config: ComponentManagerConfig | None = None,
    ) -> None:
        """Initialize the installer.

        Args:
            gateway: Knowledge base query gateway.
            runner: Script executor, defaults to a shell runner.
            config: Supplies the script timeout for the default runner.
        """
        timeout = config.script_timeout_seconds if config is not None else 600.0
        self._gateway = gateway
        self._runner = runner or ShellScriptRunner(timeout=timeout)

    def check_preconditions(self, component_id: str) -> list[ComponentError]:
        """Return every failed installability check, empty if installable."""
        problems: list[ComponentError] = []
        if not self._gateway.is_reusable(component_id):
            logger.warning("Component %s is not a reusable component", component_id)
            problems.append(
                ComponentError(
                    kind=ErrorKind.NOT_REUSABLE,
                    message="Component is not a reusable component",
                    component_id=component_id,
                )
            )
        if self._gateway.get_installation_method(component_id) is None:
            logger.warning("Component %s installation method isn't valid", component_id)
            problems.append(
                ComponentError(
                    kind=ErrorKind.INVALID_INSTALLATION_METHOD,
                    message="Component installation method isn't valid",
                    component_id=component_id,
                )
            )
        return problems

    def install(self, component_id: str, workdir: Path | None = None) -> Result[InstallSummary]:
        """Install one component by running its scripts.

        Args:
            component_id: Component to install.
            workdir: Directory scripts run in, usually the download directory.

        Returns:
            Result holding an InstallSummary, or the first failed
            precondition, or INSTALL_SCRIPT_FAILED naming the failing script.
        """
        problems = self.check_preconditions(component_id)
        if problems:
            return Result.from_error(problems[0])

        scripts, duplicates = dedupe_scripts(self._gateway.get_install_scripts(component_id))
        if duplicates:
            logger.warning(
                "Skipped %d duplicate install scripts for %s", duplicates, component_id
            )
        summary = InstallSummary(component_id=component_id, duplicates_skipped=duplicates)

        if not scripts:
            logger.info("No install scripts for %s, nothing to run", component_id)
            return Result.success(summary)

        for index, script in enumerate(scripts):
            logger.info(
                "Running install script %d/%d for %s", index + 1, len(scripts), component_id
            )
            outcome = self._runner.run(script, cwd=workdir)
            if not outcome.ok:
                logger.error(
                    "Install script %d for %s failed (exit %d): %s",
                    index,
                    component_id,
                    outcome.returncode,
                    outcome.stderr,
                )
                return Result.failure(
                    ErrorKind.INSTALL_SCRIPT_FAILED,
                    f"Install script {index} failed with exit code {outcome.returncode}",
                    component_id=component_id,
                    index=str(index),
                    script=script,
                    returncode=str(outcome.returncode),
                    stderr=outcome.stderr,
                )
            summary.scripts_run.append(script)

        return Result.success(summary)
