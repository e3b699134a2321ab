"""Install stage: precondition checks and ordered script execution."""

from sc_component_manager.nodes.install.installer import (
    ComponentInstaller,
    InstallSummary,
    dedupe_scripts,
)
from sc_component_manager.nodes.install.script_runner import (
    ScriptResult,
    ScriptRunner,
    ShellScriptRunner,
)

__all__ = [
    "ComponentInstaller",
    "InstallSummary",
    "ScriptResult",
    "ScriptRunner",
    "ShellScriptRunner",
    "dedupe_scripts",
]
