"""Shell execution of install scripts."""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# Output kept per stream for failure reports
OUTPUT_TAIL_CHARS = 2000


@dataclass(frozen=True)
class ScriptResult:
    """Outcome of running one install script."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class ScriptRunner(Protocol):
    """Protocol for install script executors."""

    def run(self, script: str, cwd: Path | None = None) -> ScriptResult: ...


class ShellScriptRunner:
    """Runs each script through the system shell and captures its output."""

    def __init__(
        self,
        timeout: float = 600.0,
        env_overrides: dict[str, str] | None = None,
    ) -> None:
        self._timeout = timeout
        self._env_overrides = env_overrides or {}

    def run(self, script: str, cwd: Path | None = None) -> ScriptResult:
        env = os.environ.copy()
        for key, value in self._env_overrides.items():
            env[key] = os.path.expandvars(value)

        start = time.monotonic()
        try:
            completed = subprocess.run(  # noqa: S602
                script,
                shell=True,
                cwd=cwd,
                env=env,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            return ScriptResult(
                returncode=-1,
                stderr=f"Script timed out ({self._timeout:g}s)",
                elapsed_ms=int((time.monotonic() - start) * 1000),
            )
        except OSError as e:
            logger.exception("Could not start install script in %s", cwd)
            return ScriptResult(returncode=-1, stderr=str(e))

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("Script exited %d after %d ms", completed.returncode, elapsed_ms)
        return ScriptResult(
            returncode=completed.returncode,
            stdout=completed.stdout[-OUTPUT_TAIL_CHARS:] if completed.stdout else "",
            stderr=completed.stderr[-OUTPUT_TAIL_CHARS:] if completed.stderr else "",
            elapsed_ms=elapsed_ms,
        )
