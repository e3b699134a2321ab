"""Domain models for installable components and their addresses."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path  # noqa: TC003

from pydantic import BaseModel, ConfigDict

from sc_component_manager.entities.results import ComponentError  # noqa: TC001


class ComponentKind(StrEnum):
    """Classification of a component in the knowledge base."""

    REPOSITORY = "repository"
    REUSABLE_SPECIFICATION = "reusable_specification"
    UNKNOWN = "unknown"


class InstallStatus(StrEnum):
    """Per-component pipeline state. INSTALLED and FAILED are terminal."""

    PENDING = "pending"
    RESOLVED = "resolved"
    DOWNLOADED = "downloaded"
    INSTALLED = "installed"
    FAILED = "failed"


class AddressNode(BaseModel):
    """One candidate remote location of a component's source material."""

    model_config = ConfigDict(frozen=True)

    id: str
    primary: bool = False


class AddressLink(BaseModel):
    """A literal URL attached to an address node, with its hosting class."""

    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    hosting_tag: str | None = None


class SourceAddress(BaseModel):
    """A located, hosting-classified address ready for download."""

    model_config = ConfigDict(frozen=True)

    component_id: str
    kind: ComponentKind
    address_id: str
    url: str
    hosting_tag: str


class ComponentOutcome(BaseModel):
    """Where a single component ended up during a pipeline run."""

    component_id: str
    status: InstallStatus = InstallStatus.PENDING
    local_path: Path | None = None
    scripts_run: int = 0
    error: ComponentError | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (InstallStatus.INSTALLED, InstallStatus.FAILED)
