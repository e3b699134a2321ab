"""Component manager configuration and knowledge-base keynodes."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field


class FailurePolicy(StrEnum):
    """What the pipeline does after a component fails."""

    FAIL_FAST = "fail_fast"  # Stop, leave the rest unattempted
    BEST_EFFORT = "best_effort"  # Keep going, collect every failure


class Keynodes(BaseModel):
    """System identifiers of the classes and relations the pipeline queries.

    Bound once at construction so the gateway can be pointed at a knowledge
    base that names things differently.
    """

    concept_repository: str = Field(default="concept_repository")
    concept_reusable_component_specification: str = Field(
        default="concept_reusable_component_specification"
    )
    concept_reusable_component: str = Field(default="concept_reusable_component")

    nrel_component_dependencies: str = Field(default="nrel_component_dependencies")
    nrel_alternative_addresses: str = Field(default="nrel_alternative_addresses")
    nrel_repository_address: str = Field(default="nrel_repository_address")
    nrel_installation_method: str = Field(default="nrel_installation_method")
    nrel_installation_script: str = Field(default="nrel_installation_script")

    rrel_primary: str = Field(
        default="rrel_1", description="Membership role marking the primary address"
    )

    concept_github_url: str = Field(default="concept_github_url")
    concept_google_drive_url: str = Field(default="concept_google_drive_url")

    @property
    def hosting_tags(self) -> tuple[str, ...]:
        """Hosting-scheme classes in lookup priority order."""
        return (self.concept_github_url, self.concept_google_drive_url)


class ComponentManagerConfig(BaseModel):
    """Runtime configuration for the install pipeline."""

    keynodes: Keynodes = Field(default_factory=Keynodes)
    download_dir: Path = Field(
        default_factory=lambda: Path.home() / ".sc-component-manager" / "components",
        description="Base directory; each component lands in a subdirectory named by its id",
    )
    specification_filename: str = Field(default="specification.scs")
    failure_policy: FailurePolicy = Field(default=FailurePolicy.FAIL_FAST)
    script_timeout_seconds: float = Field(default=600.0, gt=0)
    http_timeout_seconds: float = Field(default=60.0, gt=0)
    git_clone_depth: int = Field(default=1, ge=1)

    @classmethod
    def from_file(cls, path: Path) -> ComponentManagerConfig:
        """Load configuration from a JSON file."""
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))


DEFAULT_CONFIG = ComponentManagerConfig()
