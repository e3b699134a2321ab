"""Pipeline result models for install orchestration."""

from __future__ import annotations

from dataclasses import dataclass, field

from sc_component_manager.entities.components import ComponentOutcome, InstallStatus
from sc_component_manager.entities.results import ComponentError  # noqa: TC001


@dataclass
class PipelineReport:
    """Result of one install pipeline run.

    Either ``resolution_error`` is set and nothing was attempted, or
    ``outcomes`` holds an entry for every component in ``order``.
    Components left ``RESOLVED`` were never attempted, because of a
    fail-fast stop or cancellation.
    """

    root_id: str
    order: list[str] = field(
        default_factory=lambda: []  # pyright: ignore[reportUnknownLambdaType]
    )
    outcomes: dict[str, ComponentOutcome] = field(
        default_factory=lambda: {}  # pyright: ignore[reportUnknownLambdaType]
    )
    resolution_error: ComponentError | None = None
    cancelled: bool = False
    latency_ms: float = 0.0

    def _with_status(self, status: InstallStatus) -> list[str]:
        return [cid for cid in self.order if self.outcomes[cid].status == status]

    @property
    def aborted(self) -> bool:
        return self.resolution_error is not None

    @property
    def installed(self) -> list[str]:
        return self._with_status(InstallStatus.INSTALLED)

    @property
    def failed(self) -> list[str]:
        return self._with_status(InstallStatus.FAILED)

    @property
    def pending(self) -> list[str]:
        """Components that were resolved but never attempted."""
        return self._with_status(InstallStatus.RESOLVED)

    @property
    def errors(self) -> list[ComponentError]:
        if self.resolution_error is not None:
            return [self.resolution_error]
        return [
            outcome.error
            for cid in self.order
            if (outcome := self.outcomes[cid]).error is not None
        ]

    @property
    def ok(self) -> bool:
        return (
            not self.aborted
            and not self.cancelled
            and len(self.installed) == len(self.order)
        )
