"""Tagged success/failure values returned by every fallible operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(StrEnum):
    """Named failure reasons across resolution, download and install."""

    CLASS_NOT_FOUND = "class_not_found"
    CYCLIC_DEPENDENCY = "cyclic_dependency"
    NO_ALTERNATIVE_ADDRESSES = "no_alternative_addresses"
    EMPTY_ALTERNATIVE_SET = "empty_alternative_set"
    NO_REPOSITORY_ADDRESS = "no_repository_address"
    NO_ADDRESS_LINKS = "no_address_links"
    UNSUPPORTED_HOSTING_SCHEME = "unsupported_hosting_scheme"
    DIRECTORY_CREATE_FAILED = "directory_create_failed"
    DOWNLOAD_FAILED = "download_failed"
    NOT_REUSABLE = "not_reusable"
    INVALID_INSTALLATION_METHOD = "invalid_installation_method"
    INSTALL_SCRIPT_FAILED = "install_script_failed"


@dataclass(frozen=True)
class ComponentError:
    """A reported failure.

    ``members`` lists the components involved when there are several (the
    members of a dependency cycle). ``details`` holds kind-specific context
    such as the failing script index or the underlying exception text.
    """

    kind: ErrorKind
    message: str
    component_id: str = ""
    members: tuple[str, ...] = ()
    details: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        prefix = f"[{self.component_id}] " if self.component_id else ""
        return f"{prefix}{self.kind}: {self.message}"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a ComponentError, never both."""

    value: T | None = None
    error: ComponentError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        component_id: str = "",
        members: tuple[str, ...] = (),
        **details: str,
    ) -> Result[T]:
        return cls(
            error=ComponentError(
                kind=kind,
                message=message,
                component_id=component_id,
                members=members,
                details=dict(details),
            )
        )

    @classmethod
    def from_error(cls, error: ComponentError) -> Result[T]:
        """Re-wrap an existing error under a different value type."""
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, raising ValueError if this is a failure."""
        if self.error is not None:
            raise ValueError(str(self.error))
        return self.value  # type: ignore[return-value]
