"""Data models for the compliance checker."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from semantic_version import NpmSpec

from lockcheck.engines.compliance.errors import ConfigurationError

DEFAULT_LIBRARY = "@time-loop/cdk-library"
SUPPORTED_PACKAGE_MANAGERS = ("pnpm", "yarn")


class TargetKind(str, Enum):
    LIBRARY = "library"
    PACKAGE_MANAGER = "packageManager"


class Reduction(str, Enum):
    NONE = "none"
    MIN = "min"
    MAX = "max"


@dataclass(frozen=True)
class CheckRequest:
    """What to look for and which versions are acceptable.

    Build one with :meth:`from_options`; direct construction re-runs the
    same validation so an invalid request can never reach a fetch.
    """

    target_kind: TargetKind
    identifier: str
    version_requirement: str
    reduction: Reduction = Reduction.NONE

    def __post_init__(self) -> None:
        if not self.version_requirement:
            raise ConfigurationError("versionRequirement is required, example '>=11.1.2'")
        if not self.identifier:
            raise ConfigurationError(f"{self.target_kind.value} identifier is required")
        if (
            self.target_kind is TargetKind.PACKAGE_MANAGER
            and self.identifier not in SUPPORTED_PACKAGE_MANAGERS
        ):
            raise ConfigurationError(
                f"unsupported packageManager {self.identifier!r}, "
                f"expected one of {', '.join(SUPPORTED_PACKAGE_MANAGERS)}"
            )
        try:
            NpmSpec(self.version_requirement)
        except ValueError as exc:
            raise ConfigurationError(
                f"invalid versionRequirement {self.version_requirement!r}: {exc}"
            ) from exc

    @classmethod
    def from_options(
        cls,
        version_requirement: str | None,
        *,
        library: str | None = None,
        package_manager: str | None = None,
        reduce: str | None = None,
    ) -> CheckRequest:
        """Validate caller-supplied options and build a request.

        With neither *library* nor *package_manager* the default library
        is checked.
        """
        if not version_requirement:
            if package_manager:
                raise ConfigurationError(
                    "versionRequirement is required when using packageManager"
                )
            raise ConfigurationError("versionRequirement is required, example '>=11.1.2'")
        if package_manager and library:
            raise ConfigurationError("cannot use both packageManager and library options")

        try:
            reduction = Reduction(reduce) if reduce else Reduction.NONE
        except ValueError:
            raise ConfigurationError(
                f"unknown reduce {reduce!r}, expected 'min' or 'max'"
            ) from None

        if package_manager:
            return cls(
                target_kind=TargetKind.PACKAGE_MANAGER,
                identifier=package_manager,
                version_requirement=version_requirement,
                reduction=reduction,
            )
        return cls(
            target_kind=TargetKind.LIBRARY,
            identifier=library or DEFAULT_LIBRARY,
            version_requirement=version_requirement,
            reduction=reduction,
        )


@dataclass(frozen=True)
class RepositoryRef:
    """A repository as supplied by the fleet host."""

    full_name: str
    archived: bool = False

    @property
    def owner(self) -> str:
        return self.full_name.split("/", 1)[0]

    @property
    def name(self) -> str:
        return self.full_name.split("/", 1)[1]

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RepositoryRef:
        """Build from a GitHub ``/repos`` payload."""
        return cls(full_name=data["full_name"], archived=bool(data.get("archived", False)))


@dataclass
class VersionRecord:
    """A version found for the target, and the file it came from."""

    version: str
    source_artifact: str


@dataclass(frozen=True)
class Outcome:
    """Classification of one retained version against the requirement."""

    repository: str
    identifier: str
    version: str
    requirement: str
    satisfies: bool


@dataclass
class RemoteFile:
    """A repository path as returned by the contents API."""

    path: str
    type: str  # file / dir / symlink / submodule
    content: str = ""  # base64


# ── parsed lockfile ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class LockedPackage:
    name: str | None
    version: str


@dataclass(frozen=True)
class Malformed:
    """Content did not have the structure the format requires."""

    reason: str


@dataclass(frozen=True)
class Empty:
    """Well-formed lockfile without any package entries."""


@dataclass(frozen=True)
class Entries:
    """Package entries keyed by their lockfile key."""

    packages: dict[str, LockedPackage] = field(default_factory=dict)


ParsedLock = Union[Malformed, Empty, Entries]
