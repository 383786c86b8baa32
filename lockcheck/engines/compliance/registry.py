"""Lockfile parser registry: the formats a library check tries, in order."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lockcheck.engines.compliance.models import ParsedLock


@runtime_checkable
class LockfileParser(Protocol):
    """Interface that every lockfile parser must satisfy."""

    format_name: str
    file_name: str

    def parse(self, content: str) -> ParsedLock: ...


# Insertion order is lookup order.
LOCKFILE_REGISTRY: dict[str, LockfileParser] = {}


def register_lockfile(parser: LockfileParser) -> None:
    """Register a parser instance by its format_name."""
    LOCKFILE_REGISTRY[parser.format_name] = parser


def lockfile_parsers() -> list[LockfileParser]:
    """Registered parsers in the order a check should try them."""
    return list(LOCKFILE_REGISTRY.values())
