"""Version reduction and range satisfaction (npm semantics)."""

from __future__ import annotations

from semantic_version import NpmSpec, Version

from lockcheck.engines.compliance.models import Reduction, VersionRecord

# Fold seeds: above / below any real version.
MIN_SENTINEL = "99999999.0.0"
MAX_SENTINEL = "0.0.0"


def parse_version(version: str) -> Version | None:
    """Strict semver parse; None for strings like ``4.0`` or ``latest``."""
    try:
        return Version(version)
    except ValueError:
        return None


def satisfies(version: str, requirement: str) -> bool:
    """True if *version* is inside the npm range *requirement*.

    A version that is not valid semver never satisfies.
    """
    parsed = parse_version(version)
    if parsed is None:
        return False
    return NpmSpec(requirement).match(parsed)


def reduce_versions(records: list[VersionRecord], reduction: Reduction) -> list[VersionRecord]:
    """Collapse *records* to the smallest or largest version.

    ``Reduction.NONE`` returns the records unchanged, in discovery order.
    Ties keep the first-seen record. Unparseable versions take no part in
    the fold; if no version parses, the first record is kept.
    """
    if reduction is Reduction.NONE or not records:
        return list(records)

    if reduction is Reduction.MIN:
        best, best_version = None, Version(MIN_SENTINEL)
        for record in records:
            current = parse_version(record.version)
            if current is not None and current < best_version:
                best, best_version = record, current
    else:
        best, best_version = None, Version(MAX_SENTINEL)
        for record in records:
            current = parse_version(record.version)
            if current is not None and current > best_version:
                best, best_version = record, current
    return [best if best is not None else records[0]]
