"""Parser for yarn.lock files (classic v1 and berry)."""

from __future__ import annotations

import re

import yaml

from lockcheck.engines.compliance.models import (
    Empty,
    Entries,
    LockedPackage,
    Malformed,
    ParsedLock,
)
from lockcheck.engines.compliance.registry import register_lockfile

# Name part of a "<name>@<range>" specifier. Names with dots or
# underscores do not match; callers rely on this exact behaviour.
SPECIFIER_NAME_RE = re.compile(r"^(@?[a-z0-9-]+/?[a-z0-9-]+)@", re.IGNORECASE)

# Inside an entry: version "1.2.3"
_VERSION_RE = re.compile(r'^version\s+"?([^"\s]+)"?\s*$')

_BERRY_MARKER_RE = re.compile(r"^__metadata:\s*$", re.MULTILINE)


def package_name_from_specifier(specifier: str) -> str | None:
    """``@scope/name@^1.0.0`` -> ``@scope/name``; None if it does not match."""
    m = SPECIFIER_NAME_RE.match(specifier)
    return m.group(1) if m else None


def _split_header(header: str) -> list[str]:
    """Split an entry header into its specifiers, quotes removed."""
    specs = [part.strip().strip('"').strip("'") for part in header.split(",")]
    return [s for s in specs if s]


def _entries(versions: dict[str, str]) -> ParsedLock:
    if not versions:
        return Empty()
    # One entry per specifier; a shared header repeats the version.
    packages: dict[str, LockedPackage] = {}
    for header, version in versions.items():
        for spec in _split_header(header):
            packages[spec] = LockedPackage(
                name=package_name_from_specifier(spec), version=version
            )
    return Entries(packages)


def _parse_classic(content: str) -> ParsedLock:
    versions: dict[str, str] = {}
    current: str | None = None

    for lineno, raw_line in enumerate(content.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        indent = len(raw_line) - len(raw_line.lstrip())
        if indent == 0:
            if not line.endswith(":") or not _split_header(line[:-1]):
                return Malformed(f"line {lineno}: expected an entry header, got {line!r}")
            current = line[:-1]
            continue

        if current is None:
            return Malformed(f"line {lineno}: indented line outside of an entry")

        # Only the entry's own fields; nested dependency maps are deeper.
        if indent == 2:
            m = _VERSION_RE.match(line)
            if m:
                versions[current] = m.group(1)

    return _entries(versions)


def _parse_berry(content: str) -> ParsedLock:
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        return Malformed(f"invalid YAML: {exc}")
    if not isinstance(data, dict):
        return Malformed(f"expected a mapping, got {type(data).__name__}")

    versions: dict[str, str] = {}
    for key, details in data.items():
        if key == "__metadata" or not isinstance(details, dict):
            continue
        version = details.get("version")
        if version is not None:
            versions[str(key)] = str(version)
    return _entries(versions)


class YarnLockParser:
    format_name = "yarn"
    file_name = "yarn.lock"

    def parse(self, content: str) -> ParsedLock:
        if _BERRY_MARKER_RE.search(content):
            return _parse_berry(content)
        return _parse_classic(content)


register_lockfile(YarnLockParser())
