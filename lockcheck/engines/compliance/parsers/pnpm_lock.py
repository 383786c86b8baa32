"""Parser for pnpm-lock.yaml files."""

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

# Dependency path: /<name>@<major.minor.patch><anything>
# The optional scope segment cannot contain "/", and the name cannot contain
# "@", so the first "@" after the name is always the version separator.
# Pre-release, build and peer suffixes fall into the trailing ".*".
DEPENDENCY_PATH_RE = re.compile(
    r"^/(?P<packageName>(@[^/]+/)?[^@]+)@(?P<version>[0-9]+\.[0-9]+\.[0-9]+).*"
)


def parse_dependency_path(key: str) -> LockedPackage | None:
    """Split a ``packages`` key like ``/@scope/name@1.2.3(peer@4.5.6)``.

    Returns None for keys that are not in dependency-path form.
    """
    m = DEPENDENCY_PATH_RE.match(key)
    if m is None:
        return None
    return LockedPackage(name=m.group("packageName"), version=m.group("version"))


class PnpmLockParser:
    format_name = "pnpm"
    file_name = "pnpm-lock.yaml"

    def parse(self, content: str) -> ParsedLock:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            return Malformed(f"invalid YAML: {exc}")

        if not isinstance(data, dict):
            return Malformed(f"expected a mapping, got {type(data).__name__}")
        if "packages" not in data:
            return Malformed("missing top-level 'packages'")

        packages = data["packages"]
        if not packages:
            return Empty()
        if not isinstance(packages, dict):
            return Malformed(f"'packages' is a {type(packages).__name__}, expected a mapping")

        entries: dict[str, LockedPackage] = {}
        for key in packages:
            parsed = parse_dependency_path(str(key))
            if parsed is not None:
                entries[str(key)] = parsed
        return Entries(entries)


register_lockfile(PnpmLockParser())
