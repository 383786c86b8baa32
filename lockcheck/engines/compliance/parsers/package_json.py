"""Parser for the ``packageManager`` pin in package.json."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

MANIFEST_FILE = "package.json"

# "<tool>@<version>", optionally followed by "+sha512.<hash>". Minor and patch
# may be omitted ("pnpm@10"); they read as zero.
_PIN_RE = re.compile(
    r"^(?P<tool>[a-z0-9-]+)@(?P<major>[0-9]+)"
    r"(?:\.(?P<minor>[0-9]+)(?:\.(?P<patch>[0-9]+)(?:-(?P<prerelease>[0-9A-Za-z.-]+))?)?)?"
    r"(?:$|\+)"
)


@dataclass(frozen=True)
class PackageManagerPin:
    tool: str
    version: str
    major: int

    @property
    def label(self) -> str:
        return f"{self.tool} v{self.major}"


def parse_pin(value: str) -> PackageManagerPin | None:
    """Parse ``pnpm@10.0.0`` style pins; None if *value* is not one."""
    m = _PIN_RE.match(value.strip())
    if m is None:
        return None
    version = ".".join((m.group("major"), m.group("minor") or "0", m.group("patch") or "0"))
    if m.group("prerelease"):
        version += f"-{m.group('prerelease')}"
    return PackageManagerPin(tool=m.group("tool"), version=version, major=int(m.group("major")))


def read_pin(content: str) -> PackageManagerPin | None:
    """Return the manifest's package-manager pin, if it has a usable one."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    value = data.get("packageManager")
    if not isinstance(value, str):
        return None
    return parse_pin(value)
