"""Lockfile parsers: auto-registered on import, pnpm before yarn."""

from lockcheck.engines.compliance.parsers import (
    pnpm_lock,  # noqa: F401
    yarn_lock,  # noqa: F401
)
