"""Error taxonomy for the compliance checker."""

from __future__ import annotations

from enum import Enum


class LockcheckError(Exception):
    """Base exception for all lockcheck errors."""


class ConfigurationError(LockcheckError):
    """Raised when a check request is invalid. The only error that escapes a check."""


class ErrorKind(str, Enum):
    """Per-repository conditions that are absorbed and surfaced as events."""

    NOT_FOUND = "not_found"
    STRUCTURAL_PARSE = "structural_parse"
    WRONG_ARTIFACT_TYPE = "wrong_artifact_type"
    UNEXPECTED = "unexpected"
