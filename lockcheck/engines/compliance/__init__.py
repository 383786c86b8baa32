"""Compliance checker engine: dependency version audits per repository."""

from lockcheck.engines.compliance.checker import check
from lockcheck.engines.compliance.errors import ConfigurationError, ErrorKind, LockcheckError
from lockcheck.engines.compliance.events import (
    CheckEvent,
    EventSink,
    Level,
    LogSink,
    MemorySink,
    TeeSink,
)
from lockcheck.engines.compliance.github_client import GitHubClient, RateLimitError, RetryPolicy
from lockcheck.engines.compliance.models import (
    CheckRequest,
    Outcome,
    Reduction,
    RepositoryRef,
    TargetKind,
    VersionRecord,
)
from lockcheck.engines.compliance.runner import FleetRunner, RepoReport

__all__ = [
    "CheckEvent",
    "CheckRequest",
    "ConfigurationError",
    "ErrorKind",
    "EventSink",
    "FleetRunner",
    "GitHubClient",
    "Level",
    "LockcheckError",
    "LogSink",
    "MemorySink",
    "Outcome",
    "RateLimitError",
    "Reduction",
    "RepoReport",
    "RepositoryRef",
    "RetryPolicy",
    "TargetKind",
    "TeeSink",
    "VersionRecord",
    "check",
]
