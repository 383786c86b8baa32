"""FleetRunner: invoke the checker once per repository across a fleet."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx
import structlog

from lockcheck.core.github import parse_repo_ref
from lockcheck.engines.compliance.checker import check
from lockcheck.engines.compliance.errors import ErrorKind
from lockcheck.engines.compliance.events import (
    CheckEvent,
    EventSink,
    Level,
    LogSink,
    MemorySink,
    TeeSink,
)
from lockcheck.engines.compliance.github_client import GitHubClient
from lockcheck.engines.compliance.models import CheckRequest, Outcome, RepositoryRef

log = structlog.get_logger("lockcheck.engine")

_DEFAULT_CONCURRENCY = 4


@dataclass
class RepoReport:
    """Everything one repository's check emitted."""

    repository: RepositoryRef
    events: list[CheckEvent] = field(default_factory=list)

    @property
    def outcomes(self) -> list[Outcome]:
        return [e.outcome for e in self.events if e.outcome is not None]

    @property
    def compliant(self) -> list[Outcome]:
        return [o for o in self.outcomes if o.satisfies]

    @property
    def non_compliant(self) -> list[Outcome]:
        return [o for o in self.outcomes if not o.satisfies]

    @property
    def errored(self) -> bool:
        return any(e.level is Level.ERROR for e in self.events)

    @property
    def status(self) -> str:
        if self.non_compliant:
            return "non-compliant"
        if self.errored:
            return "error"
        if self.compliant:
            return "compliant"
        return "skipped"


class FleetRunner:
    """Check many repositories with bounded concurrency."""

    def __init__(
        self,
        client: GitHubClient,
        request: CheckRequest,
        *,
        concurrency: int = _DEFAULT_CONCURRENCY,
        sink: EventSink | None = None,
    ) -> None:
        self._client = client
        self._request = request
        self._concurrency = max(concurrency, 1)
        self._sink = sink or LogSink()

    async def run_one(self, repository: RepositoryRef) -> RepoReport:
        recorder = MemorySink()
        await check(self._client, repository, self._request, TeeSink(self._sink, recorder))
        return RepoReport(repository=repository, events=recorder.events)

    async def run(self, repositories: Iterable[RepositoryRef]) -> list[RepoReport]:
        """Check every repository; reports keep the input order."""
        sem = asyncio.Semaphore(self._concurrency)

        async def _run_one(repo: RepositoryRef) -> RepoReport:
            async with sem:
                try:
                    return await self.run_one(repo)
                except Exception as exc:
                    # check() absorbs its own faults; this guards the sinks.
                    log.error("runner.failed", repository=repo.full_name, error=str(exc))
                    event = CheckEvent(
                        level=Level.ERROR,
                        message=str(exc),
                        repository=repo.full_name,
                        kind=ErrorKind.UNEXPECTED,
                    )
                    return RepoReport(repository=repo, events=[event])

        return list(await asyncio.gather(*(_run_one(r) for r in repositories)))


# ── repository discovery ─────────────────────────────────────────────────


async def list_owner_repositories(client: GitHubClient, owner: str) -> list[RepositoryRef]:
    """All repositories of an organisation, or of a user if *owner* is not an org."""
    try:
        return [
            RepositoryRef.from_api(item)
            async for item in client.get_paginated(f"/orgs/{owner}/repos", {"type": "all"})
        ]
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code != 404:
            raise
    log.debug("runner.owner_not_org", owner=owner)
    return [
        RepositoryRef.from_api(item)
        async for item in client.get_paginated(f"/users/{owner}/repos", {"type": "owner"})
    ]


async def get_repository(client: GitHubClient, ref: str) -> RepositoryRef:
    """Look up one repository by ``owner/name`` or URL."""
    owner, name = parse_repo_ref(ref)
    return RepositoryRef.from_api(await client.get(f"/repos/{owner}/{name}"))
