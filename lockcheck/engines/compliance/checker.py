"""Compliance checker: one repository, one request, events out."""

from __future__ import annotations

import base64

import structlog

# Ensure lockfile parsers are registered before any check runs.
import lockcheck.engines.compliance.parsers  # noqa: F401
from lockcheck.engines.compliance.errors import ErrorKind
from lockcheck.engines.compliance.events import CheckEvent, EventSink, Level, LogSink
from lockcheck.engines.compliance.github_client import ContentFetcher
from lockcheck.engines.compliance.models import (
    CheckRequest,
    Empty,
    Malformed,
    Outcome,
    RemoteFile,
    RepositoryRef,
    TargetKind,
    VersionRecord,
)
from lockcheck.engines.compliance.parsers.package_json import MANIFEST_FILE, read_pin
from lockcheck.engines.compliance.registry import LockfileParser, lockfile_parsers
from lockcheck.engines.compliance.versions import reduce_versions, satisfies

log = structlog.get_logger("lockcheck.engine")


async def check(
    fetcher: ContentFetcher,
    repository: RepositoryRef,
    request: CheckRequest,
    sink: EventSink | None = None,
) -> None:
    """Check one repository against *request*.

    Everything the check finds is emitted into *sink* (structured log by
    default). Expected conditions and unexpected faults alike end in an
    event; nothing is raised. A :class:`CheckRequest` has already been
    validated, so configuration errors cannot occur here.
    """
    run = _Check(fetcher, repository, request, sink or LogSink())
    try:
        await run.execute()
    except Exception as exc:
        run.emit(Level.ERROR, str(exc) or type(exc).__name__, kind=ErrorKind.UNEXPECTED)


class _Check:
    """State for a single check invocation."""

    def __init__(
        self,
        fetcher: ContentFetcher,
        repository: RepositoryRef,
        request: CheckRequest,
        sink: EventSink,
    ) -> None:
        self._fetcher = fetcher
        self._repo = repository
        self._request = request
        self._sink = sink

    def emit(
        self,
        level: Level,
        message: str,
        *,
        kind: ErrorKind | None = None,
        outcome: Outcome | None = None,
    ) -> None:
        self._sink.emit(
            CheckEvent(
                level=level,
                message=message,
                repository=self._repo.full_name,
                kind=kind,
                outcome=outcome,
            )
        )

    async def execute(self) -> None:
        if self._repo.archived:
            self.emit(Level.DEBUG, f"{self._repo.full_name} is archived, skipping.")
            return

        if self._request.target_kind is TargetKind.PACKAGE_MANAGER:
            await self._check_package_manager()
        else:
            await self._check_library()

    # ── mode A: package-manager pin ──────────────────────────────────────

    async def _check_package_manager(self) -> None:
        tool = self._request.identifier
        manifest = await self._fetch(MANIFEST_FILE)

        pin = None
        if manifest is not None and manifest.type == "file":
            pin = read_pin(_decode(manifest))

        if pin is None or pin.tool != tool:
            self.emit(
                Level.DEBUG,
                f"{self._repo.full_name} does not specify {tool} version in {MANIFEST_FILE}",
                kind=ErrorKind.NOT_FOUND,
            )
            return

        self._classify(
            pin.version,
            label=f"packageManager {pin.label}",
            identifier=pin.label,
        )

    # ── mode B: library in a lockfile ────────────────────────────────────

    async def _check_library(self) -> None:
        located = await self._locate_lockfile()
        if located is None:
            self.emit(
                Level.WARNING,
                f"{self._repo.full_name}: Missing lockfile "
                f"({' or '.join(p.file_name for p in lockfile_parsers())}), quitting.",
                kind=ErrorKind.NOT_FOUND,
            )
            return

        parser, remote = located
        path = parser.file_name
        if remote.type != "file":
            self.emit(
                Level.ERROR,
                f"{path} is a {remote.type}, quitting.",
                kind=ErrorKind.WRONG_ARTIFACT_TYPE,
            )
            return

        parsed = parser.parse(_decode(remote))
        if isinstance(parsed, Malformed):
            self.emit(
                Level.ERROR,
                f"parsing {path} did not succeed: {parsed.reason}",
                kind=ErrorKind.STRUCTURAL_PARSE,
            )
            return

        library = self._request.identifier
        records: list[VersionRecord] = []
        if not isinstance(parsed, Empty):
            for locked in parsed.packages.values():
                if locked.name == library:
                    records.append(VersionRecord(version=locked.version, source_artifact=path))

        if not records:
            self.emit(
                Level.DEBUG,
                f"{self._repo.full_name} does not have {library} in {path}",
                kind=ErrorKind.NOT_FOUND,
            )
            return

        for record in reduce_versions(records, self._request.reduction):
            self._classify(record.version, label=f"library {library}", identifier=library)

    async def _locate_lockfile(self) -> tuple[LockfileParser, RemoteFile] | None:
        """First lockfile format whose file could be fetched."""
        for parser in lockfile_parsers():
            remote = await self._fetch(parser.file_name)
            if remote is not None:
                return parser, remote
        return None

    # ── shared ───────────────────────────────────────────────────────────

    async def _fetch(self, path: str) -> RemoteFile | None:
        """Fetch *path*; any failure means the file is absent."""
        try:
            return await self._fetcher.fetch(self._repo.full_name, path)
        except Exception as exc:
            log.debug(
                "checker.fetch_failed",
                repository=self._repo.full_name,
                path=path,
                error=str(exc),
            )
            return None

    def _classify(self, version: str, *, label: str, identifier: str) -> None:
        requirement = self._request.version_requirement
        ok = satisfies(version, requirement)
        outcome = Outcome(
            repository=self._repo.full_name,
            identifier=identifier,
            version=version,
            requirement=requirement,
            satisfies=ok,
        )
        verdict = "satisfies" if ok else "DOES NOT satisfy"
        self.emit(
            Level.INFO if ok else Level.WARNING,
            f"{self._repo.full_name} {label} at version {version} {verdict} {requirement}",
            outcome=outcome,
        )


def _decode(remote: RemoteFile) -> str:
    return base64.b64decode(remote.content).decode("utf-8")
