"""CLI entry point: lockcheck.

Subcommands:
    lockcheck check my-org -r '>=5.15.0' --library @time-loop/cdk-library
    lockcheck check my-org/repo -r '>=9' --package-manager pnpm
    lockcheck check my-org other-org -r '^12' --reduce min --only-failing --json
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import asdict

import click

from lockcheck.core.github import is_repo_ref
from lockcheck.core.logging import setup_logging
from lockcheck.engines.compliance.errors import ConfigurationError
from lockcheck.engines.compliance.github_client import GitHubClient
from lockcheck.engines.compliance.models import (
    SUPPORTED_PACKAGE_MANAGERS,
    CheckRequest,
    Reduction,
    RepositoryRef,
)
from lockcheck.engines.compliance.runner import (
    FleetRunner,
    RepoReport,
    get_repository,
    list_owner_repositories,
)

_REDUCE_CHOICES = [r.value for r in Reduction if r is not Reduction.NONE]


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Debug logging (shows skips and misses)")
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default=None,
    help="Log renderer [env: LOCKCHECK_LOG_FORMAT]",
)
def main(verbose: bool, log_format: str | None) -> None:
    """lockcheck: audit repositories for dependency version compliance."""
    setup_logging(level="DEBUG" if verbose else None, log_format=log_format)


@main.command("check")
@click.argument("targets", nargs=-1, required=True)
@click.option(
    "-r",
    "--version-requirement",
    default=None,
    help="npm semver range the version must satisfy, e.g. '>=11.1.2' or '^12'",
)
@click.option("--library", default=None, help="Library to look up in the lockfile")
@click.option(
    "--package-manager",
    type=click.Choice(list(SUPPORTED_PACKAGE_MANAGERS)),
    default=None,
    help="Check the packageManager pin in package.json instead of a library",
)
@click.option(
    "--reduce",
    type=click.Choice(_REDUCE_CHOICES),
    default=None,
    help="Report only the smallest or largest version found",
)
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub token")
@click.option(
    "--api-url", envvar="LOCKCHECK_GITHUB_API_URL", default=None, help="GitHub API base URL"
)
@click.option("--concurrency", type=click.IntRange(min=1), default=4, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print outcomes as JSON")
@click.option("--only-failing", is_flag=True, help="Only show non-compliant repositories")
def check_cmd(
    targets: tuple[str, ...],
    version_requirement: str | None,
    library: str | None,
    package_manager: str | None,
    reduce: str | None,
    token: str | None,
    api_url: str | None,
    concurrency: int,
    as_json: bool,
    only_failing: bool,
) -> None:
    """Check TARGETS (owners or owner/repo names) against a version requirement.

    Exits with status 1 when any repository is non-compliant.
    """
    try:
        request = CheckRequest.from_options(
            version_requirement,
            library=library,
            package_manager=package_manager,
            reduce=reduce,
        )
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc

    reports = asyncio.run(
        _run_check(targets, request, token=token, api_url=api_url, concurrency=concurrency)
    )
    _print_reports(reports, as_json=as_json, only_failing=only_failing)

    if any(r.non_compliant for r in reports):
        sys.exit(1)


async def _run_check(
    targets: tuple[str, ...],
    request: CheckRequest,
    *,
    token: str | None,
    api_url: str | None,
    concurrency: int,
) -> list[RepoReport]:
    async with GitHubClient(token=token, base_url=api_url) as client:
        repositories = await _resolve_targets(client, targets)
        runner = FleetRunner(client, request, concurrency=concurrency)
        return await runner.run(repositories)


async def _resolve_targets(client: GitHubClient, targets: tuple[str, ...]) -> list[RepositoryRef]:
    """Expand owners to their repositories; de-duplicate, keep first-seen order."""
    seen: dict[str, RepositoryRef] = {}
    for target in targets:
        if is_repo_ref(target):
            found = [await get_repository(client, target)]
        else:
            found = await list_owner_repositories(client, target)
        for repo in found:
            seen.setdefault(repo.full_name, repo)
    return list(seen.values())


def _print_reports(reports: list[RepoReport], *, as_json: bool, only_failing: bool) -> None:
    shown = [r for r in reports if r.non_compliant] if only_failing else reports

    if as_json:
        rows = [asdict(o) for r in shown for o in r.outcomes]
        if only_failing:
            rows = [row for row in rows if not row["satisfies"]]
        click.echo(json.dumps(rows, indent=2))
        return

    counts: dict[str, int] = {}
    for r in reports:
        counts[r.status] = counts.get(r.status, 0) + 1
    summary = ", ".join(
        f"{counts.get(s, 0)} {s}" for s in ("compliant", "non-compliant", "skipped", "error")
    )
    click.echo(f"Checked {len(reports)} repositories: {summary}\n")

    for r in shown:
        outcomes = r.non_compliant if only_failing else r.outcomes
        if not outcomes:
            click.echo(f"  {r.status:<14} {r.repository.full_name}")
            continue
        for o in outcomes:
            status = "compliant" if o.satisfies else "non-compliant"
            click.echo(
                f"  {status:<14} {r.repository.full_name}  "
                f"{o.identifier} {o.version} (requires {o.requirement})"
            )


if __name__ == "__main__":
    main()
