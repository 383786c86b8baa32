"""Async GitHub API client with pagination, rate-limit handling, and retries."""

from __future__ import annotations

import asyncio
import base64
import os
import re
import time
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import structlog

from lockcheck.engines.compliance.models import RemoteFile

log = structlog.get_logger("lockcheck.engine")

DEFAULT_API_URL = "https://api.github.com"

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')

_RAW_ACCEPT = "application/vnd.github.raw+json"


class ContentFetcher(Protocol):
    """Remote content access used by the checker."""

    async def fetch(self, owner_repo: str, path: str) -> RemoteFile: ...


@dataclass(frozen=True)
class RetryPolicy:
    """How listing calls retry. Content fetches never retry."""

    attempts: int = 3
    base_delay: float = 1.0  # seconds, doubled per attempt
    rate_limit_wait: int = 60  # seconds, when GitHub gives no hint

    def backoff(self, attempt: int) -> float:
        return self.base_delay * 2 ** (attempt - 1)


class RateLimitError(Exception):
    """Raised when GitHub rate limit is exhausted and we need to wait."""

    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(f"rate limit exceeded, retry after {retry_after}s")


class GitHubClient:
    """Thin async wrapper around the GitHub REST API."""

    _retry = RetryPolicy()

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        *,
        retry: RetryPolicy | None = None,
    ) -> None:
        if retry is not None:
            self._retry = retry
        resolved_token = token or os.environ.get("GITHUB_TOKEN")
        resolved_url = base_url or os.environ.get("LOCKCHECK_GITHUB_API_URL", DEFAULT_API_URL)
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if resolved_token:
            headers["Authorization"] = f"token {resolved_token}"
        self._client = httpx.AsyncClient(
            base_url=resolved_url.rstrip("/"),
            headers=headers,
            timeout=30.0,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def get_paginated(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        max_pages: int = 50,
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Yield JSON items from a paginated GitHub API endpoint.

        Automatically follows ``Link: <...>; rel="next"`` headers and
        respects rate-limit headers. Stops after *max_pages* pages.
        """
        url: str | None = path
        params = dict(params or {})
        params.setdefault("per_page", 100)
        page = 0

        while url and page < max_pages:
            response = await self._request_with_retry(url, params if page == 0 else None)
            await self._check_rate_limit(response)

            data = response.json()
            if isinstance(data, list):
                for item in data:
                    yield item
            else:
                yield data

            url = next_page_url(response.headers.get("Link", ""))
            page += 1

    async def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Single-resource GET, returns parsed JSON."""
        response = await self._request_with_retry(path, params)
        await self._check_rate_limit(response)
        return response.json()

    async def fetch(self, owner_repo: str, path: str) -> RemoteFile:
        """GET /repos/{owner}/{repo}/contents/{path}, exactly once.

        A failed request raises (``httpx.HTTPStatusError`` for 404 and the
        like); callers treat that as "file absent", so there is no retry.
        Directory listings come back as ``type="dir"``. Files too large for
        inline content are re-fetched raw and re-encoded to base64.
        """
        url = f"/repos/{owner_repo}/contents/{path}"
        response = await self._client.get(url)
        response.raise_for_status()
        data = response.json()

        if isinstance(data, list):
            return RemoteFile(path=path, type="dir")

        remote = RemoteFile(
            path=data.get("path", path),
            type=data.get("type", "file"),
            content=data.get("content") or "",
        )
        if remote.type == "file" and data.get("encoding") == "none":
            log.debug("github.raw_fetch", repository=owner_repo, path=path, size=data.get("size"))
            raw = await self._client.get(url, headers={"Accept": _RAW_ACCEPT})
            raw.raise_for_status()
            remote.content = base64.b64encode(raw.content).decode("ascii")
        return remote

    # ── internal ───────────────────────────────────────────────────────────

    async def _request_with_retry(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """GET *url*, retrying rate limits, 5xx and timeouts per the client's policy."""
        policy = self._retry
        failure: Exception | None = None

        for attempt in range(1, policy.attempts + 1):
            try:
                resp = await self._client.get(url, params=params)
            except httpx.TimeoutException as exc:
                failure, reason, delay = exc, "timeout", policy.backoff(attempt)
            else:
                if resp.status_code == 403 and is_rate_limited(resp.headers):
                    delay = rate_limit_wait(resp.headers, default=policy.rate_limit_wait)
                    failure, reason = RateLimitError(delay), "rate_limit"
                elif resp.status_code >= 500:
                    failure = httpx.HTTPStatusError(
                        f"{resp.status_code}", request=resp.request, response=resp
                    )
                    reason, delay = f"http_{resp.status_code}", policy.backoff(attempt)
                else:
                    resp.raise_for_status()
                    return resp

            log.warning(
                "github.retry",
                url=url,
                reason=reason,
                attempt=attempt,
                attempts=policy.attempts,
            )
            if attempt < policy.attempts:
                await asyncio.sleep(delay)

        assert failure is not None
        raise failure

    async def _check_rate_limit(self, response: httpx.Response) -> None:
        """Pause until the window resets when the last call used up the quota."""
        if _header_int(response.headers, "X-RateLimit-Remaining") == 0:
            wait = rate_limit_wait(response.headers, default=self._retry.rate_limit_wait)
            log.warning("github.quota_exhausted", wait_seconds=wait)
            await asyncio.sleep(wait)


def _header_int(headers: Mapping[str, str], name: str) -> int | None:
    try:
        return int(headers[name])
    except (KeyError, ValueError, TypeError):
        return None


def is_rate_limited(headers: Mapping[str, str]) -> bool:
    """A 403 is a rate limit if the quota is spent or GitHub asks us to back off."""
    remaining = _header_int(headers, "X-RateLimit-Remaining")
    if remaining is not None:
        return remaining == 0
    # Secondary rate limits only send Retry-After
    return "Retry-After" in headers


def rate_limit_wait(headers: Mapping[str, str], *, default: int = 60) -> int:
    """Seconds to wait: Retry-After, else until X-RateLimit-Reset, else *default*."""
    retry_after = _header_int(headers, "Retry-After")
    if retry_after is not None:
        return max(retry_after, 1)
    reset = _header_int(headers, "X-RateLimit-Reset")
    if reset is not None:
        return max(reset - int(time.time()), 1)
    return default


def next_page_url(link_header: str) -> str | None:
    """The ``rel="next"`` target of a GitHub ``Link`` header."""
    match = _NEXT_LINK_RE.search(link_header)
    return match.group(1) if match else None
