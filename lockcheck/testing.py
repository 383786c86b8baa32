"""Test doubles for lockcheck: use when embedding the checker in a host.

Usage::

    from lockcheck.testing import FakeContentFetcher, lock_file

    fetcher = FakeContentFetcher({"pnpm-lock.yaml": lock_file(content)})
    sink = MemorySink()
    await check(fetcher, repo, request, sink)
    assert fetcher.calls == [("org/repo", "pnpm-lock.yaml")]
"""

from __future__ import annotations

import base64

from lockcheck.engines.compliance.events import MemorySink
from lockcheck.engines.compliance.models import RemoteFile

__all__ = ["FakeContentFetcher", "MemorySink", "lock_file"]


def lock_file(content: str, path: str = "", type_: str = "file") -> RemoteFile:
    """A :class:`RemoteFile` holding *content*, base64-encoded like the API does."""
    encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
    return RemoteFile(path=path, type=type_, content=encoded)


class FakeContentFetcher:
    """Serve files from a dict; paths not present raise like a 404.

    Values may also be exceptions, which are raised when fetched.
    """

    def __init__(self, files: dict[str, RemoteFile | Exception] | None = None) -> None:
        self._files = dict(files or {})
        self._calls: list[tuple[str, str]] = []

    @property
    def calls(self) -> list[tuple[str, str]]:
        """``(owner_repo, path)`` pairs requested, in order."""
        return self._calls

    async def fetch(self, owner_repo: str, path: str) -> RemoteFile:
        self._calls.append((owner_repo, path))
        found = self._files.get(path)
        if found is None:
            raise LookupError(f"404 Not Found: {owner_repo}/{path}")
        if isinstance(found, Exception):
            raise found
        return found
