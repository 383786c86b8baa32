"""GitHub repository reference helpers."""

from __future__ import annotations


def parse_repo_ref(ref: str) -> tuple[str, str]:
    """Extract (owner, repo) from ``owner/repo`` or a GitHub URL.

    Raises ValueError if the reference cannot be parsed.
    """
    result = _extract_owner_repo(ref)
    if result is None:
        raise ValueError(f"cannot parse GitHub repository reference: {ref!r}")
    owner, repo = result.split("/", 1)
    return owner, repo


def is_repo_ref(target: str) -> bool:
    """True if *target* names a single repository rather than an owner."""
    return "/" in target.strip().rstrip("/") or target.startswith("git@")


def _extract_owner_repo(ref: str) -> str | None:
    """Extract 'owner/repo' from a repository reference.

    Handles:
      - owner/repo
      - https://github.com/owner/repo
      - https://github.com/owner/repo.git
      - git@github.com:owner/repo.git
    """
    ref = ref.strip().rstrip("/")
    if ref.endswith(".git"):
        ref = ref[:-4]

    # SSH format: git@github.com:owner/repo
    if ref.startswith("git@"):
        colon_idx = ref.find(":")
        if colon_idx == -1:
            return None
        path = ref[colon_idx + 1 :]
        parts = path.split("/")
        if len(parts) == 2 and all(parts):
            return f"{parts[0]}/{parts[1]}"
        return None

    parts = ref.split("/")
    if len(parts) >= 2 and parts[-2] and parts[-1]:
        return f"{parts[-2]}/{parts[-1]}"
    return None
