"""Read release metadata (tag, commit, remote) from a git checkout."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from forgepub.core.result import Err, Ok, Result
from forgepub.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = ["GitError", "GitInfo", "read_git_info"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git query.

    Attributes:
        command: The git command that failed
        message: Error message (git's stderr when available)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class GitInfo:
    """What git knows about HEAD.

    ``current_tag`` is None when no tag is reachable, ``url`` is None when the
    checkout has no remote.
    """

    current_tag: str | None
    commit: str
    short_commit: str
    url: str | None = None


def _git(root: Path, *args: str) -> Result[str, GitError]:
    cmd = ["git", *args]
    result = run_process(cmd, cwd=root, timeout=_GIT_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        error = result.error
        return Err(
            GitError(
                command=" ".join(cmd),
                message=error.stderr.strip() or str(error),
                returncode=error.returncode,
            )
        )
    return Ok(result.value.strip())


def read_git_info(root: Path) -> Result[GitInfo, GitError]:
    """Collect tag, commit and remote URL for the checkout at ``root``.

    Only the commit is mandatory; a missing tag or remote is reported as None
    so callers can supply them explicitly.
    """
    commit = _git(root, "rev-parse", "HEAD")
    if isinstance(commit, Err):
        return commit

    short = _git(root, "rev-parse", "--short", "HEAD")
    if isinstance(short, Err):
        return short

    tag = _git(root, "describe", "--tags", "--abbrev=0")
    url = _git(root, "ls-remote", "--get-url")

    return Ok(
        GitInfo(
            current_tag=tag.value or None if isinstance(tag, Ok) else None,
            commit=commit.value,
            short_commit=short.value,
            url=url.value or None if isinstance(url, Ok) else None,
        )
    )
