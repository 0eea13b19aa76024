"""Git queries used to fill in the release context."""

from .info import GitError, GitInfo, read_git_info

__all__ = [
    "GitError",
    "GitInfo",
    "read_git_info",
]
