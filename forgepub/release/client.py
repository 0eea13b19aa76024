"""What a forge backend must provide to publish releases.

Backends satisfy ``ReleaseClient`` structurally; there is no base class.
``forgepub.gitea.client.GiteaClient`` is the Gitea implementation.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable

from forgepub.core.result import Result
from forgepub.release.context import Artifact, CommitAuthor, ReleaseContext, RepoRef
from forgepub.release.errors import PublishError


@runtime_checkable
class ReleaseClient(Protocol):
    def ensure_release(self, ctx: ReleaseContext, description: str) -> Result[str, PublishError]:
        """Make sure a release exists for ``ctx.tag``.

        Returns:
            Ok with the release identifier to pass to ``upload``
        """
        ...

    def upload(
        self,
        ctx: ReleaseContext,
        release_id: str,
        artifact: Artifact,
        stream: BinaryIO,
    ) -> Result[None, PublishError]:
        """Attach ``stream`` (read once, fully) to the release as ``artifact.name``."""
        ...

    def create_file(
        self,
        ctx: ReleaseContext,
        author: CommitAuthor,
        repo: RepoRef,
        content: bytes,
        path: str,
        message: str,
    ) -> Result[None, PublishError]:
        """Commit ``content`` at ``path`` in ``repo``."""
        ...
