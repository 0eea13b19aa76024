"""Ensure a release, then attach every artifact to it."""

from __future__ import annotations

from collections.abc import Sequence

from forgepub.core.result import Err, Ok, Result
from forgepub.output.console import ConsoleProtocol, Style
from forgepub.release.client import ReleaseClient
from forgepub.release.context import Artifact, ReleaseContext
from forgepub.release.errors import PublishError


def upload_artifacts(
    client: ReleaseClient,
    ctx: ReleaseContext,
    release_id: str,
    artifacts: Sequence[Artifact],
    console: ConsoleProtocol,
) -> Result[None, PublishError]:
    """Upload artifacts in order, stopping at the first failure."""
    for artifact in artifacts:
        console.print(f"uploading {artifact.name}", Style.DIM)
        try:
            with artifact.path.open("rb") as stream:
                result = client.upload(ctx, release_id, artifact, stream)
        except OSError as e:
            return Err(PublishError(kind="io", message=f"cannot open {artifact.path}: {e}"))
        if isinstance(result, Err):
            return result
        console.success(f"uploaded {artifact.name}")
    return Ok(None)


def publish(
    client: ReleaseClient,
    ctx: ReleaseContext,
    description: str,
    artifacts: Sequence[Artifact],
    console: ConsoleProtocol,
) -> Result[str, PublishError]:
    """Create or update the release for ``ctx.tag`` and upload ``artifacts``.

    Returns:
        Ok with the release identifier, or the first error encountered
    """
    console.header(f"Release {ctx.owner}/{ctx.repo}@{ctx.tag}")
    release_id = client.ensure_release(ctx, description)
    if isinstance(release_id, Err):
        return release_id
    console.success(f"release {release_id.value} ready")

    uploaded = upload_artifacts(client, ctx, release_id.value, artifacts, console)
    if isinstance(uploaded, Err):
        return uploaded
    return release_id
