from __future__ import annotations

from pathlib import Path

import typer

from forgepub.cli.commands._helpers import (
    exit_on_publish_error,
    exit_with,
    read_notes,
    release_context,
)
from forgepub.cli.context import build_context
from forgepub.core.config import DEFAULT_CONFIG_NAME, DEFAULT_TOKEN_ENV
from forgepub.core.errors import ErrorCode
from forgepub.core.result import Err
from forgepub.gitea.client import artifact_download_url
from forgepub.release.context import Artifact, ReleaseContext
from forgepub.release.publish import publish as publish_release
from forgepub.release.publish import upload_artifacts

_CONFIG_OPTION = typer.Option(Path(DEFAULT_CONFIG_NAME), "--config", "-c", help="Config file")
_TOKEN_ENV_OPTION = typer.Option(
    DEFAULT_TOKEN_ENV, "--token-env", help="Environment variable holding the API token"
)
_TAG_OPTION = typer.Option(None, "--tag", help="Release tag (default: latest tag on HEAD)")
_COMMIT_OPTION = typer.Option(None, "--commit", help="Target commit (default: HEAD)")
_NOTES_OPTION = typer.Option(None, "--notes", help="Markdown file used as release description")


def _artifacts(files: list[Path]) -> list[Artifact]:
    return [Artifact.from_path(p) for p in files]


def release(
    config: Path = _CONFIG_OPTION,
    token_env: str = _TOKEN_ENV_OPTION,
    tag: str | None = _TAG_OPTION,
    commit: str | None = _COMMIT_OPTION,
    notes: Path | None = _NOTES_OPTION,
) -> None:
    """Create or update the release for a tag and print its id."""
    ctx = build_context(config, token_env=token_env)
    rctx = release_context(ctx, tag=tag, commit=commit)
    description = read_notes(ctx.console, notes)

    release_id = exit_on_publish_error(
        ctx.client.ensure_release(rctx, description), ctx.console
    )
    ctx.console.success(f"release {rctx.tag} -> {release_id}")
    typer.echo(release_id)


def upload(
    release_id: str = typer.Argument(..., help="Release id printed by `forgepub release`"),
    files: list[Path] = typer.Argument(..., help="Files to attach"),
    config: Path = _CONFIG_OPTION,
    token_env: str = _TOKEN_ENV_OPTION,
) -> None:
    """Attach files to an existing release."""
    ctx = build_context(config, token_env=token_env)
    # Uploads address the release by id; tag and commit are not needed.
    rctx = ReleaseContext(
        project_name=ctx.config.project_name,
        name_template=ctx.config.release.name_template,
        owner=ctx.config.release.owner,
        repo=ctx.config.release.name,
        tag="",
        commit="",
    )
    exit_on_publish_error(
        upload_artifacts(ctx.client, rctx, release_id, _artifacts(files), ctx.console),
        ctx.console,
    )


def publish(
    files: list[Path] = typer.Argument(..., help="Files to attach"),
    config: Path = _CONFIG_OPTION,
    token_env: str = _TOKEN_ENV_OPTION,
    tag: str | None = _TAG_OPTION,
    commit: str | None = _COMMIT_OPTION,
    notes: Path | None = _NOTES_OPTION,
) -> None:
    """Create or update the release, then attach every file to it."""
    ctx = build_context(config, token_env=token_env)
    missing = [p for p in files if not p.is_file()]
    if missing:
        # Checked up front so a typo does not leave a release without assets.
        exit_with(ctx.console, f"not a file: {missing[0]}", code=ErrorCode.IO_ERROR)

    rctx = release_context(ctx, tag=tag, commit=commit)
    description = read_notes(ctx.console, notes)

    artifacts = _artifacts(files)
    exit_on_publish_error(
        publish_release(ctx.client, rctx, description, artifacts, ctx.console),
        ctx.console,
    )

    for artifact in artifacts:
        link = artifact_download_url(ctx.config, rctx, artifact.name)
        if not isinstance(link, Err):
            typer.echo(link.value)
