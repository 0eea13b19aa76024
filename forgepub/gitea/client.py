"""Gitea release backend.

Implements ``ReleaseClient`` on top of ``GiteaAPI``:

- ``ensure_release``: render the name, find the release by tag, then create
  it or update it in place, returning its id as a decimal string
- ``upload``: attach one artifact to a release id returned earlier
- ``create_file``: not supported by this backend (no-op)

Finding and writing are two separate requests. Another process creating a
release for the same tag in between will cause a duplicate-tag error from
Gitea on create; nothing here guards against that.
"""

from __future__ import annotations

import re
from typing import BinaryIO
from urllib.parse import quote, urlsplit

from forgepub.core.config import Config
from forgepub.core.result import Err, Ok, Result
from forgepub.gitea.api import GiteaAPI
from forgepub.gitea.http import HttpTransport, UrllibTransport
from forgepub.gitea.models import Release, ReleasePayload
from forgepub.release.context import Artifact, CommitAuthor, ReleaseContext, RepoRef
from forgepub.release.errors import PublishError
from forgepub.release.template import render

__all__ = [
    "GiteaClient",
    "artifact_download_url",
    "get_instance_url",
    "new_gitea_client",
    "parse_release_id",
]

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def get_instance_url(api_url: str) -> Result[str, PublishError]:
    """Return ``scheme://host`` for an API base URL such as ``https://h/api/v1``."""
    if not api_url:
        return Err(PublishError(kind="parse", message="parse \"\": empty url"))

    try:
        parts = urlsplit(api_url)
        # Accessing .port validates it.
        _ = parts.port
    except ValueError as e:
        return Err(PublishError(kind="parse", message=f"parse {api_url!r}: {e}"))

    if not parts.scheme:
        return Err(
            PublishError(kind="parse", message=f"parse {api_url!r}: missing protocol scheme")
        )

    host = parts.netloc.rpartition("@")[2]
    if not host:
        return Err(PublishError(kind="parse", message=f"parse {api_url!r}: missing host"))

    return Ok(f"{parts.scheme}://{host}")


def parse_release_id(literal: str) -> Result[int, PublishError]:
    if not _INT_RE.fullmatch(literal):
        return Err(
            PublishError(
                kind="parse",
                message=f"invalid release id {literal!r}: not a base-10 integer",
            )
        )
    digits = literal.lstrip("+-").lstrip("0")
    value = int(literal) if len(digits) <= 19 else None
    if value is None or not _INT64_MIN <= value <= _INT64_MAX:
        return Err(
            PublishError(
                kind="parse",
                message=f"invalid release id {literal!r}: value out of range",
            )
        )
    return Ok(value)


class GiteaClient:
    """Release backend for one Gitea instance."""

    def __init__(self, api: GiteaAPI) -> None:
        self.api = api

    def find_release(
        self, owner: str, repo: str, tag: str
    ) -> Result[Release | None, PublishError]:
        """Return the release for ``tag``, or Ok(None) when there is none."""
        releases = self.api.list_releases(owner, repo)
        if isinstance(releases, Err):
            return releases

        for release in releases.value:
            if release.tag_name == tag:
                return Ok(release)
        return Ok(None)

    def _payload(
        self, ctx: ReleaseContext, title: str, description: str
    ) -> Result[ReleasePayload, PublishError]:
        if not ctx.tag or not ctx.commit:
            return Err(
                PublishError(
                    kind="context",
                    message="release context needs both a tag and a commit",
                )
            )
        return Ok(
            ReleasePayload(
                tag_name=ctx.tag,
                target=ctx.commit,
                title=title,
                note=description,
                is_draft=ctx.draft,
                is_prerelease=ctx.prerelease,
            )
        )

    def create_release(
        self, ctx: ReleaseContext, title: str, description: str
    ) -> Result[Release, PublishError]:
        payload = self._payload(ctx, title, description)
        if isinstance(payload, Err):
            return payload
        return self.api.create_release(ctx.owner, ctx.repo, payload.value)

    def update_release(
        self, ctx: ReleaseContext, title: str, description: str, release_id: int
    ) -> Result[Release, PublishError]:
        payload = self._payload(ctx, title, description)
        if isinstance(payload, Err):
            return payload
        return self.api.edit_release(ctx.owner, ctx.repo, release_id, payload.value)

    def ensure_release(self, ctx: ReleaseContext, description: str) -> Result[str, PublishError]:
        """Create or update the release for ``ctx.tag``.

        Draft and prerelease flags always come from ``ctx``, so an existing
        release takes this run's values rather than keeping its own.
        """
        title = render(ctx.name_template, ctx.template_fields())
        if isinstance(title, Err):
            return title

        existing = self.find_release(ctx.owner, ctx.repo, ctx.tag)
        if isinstance(existing, Err):
            return existing

        if existing.value is None:
            created = self.create_release(ctx, title.value, description)
            if isinstance(created, Err):
                return created
            return Ok(str(created.value.id))

        release_id = existing.value.id
        updated = self.update_release(ctx, title.value, description, release_id)
        if isinstance(updated, Err):
            return updated
        return Ok(str(release_id))

    def upload(
        self,
        ctx: ReleaseContext,
        release_id: str,
        artifact: Artifact,
        stream: BinaryIO,
    ) -> Result[None, PublishError]:
        parsed = parse_release_id(release_id)
        if isinstance(parsed, Err):
            return parsed

        result = self.api.create_release_attachment(
            ctx.owner, ctx.repo, parsed.value, stream, artifact.name
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def create_file(
        self,
        ctx: ReleaseContext,
        author: CommitAuthor,
        repo: RepoRef,
        content: bytes,
        path: str,
        message: str,
    ) -> Result[None, PublishError]:
        """Committing files is not supported on Gitea; does nothing."""
        del ctx, author, repo, content, path, message
        return Ok(None)


def artifact_download_url(
    config: Config, ctx: ReleaseContext, name: str
) -> Result[str, PublishError]:
    """Public link of an uploaded attachment.

    Uses ``gitea.download`` when configured, else the instance URL.
    """
    base = config.gitea.download
    if not base:
        instance_url = get_instance_url(config.gitea.api)
        if isinstance(instance_url, Err):
            return instance_url
        base = instance_url.value
    return Ok(f"{base}/{ctx.owner}/{ctx.repo}/releases/download/{ctx.tag}/{quote(name)}")


def new_gitea_client(
    config: Config,
    token: str,
    transport: HttpTransport | None = None,
) -> Result[GiteaClient, PublishError]:
    """Build a client for the instance behind ``config.gitea.api``."""
    instance_url = get_instance_url(config.gitea.api)
    if isinstance(instance_url, Err):
        return instance_url

    if transport is None:
        transport = UrllibTransport(verify_tls=not config.gitea.skip_tls_verify)
    return Ok(GiteaClient(GiteaAPI(instance_url.value, transport, token=token)))
