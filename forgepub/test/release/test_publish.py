from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from forgepub.core.result import Err, Ok, Result
from forgepub.output.console import MockConsole, Style
from forgepub.release.client import ReleaseClient
from forgepub.release.context import Artifact, CommitAuthor, ReleaseContext, RepoRef
from forgepub.release.errors import PublishError
from forgepub.release.publish import publish, upload_artifacts


def _ctx() -> ReleaseContext:
    return ReleaseContext(
        project_name="project",
        name_template="{{ .Tag }}",
        owner="owner",
        repo="repo",
        tag="v1.0.0",
        commit="abc123",
    )


@dataclass
class FakeClient:
    release_id: str = "7"
    ensure_error: PublishError | None = None
    fail_on: str | None = None
    uploads: list[tuple[str, str, bytes]] = field(default_factory=list)
    descriptions: list[str] = field(default_factory=list)

    def ensure_release(self, ctx: ReleaseContext, description: str) -> Result[str, PublishError]:
        self.descriptions.append(description)
        if self.ensure_error is not None:
            return Err(self.ensure_error)
        return Ok(self.release_id)

    def upload(
        self, ctx: ReleaseContext, release_id: str, artifact: Artifact, stream: BinaryIO
    ) -> Result[None, PublishError]:
        if artifact.name == self.fail_on:
            return Err(PublishError(kind="remote", message="Unknown API Error: 400"))
        self.uploads.append((release_id, artifact.name, stream.read()))
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
        return Ok(None)


def _artifacts(tmp_path: Path, *names: str) -> list[Artifact]:
    artifacts: list[Artifact] = []
    for name in names:
        path = tmp_path / name
        path.write_bytes(name.encode("utf-8"))
        artifacts.append(Artifact.from_path(path))
    return artifacts


def test_fake_client_satisfies_protocol() -> None:
    assert isinstance(FakeClient(), ReleaseClient)


class TestUploadArtifacts:
    def test_uploads_in_order(self, tmp_path: Path) -> None:
        client = FakeClient()
        console = MockConsole()

        result = upload_artifacts(
            client, _ctx(), "7", _artifacts(tmp_path, "a.zip", "b.zip"), console
        )

        assert result == Ok(None)
        assert client.uploads == [("7", "a.zip", b"a.zip"), ("7", "b.zip", b"b.zip")]
        assert console.count(Style.SUCCESS) == 2

    def test_stops_at_first_failure(self, tmp_path: Path) -> None:
        client = FakeClient(fail_on="a.zip")

        result = upload_artifacts(
            client, _ctx(), "7", _artifacts(tmp_path, "a.zip", "b.zip"), MockConsole()
        )

        assert isinstance(result, Err)
        assert result.error.kind == "remote"
        assert client.uploads == []

    def test_missing_file_is_io_error(self, tmp_path: Path) -> None:
        client = FakeClient()
        missing = Artifact.from_path(tmp_path / "missing.zip")

        result = upload_artifacts(client, _ctx(), "7", [missing], MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "io"
        assert "missing.zip" in result.error.message


class TestPublish:
    def test_returns_release_id(self, tmp_path: Path) -> None:
        client = FakeClient(release_id="666")
        console = MockConsole()

        result = publish(client, _ctx(), "notes", _artifacts(tmp_path, "a.zip"), console)

        assert result == Ok("666")
        assert client.descriptions == ["notes"]
        assert client.uploads == [("666", "a.zip", b"a.zip")]
        assert "Release owner/repo@v1.0.0" in console.messages

    def test_ensure_failure_skips_uploads(self, tmp_path: Path) -> None:
        client = FakeClient(ensure_error=PublishError(kind="remote", message="403 Forbidden"))

        result = publish(client, _ctx(), "", _artifacts(tmp_path, "a.zip"), MockConsole())

        assert result == Err(PublishError(kind="remote", message="403 Forbidden"))
        assert client.uploads == []

    def test_upload_failure_is_returned(self, tmp_path: Path) -> None:
        client = FakeClient(fail_on="b.zip")

        result = publish(client, _ctx(), "", _artifacts(tmp_path, "a.zip", "b.zip"), MockConsole())

        assert isinstance(result, Err)
        assert client.uploads == [("7", "a.zip", b"a.zip")]

    def test_without_artifacts(self) -> None:
        assert publish(FakeClient(), _ctx(), "", [], MockConsole()) == Ok("7")
