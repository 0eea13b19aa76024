from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from forgepub.core.config import Config, GiteaURLsConfig, ReleaseConfig
from forgepub.core.result import Err, Ok
from forgepub.git.info import GitInfo
from forgepub.release.context import (
    Artifact,
    ReleaseContext,
    SemVer,
    build_context,
    parse_semver,
    resolve_prerelease,
)

COMMIT = "0123456789abcdef0123456789abcdef01234567"


def _config(**release: object) -> Config:
    return Config(
        project_name="project",
        gitea=GiteaURLsConfig(api="https://gitea.example.com/api/v1"),
        release=ReleaseConfig(owner="owner", name="repo", **release),  # type: ignore[arg-type]
    )


def _git(tag: str | None = "v1.2.3") -> GitInfo:
    return GitInfo(
        current_tag=tag,
        commit=COMMIT,
        short_commit="0123456",
        url="https://gitea.example.com/owner/repo.git",
    )


class TestParseSemver:
    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("v1.2.3", SemVer(1, 2, 3)),
            ("1.2.3", SemVer(1, 2, 3)),
            ("v6.6.6-rc.1", SemVer(6, 6, 6, "rc.1")),
            ("v1.0.0+build.5", SemVer(1, 0, 0)),
        ],
    )
    def test_valid(self, tag: str, expected: SemVer) -> None:
        assert parse_semver(tag) == expected

    @pytest.mark.parametrize("tag", ["nightly", "v1.2", "v01.2.3", "1.2.3.4"])
    def test_invalid(self, tag: str) -> None:
        assert parse_semver(tag) is None


class TestResolvePrerelease:
    def test_explicit_values_win(self) -> None:
        assert resolve_prerelease(True, None) is True
        assert resolve_prerelease(False, SemVer(1, 0, 0, "beta")) is False

    def test_auto(self) -> None:
        assert resolve_prerelease("auto", SemVer(1, 0, 0, "beta")) is True
        assert resolve_prerelease("auto", SemVer(1, 0, 0)) is False
        assert resolve_prerelease("auto", None) is False


class TestBuildContext:
    def test_from_git(self) -> None:
        result = build_context(_config(draft=True), _git(), env={"CI": "1"})

        assert isinstance(result, Ok)
        ctx = result.value
        assert ctx.project_name == "project"
        assert ctx.owner == "owner"
        assert ctx.repo == "repo"
        assert ctx.tag == "v1.2.3"
        assert ctx.version == "1.2.3"
        assert ctx.commit == COMMIT
        assert ctx.short_commit == "0123456"
        assert ctx.git_url == "https://gitea.example.com/owner/repo.git"
        assert ctx.draft is True
        assert ctx.prerelease is False
        assert ctx.semver == SemVer(1, 2, 3)
        assert ctx.env == {"CI": "1"}

    def test_explicit_values_override_git(self) -> None:
        result = build_context(_config(), _git(), tag="v2.0.0", commit="fedcba9876543210")

        assert isinstance(result, Ok)
        assert result.value.tag == "v2.0.0"
        assert result.value.commit == "fedcba9876543210"
        assert result.value.short_commit == "fedcba9"

    def test_without_git(self) -> None:
        result = build_context(_config(), None, tag="nightly", commit=COMMIT)

        assert isinstance(result, Ok)
        assert result.value.version == "nightly"
        assert result.value.semver is None
        assert result.value.git_url == ""

    def test_prerelease_auto(self) -> None:
        result = build_context(_config(prerelease="auto"), _git("v1.0.0-rc.2"))

        assert isinstance(result, Ok)
        assert result.value.prerelease is True

    def test_project_name_defaults_to_repo(self) -> None:
        config = Config(release=ReleaseConfig(owner="owner", name="repo"))

        result = build_context(config, _git())

        assert isinstance(result, Ok)
        assert result.value.project_name == "repo"

    def test_missing_tag(self) -> None:
        result = build_context(_config(), _git(tag=None))

        assert isinstance(result, Err)
        assert result.error.kind == "context"
        assert result.error.hint is not None

    def test_missing_commit(self) -> None:
        result = build_context(_config(), None, tag="v1.0.0")

        assert isinstance(result, Err)
        assert result.error.kind == "context"


class TestTemplateFields:
    def test_semver_fields(self) -> None:
        ctx = ReleaseContext(
            project_name="project",
            name_template="{{ .Tag }}",
            owner="owner",
            repo="repo",
            tag="v6.6.6-rc.1",
            commit=COMMIT,
            version="6.6.6-rc.1",
            semver=SemVer(6, 6, 6, "rc.1"),
            date=datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC),
        )

        fields = ctx.template_fields()

        assert fields["Version"] == "6.6.6-rc.1"
        assert fields["RawVersion"] == "6.6.6"
        assert fields["Major"] == 6
        assert fields["Prerelease"] == "rc.1"
        assert fields["FullCommit"] == COMMIT
        assert fields["Date"] == "2024-01-02T03:04:05+00:00"
        assert fields["Timestamp"] == 1704164645

    def test_no_semver_fields_for_plain_tags(self) -> None:
        ctx = ReleaseContext(
            project_name="p", name_template="", owner="o", repo="r", tag="nightly", commit="c"
        )

        assert "Major" not in ctx.template_fields()


def test_artifact_from_path() -> None:
    artifact = Artifact.from_path(Path("dist") / "app-1.0.zip")
    assert artifact.name == "app-1.0.zip"
    assert artifact.path == Path("dist/app-1.0.zip")
