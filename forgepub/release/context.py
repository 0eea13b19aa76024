"""Per-run snapshot of everything a release needs to know."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from forgepub.core.config import Config, PrereleaseSetting
from forgepub.core.result import Err, Ok, Result
from forgepub.git.info import GitInfo
from forgepub.release.errors import PublishError

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str = ""


def parse_semver(tag: str) -> SemVer | None:
    m = _SEMVER_RE.match(tag)
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4) or "")


def _empty_env() -> dict[str, str]:
    return {}


def _now_utc() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Immutable inputs for one ensure/upload run.

    ``tag`` and ``commit`` must be non-empty before anything is written to the
    forge; the writer checks this.
    """

    project_name: str
    name_template: str
    owner: str
    repo: str
    tag: str
    commit: str
    short_commit: str = ""
    version: str = ""
    draft: bool = False
    prerelease: bool = False
    git_url: str = ""
    semver: SemVer | None = None
    env: Mapping[str, str] = field(default_factory=_empty_env)
    date: datetime = field(default_factory=_now_utc)

    def template_fields(self) -> dict[str, object]:
        """Fields visible to the release name template."""
        fields: dict[str, object] = {
            "ProjectName": self.project_name,
            "Version": self.version,
            "RawVersion": self.version,
            "Tag": self.tag,
            "Commit": self.commit,
            "FullCommit": self.commit,
            "ShortCommit": self.short_commit,
            "GitURL": self.git_url,
            "Env": dict(self.env),
            "Date": self.date.isoformat(),
            "Timestamp": int(self.date.timestamp()),
        }
        if self.semver is not None:
            fields["Major"] = self.semver.major
            fields["Minor"] = self.semver.minor
            fields["Patch"] = self.semver.patch
            fields["Prerelease"] = self.semver.prerelease
            fields["RawVersion"] = (
                f"{self.semver.major}.{self.semver.minor}.{self.semver.patch}"
            )
        return fields


@dataclass(frozen=True, slots=True)
class Artifact:
    """A built file to attach to a release."""

    name: str
    path: Path

    @classmethod
    def from_path(cls, path: Path) -> Artifact:
        return cls(name=path.name, path=path)


@dataclass(frozen=True, slots=True)
class CommitAuthor:
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class RepoRef:
    """owner/name of a repository files are committed to."""

    owner: str
    name: str


def resolve_prerelease(setting: PrereleaseSetting, semver: SemVer | None) -> bool:
    if setting == "auto":
        return semver is not None and semver.prerelease != ""
    return setting


def build_context(
    config: Config,
    git: GitInfo | None,
    *,
    tag: str | None = None,
    commit: str | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[ReleaseContext, PublishError]:
    """Merge config, git metadata and explicit overrides into a context.

    Explicit ``tag``/``commit`` win over what git reports. The short commit
    follows git when the commit came from git, else the first 7 characters.
    """
    resolved_tag = tag or (git.current_tag if git else None)
    if not resolved_tag:
        return Err(
            PublishError(
                kind="context",
                message="no tag to release",
                hint="tag HEAD or pass --tag",
            )
        )

    resolved_commit = commit or (git.commit if git else None)
    if not resolved_commit:
        return Err(
            PublishError(
                kind="context",
                message="no commit to release",
                hint="run inside a git checkout or pass --commit",
            )
        )

    if git is not None and resolved_commit == git.commit:
        short_commit = git.short_commit
    else:
        short_commit = resolved_commit[:7]

    semver = parse_semver(resolved_tag)
    return Ok(
        ReleaseContext(
            project_name=config.project_name or config.release.name,
            name_template=config.release.name_template,
            owner=config.release.owner,
            repo=config.release.name,
            tag=resolved_tag,
            commit=resolved_commit,
            short_commit=short_commit,
            version=resolved_tag.removeprefix("v"),
            draft=config.release.draft,
            prerelease=resolve_prerelease(config.release.prerelease, semver),
            git_url=(git.url or "") if git else "",
            semver=semver,
            env=dict(env or {}),
        )
    )
