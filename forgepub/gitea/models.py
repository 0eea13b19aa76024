"""Typed views of the Gitea release payloads."""

from __future__ import annotations

from dataclasses import dataclass

from forgepub.core.structured import as_str_dict, get_bool, get_int, get_raw_str


@dataclass(frozen=True, slots=True)
class Release:
    """A release record as returned by ``/repos/{owner}/{repo}/releases``."""

    id: int
    tag_name: str
    target: str = ""
    title: str = ""
    note: str = ""
    is_draft: bool = False
    is_prerelease: bool = False
    url: str = ""
    html_url: str = ""

    @classmethod
    def from_json(cls, obj: object) -> Release | None:
        """Build from a decoded JSON object; None if it is not a release."""
        data = as_str_dict(obj)
        if data is None:
            return None
        return cls(
            id=get_int(data, "id") or 0,
            tag_name=get_raw_str(data, "tag_name"),
            target=get_raw_str(data, "target_commitish"),
            title=get_raw_str(data, "name"),
            note=get_raw_str(data, "body"),
            is_draft=get_bool(data, "draft") or False,
            is_prerelease=get_bool(data, "prerelease") or False,
            url=get_raw_str(data, "url"),
            html_url=get_raw_str(data, "html_url"),
        )


@dataclass(frozen=True, slots=True)
class ReleasePayload:
    """Body of the create (POST) and edit (PATCH) release calls."""

    tag_name: str
    target: str
    title: str
    note: str
    is_draft: bool
    is_prerelease: bool

    def to_json(self) -> dict[str, object]:
        return {
            "tag_name": self.tag_name,
            "target_commitish": self.target,
            "name": self.title,
            "body": self.note,
            "draft": self.is_draft,
            "prerelease": self.is_prerelease,
        }


@dataclass(frozen=True, slots=True)
class Attachment:
    id: int
    name: str
    size: int = 0
    download_url: str = ""

    @classmethod
    def from_json(cls, obj: object) -> Attachment | None:
        data = as_str_dict(obj)
        if data is None:
            return None
        return cls(
            id=get_int(data, "id") or 0,
            name=get_raw_str(data, "name"),
            size=get_int(data, "size") or 0,
            download_url=get_raw_str(data, "browser_download_url"),
        )

