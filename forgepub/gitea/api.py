"""Gitea REST API calls used by the release backend.

Only the four endpoints a release needs are implemented:

- ``GET    /api/v1/repos/{owner}/{repo}/releases``
- ``POST   /api/v1/repos/{owner}/{repo}/releases``
- ``PATCH  /api/v1/repos/{owner}/{repo}/releases/{id}``
- ``POST   /api/v1/repos/{owner}/{repo}/releases/{id}/assets``

Failures keep the wording of the Gitea Go SDK, so the text users see matches
what other Gitea tooling reports for the same response.
"""

from __future__ import annotations

import json
import uuid
from typing import BinaryIO
from urllib.parse import quote

from forgepub.core.result import Err, Ok, Result
from forgepub.core.structured import as_obj_list, as_str_dict
from forgepub.gitea.http import HttpError, HttpResponse, HttpTransport
from forgepub.gitea.models import Attachment, Release, ReleasePayload
from forgepub.release.errors import PublishError

__all__ = ["GiteaAPI", "remote_error_text"]

_STATUS_TEXT = {
    403: "403 Forbidden",
    404: "404 Not Found",
    409: "409 Conflict",
}


def remote_error_text(method: str, path: str, error: HttpError) -> str:
    """Describe a failed call the way the Gitea SDK does.

    Known statuses get a fixed phrase, otherwise the ``message`` field of a
    JSON error body is used verbatim, otherwise the status is reported along
    with the request line and the response body.
    """
    if error.status == 0:
        return error.message
    if error.status in _STATUS_TEXT:
        return _STATUS_TEXT[error.status]
    if error.status == 422:
        return f"422 Unprocessable Entity: {error.body}"

    try:
        decoded: object = json.loads(error.body)
    except ValueError:
        decoded = None
    data = as_str_dict(decoded)
    if data is not None and isinstance(data.get("message"), str):
        return str(data["message"])

    return (
        f"Unknown API Error: {error.status}\n"
        f"Request: '{path}' with '{method}' method and '{error.body}' body"
    )


class GiteaAPI:
    """Thin client for one Gitea instance.

    Args:
        instance_url: ``scheme://host`` of the instance (no ``/api/v1``)
        token: Access token; sent as ``Authorization: token ...`` when set
        transport: HTTP transport (inject MockTransport in tests)
    """

    def __init__(self, instance_url: str, transport: HttpTransport, token: str = "") -> None:
        self.instance_url = instance_url.rstrip("/")
        self.transport = transport
        self._token = token

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if content_type:
            headers["Content-Type"] = content_type
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        return headers

    def _call(
        self,
        method: str,
        path: str,
        *,
        body: bytes | None = None,
        content_type: str | None = None,
    ) -> Result[HttpResponse, PublishError]:
        url = f"{self.instance_url}/api/v1{path}"
        result = self.transport.request(
            method,
            url,
            headers=self._headers(content_type),
            body=body,
        )
        if isinstance(result, Err):
            return Err(
                PublishError(
                    kind="remote",
                    message=remote_error_text(method, path, result.error),
                    hint=f"{method} {url}",
                )
            )
        return result

    def _call_json(
        self,
        method: str,
        path: str,
        payload: dict[str, object] | None = None,
    ) -> Result[object, PublishError]:
        body = json.dumps(payload).encode("utf-8") if payload is not None else None
        result = self._call(
            method,
            path,
            body=body,
            content_type="application/json" if body is not None else None,
        )
        if isinstance(result, Err):
            return result

        try:
            return Ok(json.loads(result.value.text()))
        except ValueError as e:
            return Err(
                PublishError(
                    kind="remote",
                    message=f"invalid JSON from {method} {path}: {e}",
                )
            )

    @staticmethod
    def _releases_path(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/releases"

    def list_releases(self, owner: str, repo: str) -> Result[list[Release], PublishError]:
        path = self._releases_path(owner, repo)
        result = self._call_json("GET", path)
        if isinstance(result, Err):
            return result

        items = as_obj_list(result.value)
        if items is None:
            return Err(
                PublishError(kind="remote", message=f"unexpected releases payload: {path}")
            )

        releases: list[Release] = []
        for item in items:
            release = Release.from_json(item)
            if release is not None:
                releases.append(release)
        return Ok(releases)

    def _release_response(
        self, path: str, result: Result[object, PublishError]
    ) -> Result[Release, PublishError]:
        if isinstance(result, Err):
            return result
        release = Release.from_json(result.value)
        if release is None:
            return Err(PublishError(kind="remote", message=f"unexpected release payload: {path}"))
        return Ok(release)

    def create_release(
        self, owner: str, repo: str, payload: ReleasePayload
    ) -> Result[Release, PublishError]:
        path = self._releases_path(owner, repo)
        return self._release_response(path, self._call_json("POST", path, payload.to_json()))

    def edit_release(
        self, owner: str, repo: str, release_id: int, payload: ReleasePayload
    ) -> Result[Release, PublishError]:
        path = f"{self._releases_path(owner, repo)}/{release_id}"
        return self._release_response(path, self._call_json("PATCH", path, payload.to_json()))

    def create_release_attachment(
        self,
        owner: str,
        repo: str,
        release_id: int,
        stream: BinaryIO,
        name: str,
    ) -> Result[Attachment, PublishError]:
        """Upload ``stream`` as a multipart ``attachment`` field.

        The stream is read once, to the end, before the request is sent.
        """
        try:
            content = stream.read()
        except OSError as e:
            return Err(PublishError(kind="io", message=f"failed to read {name}: {e}"))

        boundary = uuid.uuid4().hex
        body = _multipart_file(boundary, field_name="attachment", filename=name, content=content)
        path = f"{self._releases_path(owner, repo)}/{release_id}/assets?name={quote(name)}"
        result = self._call(
            "POST",
            path,
            body=body,
            content_type=f"multipart/form-data; boundary={boundary}",
        )
        if isinstance(result, Err):
            return result

        try:
            decoded: object = json.loads(result.value.text())
        except ValueError:
            decoded = None
        return Ok(Attachment.from_json(decoded) or Attachment(id=0, name=name, size=len(content)))


def _multipart_file(boundary: str, *, field_name: str, filename: str, content: bytes) -> bytes:
    quoted = filename.replace("\\", "\\\\").replace('"', '\\"')
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{field_name}"; filename="{quoted}"\r\n'
        "Content-Type: application/octet-stream\r\n"
        "\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return head + content + tail
