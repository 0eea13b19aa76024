"""HTTP transport for the Gitea REST API.

This module provides:
- HttpTransport: Protocol for a single request/response round trip
- UrllibTransport: Real implementation using urllib
- MockTransport: Scripted implementation for tests

A transport never retries and never interprets status codes beyond
"2xx or not": the API layer turns failures into forge error text.
"""

from __future__ import annotations

import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from forgepub import __version__
from forgepub.core.result import Err, Ok, Result

__all__ = [
    "HttpError",
    "HttpRequest",
    "HttpResponse",
    "HttpTransport",
    "MockTransport",
    "UrllibTransport",
]


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    body: bytes = b""

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Reason phrase or transport error text
        body: Response body as text (empty for network errors)
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpRequest:
    """A request as seen by MockTransport (kept for assertions)."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None


@runtime_checkable
class HttpTransport(Protocol):
    """One blocking HTTP exchange.

    Non-2xx responses come back as ``Err(HttpError)`` with the status and
    body filled in; ``status == 0`` means the request never got a response.
    """

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]: ...


class UrllibTransport:
    """Real transport using urllib.

    Handles:
    - HTTPS with system certificates (or no verification when asked)
    - Timeout handling
    - Error bodies, so the API layer can surface the forge's message
    """

    def __init__(
        self,
        timeout: float = 60.0,
        user_agent: str = f"forgepub/{__version__}",
        *,
        verify_tls: bool = True,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.verify_tls = verify_tls
        self._ssl_context = ssl.create_default_context()
        if not verify_tls:
            self._ssl_context.check_hostname = False
            self._ssl_context.verify_mode = ssl.CERT_NONE

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **(headers or {})}
        try:
            req = urllib.request.Request(url, data=body, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(HttpResponse(status=response.status, body=response.read()))
        except urllib.error.HTTPError as e:
            try:
                error_body = e.read().decode("utf-8", errors="replace")
            except OSError:
                error_body = ""
            return Err(HttpError(url=url, status=e.code, message=str(e.reason), body=error_body))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


def _strip_query(url: str) -> str:
    return url.split("?", 1)[0]


def _empty_requests() -> list[HttpRequest]:
    return []


@dataclass
class MockTransport:
    """Scripted transport for tests.

    Responses are keyed by method and URL without its query string. A request
    with no registered response fails like a connection error, so tests can
    assert that nothing unexpected was called.

    Usage:
        transport = MockTransport()
        transport.respond("GET", f"{base}/api/v1/repos/o/r/releases", 200, "[]")
        api = GiteaAPI(base, transport=transport)
    """

    _responses: dict[tuple[str, str], tuple[int, bytes] | HttpError] = field(
        default_factory=dict
    )
    requests: list[HttpRequest] = field(default_factory=_empty_requests)

    def respond(self, method: str, url: str, status: int, body: str | bytes = b"") -> None:
        raw = body.encode("utf-8") if isinstance(body, str) else body
        self._responses[(method.upper(), _strip_query(url))] = (status, raw)

    def fail(self, method: str, url: str, message: str) -> None:
        """Register a transport-level failure (no HTTP response)."""
        self._responses[(method.upper(), _strip_query(url))] = HttpError(
            url=url, status=0, message=message
        )

    @property
    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url) for r in self.requests]

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        self.requests.append(
            HttpRequest(method=method.upper(), url=url, headers=dict(headers or {}), body=body)
        )

        key = (method.upper(), _strip_query(url))
        if key not in self._responses:
            message = f"no responder found for {method} {url}"
            return Err(HttpError(url=url, status=0, message=message))

        response = self._responses[key]
        if isinstance(response, HttpError):
            return Err(response)

        status, raw = response
        if status // 100 != 2:
            return Err(
                HttpError(
                    url=url,
                    status=status,
                    message="mock error",
                    body=raw.decode("utf-8", errors="replace"),
                )
            )
        return Ok(HttpResponse(status=status, body=raw))
