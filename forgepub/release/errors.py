"""Error payload shared by every forge operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PublishErrorKind = Literal[
    "parse",
    "template",
    "remote",
    "context",
    "io",
]


@dataclass(frozen=True, slots=True)
class PublishError:
    """Why a release operation failed.

    ``parse``, ``template`` and ``context`` are detected locally before any
    request is sent. ``remote`` carries the forge's own error text verbatim.
    """

    kind: PublishErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message

    def __str__(self) -> str:
        return self.message
