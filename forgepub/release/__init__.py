"""Backend-neutral release types: context, errors, templates, publishing."""

from __future__ import annotations
