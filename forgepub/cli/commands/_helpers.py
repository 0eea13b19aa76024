"""Shared helpers for CLI commands."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from forgepub.core.errors import ErrorCode, error_code_for_kind
from forgepub.core.result import Err, Ok, Result
from forgepub.git.info import read_git_info
from forgepub.output.console import ConsoleProtocol, Style
from forgepub.release.context import ReleaseContext, build_context
from forgepub.release.errors import PublishError

T = TypeVar("T")

if TYPE_CHECKING:
    from forgepub.cli.context import CLIContext


def exit_with(console: ConsoleProtocol, message: str, *, code: ErrorCode) -> NoReturn:
    console.error(message)
    raise typer.Exit(code=int(code))


def exit_on_publish_error(result: Result[T, PublishError], console: ConsoleProtocol) -> T:
    """Return the value of ``result`` or print its error and exit.

    The exit code follows the error kind (see ``error_code_for_kind``).
    """
    if isinstance(result, Err):
        error = result.error
        console.error(error.message)
        if error.hint:
            console.print(f"hint: {error.hint}", Style.DIM)
        raise typer.Exit(code=int(error_code_for_kind(error.kind)))
    return result.value


def read_notes(console: ConsoleProtocol, notes: Path | None) -> str:
    if notes is None:
        return ""
    try:
        return notes.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        exit_with(console, f"cannot read notes {notes}: {e}", code=ErrorCode.IO_ERROR)


def release_context(
    ctx: CLIContext,
    *,
    tag: str | None,
    commit: str | None,
) -> ReleaseContext:
    """Resolve the release context from git, letting explicit flags win."""
    git = None
    if tag is None or commit is None:
        match read_git_info(ctx.root):
            case Ok(info):
                git = info
            case Err(error):
                if commit is None:
                    exit_with(ctx.console, f"git: {error.message}", code=ErrorCode.ENV_ERROR)

    return exit_on_publish_error(
        build_context(ctx.config, git, tag=tag, commit=commit, env=os.environ),
        ctx.console,
    )
