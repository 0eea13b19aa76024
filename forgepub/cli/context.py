from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from forgepub.core.config import Config, load_config
from forgepub.core.errors import ErrorCode
from forgepub.core.result import Err
from forgepub.gitea.client import new_gitea_client
from forgepub.output.console import ConsoleProtocol, RichConsole
from forgepub.release.client import ReleaseClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    console: ConsoleProtocol
    client: ReleaseClient


def build_context(config_path: Path, *, token_env: str) -> CLIContext:
    """Load config, read the token and build the Gitea client, or exit."""
    console = RichConsole()

    config_result = load_config(config_path)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    config = config_result.value

    token = os.environ.get(token_env, "")
    if not token:
        console.warning(f"{token_env} is not set; requests will be anonymous")

    client = new_gitea_client(config, token)
    if isinstance(client, Err):
        console.error(f"gitea.api: {client.error.message}")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        root=config_path.resolve().parent,
        config=config,
        console=console,
        client=client.value,
    )
