from __future__ import annotations

import typer

from forgepub import __version__
from forgepub.cli.commands.release_cmd import publish, release, upload


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(release)
app.command()(upload)
app.command()(publish)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    """Publish releases and their artifacts to a Gitea instance."""
    del version


def main() -> None:
    app()
