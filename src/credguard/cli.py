"""Command-line interface for credguard."""

from typing import Annotated

import typer

from credguard.cli_commands.audit import audit
from credguard.cli_commands.hooks import install_hooks
from credguard.cli_commands.scan import scan
from credguard.cli_commands.validate import validate
from credguard.cli_commands.wizard import setup
from credguard.output.rich import console
from credguard.utils.logging import setup_logging

app = typer.Typer(
    name="credguard",
    help="Keep credentials out of git: scan, validate, audit and hook.",
    no_args_is_help=True,
)


@app.callback()
def main(
    debug: Annotated[
        bool, typer.Option("--debug", help="Show debug logging on stderr")
    ] = False,
) -> None:
    """Keep credentials out of git."""
    setup_logging(debug)


app.command()(scan)
app.command()(validate)
app.command()(audit)
app.command("install-hooks")(install_hooks)
app.command()(setup)


@app.command()
def version() -> None:
    """Show credguard version."""
    from credguard import __version__

    console.print(f"credguard [bold green]{__version__}[/bold green]")


if __name__ == "__main__":
    app()
