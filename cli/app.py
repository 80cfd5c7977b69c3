"""
encscore - Decoder and inspector for Encore (.enc) music notation files.

A command line tool for looking inside Encore scores.
"""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from cli.commands.blocks import blocks
from cli.commands.info import info
from cli.commands.measures import measures
from encscore import __version__

console = Console()

# Main app
app = typer.Typer(
    name="encscore",
    help="Decode and inspect Encore (.enc) music notation files.",
    add_completion=False,
    rich_markup_mode="rich",
)

# Add commands directly
app.command(name="info")(info)
app.command(name="measures")(measures)
app.command(name="blocks")(blocks)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]encscore[/bold] version {__version__}")
    console.print("[dim]Decoder for Encore music notation files[/dim]")


def setup_logging(verbose: bool) -> None:
    """Route decoder diagnostics to the terminal when verbose."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version_flag: bool = typer.Option(False, "--version", "-V", help="Show version"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show decoder diagnostics (block and element traces)"
    ),
) -> None:
    """
    encscore - Decode and inspect Encore music notation files.

    Reads both [cyan]SCOW[/cyan] (little-endian) and [cyan]SCO5[/cyan]
    (big-endian) files.

    [bold]Commands:[/bold]

        encscore info song.enc               # Header, instruments, systems
        encscore measures song.enc           # Elements with ties/slurs/wedges
        encscore measures song.enc -m 4      # A single measure
        encscore blocks song.enc --hex       # Block map with hex preview

    Use --help with any command for more details.
    """
    if version_flag:
        version()
        raise typer.Exit()

    setup_logging(verbose)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
