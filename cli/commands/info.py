"""
Info command - display score header, instruments and systems.
"""

from pathlib import Path

import typer
from rich.console import Console

from cli.display.tables import display_score_info
from encscore.formats.enc.reader import EncReader
from encscore.utils.validation import FormatError

console = Console()
app = typer.Typer()


def load_score(file: Path):
    """Decode a file for a command, exiting with an error message on failure."""
    if not file.exists():
        console.print(f"[red]Error: File not found: {file}[/red]")
        raise typer.Exit(1)

    try:
        return EncReader.read(file)
    except FormatError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def info(
    file: Path = typer.Argument(..., help="Encore file to analyze (.enc)"),
) -> None:
    """
    Display information about an Encore score.

    Shows the header counts and byte order, the title block, free texts,
    instruments with their staff counts and the staves of every system.

    Examples:

        encscore info song.enc
    """
    score = load_score(file)
    display_score_info(score, str(file))


if __name__ == "__main__":
    app()
