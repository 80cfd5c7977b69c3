"""
Measures command - element dump with resolved ties, slurs and wedges.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from cli.commands.info import load_score
from cli.display.tables import display_measures

console = Console()
app = typer.Typer()


@app.command()
def measures(
    file: Path = typer.Argument(..., help="Encore file to analyze (.enc)"),
    measure: Optional[int] = typer.Option(
        None, "--measure", "-m", help="Show only this measure (1-based)"
    ),
) -> None:
    """
    Display the elements of each measure.

    Every element is listed in file order with its tick, staff/voice and
    x-offset. Notes are spelled in the prevailing key and annotated with
    their tie, slur, wedge and tuplet connections.

    Examples:

        encscore measures song.enc
        encscore measures song.enc --measure 12
    """
    score = load_score(file)

    if measure is not None and not 1 <= measure <= len(score.measures):
        console.print(
            f"[red]Error: Measure {measure} out of range (1-{len(score.measures)})[/red]"
        )
        raise typer.Exit(1)

    display_measures(score, measure)


if __name__ == "__main__":
    app()
