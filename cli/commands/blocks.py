"""
Blocks command - tagged block map of an Encore file.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from cli.display.hex_view import display_hex_dump
from cli.display.tables import create_block_table
from encscore.formats.enc.reader import scan_blocks
from encscore.utils.validation import FormatError

console = Console()
app = typer.Typer()


@app.command()
def blocks(
    file: Path = typer.Argument(..., help="Encore file to scan (.enc)"),
    hex: bool = typer.Option(False, "--hex", "-x", help="Show hex preview of each block"),
    lines: int = typer.Option(4, "--lines", "-l", help="Hex lines per block"),
) -> None:
    """
    List the tagged blocks of an Encore file.

    Blocks are located the way the decoder finds them: by scanning for
    the next known tag. Unknown block kinds (PAGE, ...) are not listed.

    Examples:

        encscore blocks song.enc
        encscore blocks song.enc --hex
    """
    if not file.exists():
        console.print(f"[red]Error: File not found: {file}[/red]")
        raise typer.Exit(1)

    with open(file, "rb") as f:
        data = f.read()

    try:
        found = scan_blocks(data)
    except FormatError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[bold]File:[/bold] {file}\n"
            f"[bold]Size:[/bold] {len(data)} bytes\n"
            f"[bold]Magic:[/bold] {data[:4].decode('ascii', errors='replace')}",
            title="[bold]Encore Blocks[/bold]",
            border_style="blue",
            expand=False,
        )
    )
    console.print(create_block_table(found))

    if hex:
        for tag, offset, size in found:
            display_hex_dump(
                data[offset : offset + 8 + size],
                title=f"{tag} @ 0x{offset:06X}",
                start_offset=offset,
                max_lines=lines,
            )


if __name__ == "__main__":
    app()
