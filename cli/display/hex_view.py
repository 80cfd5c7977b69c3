"""
Hex dump display utilities.
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

console = Console()


def format_hex_lines(data: bytes, start_offset: int = 0, bytes_per_line: int = 16, max_lines: int = 8):
    """
    Format bytes as hex dump lines with rich markup.

    Returns:
        List of lines, with a trailing "more bytes" line when cut
    """
    lines = []
    end = min(len(data), max_lines * bytes_per_line)

    for offset in range(0, end, bytes_per_line):
        chunk = data[offset : offset + bytes_per_line]

        hex_parts = []
        for i, b in enumerate(chunk):
            if i == 8:
                hex_parts.append(" ")
            hex_parts.append(f"{b:02X}")
        hex_str = " ".join(hex_parts)

        ascii_str = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)

        lines.append(
            f"[dim]{start_offset + offset:08X}[/dim]  "
            f"{hex_str:<{bytes_per_line * 3 + 2}}  [cyan]{escape(ascii_str)}[/cyan]"
        )

    if len(data) > end:
        lines.append(f"[dim]... {len(data) - end} more bytes ...[/dim]")

    return lines


def display_hex_dump(
    data: bytes,
    title: str = "Hex Dump",
    start_offset: int = 0,
    bytes_per_line: int = 16,
    max_lines: int = 8,
) -> None:
    """Display formatted hex dump with Rich."""
    content = "\n".join(format_hex_lines(data, start_offset, bytes_per_line, max_lines))
    console.print(Panel(content, title=title, border_style="blue", expand=False))
