"""
Rich table displays for decoded Encore scores.
"""

from typing import Dict, List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from encscore.analysis.connector import NoteConnector
from encscore.models.elements import (
    Chord,
    ElementRef,
    KeyChange,
    MeasureElement,
    Note,
    Ornament,
    Rest,
)
from encscore.models.score import ScoreFile, StaffType
from encscore.utils.notation import clef_to_sign, duration_type_name, ending_numbers, jump_words
from encscore.utils.pitch import KEY_FIFTHS, key_name, key_to_fifths, spell_pitch
from encscore.utils.tuplets import TupletHandler, TupletState
from encscore.utils.validation import ValidationError

console = Console()


def display_score_info(score: ScoreFile, filename: str = "") -> None:
    """Display header, title, instruments and systems of a score."""
    header = score.header
    order = header.byte_order.name.lower()
    if score.is_degraded:
        order += " [yellow](ornament fields unreliable)[/yellow]"

    header_content = f"""[bold]File:[/bold] {filename or "N/A"}
[bold]Magic:[/bold] {header.magic} ({order})
[bold]Format:[/bold] {header.format}  [bold]Version:[/bold] {header.version}
[bold]Systems:[/bold] {header.system_count}  [bold]Pages:[/bold] {header.page_count}
[bold]Staves per System:[/bold] {header.staves_per_system}
[bold]Measures:[/bold] {len(score.measures)} (header: {header.measure_count})"""

    console.print(
        Panel(
            header_content,
            title="[bold blue]Encore Score Info[/bold blue]",
            border_style="blue",
            expand=False,
        )
    )

    title = score.title
    if title.title or any(title.authors) or any(title.copyrights):
        lines = [f"[bold]Title:[/bold] {escape(title.title) or 'N/A'}"]
        for label, items in (
            ("Subtitle", title.subtitles),
            ("Author", title.authors),
            ("Copyright", title.copyrights),
        ):
            for item in items:
                if item:
                    lines.append(f"[bold]{label}:[/bold] {escape(item)}")
        console.print(
            Panel("\n".join(lines), title="[bold cyan]Title[/bold cyan]", border_style="cyan", expand=False)
        )

    if score.text.texts:
        console.print(
            Panel(
                "\n".join(escape(t) for t in score.text.texts),
                title="[bold cyan]Text[/bold cyan]",
                border_style="cyan",
                expand=False,
            )
        )

    console.print(create_instrument_table(score))
    console.print(create_system_table(score))


def create_instrument_table(score: ScoreFile) -> Table:
    table = Table(title="Instruments", box=box.ROUNDED, show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=3)
    table.add_column("Block", style="dim", width=6)
    table.add_column("Name", style="cyan")
    table.add_column("Staves", justify="right")

    for index, instrument in enumerate(score.instruments):
        table.add_row(
            str(index + 1),
            instrument.block_id or "-",
            escape(instrument.name) or "[dim](none)[/dim]",
            str(instrument.staff_count),
        )
    return table


def create_system_table(score: ScoreFile) -> Table:
    table = Table(title="Systems", box=box.ROUNDED, show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=4)
    table.add_column("Start", justify="right")
    table.add_column("Measures", justify="right")
    table.add_column("Staves")

    for index, system in enumerate(score.systems):
        staves = ", ".join(format_staff(staff.clef, staff.key, staff.staff_type) for staff in system.staves)
        table.add_row(str(index + 1), str(system.start), str(system.measure_count), staves)
    return table


def format_staff(clef: int, key: int, staff_type: int) -> str:
    sign = clef_to_sign(clef)
    clef_str = f"{sign.sign}{sign.line}" if sign else f"clef {clef}"
    try:
        key_str = key_name(key)
    except ValidationError:
        key_str = f"key {key}"
    try:
        type_str = StaffType(staff_type).name.lower()
    except ValueError:
        type_str = f"type {staff_type}"
    return f"{clef_str} {key_str} {type_str}"


def display_measures(score: ScoreFile, only: Optional[int] = None) -> None:
    """
    Display the elements of every measure with resolved connections.

    Args:
        score: Decoded score
        only: Show a single measure (1-based), None for all
    """
    connector = NoteConnector(score)
    handlers: Dict[Tuple[int, int], TupletHandler] = {}
    fifths = _initial_fifths(score)

    for measure_nr, measure in enumerate(score.measures):
        for elem in measure.elements:
            if isinstance(elem, KeyChange) and 0 <= elem.key < len(KEY_FIFTHS):
                fifths = key_to_fifths(elem.key)

        table = Table(box=box.SIMPLE, show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim", width=3)
        table.add_column("Tick", justify="right", width=5)
        table.add_column("St/V", width=5)
        table.add_column("X", justify="right", width=4)
        table.add_column("Element", style="cyan")
        table.add_column("Dur", justify="right", width=5)
        table.add_column("Connections")

        for index, elem in enumerate(measure.elements):
            ref = ElementRef(measure_nr, index)
            handler = handlers.setdefault((elem.staff, elem.voice), TupletHandler())
            table.add_row(
                str(index),
                str(elem.tick),
                f"{elem.staff}/{elem.voice}",
                str(elem.x_offset),
                describe_element(elem, fifths),
                str(getattr(elem, "duration", "")),
                ", ".join(_connections(connector, handler, ref, elem)),
            )

        # tuplet state runs across measures, so skip only after feeding it
        if only is not None and measure_nr + 1 != only:
            continue

        num, den = measure.time_signature
        info = f"{num}/{den}  {measure.bpm} bpm  bars {measure.bar_start}/{measure.bar_end}"
        endings = ending_numbers(measure.repeat_alternative)
        if endings:
            info += f"  endings {','.join(str(e) for e in endings)}"
        jump = jump_words(measure.jump)
        if jump:
            info += f"  [yellow]{jump}[/yellow]"

        console.print(f"[bold]Measure {measure_nr + 1}[/bold]  [dim]{info}[/dim]")
        if measure.elements:
            console.print(table)
        else:
            console.print("[dim]  (empty)[/dim]\n")


def _initial_fifths(score: ScoreFile) -> int:
    try:
        return score.initial_fifths()
    except ValidationError:
        return 0


def describe_element(elem: MeasureElement, fifths: int = 0) -> str:
    """One-line description of an element."""
    if isinstance(elem, Note):
        try:
            pitch = str(spell_pitch(elem.pitch, elem.accidental, fifths))
        except ValidationError:
            pitch = f"pitch {elem.pitch}"
        text = f"Note {pitch} {duration_type_name(elem.duration_code)}"
        if elem.dots:
            text += "." * elem.dots
        if elem.is_grace:
            text += f" ({elem.grace_type.value})"
        return text
    if isinstance(elem, Rest):
        return f"Rest {duration_type_name(elem.duration_code)}" + "." * elem.dots
    if isinstance(elem, Ornament):
        text = elem.describe()
        if elem.is_slur_start or elem.is_wedge_start:
            text += f" -> +{elem.to_measure} x={elem.partner_x_offset}"
        return text
    if isinstance(elem, Chord):
        return f"Chord {escape(elem.name)}" if elem.name else f"Chord root={elem.root}"
    if isinstance(elem, KeyChange):
        try:
            return f"Key {key_name(elem.key)}"
        except ValidationError:
            return f"Key {elem.key}"
    return elem.kind.name.capitalize()


def _connections(
    connector: NoteConnector, handler: TupletHandler, ref: ElementRef, elem: MeasureElement
) -> List[str]:
    marks = []
    if isinstance(elem, (Note, Rest)):
        state = handler.new_note(elem.actual_notes, elem.normal_notes, elem.duration_code)
        if state != TupletState.NONE:
            marks.append(f"tuplet {elem.actual_notes}:{elem.normal_notes} {state.value}")
    if not isinstance(elem, Note):
        return marks

    if connector.tie_stop(ref):
        marks.append("tie stop")
    if connector.tie_start(ref):
        marks.append("tie start")
    for label, found in (
        ("slur start", connector.slur_start(ref)),
        ("slur stop", connector.slur_stop(ref)),
        ("wedge start", connector.wedge_start(ref)),
        ("wedge stop", connector.wedge_stop(ref)),
        ("direction", connector.direction(ref)),
    ):
        if found is not None:
            marks.append(f"{label} [dim]@{found.measure + 1}:{found.index}[/dim]")
    return marks


def create_block_table(blocks: List[Tuple[str, int, int]]) -> Table:
    table = Table(title="Blocks", box=box.ROUNDED, show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=5)
    table.add_column("Tag", style="cyan", width=6)
    table.add_column("Offset", width=10)
    table.add_column("Size", justify="right")

    for index, (tag, offset, size) in enumerate(blocks):
        table.add_row(str(index), tag, f"0x{offset:06X}", str(size))
    return table
