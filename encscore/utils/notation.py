"""
Notation helpers for consumers of the decoded score.

Clef and note type names, repeat endings, jump marker words, chord
grouping and voice timing.
"""

from typing import List, NamedTuple, Optional, Sequence, Set, Tuple

from encscore.models.elements import DURATION_TICKS, KeyChange, MeasureElement, Note, Rest
from encscore.models.score import ClefType, Measure, RepeatType


class ClefSign(NamedTuple):
    sign: str
    line: int
    octave_change: int = 0


CLEF_SIGNS = {
    ClefType.G: ClefSign("G", 2),
    ClefType.F: ClefSign("F", 4),
    ClefType.C3L: ClefSign("C", 3),
    ClefType.C4L: ClefSign("C", 4),
    ClefType.G8P: ClefSign("G", 2, 1),
    ClefType.G8M: ClefSign("G", 2, -1),
    ClefType.F8M: ClefSign("F", 4, -1),
    ClefType.PERC: ClefSign("percussion", 2),
    ClefType.TAB: ClefSign("TAB", 5),
}

TYPE_NAMES = {
    1: "whole",
    2: "half",
    3: "quarter",
    4: "eighth",
    5: "16th",
    6: "32nd",
    7: "64th",
    8: "128th",
}

JUMP_WORDS = {
    RepeatType.DS: "D.S.",
    RepeatType.DC_AL_CODA: "D.C. al Coda",
    RepeatType.DC_AL_FINE: "D.C. al Fine",
    RepeatType.DS_AL_CODA: "D.S. al Coda",
    RepeatType.DS_AL_FINE: "D.S. al Fine",
    RepeatType.DC: "D.C.",
    RepeatType.FINE: "Fine",
}


def clef_to_sign(clef: int) -> Optional[ClefSign]:
    """Clef code to (sign, line, octave change), None if unsupported."""
    return CLEF_SIGNS.get(clef)


def duration_type_name(duration_code: int) -> str:
    return TYPE_NAMES.get(duration_code, "???")


def jump_words(jump: int) -> str:
    """Words for a textual jump marker; empty for none, coda and segno."""
    return JUMP_WORDS.get(jump, "")


def ending_numbers(repeat_alternative: int, max_endings: int = 4) -> List[int]:
    """Pass numbers set in a repeat alternative bitmask."""
    return [i + 1 for i in range(max_endings) if repeat_alternative & (1 << i)]


def is_first_measure_in_ending(measures: Sequence[Measure], measure_nr: int) -> bool:
    alternative = measures[measure_nr].repeat_alternative
    if alternative == 0:
        return False
    if measure_nr == 0:
        return True
    return measures[measure_nr - 1].repeat_alternative != alternative


def is_last_measure_in_ending(measures: Sequence[Measure], measure_nr: int) -> bool:
    alternative = measures[measure_nr].repeat_alternative
    if alternative == 0:
        return False
    if measure_nr == len(measures) - 1:
        return True
    return measures[measure_nr + 1].repeat_alternative != alternative


def notes_in_chord(first: Optional[Note], second: Optional[Note]) -> bool:
    """Two notes form a chord when tick and x-offset match."""
    return (
        first is not None
        and second is not None
        and first.tick == second.tick
        and first.x_offset == second.x_offset
    )


def find_key_change(measure: Measure) -> Optional[KeyChange]:
    for elem in measure.elements:
        if isinstance(elem, KeyChange):
            return elem
    return None


def voices_in_staff(measure: Measure, staff: int) -> List[int]:
    """Sorted voice numbers used in one staff of a measure."""
    voices: Set[int] = {e.voice for e in measure.elements if e.staff == staff}
    return sorted(voices)


def voice_timeline(measure: Measure, staff: int, voice: int) -> List[Tuple[int, MeasureElement]]:
    """
    Compute start ticks for the notes and rests of one voice.

    Stored ticks are not reliable, so the voice is assumed to start at
    tick 0 without gaps. Notes sharing tick and x-offset with the previous
    note are chord members and take no extra time.

    Returns:
        List of (computed tick, element) in file order
    """
    timeline = []
    tick = 0
    chord_tick = 0
    previous: Optional[Note] = None

    for elem in measure.elements:
        if elem.staff != staff or elem.voice != voice:
            continue
        if isinstance(elem, Note):
            if notes_in_chord(previous, elem):
                timeline.append((chord_tick, elem))
            else:
                chord_tick = tick
                timeline.append((tick, elem))
                tick += elem.duration
            previous = elem
        elif isinstance(elem, Rest):
            timeline.append((tick, elem))
            tick += elem.duration
            previous = None

    return timeline


def measure_capacity(measure: Measure) -> int:
    """Nominal measure length in ticks from the time signature."""
    if measure.time_sig_den <= 0:
        return 0
    return measure.time_sig_num * DURATION_TICKS[1] // measure.time_sig_den
