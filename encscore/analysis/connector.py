"""
Note connections: ties, slurs, wedges and directions.

None of these are linked to notes in the file. They are matched to notes
by position:

Ties have the same tick and x-offset as the note they start on. The
ending note is implicit: the next note in the same staff and voice.

Slurs and wedges have roughly the x-offset of their starting note. Slurs
end at the note closest to the partner x-offset in the target measure.
Wedges end at the last note before the partner x-offset, since a wedge
closes on the note sounding when it is released.

When two notes are equally close, the first one in file order is used.
A note takes part in at most one slur start, one slur stop, one wedge
start and one wedge stop; later spanners claiming it are dropped.
"""

import logging
from typing import Dict, Optional, Sequence, Union

from encscore.models.elements import (
    ElementRef,
    MeasureElement,
    Note,
    Ornament,
    OrnamentType,
    Tie,
)
from encscore.models.score import ScoreFile

logger = logging.getLogger(__name__)


def _same_line(note: MeasureElement, voice: int, staff: int) -> bool:
    return isinstance(note, Note) and note.voice == voice and note.staff == staff


def find_closest_note(
    elements: Sequence[MeasureElement], x_offset: int, voice: int, staff: int
) -> Optional[int]:
    """
    Find the note closest to x_offset in one voice and staff.

    Returns:
        Index into elements, or None. On equal distance the lower index wins.
    """
    closest = None
    minimum = None
    for index, elem in enumerate(elements):
        if _same_line(elem, voice, staff):
            distance = abs(x_offset - elem.x_offset)
            if minimum is None or distance < minimum:
                minimum = distance
                closest = index
    return closest


def find_last_note_before(
    elements: Sequence[MeasureElement], x_offset: int, voice: int, staff: int
) -> Optional[int]:
    """Find the last note with an x-offset strictly below x_offset."""
    last = None
    for index, elem in enumerate(elements):
        if _same_line(elem, voice, staff) and elem.x_offset < x_offset:
            last = index
    return last


def find_first_note_after(
    elements: Sequence[MeasureElement], x_offset: int, voice: int, staff: int
) -> Optional[int]:
    """Find the first note with an x-offset strictly above x_offset."""
    for index, elem in enumerate(elements):
        if _same_line(elem, voice, staff) and elem.x_offset > x_offset:
            return index
    return None


def find_last_note(elements: Sequence[MeasureElement], voice: int, staff: int) -> Optional[int]:
    """Find the last note of a voice and staff."""
    last = None
    for index, elem in enumerate(elements):
        if _same_line(elem, voice, staff):
            last = index
    return last


def find_previous_note(elements: Sequence[MeasureElement], note: Note) -> Optional[int]:
    """
    Find the note before ``note`` in the same measure, voice and staff:
    the last one in file order with a smaller tick.
    """
    previous = None
    if note.tick > 0:
        for index, elem in enumerate(elements):
            if _same_line(elem, note.voice, note.staff) and elem.tick < note.tick:
                previous = index
    return previous


class NoteConnector:
    """
    Resolves connections between notes of a decoded score.

    All results are ElementRef handles into the score.

    Example:
        nc = NoteConnector(score)
        for ref, note in score.iter_notes():
            if nc.slur_start(ref):
                ...
    """

    DIRECTION_TYPES = (OrnamentType.STAFF_TEXT, OrnamentType.TEMPO)

    def __init__(self, score: ScoreFile, diagnostics: Optional[logging.Logger] = None):
        self.score = score
        self.log = diagnostics or logger
        self._measure_numbers: Dict[int, int] = {}
        self._slur_starts: Dict[ElementRef, ElementRef] = {}
        self._slur_stops: Dict[ElementRef, ElementRef] = {}
        self._wedge_starts: Dict[ElementRef, ElementRef] = {}
        self._wedge_stops: Dict[ElementRef, ElementRef] = {}

        self._init_measure_numbers()
        for ref, elem in score.iter_elements():
            if isinstance(elem, Ornament):
                if elem.is_slur_start:
                    self._init_slur(ref, elem)
                elif elem.is_wedge_start:
                    self._init_wedge(ref, elem)

    def _init_measure_numbers(self) -> None:
        for ref, elem in self.score.iter_elements():
            self._measure_numbers[id(elem)] = ref.measure

    def _init_slur(self, ref: ElementRef, orn: Ornament) -> None:
        target = ref.measure + orn.to_measure
        start = self._closest(ref.measure, orn.x_offset, orn.voice, orn.staff)
        stop = self._closest(target, orn.partner_x_offset, orn.voice, orn.staff)

        if start is None or stop is None or start == stop:
            self.log.debug("measure %d: slur at x=%d not resolved", ref.measure, orn.x_offset)
        elif start in self._slur_starts:
            self.log.debug("slur start note %s already has a slur", start)
        elif stop in self._slur_stops:
            self.log.debug("slur stop note %s already has a slur", stop)
        else:
            self._slur_starts[start] = ref
            self._slur_stops[stop] = ref

    def _init_wedge(self, ref: ElementRef, orn: Ornament) -> None:
        target = ref.measure + orn.to_measure
        start = self._closest(ref.measure, orn.x_offset, orn.voice, orn.staff)
        stop = None
        if target < len(self.score.measures):
            index = find_last_note_before(
                self.score.measures[target].elements, orn.partner_x_offset, orn.voice, orn.staff
            )
            if index is not None:
                stop = ElementRef(target, index)

        if start is None or stop is None:
            self.log.debug("measure %d: wedge at x=%d not resolved", ref.measure, orn.x_offset)
        elif start in self._wedge_starts:
            self.log.debug("wedge start note %s already has a wedge", start)
        elif stop in self._wedge_stops:
            self.log.debug("wedge stop note %s already has a wedge", stop)
        else:
            self._wedge_starts[start] = ref
            self._wedge_stops[stop] = ref

    def _closest(self, measure_nr: int, x_offset: int, voice: int, staff: int) -> Optional[ElementRef]:
        if measure_nr >= len(self.score.measures):
            return None
        index = find_closest_note(self.score.measures[measure_nr].elements, x_offset, voice, staff)
        if index is None:
            return None
        return ElementRef(measure_nr, index)

    def measure_number(self, elem: Union[ElementRef, MeasureElement]) -> int:
        """
        Return the measure number of an element of this score.

        Args:
            elem: ElementRef handle or element object

        Raises:
            KeyError: If elem is not part of the score
        """
        if isinstance(elem, ElementRef):
            return self._measure_numbers[id(self.score.element(elem))]
        return self._measure_numbers[id(elem)]

    def _note(self, ref: ElementRef) -> Note:
        elem = self.score.element(ref)
        if not isinstance(elem, Note):
            raise TypeError(f"{ref} is not a note")
        return elem

    def tie_start(self, ref: ElementRef) -> bool:
        """True if a tie starts at the note."""
        note = self._note(ref)
        for elem in self.score.measures[ref.measure].elements:
            if (
                isinstance(elem, Tie)
                and elem.tick == note.tick
                and elem.voice == note.voice
                and elem.staff == note.staff
                and elem.x_offset == note.x_offset
            ):
                return True
        return False

    def tie_stop(self, ref: ElementRef) -> bool:
        """True if the previous note in the same voice and staff starts a tie."""
        note = self._note(ref)
        previous = None

        if note.tick > 0:
            index = find_previous_note(self.score.measures[ref.measure].elements, note)
            if index is not None:
                previous = ElementRef(ref.measure, index)
        elif ref.measure > 0:
            index = find_last_note(
                self.score.measures[ref.measure - 1].elements, note.voice, note.staff
            )
            if index is not None:
                previous = ElementRef(ref.measure - 1, index)

        return previous is not None and self.tie_start(previous)

    def slur_start(self, ref: ElementRef) -> Optional[ElementRef]:
        return self._slur_starts.get(ref)

    def slur_stop(self, ref: ElementRef) -> Optional[ElementRef]:
        return self._slur_stops.get(ref)

    def wedge_start(self, ref: ElementRef) -> Optional[ElementRef]:
        return self._wedge_starts.get(ref)

    def wedge_stop(self, ref: ElementRef) -> Optional[ElementRef]:
        return self._wedge_stops.get(ref)

    def direction(self, ref: ElementRef) -> Optional[ElementRef]:
        """
        Return a staff text or tempo ornament at the note's tick, voice and
        staff. Always None for SCO5 files, whose ornament fields are mostly
        zeroed.
        """
        if self.score.is_degraded:
            return None

        note = self._note(ref)
        for index, elem in enumerate(self.score.measures[ref.measure].elements):
            if (
                isinstance(elem, Ornament)
                and elem.tick == note.tick
                and elem.voice == note.voice
                and elem.staff == note.staff
                and elem.code in self.DIRECTION_TYPES
            ):
                return ElementRef(ref.measure, index)
        return None
