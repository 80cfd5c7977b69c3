"""
Score-level models: header, metadata blocks, systems and measures.

The ScoreFile keeps systems, measures and elements in flat lists so that
derived indices can refer to them by position (see ElementRef).
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, List, Optional, Tuple

from encscore.models.elements import ElementRef, MeasureElement, Note


class ByteOrder(IntEnum):
    LITTLE = 0
    BIG = 1


class StaffType(IntEnum):
    """Kind of staff in a system."""

    MELODY = 0
    TAB = 1
    RHYTHM = 2


class ClefType(IntEnum):
    """Clef codes as stored in staff data."""

    ALIAS = -1
    G = 0
    F = 1
    C3L = 2
    C4L = 3
    G8P = 4
    G8M = 5
    F8M = 6
    PERC = 7
    TAB = 8


class BarlineType(IntEnum):
    NORMAL = 0
    REPEAT_START = 2
    DOUBLE_LEFT = 3
    REPEAT_END = 4
    FINAL = 5
    DOUBLE_RIGHT = 6


class RepeatType(IntEnum):
    """End-of-measure jump markers."""

    NONE = 0
    DC_AL_CODA = 0x80
    DS_AL_CODA = 0x81
    DC_AL_FINE = 0x82
    DS_AL_FINE = 0x83
    DS = 0x84
    CODA1 = 0x85
    FINE = 0x86
    DC = 0x87
    SEGNO = 0x88
    CODA2 = 0x89


@dataclass
class Header:
    """
    File header (first 0xC2 bytes).

    The magic tag selects the byte order of every multi-byte field that
    follows: "SCOW" is little-endian, "SCO5" is big-endian.
    """

    magic: str
    format: int = 0
    version: int = 0
    unknown1: int = 0
    unknown2: int = 0
    system_count: int = 0
    page_count: int = 0
    instrument_count: int = 0
    staves_per_system: int = 0
    measure_count: int = 0

    @property
    def byte_order(self) -> ByteOrder:
        return ByteOrder.BIG if self.magic == "SCO5" else ByteOrder.LITTLE


@dataclass
class Instrument:
    """An instrument ("TKnn" block) or a synthesized placeholder."""

    name: str
    block_id: str = ""
    declared_size: int = 0
    staff_count: int = 0

    @property
    def wide_chars(self) -> bool:
        """Names and titles use two-byte characters in large blocks."""
        return self.declared_size > 250


@dataclass
class Title:
    """Title block ("TITL") text items."""

    title: str = ""
    subtitles: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    authors: List[str] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)
    footers: List[str] = field(default_factory=list)
    copyrights: List[str] = field(default_factory=list)


@dataclass
class FreeText:
    """Free text block ("TEXT")."""

    texts: List[str] = field(default_factory=list)


@dataclass
class StaffData:
    """One staff of a system."""

    clef: int = ClefType.G
    key: int = 0
    page_index: int = 0
    staff_type: int = StaffType.MELODY
    instrument_index: int = 0

    @property
    def clef_type(self) -> Optional[ClefType]:
        try:
            return ClefType(self.clef)
        except ValueError:
            return None


@dataclass
class System:
    """A system ("LINE" block): one printed line of the score."""

    start: int = 0
    measure_count: int = 0
    declared_size: int = 0
    staves: List[StaffData] = field(default_factory=list)


@dataclass
class Measure:
    """
    A measure ("MEAS" block).

    Elements are kept in file order. Spanner ends synthesized after decode
    are appended at the end.
    """

    declared_size: int = 0
    bpm: int = 0
    time_sig_glyph: int = 0
    beat_ticks: int = 0
    duration_ticks: int = 0
    time_sig_num: int = 0
    time_sig_den: int = 0
    bar_start: int = BarlineType.NORMAL
    bar_end: int = BarlineType.NORMAL
    repeat_marker: int = 0
    repeat_alternative: int = 0
    coda: int = 0
    elements: Tuple[MeasureElement, ...] = ()

    @property
    def time_signature(self) -> Tuple[int, int]:
        return (self.time_sig_num, self.time_sig_den)

    @property
    def jump(self) -> int:
        """Jump marker code, second least significant byte of the coda word."""
        return (self.coda >> 8) & 0xFF

    @property
    def jump_type(self) -> Optional[RepeatType]:
        try:
            return RepeatType(self.jump)
        except ValueError:
            return None

    @property
    def barline_start(self) -> Optional[BarlineType]:
        try:
            return BarlineType(self.bar_start)
        except ValueError:
            return None

    @property
    def barline_end(self) -> Optional[BarlineType]:
        try:
            return BarlineType(self.bar_end)
        except ValueError:
            return None


@dataclass
class ScoreFile:
    """
    A fully decoded Encore file.

    Built once by EncReader; consumers treat it as read-only.
    """

    header: Header
    title: Title = field(default_factory=Title)
    text: FreeText = field(default_factory=FreeText)
    instruments: List[Instrument] = field(default_factory=list)
    systems: List[System] = field(default_factory=list)
    measures: List[Measure] = field(default_factory=list)

    @property
    def is_degraded(self) -> bool:
        """SCO5 files carry unreliable ornament fields."""
        return self.header.magic == "SCO5"

    def element(self, ref: ElementRef) -> MeasureElement:
        return self.measures[ref.measure].elements[ref.index]

    def iter_elements(self) -> Iterator[Tuple[ElementRef, MeasureElement]]:
        """Yield (ref, element) for every element in file order."""
        for measure_nr, measure in enumerate(self.measures):
            for index, elem in enumerate(measure.elements):
                yield ElementRef(measure_nr, index), elem

    def iter_notes(self) -> Iterator[Tuple[ElementRef, Note]]:
        for ref, elem in self.iter_elements():
            if isinstance(elem, Note):
                yield ref, elem

    def initial_fifths(self) -> int:
        """Key of the first staff of the first system, as a fifths count."""
        from encscore.utils.pitch import key_to_fifths

        if not self.measures or not self.systems or not self.systems[0].staves:
            return 0
        return key_to_fifths(self.systems[0].staves[0].key)
