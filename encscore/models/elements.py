"""
Measure element models.

A measure's element stream is a closed set of record kinds, selected by
the high nibble of the type/voice byte:

    0  NONE       (decoded and skipped, never stored)
    1  CLEF       6  LYRIC
    2  KEYCHANGE  7  CHORD
    3  TIE        8  REST
    4  BEAM       9  NOTE
    5  ORNAMENT   10, 11  unknown but sized

Every record starts with tick (u16), type/voice (u8), size (u8) and
staff (u8), so the common fields live on MeasureElement.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import NamedTuple, Optional, Union


class ElementType(IntEnum):
    """Element type codes (high nibble of the type/voice byte)."""

    NONE = 0
    CLEF = 1
    KEYCHANGE = 2
    TIE = 3
    BEAM = 4
    ORNAMENT = 5
    LYRIC = 6
    CHORD = 7
    REST = 8
    NOTE = 9
    UNKNOWN1 = 10
    UNKNOWN2 = 11


class OrnamentType(IntEnum):
    """Known ornament (symbol) codes."""

    OTTAVA_ALTA = 0x10
    OTTAVA_ALTA_STOP = 0x11
    OTTAVA_BASSA = 0x12
    OTTAVA_BASSA_STOP = 0x13
    BOX = 0x19
    ROUNDED_BOX = 0x1A
    CIRCLE = 0x1B
    LINE = 0x1C
    WEDGE_START = 0x1D
    STAFF_TEXT = 0x1E
    PEDAL_START = 0x1F
    SLUR_START = 0x21
    GLISSANDO_THIN = 0x22
    TEMPO = 0x32
    GLISSANDO_THICK = 0x36
    TRILL_START = 0x37
    SLUR_STOP = 0x41
    WEDGE_STOP = 0x4D
    PEDAL_STOP = 0x4F
    TRILL_STOP = 0x57
    PPP = 0x80
    PP = 0x81
    P = 0x82
    MP = 0x83
    MF = 0x84
    F = 0x85
    FF = 0x86


class AccidentalType(IntEnum):
    """Explicit accidental glyph on a note."""

    NONE = 0
    SHARP = 1
    FLAT = 2
    NATURAL = 3


class GraceType(Enum):
    """Grace note classification."""

    NORMAL = "normal"
    ACCIACCATURA = "acciaccatura"
    APPOGGIATURA = "appoggiatura"


# Face value (duration code) to ticks at 240 divisions per quarter
DURATION_TICKS = {
    1: 960,
    2: 480,
    3: 240,
    4: 120,
    5: 60,
    6: 30,
    7: 15,
    8: 7,
}


class ElementRef(NamedTuple):
    """Handle of an element: measure index and position in its element list."""

    measure: int
    index: int


def playable_duration(duration_code: int, dots: int, actual: int, normal: int) -> int:
    """
    Compute playable duration in ticks.

    Args:
        duration_code: 1 (whole) to 8 (128th)
        dots: Number of dots (0-3)
        actual: Tuplet actual notes (0 = no tuplet)
        normal: Tuplet normal notes (0 = no tuplet)

    Returns:
        Duration in ticks, 0 for unknown codes
    """
    duration = DURATION_TICKS.get(duration_code, 0)
    for _ in range(dots):
        duration *= 3
        duration //= 2

    if actual > 0 and normal > 0:
        duration *= normal
        duration //= actual

    return duration


@dataclass(frozen=True)
class MeasureElement:
    """
    Fields common to every measure element.

    Attributes:
        tick: Nominal time position inside the measure (not always reliable)
        voice: Voice index (low nibble of the type/voice byte)
        staff: Staff index in the system (masked to 6 bits)
        size: Encoded record size in bytes
        x_offset: Horizontal position used for proximity matching
    """

    tick: int
    voice: int
    staff: int = 0
    size: int = 0
    x_offset: int = 0

    kind = ElementType.NONE


@dataclass(frozen=True)
class Clef(MeasureElement):
    kind = ElementType.CLEF


@dataclass(frozen=True)
class KeyChange(MeasureElement):
    key: int = 0

    kind = ElementType.KEYCHANGE


@dataclass(frozen=True)
class Tie(MeasureElement):
    kind = ElementType.TIE


@dataclass(frozen=True)
class Beam(MeasureElement):
    kind = ElementType.BEAM


@dataclass(frozen=True)
class Lyric(MeasureElement):
    kind = ElementType.LYRIC


@dataclass(frozen=True)
class Unknown(MeasureElement):
    code: int = ElementType.UNKNOWN1

    @property
    def kind(self) -> ElementType:
        return ElementType(self.code)


@dataclass(frozen=True)
class Ornament(MeasureElement):
    """
    A symbol attached to the staff, including slur and wedge spanners.

    Spanner starts reference their partner by relative measure count
    (``to_measure``) and the partner's horizontal position
    (``partner_x_offset``); the end records are synthesized after decode.
    """

    code: int = 0
    to_measure: int = 0
    partner_x_offset: int = 0
    mirrored: int = 0
    note: int = 0
    tempo: int = 0
    text_index: int = 0

    kind = ElementType.ORNAMENT

    @property
    def ornament_type(self) -> Optional[OrnamentType]:
        """Known ornament type, or None for undocumented codes."""
        try:
            return OrnamentType(self.code)
        except ValueError:
            return None

    @property
    def is_slur_start(self) -> bool:
        return self.code == OrnamentType.SLUR_START

    @property
    def is_wedge_start(self) -> bool:
        return self.code == OrnamentType.WEDGE_START

    @property
    def is_diminuendo(self) -> bool:
        """Wedges are crescendo unless mirrored."""
        return bool(self.mirrored & 0x01)

    def describe(self) -> str:
        """Short human readable description."""
        if self.code == OrnamentType.WEDGE_START:
            return "Wedge diminuendo" if self.is_diminuendo else "Wedge crescendo"
        if self.code == OrnamentType.WEDGE_STOP:
            return "Wedge stop"
        if self.code == OrnamentType.SLUR_START:
            return "Slur start"
        if self.code == OrnamentType.SLUR_STOP:
            return "Slur stop"
        ornament_type = self.ornament_type
        if ornament_type is None:
            return f"Ornament 0x{self.code:02X}"
        # dynamics codes start at PPP
        if ornament_type >= OrnamentType.PPP:
            return ornament_type.name.lower()
        return ornament_type.name.replace("_", " ").capitalize()


@dataclass(frozen=True)
class Chord(MeasureElement):
    """Chord symbol. ``name`` is only present when bit 0 of ``flags`` is set."""

    tonic: int = 0
    flags: int = 0
    root: int = 0
    bass: int = 0
    name: str = ""

    kind = ElementType.CHORD

    @property
    def has_text(self) -> bool:
        return bool(self.flags & 0x01)


@dataclass(frozen=True)
class Rest(MeasureElement):
    face_value: int = 0
    tuplet: int = 0
    dot_control: int = 0

    kind = ElementType.REST

    @property
    def duration_code(self) -> int:
        return self.face_value & 0x0F

    @property
    def dots(self) -> int:
        return self.dot_control & 0x03

    @property
    def actual_notes(self) -> int:
        return self.tuplet >> 4

    @property
    def normal_notes(self) -> int:
        return self.tuplet & 0x0F

    @property
    def duration(self) -> int:
        return playable_duration(
            self.duration_code, self.dots, self.actual_notes, self.normal_notes
        )


@dataclass(frozen=True)
class Note(MeasureElement):
    """
    A single note head.

    Attributes:
        face_value: Duration code in the low nibble (1=whole ... 8=128th)
        grace1: First grace bit-field byte
        grace2: Second grace bit-field byte
        position: Vertical staff position
        tuplet: Actual notes (high nibble) / normal notes (low nibble)
        dot_control: Dot count in the low two bits
        pitch: Semitone pitch (MIDI numbering, 60 = middle C)
        playback_ticks: Playback duration as stored by the editor
        accidental: Explicit accidental glyph code
    """

    face_value: int = 0
    grace1: int = 0
    grace2: int = 0
    position: int = 0
    tuplet: int = 0
    dot_control: int = 0
    pitch: int = 0
    playback_ticks: int = 0
    velocity: int = 0
    options: int = 0
    accidental: int = 0
    articulation_up: int = 0
    articulation_down: int = 0

    kind = ElementType.NOTE

    @property
    def duration_code(self) -> int:
        return self.face_value & 0x0F

    @property
    def dots(self) -> int:
        return self.dot_control & 0x03

    @property
    def actual_notes(self) -> int:
        return self.tuplet >> 4

    @property
    def normal_notes(self) -> int:
        return self.tuplet & 0x0F

    @property
    def accidental_type(self) -> Optional[AccidentalType]:
        try:
            return AccidentalType(self.accidental)
        except ValueError:
            return None

    @property
    def grace_type(self) -> GraceType:
        grace1 = self.grace1 & 0x30
        grace2 = self.grace2 & 0x05

        if grace1 == 0x20 and grace2 == 0x04:
            return GraceType.ACCIACCATURA
        elif grace1 > 0x10 and grace2 != 0x01:
            return GraceType.APPOGGIATURA

        return GraceType.NORMAL

    @property
    def is_grace(self) -> bool:
        return self.grace_type is not GraceType.NORMAL

    @property
    def duration(self) -> int:
        """Playable duration in ticks; grace notes take no time."""
        if self.is_grace:
            return 0
        return playable_duration(
            self.duration_code, self.dots, self.actual_notes, self.normal_notes
        )


AnyElement = Union[
    Clef, KeyChange, Tie, Beam, Ornament, Lyric, Chord, Rest, Note, Unknown
]
