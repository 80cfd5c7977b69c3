"""
Encore measure ("MEAS") block parser.

MEAS Block Structure (after the tag and u32 size):
    Offset  Size    Description
    0x00    2       Tempo (bpm)
    0x02    1       Time signature glyph
    0x04    2       Beat ticks
    0x06    2       Measure duration ticks
    0x08    1       Time signature numerator
    0x09    1       Time signature denominator
    0x0C    1       Bar line at start
    0x0D    1       Bar line at end
    0x0E    1       Repeat marker
    0x0F    1       Repeat alternative (one bit per pass)
    0x19    4       Coda word (second byte = jump marker)
    0x36    ...     Element stream, terminated by tick 0xFFFF

Element Record Structure:
    Offset  Size    Description
    0       2       Tick
    2       1       Type (high nibble) / voice (low nibble)
    3       1       Record size
    4       1       Staff index (low 6 bits)
    5+              Type specific fields

Sometimes a record size is off by two, so the 0xFFFF terminator lands in
the type/voice byte and the byte after it. Such a stream is cut there
without producing an element.
"""

import logging
from typing import List, Optional, Tuple

from encscore.formats.enc.cursor import ByteCursor
from encscore.models.elements import (
    Beam,
    Chord,
    Clef,
    ElementType,
    KeyChange,
    Lyric,
    MeasureElement,
    Note,
    Ornament,
    Rest,
    Tie,
    Unknown,
)
from encscore.models.score import Measure
from encscore.utils.validation import UnknownElementError

logger = logging.getLogger(__name__)


# Bytes of every record read before the type specific fields
COMMON_SIZE = 5

# Chord name: 18 two-byte characters
CHORD_TEXT_SIZE = 2 * 18


class MeasureParser:
    """
    Parser for measure blocks and their element streams.

    Example:
        parser = MeasureParser(cursor)
        measure = parser.parse(declared_size)
    """

    MEASURE_PREFIX_SIZE = 54
    END_OF_ELEMENTS = 0xFFFF
    EARLY_END_MARKER = 0xFF

    def __init__(self, cursor: ByteCursor, diagnostics: Optional[logging.Logger] = None):
        self.cursor = cursor
        self.log = diagnostics or logger

    def parse(self, declared_size: int) -> Measure:
        """
        Parse one measure. The cursor must be just after the size field.

        Args:
            declared_size: Block size read after the "MEAS" tag

        Returns:
            Measure with its elements in file order
        """
        c = self.cursor
        start = c.pos

        measure = Measure(declared_size=declared_size)
        measure.bpm = c.read_u16()
        measure.time_sig_glyph = c.read_u8()
        c.skip(1)
        measure.beat_ticks = c.read_u16()
        measure.duration_ticks = c.read_u16()
        measure.time_sig_num = c.read_u8()
        measure.time_sig_den = c.read_u8()
        c.skip(2)
        measure.bar_start = c.read_u8()
        measure.bar_end = c.read_u8()
        measure.repeat_marker = c.read_u8()
        measure.repeat_alternative = c.read_u8()
        c.skip(9)
        measure.coda = c.read_u32()
        c.skip(self.MEASURE_PREFIX_SIZE - (c.pos - start))

        self.log.debug(
            "measure bpm=%d time=%d/%d bars=%d/%d alt=0x%02X coda=0x%08X",
            measure.bpm,
            measure.time_sig_num,
            measure.time_sig_den,
            measure.bar_start,
            measure.bar_end,
            measure.repeat_alternative,
            measure.coda,
        )

        elements, element_bytes = self.parse_elements()
        measure.elements = tuple(elements)

        remaining = declared_size - element_bytes - 4
        self.log.debug("element bytes %d, remaining %d", element_bytes, remaining)
        c.skip(remaining)

        return measure

    def parse_elements(self) -> Tuple[List[MeasureElement], int]:
        """
        Parse an element stream up to and including its terminator.

        Returns:
            Tuple of (elements, sum of element record sizes)
        """
        c = self.cursor
        elements: List[MeasureElement] = []
        element_bytes = 0

        tick = c.read_u16()
        while tick != self.END_OF_ELEMENTS:
            type_voice = c.read_u8()
            if type_voice == self.EARLY_END_MARKER:
                # terminator started one byte early
                c.skip(1)
                self.log.debug("early end-of-elements marker at 0x%X", c.pos - 2)
                break

            code = type_voice >> 4
            voice = type_voice & 0x0F
            elem = self.parse_element(tick, code, voice)
            if code != ElementType.NONE:
                elements.append(elem)
            element_bytes += elem.size
            tick = c.read_u16()

        return elements, element_bytes

    def parse_element(self, tick: int, code: int, voice: int) -> MeasureElement:
        """
        Parse one element record. The cursor must be just after the
        type/voice byte.

        Raises:
            UnknownElementError: If code has no decoder
        """
        c = self.cursor
        record_start = c.pos - 3
        if code > ElementType.UNKNOWN2:
            raise UnknownElementError(code, c.pos - 1)

        size = c.read_u8()
        staff = c.read_u8() & 0x3F
        kind = ElementType(code)

        if kind == ElementType.NOTE:
            elem = self._parse_note(tick, voice, size, staff)
        elif kind == ElementType.REST:
            elem = self._parse_rest(tick, voice, size, staff)
        elif kind == ElementType.ORNAMENT:
            elem = self._parse_ornament(tick, voice, size, staff)
        elif kind == ElementType.CHORD:
            elem = self._parse_chord(tick, voice, size, staff)
        elif kind == ElementType.TIE:
            c.skip(5)
            elem = Tie(tick, voice, staff, size, x_offset=c.read_u8())
        elif kind == ElementType.KEYCHANGE:
            elem = KeyChange(tick, voice, staff, size, x_offset=0, key=c.read_u8())
        elif kind == ElementType.BEAM:
            elem = Beam(tick, voice, staff, size, x_offset=255)
        elif kind == ElementType.CLEF:
            elem = Clef(tick, voice, staff, size)
        elif kind == ElementType.LYRIC:
            elem = Lyric(tick, voice, staff, size)
        elif kind == ElementType.NONE:
            elem = MeasureElement(tick, voice, staff, size)
        else:
            elem = Unknown(tick, voice, staff, size, code=code)

        # skip to end of record
        c.skip(size - (c.pos - record_start))

        self.log.debug(
            "elem %s tick=%d voice=%d staff=%d size=%d x=%d",
            kind.name,
            tick,
            voice,
            staff,
            size,
            elem.x_offset,
        )
        return elem

    def _parse_note(self, tick: int, voice: int, size: int, staff: int) -> Note:
        c = self.cursor
        face_value = c.read_u8()
        grace1 = c.read_u8()
        grace2 = c.read_u8()
        c.skip(2)
        x_offset = c.read_u8()
        c.skip(1)
        position = c.read_i8()
        tuplet = c.read_u8()
        dot_control = c.read_u8()
        pitch = c.read_u8()
        playback_ticks = c.read_u16()
        c.skip(1)
        velocity = c.read_u8()
        options = c.read_u8()
        accidental = c.read_u8()
        c.skip(2)
        articulation_up = c.read_u8()
        c.skip(1)
        articulation_down = c.read_u8()

        return Note(
            tick,
            voice,
            staff,
            size,
            x_offset=x_offset,
            face_value=face_value,
            grace1=grace1,
            grace2=grace2,
            position=position,
            tuplet=tuplet,
            dot_control=dot_control,
            pitch=pitch,
            playback_ticks=playback_ticks,
            velocity=velocity,
            options=options,
            accidental=accidental,
            articulation_up=articulation_up,
            articulation_down=articulation_down,
        )

    def _parse_rest(self, tick: int, voice: int, size: int, staff: int) -> Rest:
        c = self.cursor
        face_value = c.read_u8()
        c.skip(4)
        x_offset = c.read_u8()
        c.skip(2)
        tuplet = c.read_u8()
        dot_control = c.read_u8()

        return Rest(
            tick,
            voice,
            staff,
            size,
            x_offset=x_offset,
            face_value=face_value,
            tuplet=tuplet,
            dot_control=dot_control,
        )

    def _parse_ornament(self, tick: int, voice: int, size: int, staff: int) -> Ornament:
        c = self.cursor
        code = c.read_u8()
        c.skip(4)
        x_offset = c.read_u8()
        c.skip(7)
        to_measure = c.read_u8()
        c.skip(1)
        partner_x_offset = c.read_u8()
        c.skip(5)
        mirrored = c.read_u8() & 0x03
        c.skip(1)
        note = c.read_u8()
        c.skip(1)
        tempo = c.read_u8()
        c.skip(1)
        text_index = c.read_u8()

        return Ornament(
            tick,
            voice,
            staff,
            size,
            x_offset=x_offset,
            code=code,
            to_measure=to_measure,
            partner_x_offset=partner_x_offset,
            mirrored=mirrored,
            note=note,
            tempo=tempo,
            text_index=text_index,
        )

    def _parse_chord(self, tick: int, voice: int, size: int, staff: int) -> Chord:
        c = self.cursor
        tonic = c.read_u8()
        flags = c.read_u8()
        c.skip(3)
        x_offset = c.read_u8()
        c.skip(1)
        root = c.read_u8()
        bass = c.read_u8()

        name = ""
        if flags & 0x01:
            name = read_wide_text(c, CHORD_TEXT_SIZE)

        return Chord(
            tick,
            voice,
            staff,
            size,
            x_offset=x_offset,
            tonic=tonic,
            flags=flags,
            root=root,
            bass=bass,
            name=name,
        )


def read_wide_text(cursor: ByteCursor, field_size: int) -> str:
    """
    Read a fixed-size field of little-endian two-byte characters,
    stopping the string at the first NUL.
    """
    chars = []
    done = False
    for _ in range(field_size // 2):
        value = cursor.read_u16_le()
        if value == 0:
            done = True
        if not done:
            chars.append(chr(value))
    return "".join(chars)
