"""
Encore (.enc) file decoder.

Decodes a whole Encore buffer into a ScoreFile in a single pass.

File Structure:
    Offset  Size    Description
    0x000   4       Magic "SCOW" (little-endian) or "SCO5" (big-endian)
    0x004   1       Format
    0x028   2       Version
    0x02A   4       Unknown words
    0x02E   2       Number of systems
    0x030   2       Number of pages
    0x032   1       Number of instruments
    0x033   1       Staves per system
    0x034   2       Number of measures
    0x0C2   ...     Tagged blocks: <tag:4> <size:u32> <payload>

Known blocks:
    TKnn    Instrument (name)
    TITL    Title, subtitles, authors, copyright
    TEXT    Free text items
    LINE    System with per-staff clef/key/type data
    MEAS    Measure with its element stream

Any other block (PAGE, ...) is passed over by resynchronizing on the
next known tag.
"""

import logging
from collections import defaultdict
from dataclasses import replace
from typing import Dict, List, Optional

from encscore.formats.enc.cursor import ByteCursor
from encscore.formats.enc.measure_parser import MeasureParser
from encscore.formats.enc.scanner import BlockScanner, is_instrument_tag
from encscore.models.elements import MeasureElement, Ornament, OrnamentType
from encscore.models.score import (
    ByteOrder,
    FreeText,
    Header,
    Instrument,
    Measure,
    ScoreFile,
    StaffData,
    System,
    Title,
)
from encscore.utils.validation import FormatError

logger = logging.getLogger(__name__)


# Title block layout: item counts per field, fixed item sizes
TITLE_FIELDS = (
    ("title", 1),
    ("subtitles", 2),
    ("instructions", 3),
    ("authors", 4),
    ("headers", 2),
    ("footers", 2),
    ("copyrights", 6),
)


class EncDecoder:
    """
    Complete decoder for Encore files.

    Example:
        decoder = EncDecoder(data)
        score = decoder.decode()
    """

    MAGIC_LITTLE = b"SCOW"
    MAGIC_BIG = b"SCO5"

    HEADER_SIZE = 0xC2
    LINE_PREFIX_SIZE = 21
    LINE_STAFF_SIZE = 30
    TEXT_ITEM_HEADER = 14
    TITLE_ITEM_HEADER = 30
    TITLE_ITEM_NARROW = 66
    TITLE_ITEM_WIDE = 1026
    TITLE_TAIL_NARROW = 504
    TITLE_TAIL_WIDE = 120

    # instrument names above this declared size use two-byte characters
    WIDE_CHAR_THRESHOLD = 250

    def __init__(self, data: bytes, diagnostics: Optional[logging.Logger] = None):
        self.cursor = ByteCursor(data)
        self.log = diagnostics or logger
        self.scanner = BlockScanner(self.cursor, self.log)
        self.header: Optional[Header] = None
        self._wide_chars = False

    def decode(self) -> ScoreFile:
        """
        Decode the buffer.

        Returns:
            Complete ScoreFile with spanner ends synthesized

        Raises:
            FormatError: On an unknown magic, an unknown element type,
                or truncated data
        """
        self.header = self.decode_header()
        score = ScoreFile(header=self.header)
        c = self.cursor

        while not c.at_end():
            tag = self.scanner.next_tag()
            if tag is None:
                break
            if c.remaining < 4:
                self.log.debug("tag %s at end of file without a size", tag)
                break
            declared_size = c.read_u32()
            self.log.debug("block %s size %d", tag, declared_size)

            if tag == "LINE":
                score.systems.append(self.decode_line(declared_size))
            elif tag == "MEAS":
                score.measures.append(MeasureParser(c, self.log).parse(declared_size))
            elif tag == "TEXT":
                score.text = self.decode_text(declared_size)
            elif tag == "TITL":
                score.title = self.decode_title(declared_size)
            elif is_instrument_tag(tag.encode("ascii")):
                instrument = self.decode_instrument(tag, declared_size)
                score.instruments.append(instrument)
                self._wide_chars = instrument.wide_chars

        fixup_instruments(score.instruments, self.header.instrument_count)
        count_staves(score.instruments, score.systems)
        add_spanner_ends(score.measures, self.log)

        return score

    def decode_header(self) -> Header:
        """Decode the fixed header and set the stream byte order."""
        c = self.cursor
        magic = c.peek(4)

        if magic == self.MAGIC_LITTLE:
            c.byte_order = ByteOrder.LITTLE
        elif magic == self.MAGIC_BIG:
            c.byte_order = ByteOrder.BIG
        else:
            raise FormatError(f"Invalid Encore header: magic {magic!r}")

        c.skip(4)
        header = Header(magic=magic.decode("ascii"))
        header.format = c.read_u8()
        c.skip(0x28 - 5)
        header.version = c.read_u16()
        header.unknown1 = c.read_u16()
        header.unknown2 = c.read_u16()
        header.system_count = c.read_i16()
        header.page_count = c.read_i16()
        header.instrument_count = c.read_i8()
        header.staves_per_system = c.read_i8()
        header.measure_count = c.read_i16()
        c.skip(self.HEADER_SIZE - c.pos)

        self.log.debug("header %s", header)
        return header

    def decode_instrument(self, tag: str, declared_size: int) -> Instrument:
        """Decode a "TKnn" block: a NUL-terminated name."""
        c = self.cursor
        size = declared_size & 0xFFFF
        instrument = Instrument(name="", block_id=tag, declared_size=size)

        consumed = 8
        chars = []
        while True:
            if instrument.wide_chars:
                value = c.read_u16()
                consumed += 2
            else:
                value = c.read_u8()
                consumed += 1
            if value == 0:
                break
            chars.append(chr(value))
        instrument.name = "".join(chars)

        c.skip(size - consumed)
        self.log.debug("instrument %s %r", tag, instrument.name)
        return instrument

    def decode_line(self, declared_size: int) -> System:
        """Decode a "LINE" block with one staff record per staff in the system."""
        c = self.cursor
        staves_per_system = self.header.staves_per_system if self.header else 0

        system = System(declared_size=declared_size)
        c.skip(10)
        system.start = c.read_u16()
        system.measure_count = c.read_u8()

        for _ in range(staves_per_system):
            system.staves.append(self._decode_staff_data())

        to_skip = (
            declared_size + 8 - self.LINE_PREFIX_SIZE - self.LINE_STAFF_SIZE * staves_per_system
        )
        c.skip(to_skip)

        self.log.debug(
            "system start=%d measures=%d staves=%d",
            system.start,
            system.measure_count,
            len(system.staves),
        )
        return system

    def _decode_staff_data(self) -> StaffData:
        c = self.cursor
        c.skip(14)
        staff = StaffData()
        staff.clef = c.read_i8()
        staff.key = c.read_u8()
        staff.page_index = c.read_u8()
        c.skip(3)
        staff.staff_type = c.read_u8()
        staff.instrument_index = c.read_u8()
        c.skip(8)
        return staff

    def decode_text(self, declared_size: int) -> FreeText:
        """Decode a "TEXT" block: a count followed by short text records."""
        c = self.cursor
        start = c.pos

        c.skip(2)
        count = c.read_u16()
        c.skip(4)

        text = FreeText()
        for _ in range(count):
            text.texts.append(self._read_single_text())

        c.skip(declared_size - (c.pos - start))
        self.log.debug("texts %s", text.texts)
        return text

    def _read_single_text(self) -> str:
        # two byte size counts the rest of the 16 byte record header plus the string
        c = self.cursor
        size = c.read_u16()
        c.skip(self.TEXT_ITEM_HEADER)

        chars = []
        done = False
        for _ in range(max(0, size - self.TEXT_ITEM_HEADER)):
            b = c.read_u8()
            if b in (0, 4):
                done = True
            if not done:
                chars.append(chr(b))
        return "".join(chars)

    def decode_title(self, declared_size: int) -> Title:
        """
        Decode a "TITL" block. Character width follows the last decoded
        instrument block.
        """
        c = self.cursor
        start = c.pos
        c.skip(2)

        title = Title()
        for name, count in TITLE_FIELDS:
            items = [self._read_title_item() for _ in range(count)]
            if name == "title":
                title.title = items[0]
            else:
                setattr(title, name, items)

        c.skip(self.TITLE_TAIL_WIDE if self._wide_chars else self.TITLE_TAIL_NARROW)
        c.skip(declared_size - (c.pos - start))

        self.log.debug("title %r", title.title)
        return title

    def _read_title_item(self) -> str:
        c = self.cursor
        c.skip(self.TITLE_ITEM_HEADER)

        chars = []
        done = False
        if self._wide_chars:
            for _ in range(self.TITLE_ITEM_WIDE // 2):
                value = c.read_u16_le()
                if value == 0:
                    done = True
                if not done:
                    chars.append(chr(value))
        else:
            for _ in range(self.TITLE_ITEM_NARROW):
                value = c.read_u8()
                if value == 0:
                    done = True
                if not done:
                    chars.append(chr(value))
        return "".join(chars)


def fixup_instruments(instruments: List[Instrument], count: int) -> None:
    """Create "Part N" instruments when the file has no TKnn blocks."""
    if not instruments:
        for i in range(count):
            instruments.append(Instrument(name=f"Part {i + 1}"))


def count_staves(instruments: List[Instrument], systems: List[System]) -> None:
    """Set each instrument's staff count from the first system's staff data."""
    staves = systems[0].staves if systems else []
    for index, instrument in enumerate(instruments):
        instrument.staff_count = sum(1 for s in staves if s.instrument_index == index)


def add_spanner_ends(measures: List[Measure], diagnostics: Optional[logging.Logger] = None) -> int:
    """
    Append a stop ornament for every slur and wedge start.

    The end is a copy of the start, placed in the measure the start points
    to, at the start's partner x-offset. Ends are appended after all
    measures have been scanned, so they are never treated as starts.

    Returns:
        Number of ends added
    """
    log = diagnostics or logger
    pending: Dict[int, List[MeasureElement]] = defaultdict(list)

    for measure_nr, measure in enumerate(measures):
        for elem in measure.elements:
            if not isinstance(elem, Ornament):
                continue
            if elem.is_slur_start:
                stop_code = OrnamentType.SLUR_STOP
            elif elem.is_wedge_start:
                stop_code = OrnamentType.WEDGE_STOP
            else:
                continue

            target = measure_nr + elem.to_measure
            if target >= len(measures):
                log.warning(
                    "measure %d: %s points to missing measure %d",
                    measure_nr,
                    elem.describe(),
                    target,
                )
                continue
            pending[target].append(
                replace(elem, code=int(stop_code), x_offset=elem.partner_x_offset)
            )

    added = 0
    for target, ends in sorted(pending.items()):
        measures[target].elements = measures[target].elements + tuple(ends)
        added += len(ends)
    return added
