"""Test configuration and fixtures."""

import struct
from typing import Iterable, List, Optional, Sequence

import pytest


class EncBuilder:
    """
    Builds small synthetic Encore buffers.

    Blocks are added in order and the header counts are filled in by
    build(). Element helpers return raw element records for add_measure().
    """

    HEADER_SIZE = 0xC2

    def __init__(self, magic: bytes = b"SCOW", staves_per_system: int = 1, instrument_count: int = 1):
        self.magic = magic
        self.staves_per_system = staves_per_system
        self.instrument_count = instrument_count
        self.system_count = 0
        self.measure_count = 0
        self.blocks: List[bytes] = []

    @property
    def fmt(self) -> str:
        return ">" if self.magic == b"SCO5" else "<"

    def u16(self, value: int) -> bytes:
        return struct.pack(self.fmt + "H", value)

    def u32(self, value: int) -> bytes:
        return struct.pack(self.fmt + "I", value)

    def header(self) -> bytes:
        data = bytearray(self.HEADER_SIZE)
        data[0:4] = self.magic
        data[4] = 1
        data[0x28:0x2A] = self.u16(5)
        data[0x2E:0x30] = self.u16(self.system_count)
        data[0x30:0x32] = self.u16(1)
        data[0x32] = self.instrument_count
        data[0x33] = self.staves_per_system
        data[0x34:0x36] = self.u16(self.measure_count)
        return bytes(data)

    def block(self, tag: bytes, payload: bytes, declared: Optional[int] = None) -> bytes:
        size = len(payload) if declared is None else declared
        return tag + self.u32(size) + payload

    def add_raw(self, data: bytes) -> "EncBuilder":
        self.blocks.append(data)
        return self

    def add_instrument(self, name: str, number: int = 0) -> "EncBuilder":
        # declared size counts tag and size field
        payload = name.encode("latin-1") + b"\x00"
        payload += bytes(32 - len(payload))
        self.blocks.append(self.block(b"TK%02d" % number, payload, declared=8 + len(payload)))
        return self

    def add_system(self, staves: Optional[Sequence[dict]] = None, start: int = 0, measure_count: int = 1) -> "EncBuilder":
        if staves is None:
            staves = [{} for _ in range(self.staves_per_system)]
        payload = bytearray(10) + self.u16(start) + bytes([measure_count])
        for staff in staves:
            record = bytearray(30)
            record[14] = staff.get("clef", 0) & 0xFF
            record[15] = staff.get("key", 0)
            record[16] = staff.get("page", 0)
            record[20] = staff.get("staff_type", 0)
            record[21] = staff.get("instrument", 0)
            payload += record
        self.blocks.append(self.block(b"LINE", bytes(payload)))
        self.system_count += 1
        return self

    def add_text(self, texts: Iterable[str]) -> "EncBuilder":
        texts = list(texts)
        payload = bytearray(2) + self.u16(len(texts)) + bytearray(4)
        for text in texts:
            raw = text.encode("latin-1") + b"\x00"
            payload += self.u16(14 + len(raw)) + bytearray(14) + raw
        self.blocks.append(self.block(b"TEXT", bytes(payload)))
        return self

    def add_measure(
        self,
        elements: Sequence[bytes] = (),
        bpm: int = 120,
        time_signature=(4, 4),
        bar_start: int = 0,
        bar_end: int = 0,
        alternative: int = 0,
        coda: int = 0,
        terminator: bytes = b"\xff\xff",
        trailing: bytes = b"",
    ) -> "EncBuilder":
        prefix = bytearray(54)
        prefix[0:2] = self.u16(bpm)
        prefix[4:6] = self.u16(240)
        prefix[6:8] = self.u16(960)
        prefix[8] = time_signature[0]
        prefix[9] = time_signature[1]
        prefix[12] = bar_start
        prefix[13] = bar_end
        prefix[15] = alternative
        prefix[25:29] = self.u32(coda)

        body = b"".join(elements)
        declared = len(body) + 4 + len(trailing)
        payload = bytes(prefix) + body + terminator + trailing
        self.blocks.append(self.block(b"MEAS", payload, declared=declared))
        self.measure_count += 1
        return self

    def build(self) -> bytes:
        return self.header() + b"".join(self.blocks)

    # Element records

    def record(self, code: int, tick: int, voice: int, staff: int, size: int, fields: dict) -> bytes:
        data = bytearray(size)
        data[0:2] = self.u16(tick)
        data[2] = (code << 4) | voice
        data[3] = size
        data[4] = staff
        for offset, value in fields.items():
            if isinstance(value, bytes):
                data[offset : offset + len(value)] = value
            else:
                data[offset] = value & 0xFF
        return bytes(data)

    def note(
        self,
        tick: int = 0,
        x: int = 0,
        pitch: int = 60,
        face: int = 3,
        voice: int = 0,
        staff: int = 0,
        accidental: int = 0,
        tuplet: int = 0,
        dots: int = 0,
        grace1: int = 0,
        grace2: int = 0,
        size: int = 28,
    ) -> bytes:
        return self.record(
            9,
            tick,
            voice,
            staff,
            size,
            {
                5: face,
                6: grace1,
                7: grace2,
                10: x,
                13: tuplet,
                14: dots,
                15: pitch,
                16: self.u16(240),
                19: 100,
                21: accidental,
            },
        )

    def rest(self, tick: int = 0, x: int = 0, face: int = 3, voice: int = 0, staff: int = 0, tuplet: int = 0, dots: int = 0) -> bytes:
        return self.record(8, tick, voice, staff, 16, {5: face, 10: x, 13: tuplet, 14: dots})

    def tie(self, tick: int = 0, x: int = 0, voice: int = 0, staff: int = 0) -> bytes:
        return self.record(3, tick, voice, staff, 12, {10: x})

    def key_change(self, key: int, tick: int = 0, staff: int = 0) -> bytes:
        return self.record(2, tick, 0, staff, 8, {5: key})

    def ornament(
        self,
        code: int,
        tick: int = 0,
        x: int = 0,
        to_measure: int = 0,
        partner_x: int = 0,
        mirrored: int = 0,
        voice: int = 0,
        staff: int = 0,
    ) -> bytes:
        return self.record(
            5,
            tick,
            voice,
            staff,
            34,
            {5: code, 10: x, 18: to_measure, 20: partner_x, 26: mirrored},
        )

    def chord(self, name: str = "", root: int = 0, tick: int = 0, x: int = 0) -> bytes:
        fields = {5: root, 6: 1 if name else 0, 10: x, 12: root}
        size = 14
        if name:
            fields[14] = name.encode("utf-16-le").ljust(36, b"\x00")
            size = 50
        return self.record(7, tick, 0, 0, size, fields)

    def element(self, code: int, tick: int = 0, voice: int = 0, size: int = 5) -> bytes:
        return self.record(code, tick, voice, 0, size, {})


@pytest.fixture
def enc_builder():
    """Return a fresh little-endian builder."""
    return EncBuilder()


@pytest.fixture
def sco5_builder():
    """Return a fresh big-endian builder."""
    return EncBuilder(magic=b"SCO5")


@pytest.fixture
def single_note_data(enc_builder):
    """One instrument, one system, one measure with a quarter note C4."""
    b = enc_builder
    b.add_instrument("Piano")
    b.add_system([{"key": 0, "instrument": 0}])
    b.add_measure([b.note(tick=0, x=20, pitch=60, face=3)])
    return b.build()


@pytest.fixture
def enc_file(tmp_path, single_note_data):
    """Write the single note score to a temporary .enc file."""
    path = tmp_path / "single.enc"
    path.write_bytes(single_note_data)
    return path


@pytest.fixture
def make_builder():
    """Return the builder class for tests that need several buffers."""
    return EncBuilder
