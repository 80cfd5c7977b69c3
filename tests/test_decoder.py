"""Tests for Encore file decoding and the reader."""

import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from encscore.analysis.connector import NoteConnector
from encscore.formats.enc.decoder import EncDecoder, add_spanner_ends, count_staves, fixup_instruments
from encscore.formats.enc.reader import EncReader, scan_blocks
from encscore.models.elements import Note, Ornament, OrnamentType
from encscore.models.score import ByteOrder, Instrument, Measure, StaffData, System
from encscore.utils.pitch import key_to_fifths, spell_pitch
from encscore.utils.validation import FormatError


def title_block(builder, items):
    """Narrow TITL block with one 66 character item per slot."""
    payload = bytearray(2)
    for text in items + [""] * (20 - len(items)):
        payload += bytearray(30) + text.encode("latin-1").ljust(66, b"\x00")
    payload += bytearray(504)
    return builder.block(b"TITL", bytes(payload))


class TestHeader:
    """Test cases for header decoding."""

    def test_little_endian_header(self, enc_builder):
        """Test SCOW selects little-endian fields."""
        b = enc_builder
        b.staves_per_system = 2
        b.instrument_count = 3
        score = EncReader().parse_bytes(b.build())

        assert score.header.magic == "SCOW"
        assert score.header.byte_order == ByteOrder.LITTLE
        assert score.header.version == 5
        assert score.header.staves_per_system == 2
        assert score.header.instrument_count == 3
        assert not score.is_degraded

    def test_big_endian_header(self, sco5_builder):
        """Test SCO5 selects big-endian fields."""
        b = sco5_builder
        b.add_system()
        b.add_measure([b.note(tick=300, pitch=64)])
        score = EncReader().parse_bytes(b.build())

        assert score.header.byte_order == ByteOrder.BIG
        assert score.header.version == 5
        assert score.header.measure_count == 1
        assert score.is_degraded
        assert score.measures[0].bpm == 120
        assert score.measures[0].elements[0].tick == 300

    @pytest.mark.parametrize("magic", [b"SCOX", b"MThd", b"\x00\x00\x00\x00"])
    def test_invalid_magic(self, magic):
        """Test any other magic is a fatal error."""
        data = magic + bytes(0xC2 - 4)
        with pytest.raises(FormatError, match="Invalid Encore header"):
            EncReader().parse_bytes(data)

    def test_empty_buffer(self):
        """Test an empty buffer is rejected."""
        with pytest.raises(FormatError):
            EncReader().parse_bytes(b"")

    def test_format_error_is_value_error(self):
        """Test callers catching ValueError also catch format errors."""
        with pytest.raises(ValueError):
            EncDecoder(b"RIFF").decode()


class TestBlocks:
    """Test cases for metadata blocks."""

    def test_instrument_names(self, enc_builder):
        """Test instrument names and block ids."""
        b = enc_builder
        b.instrument_count = 2
        b.add_instrument("Violin", 0)
        b.add_instrument("Cello", 1)
        score = EncReader().parse_bytes(b.build())

        assert [i.name for i in score.instruments] == ["Violin", "Cello"]
        assert [i.block_id for i in score.instruments] == ["TK00", "TK01"]
        assert not score.instruments[0].wide_chars

    def test_missing_instruments_synthesized(self, enc_builder):
        """Test a file without instrument blocks gets Part N names."""
        b = enc_builder
        b.instrument_count = 3
        score = EncReader().parse_bytes(b.build())
        assert [i.name for i in score.instruments] == ["Part 1", "Part 2", "Part 3"]

    def test_staff_counts(self, enc_builder):
        """Test staff counts come from the first system's staff data."""
        b = enc_builder
        b.staves_per_system = 3
        b.instrument_count = 2
        b.add_instrument("Piano", 0)
        b.add_instrument("Voice", 1)
        b.add_system(
            [
                {"instrument": 1, "key": 8},
                {"instrument": 0, "clef": 0},
                {"instrument": 0, "clef": 1, "staff_type": 2},
            ]
        )
        b.add_measure([])
        score = EncReader().parse_bytes(b.build())

        assert [i.staff_count for i in score.instruments] == [2, 1]
        staves = score.systems[0].staves
        assert len(staves) == 3
        assert staves[0].key == 8
        assert staves[2].clef == 1
        assert staves[2].staff_type == 2
        assert score.initial_fifths() == 1

    def test_system_fields(self, enc_builder):
        """Test system start and measure count."""
        b = enc_builder
        b.add_system(start=4, measure_count=3)
        score = EncReader().parse_bytes(b.build())
        assert score.systems[0].start == 4
        assert score.systems[0].measure_count == 3

    def test_alias_clef_is_signed(self, enc_builder):
        """Test the clef byte is read as a signed value."""
        b = enc_builder
        b.add_system([{"clef": -1}])
        score = EncReader().parse_bytes(b.build())
        assert score.systems[0].staves[0].clef == -1

    def test_free_text(self, enc_builder):
        """Test the TEXT block items."""
        b = enc_builder
        b.add_text(["Allegro", "dolce"])
        b.add_system()
        b.add_measure([b.note()])
        score = EncReader().parse_bytes(b.build())
        assert score.text.texts == ["Allegro", "dolce"]
        assert len(score.measures) == 1

    def test_title(self, enc_builder):
        """Test the TITL block fields."""
        b = enc_builder
        b.add_instrument("Piano")
        b.add_raw(title_block(b, ["Nocturne", "Op. 9", "No. 2", "", "", "", "F. Chopin"]))
        b.add_system()
        b.add_measure([b.note()])
        score = EncReader().parse_bytes(b.build())

        assert score.title.title == "Nocturne"
        assert score.title.subtitles == ["Op. 9", "No. 2"]
        assert score.title.authors[0] == "F. Chopin"
        assert len(score.title.copyrights) == 6
        assert len(score.measures) == 1

    def test_unknown_block_skipped(self, enc_builder):
        """Test a PAGE block between known blocks is passed over."""
        b = enc_builder
        b.add_system()
        b.add_raw(b.block(b"PAGE", bytes(40)))
        b.add_measure([b.note()])
        score = EncReader().parse_bytes(b.build())
        assert len(score.systems) == 1
        assert len(score.measures) == 1


class TestEndToEnd:
    """Test cases for a complete minimal score."""

    def test_single_note(self, single_note_data):
        """Test one quarter note C4 in C major."""
        score = EncReader().parse_bytes(single_note_data)

        assert len(score.instruments) == 1
        assert score.instruments[0].name == "Piano"
        assert score.instruments[0].staff_count == 1
        assert len(score.measures) == 1

        notes = list(score.iter_notes())
        assert len(notes) == 1
        ref, note = notes[0]
        assert isinstance(note, Note)
        assert note.duration == 240
        assert not note.is_grace

        fifths = key_to_fifths(score.systems[0].staves[0].key)
        pitch = spell_pitch(note.pitch, note.accidental, fifths)
        assert (pitch.step, pitch.alter, pitch.octave) == ("C", 0, 4)

        nc = NoteConnector(score)
        assert not nc.tie_start(ref)
        assert not nc.tie_stop(ref)
        assert nc.slur_start(ref) is None
        assert nc.wedge_start(ref) is None
        assert nc.direction(ref) is None

    def test_tag_without_size_at_end(self, single_note_data):
        """Test a known tag too close to the end of the file stops the block loop."""
        score = EncReader().parse_bytes(single_note_data + b"\x00\x01MEAS\x02\x00")
        assert len(score.measures) == 1
        assert len(list(score.iter_notes())) == 1

    def test_diagnostics_logger(self, single_note_data, caplog):
        """Test an injected logger receives the decode trace."""
        log = logging.getLogger("test.decode")
        with caplog.at_level(logging.DEBUG, logger="test.decode"):
            EncReader(log).parse_bytes(single_note_data)
        messages = [r.getMessage() for r in caplog.records if r.name == "test.decode"]
        assert any(m.startswith("block TK00") for m in messages)
        assert any(m.startswith("elem NOTE") for m in messages)


class TestReader:
    """Test cases for file level reader functions."""

    def test_read_file(self, enc_file):
        score = EncReader.read(enc_file)
        assert len(score.measures) == 1

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EncReader.read(tmp_path / "missing.enc")

    def test_can_read(self, enc_file, tmp_path):
        other = tmp_path / "other.mid"
        other.write_bytes(b"MThd\x00\x00\x00\x06")

        assert EncReader.can_read(enc_file)
        assert not EncReader.can_read(other)
        assert not EncReader.can_read(tmp_path / "missing.enc")

    def test_get_file_info(self, enc_file, tmp_path):
        info = EncReader.get_file_info(enc_file)
        assert info["valid"]
        assert info["magic"] == "SCOW"
        assert info["byte_order"] == "little"
        assert info["measures"] == 1
        assert info["blocks"] == 3

        bad = tmp_path / "bad.enc"
        bad.write_bytes(b"JUNK" + bytes(10))
        info = EncReader.get_file_info(bad)
        assert not info["valid"]
        assert info["size"] == 14

    def test_scan_blocks(self, single_note_data):
        blocks = scan_blocks(single_note_data)
        assert [tag for tag, _, _ in blocks] == ["TK00", "LINE", "MEAS"]
        assert blocks[0][1] == 0xC2
        assert blocks[0][2] == 40


class TestPostDecode:
    """Test cases for the passes run after all blocks are decoded."""

    def test_fixup_keeps_existing(self):
        instruments = [Instrument(name="Flute")]
        fixup_instruments(instruments, 4)
        assert [i.name for i in instruments] == ["Flute"]

    def test_count_staves_without_systems(self):
        instruments = [Instrument(name="A")]
        count_staves(instruments, [])
        assert instruments[0].staff_count == 0

    def test_count_staves_first_system_only(self):
        instruments = [Instrument(name="A"), Instrument(name="B")]
        systems = [
            System(staves=[StaffData(instrument_index=0)]),
            System(staves=[StaffData(instrument_index=1), StaffData(instrument_index=1)]),
        ]
        count_staves(instruments, systems)
        assert [i.staff_count for i in instruments] == [1, 0]

    def test_spanner_ends_appended(self):
        """Test slur and wedge ends land in the target measure."""
        slur = Ornament(0, 0, x_offset=10, code=OrnamentType.SLUR_START, to_measure=1, partner_x_offset=40)
        wedge = Ornament(0, 0, x_offset=20, code=OrnamentType.WEDGE_START, to_measure=0, partner_x_offset=60)
        first = Note(0, 0, x_offset=10)
        measures = [Measure(elements=(first, slur, wedge)), Measure(elements=(Note(0, 0, x_offset=40),))]

        assert add_spanner_ends(measures) == 2

        wedge_end = measures[0].elements[-1]
        assert wedge_end.code == OrnamentType.WEDGE_STOP
        assert wedge_end.x_offset == 60
        assert wedge_end.partner_x_offset == 60

        slur_end = measures[1].elements[-1]
        assert slur_end.code == OrnamentType.SLUR_STOP
        assert slur_end.x_offset == 40
        assert slur_end.to_measure == 1
        assert measures[0].elements[:3] == (first, slur, wedge)

    def test_spanner_target_out_of_range(self, caplog):
        """Test a start pointing past the last measure is reported and skipped."""
        slur = Ornament(0, 0, code=OrnamentType.SLUR_START, to_measure=5)
        measures = [Measure(elements=(slur,))]
        with caplog.at_level(logging.WARNING):
            assert add_spanner_ends(measures) == 0
        assert "points to missing measure 5" in caplog.text
        assert measures[0].elements == (slur,)

    def test_synthesized_ends_in_decoded_score(self, enc_builder):
        b = enc_builder
        b.add_system()
        b.add_measure([b.note(x=10), b.ornament(0x21, x=10, to_measure=1, partner_x=40)])
        b.add_measure([b.note(x=40)])
        score = EncReader().parse_bytes(b.build())

        assert len(score.measures[0].elements) == 2
        end = score.measures[1].elements[-1]
        assert isinstance(end, Ornament)
        assert end.code == OrnamentType.SLUR_STOP
        assert end.x_offset == 40
