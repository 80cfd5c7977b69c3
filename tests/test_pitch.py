"""Tests for key mapping, pitch spelling and tuplet bracketing."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from encscore.models.elements import AccidentalType, Note, Rest
from encscore.utils.pitch import Pitch, key_name, key_to_fifths, spell_pitch
from encscore.utils.tuplets import TupletHandler, TupletState
from encscore.utils.validation import ValidationError

START, MID, STOP, NONE = TupletState.START, TupletState.MID, TupletState.STOP, TupletState.NONE


class TestKeys:
    """Test cases for key code mapping."""

    def test_key_to_fifths(self):
        assert key_to_fifths(0) == 0
        assert key_to_fifths(1) == -1
        assert key_to_fifths(7) == -7
        assert key_to_fifths(8) == 1
        assert key_to_fifths(14) == 7

    @pytest.mark.parametrize("key", [-1, 15, 255])
    def test_key_out_of_range(self, key):
        with pytest.raises(ValidationError, match="Key code must be 0-14"):
            key_to_fifths(key)

    def test_key_names(self):
        assert key_name(0) == "C"
        assert key_name(3) == "Eb"
        assert key_name(13) == "F#"


class TestSpelling:
    """Test cases for pitch spelling."""

    def test_naturals(self):
        assert spell_pitch(60, AccidentalType.NONE, 0) == Pitch("C", 0, 4)
        assert spell_pitch(69, AccidentalType.NONE, 0) == Pitch("A", 0, 4)
        assert spell_pitch(59, AccidentalType.NONE, 0) == Pitch("B", 0, 3)

    def test_sharp_key(self):
        assert spell_pitch(66, AccidentalType.NONE, 1) == Pitch("F", 1, 4)

    def test_flat_key(self):
        """Test black keys without accidental are flats in flat keys."""
        assert spell_pitch(70, AccidentalType.NONE, -1) == Pitch("B", -1, 4)
        assert spell_pitch(61, AccidentalType.NONE, -2) == Pitch("D", -1, 4)

    def test_explicit_flat(self):
        assert spell_pitch(70, AccidentalType.FLAT, 0) == Pitch("B", -1, 4)
        # B flat spelled from the pitch above crosses into the next octave
        assert spell_pitch(71, AccidentalType.FLAT, 0) == Pitch("C", -1, 5)

    def test_explicit_sharp_in_flat_key(self):
        assert spell_pitch(66, AccidentalType.SHARP, -3) == Pitch("F", 1, 4)

    def test_repeated_pitch_without_accidental(self):
        """Test the second B flat in a measure loses its accidental spelling."""
        first = spell_pitch(70, AccidentalType.FLAT, 0)
        second = spell_pitch(70, AccidentalType.NONE, 0)
        assert str(first) == "Bb4"
        assert str(second) == "A#4"

    def test_pitch_out_of_range(self):
        with pytest.raises(ValidationError):
            spell_pitch(128, AccidentalType.NONE, 0)

    def test_unknown_duration_code(self):
        """Test face values outside 1-8 give a zero duration."""
        assert Note(0, 0, face_value=9).duration == 0
        assert Rest(0, 0, face_value=0x0F, dot_control=1).duration == 0


class TestTuplets:
    """Test cases for the tuplet state machine."""

    def test_triplet(self):
        """Test three eighths in the time of two."""
        handler = TupletHandler()
        states = [handler.new_note(3, 2, 4) for _ in range(3)]
        assert states == [START, MID, STOP]
        assert handler.count == 0

    def test_consecutive_groups(self):
        handler = TupletHandler()
        states = [handler.new_note(3, 2, 4) for _ in range(6)]
        assert states == [START, MID, STOP, START, MID, STOP]

    def test_no_tuplet_resets(self):
        handler = TupletHandler()
        assert handler.new_note(3, 2, 4) == START
        assert handler.new_note(0, 0, 4) == NONE
        assert handler.count == 0
        assert handler.new_note(3, 2, 4) == START

    def test_longer_note_counts_double(self):
        """Test a quarter in an eighth triplet closes the group."""
        handler = TupletHandler()
        assert handler.new_note(3, 2, 4) == START
        assert handler.new_note(3, 2, 3) == STOP

    def test_shorter_notes_rescale(self):
        """Test sixteenths after an eighth double the running count."""
        handler = TupletHandler()
        states = [
            handler.new_note(5, 4, 4),
            handler.new_note(5, 4, 5),
            handler.new_note(5, 4, 5),
            handler.new_note(5, 4, 5),
        ]
        assert states == [START, MID, MID, STOP]
        assert handler.count == 0
