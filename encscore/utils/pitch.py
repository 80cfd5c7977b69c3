"""
Key signature and pitch spelling.

Spelling is deliberately simple: it looks at one note's explicit
accidental and the key's sign only. Two B flats of the same pitch in one
measure are spelled correctly the first time (with the accidental) and
as A sharp the second time (without it) in a sharp or neutral key.
"""

from typing import NamedTuple

from encscore.models.elements import AccidentalType
from encscore.utils.validation import validate_key_code, validate_pitch

# Key code to fifths:
#   c   f  bf  ef  af  df  gf  cf  g   d   a   e   b  fs  cs
KEY_FIFTHS = (0, -1, -2, -3, -4, -5, -6, -7, 1, 2, 3, 4, 5, 6, 7)

KEY_NAMES = (
    "C", "F", "Bb", "Eb", "Ab", "Db", "Gb", "Cb", "G", "D", "A", "E", "B", "F#", "C#",
)

ALTER_TABLE = (0, 1, 0, 1, 0, 0, 1, 0, 1, 0, 1, 0)
STEP_TABLE = ("C", "C", "D", "D", "E", "F", "F", "G", "G", "A", "A", "B")


class Pitch(NamedTuple):
    """A spelled pitch: step letter, alteration in semitones, octave."""

    step: str
    alter: int
    octave: int

    def __str__(self) -> str:
        accidental = {-1: "b", 0: "", 1: "#"}.get(self.alter, "?")
        return f"{self.step}{accidental}{self.octave}"


def key_to_fifths(key: int) -> int:
    """
    Convert a key code (0-14) to a signed fifths count.

    Raises:
        ValidationError: If key is out of range
    """
    validate_key_code(key)
    return KEY_FIFTHS[key]


def key_name(key: int) -> str:
    validate_key_code(key)
    return KEY_NAMES[key]


def spell_pitch(pitch: int, accidental: int, fifths: int) -> Pitch:
    """
    Spell a semitone pitch using the note's accidental and the key.

    Args:
        pitch: Semitone pitch, 60 = C4
        accidental: AccidentalType code of the note's explicit glyph
        fifths: Prevailing key as a fifths count

    Returns:
        Spelled Pitch
    """
    validate_pitch(pitch)

    if accidental == AccidentalType.FLAT:
        # explicit flat
        return _flat_spelling(pitch)
    elif ALTER_TABLE[pitch % 12] and accidental == AccidentalType.NONE and fifths < 0:
        # black key without accidental in a flat key
        return _flat_spelling(pitch)

    return Pitch(STEP_TABLE[pitch % 12], ALTER_TABLE[pitch % 12], pitch // 12 - 1)


def _flat_spelling(pitch: int) -> Pitch:
    upper = pitch + 1
    return Pitch(STEP_TABLE[upper % 12], -1, upper // 12 - 1)
