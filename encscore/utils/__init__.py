"""Utility functions for encscore."""

from encscore.utils.pitch import Pitch, key_to_fifths, spell_pitch
from encscore.utils.tuplets import TupletHandler, TupletState
from encscore.utils.validation import (
    FormatError,
    TruncatedDataError,
    UnknownElementError,
    ValidationError,
)

__all__ = [
    "Pitch",
    "key_to_fifths",
    "spell_pitch",
    "TupletHandler",
    "TupletState",
    "FormatError",
    "TruncatedDataError",
    "UnknownElementError",
    "ValidationError",
]
