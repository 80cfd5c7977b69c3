"""
encscore - Decoder for Encore (.enc) music notation files.

This library provides tools to:
- Decode Encore score files into a renderer-agnostic score model
- Resolve ties, slurs and wedges that the format stores only by position
- Spell pitches, map key signatures and bracket tuplets

Example usage:
    from encscore import EncReader, NoteConnector

    score = EncReader.read("song.enc")
    connector = NoteConnector(score)

    for ref, note in score.iter_notes():
        print(note.pitch, connector.tie_start(ref))
"""

__version__ = "0.1.0"
__author__ = "encscore Contributors"

from encscore.analysis.connector import NoteConnector
from encscore.formats.enc.reader import EncReader
from encscore.models.elements import ElementRef, Note, Ornament, Rest
from encscore.models.score import Measure, ScoreFile, System
from encscore.utils.validation import FormatError

__all__ = [
    "EncReader",
    "NoteConnector",
    "ElementRef",
    "FormatError",
    "Measure",
    "Note",
    "Ornament",
    "Rest",
    "ScoreFile",
    "System",
]
