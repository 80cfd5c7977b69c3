"""Data models for decoded Encore scores."""

from encscore.models.elements import (
    AccidentalType,
    Beam,
    Chord,
    Clef,
    ElementRef,
    ElementType,
    GraceType,
    KeyChange,
    Lyric,
    MeasureElement,
    Note,
    Ornament,
    OrnamentType,
    Rest,
    Tie,
    Unknown,
)
from encscore.models.score import (
    BarlineType,
    ByteOrder,
    ClefType,
    FreeText,
    Header,
    Instrument,
    Measure,
    RepeatType,
    ScoreFile,
    StaffData,
    StaffType,
    System,
    Title,
)

__all__ = [
    "AccidentalType",
    "BarlineType",
    "Beam",
    "ByteOrder",
    "Chord",
    "Clef",
    "ClefType",
    "ElementRef",
    "ElementType",
    "FreeText",
    "GraceType",
    "Header",
    "Instrument",
    "KeyChange",
    "Lyric",
    "Measure",
    "MeasureElement",
    "Note",
    "Ornament",
    "OrnamentType",
    "Rest",
    "RepeatType",
    "ScoreFile",
    "StaffData",
    "StaffType",
    "System",
    "Tie",
    "Title",
    "Unknown",
]
