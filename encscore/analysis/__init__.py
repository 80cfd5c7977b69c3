"""
Score analysis module.

Resolves the connections the file only stores implicitly.
"""

from encscore.analysis.connector import (
    NoteConnector,
    find_closest_note,
    find_first_note_after,
    find_last_note,
    find_last_note_before,
    find_previous_note,
)

__all__ = [
    "NoteConnector",
    "find_closest_note",
    "find_first_note_after",
    "find_last_note",
    "find_last_note_before",
    "find_previous_note",
]
