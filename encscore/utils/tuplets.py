"""
Tuplet bracketing.

The file only stores the tuplet ratio on each note and rest. Where a
group starts and stops is deduced by counting notes in units of the
first note's duration.
"""

from enum import Enum


class TupletState(Enum):
    NONE = "none"
    START = "start"
    MID = "mid"
    STOP = "stop"


class TupletHandler:
    """
    Tuplet state machine. Use one instance per voice and feed it every
    note and rest of that voice in file order.

    Example:
        handler = TupletHandler()
        states = [handler.new_note(3, 2, 4) for _ in range(3)]
        # [START, MID, STOP]
    """

    def __init__(self):
        self.count = 0
        self.value = 0

    def new_note(self, actual_notes: int, normal_notes: int, duration_code: int) -> TupletState:
        """
        Advance the state machine by one note.

        Args:
            actual_notes: Notes played in the time of normal_notes (0 = none)
            normal_notes: Normal notes of the ratio (0 = none)
            duration_code: Face value of the note (1=whole ... 8=128th)

        Returns:
            The note's position in its tuplet group
        """
        if actual_notes <= 0 or normal_notes <= 0:
            self.count = 0
            return TupletState.NONE

        if self.count == 0:
            self.count = 1
            self.value = duration_code
            return TupletState.START

        # Shorter notes rescale the running count to the shorter unit,
        # longer notes weigh more than one unit.
        count = 1
        value = duration_code
        while value > self.value:
            self.count *= 2
            self.value += 1
        while self.value > value:
            count *= 2
            value += 1
        self.count += count

        if self.count >= actual_notes:
            self.count = 0
            return TupletState.STOP

        return TupletState.MID
