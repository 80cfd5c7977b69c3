"""
Errors and value validation for Encore data.
"""


class FormatError(ValueError):
    """Raised when the input is not a decodable Encore file."""

    pass


class UnknownElementError(FormatError):
    """Raised when a measure element carries a type code with no decoder."""

    def __init__(self, code: int, offset: int):
        self.code = code
        self.offset = offset
        super().__init__(f"Unsupported element type {code} at offset 0x{offset:X}")


class TruncatedDataError(FormatError):
    """Raised when a fixed-width read runs past the end of the buffer."""

    def __init__(self, offset: int, wanted: int, available: int):
        self.offset = offset
        self.wanted = wanted
        self.available = available
        super().__init__(
            f"Truncated data at offset 0x{offset:X}: need {wanted} bytes, {available} left"
        )


class ValidationError(ValueError):
    """Raised when a decoded value is outside its documented range."""

    pass


def validate_key_code(key: int) -> None:
    """
    Validate a key signature code (0-14).

    Args:
        key: Key code as stored in staff data or key change elements

    Raises:
        ValidationError: If code is out of range
    """
    if not 0 <= key <= 14:
        raise ValidationError(f"Key code must be 0-14, got {key}")


def validate_pitch(pitch: int) -> None:
    """
    Validate a semitone pitch (0-127).

    Raises:
        ValidationError: If pitch is out of range
    """
    if not 0 <= pitch <= 127:
        raise ValidationError(f"Pitch must be 0-127, got {pitch}")
