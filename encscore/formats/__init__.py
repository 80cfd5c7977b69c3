"""Format handlers for Encore files."""

from encscore.formats.enc import EncReader

__all__ = ["EncReader"]
