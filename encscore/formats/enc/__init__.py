"""Encore .enc format handlers."""

from encscore.formats.enc.cursor import ByteCursor
from encscore.formats.enc.decoder import EncDecoder
from encscore.formats.enc.measure_parser import MeasureParser
from encscore.formats.enc.reader import EncReader, scan_blocks
from encscore.formats.enc.scanner import BlockScanner

__all__ = [
    "ByteCursor",
    "BlockScanner",
    "EncDecoder",
    "EncReader",
    "MeasureParser",
    "scan_blocks",
]
