"""
Encore .enc file reader.

Reads .enc binary files into the ScoreFile model.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from encscore.formats.enc.cursor import ByteCursor
from encscore.formats.enc.decoder import EncDecoder
from encscore.formats.enc.scanner import BlockScanner
from encscore.models.score import ScoreFile
from encscore.utils.validation import FormatError


class EncReader:
    """
    Reader for Encore score files.

    Example:
        score = EncReader.read("song.enc")
        print(f"{len(score.measures)} measures, {len(score.instruments)} instruments")
    """

    MAGICS = (EncDecoder.MAGIC_LITTLE, EncDecoder.MAGIC_BIG)

    def __init__(self, diagnostics: Optional[logging.Logger] = None):
        self.diagnostics = diagnostics
        self._raw_data: bytes = b""

    @classmethod
    def read(
        cls, filepath: Union[str, Path], diagnostics: Optional[logging.Logger] = None
    ) -> ScoreFile:
        """
        Read an .enc file and return a ScoreFile.

        Args:
            filepath: Path to .enc file
            diagnostics: Logger receiving decode traces (module logger if None)

        Returns:
            Decoded ScoreFile
        """
        reader = cls(diagnostics)
        return reader.parse_file(filepath)

    def parse_file(self, filepath: Union[str, Path]) -> ScoreFile:
        """
        Parse an .enc file.

        Raises:
            FileNotFoundError: If the file does not exist
            FormatError: If the file cannot be decoded
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        with open(filepath, "rb") as f:
            self._raw_data = f.read()

        return self.parse_bytes(self._raw_data)

    def parse_bytes(self, data: bytes) -> ScoreFile:
        """
        Parse Encore data from bytes.

        Args:
            data: Raw .enc file contents

        Returns:
            Decoded ScoreFile
        """
        self._raw_data = data
        return EncDecoder(data, self.diagnostics).decode()

    @classmethod
    def can_read(cls, filepath: Union[str, Path]) -> bool:
        """
        Check if a file starts with an Encore magic tag.

        Args:
            filepath: Path to check

        Returns:
            True if file appears to be an Encore file
        """
        filepath = Path(filepath)

        if not filepath.exists():
            return False

        try:
            with open(filepath, "rb") as f:
                magic = f.read(4)
        except OSError:
            return False

        return magic in cls.MAGICS

    @classmethod
    def get_file_info(cls, filepath: Union[str, Path]) -> dict:
        """
        Get basic information about an .enc file without decoding measures.

        Args:
            filepath: Path to .enc file

        Returns:
            Dictionary with file info
        """
        filepath = Path(filepath)

        with open(filepath, "rb") as f:
            data = f.read()

        info = {
            "valid": False,
            "size": len(data),
            "magic": data[:4].decode("ascii", errors="replace"),
        }

        if data[:4] not in cls.MAGICS:
            return info

        try:
            decoder = EncDecoder(data)
            header = decoder.decode_header()
        except FormatError:
            return info

        info["valid"] = True
        info["byte_order"] = header.byte_order.name.lower()
        info["systems"] = header.system_count
        info["pages"] = header.page_count
        info["instruments"] = header.instrument_count
        info["staves_per_system"] = header.staves_per_system
        info["measures"] = header.measure_count
        info["blocks"] = len(scan_blocks(data))
        return info


def scan_blocks(data: bytes) -> List[Tuple[str, int, int]]:
    """
    List the known blocks of an Encore buffer without decoding them.

    Payloads are not interpreted: the scanner slides over them to the next
    known tag, so a tag-like byte sequence inside a payload is listed too.

    Returns:
        List of (tag, offset, declared size) tuples

    Raises:
        FormatError: If the magic is not an Encore magic
    """
    decoder = EncDecoder(data)
    decoder.decode_header()
    cursor = decoder.cursor
    scanner = BlockScanner(cursor)

    blocks = []
    while not cursor.at_end():
        tag = scanner.next_tag()
        if tag is None or cursor.remaining < 4:
            break
        offset = cursor.pos - 4
        size = cursor.read_u32()
        blocks.append((tag, offset, size))
    return blocks
