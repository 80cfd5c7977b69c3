"""
CLI display modules.
"""

from cli.display.tables import (
    create_block_table,
    display_measures,
    display_score_info,
)
from cli.display.hex_view import display_hex_dump

__all__ = [
    "create_block_table",
    "display_measures",
    "display_score_info",
    "display_hex_dump",
]
