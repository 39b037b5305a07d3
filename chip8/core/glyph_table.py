"""
Built-in hexadecimal glyph table.

Sixteen 4x5 sprites, one per hex digit 0-F, five bytes each.  Only the high
nibble of every byte is lit.  The table is burned into memory at address
0x000 when a machine is created, and ``FX29`` points the index register at
``digit * GLYPH_HEIGHT``.
"""

from __future__ import annotations

from typing import List

GLYPH_HEIGHT: int = 5
GLYPH_TABLE_ADDRESS: int = 0x000

# fmt: off
GLYPH_TABLE: List[int] = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
]
# fmt: on

assert len(GLYPH_TABLE) == 16 * GLYPH_HEIGHT, f"glyph table must have 80 bytes, got {len(GLYPH_TABLE)}"
