"""
Memory -- the 4 KB byte-addressable store of the CHIP-8 machine.

Layout
------

===============  ==========================================
Address range    Contents
===============  ==========================================
0x000 - 0x04F    Built-in hex glyph table (16 x 5 bytes)
0x050 - 0x1FF    Unused (historically the interpreter)
0x200 - 0xFFF    Program image and program data
===============  ==========================================

Unlike a hardware RAM chip the address is never masked: every access must
fall inside ``[0, 4095]`` or a :class:`~chip8.core.errors.MemoryFault` is
raised.
"""

from __future__ import annotations

from typing import Iterable

from chip8.core.errors import MemoryFault, RomLoadFault
from chip8.core.glyph_table import GLYPH_TABLE, GLYPH_TABLE_ADDRESS

MEMORY_SIZE: int = 0x1000
PROGRAM_START: int = 0x200
MAX_PROGRAM_SIZE: int = MEMORY_SIZE - PROGRAM_START


class Memory:
    """4096 bytes of RAM with the glyph table burned in at address 0."""

    def __init__(self) -> None:
        self._data: bytearray = bytearray(MEMORY_SIZE)
        self.load_glyphs()

    def reset(self) -> None:
        """Clear every byte and burn the glyph table back in."""
        for i in range(MEMORY_SIZE):
            self._data[i] = 0
        self.load_glyphs()

    def load_glyphs(self) -> None:
        end = GLYPH_TABLE_ADDRESS + len(GLYPH_TABLE)
        self._data[GLYPH_TABLE_ADDRESS:end] = bytes(GLYPH_TABLE)

    def load_program(self, program: bytes) -> None:
        """Copy *program* into memory starting at :data:`PROGRAM_START`.

        Raises:
            RomLoadFault: If the image is larger than the 3584 bytes
                available above the program start address.
        """
        if len(program) > MAX_PROGRAM_SIZE:
            raise RomLoadFault(
                f"program is {len(program)} bytes, maximum is {MAX_PROGRAM_SIZE}"
            )
        self._data[PROGRAM_START:PROGRAM_START + len(program)] = program

    # ------------------------------------------------------------------
    # Bounds-checked access
    # ------------------------------------------------------------------

    @staticmethod
    def check_range(address: int, length: int = 1) -> None:
        """Raise :class:`MemoryFault` unless ``address .. address+length-1``
        lies inside memory."""
        if address < 0 or address + length > MEMORY_SIZE:
            raise MemoryFault(address, length)

    def __getitem__(self, address: int) -> int:
        self.check_range(address)
        return self._data[address]

    def __setitem__(self, address: int, value: int) -> None:
        self.check_range(address)
        self._data[address] = value & 0xFF

    def __len__(self) -> int:
        return MEMORY_SIZE

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word (used for opcode fetch)."""
        self.check_range(address, 2)
        return (self._data[address] << 8) | self._data[address + 1]

    def read_block(self, address: int, length: int) -> bytes:
        """Return *length* bytes starting at *address*."""
        self.check_range(address, length)
        return bytes(self._data[address:address + length])

    def write_block(self, address: int, values: Iterable[int]) -> None:
        """Write *values* starting at *address*.

        The whole range is checked before the first byte is written, so a
        faulting write leaves memory untouched.
        """
        block = bytes(v & 0xFF for v in values)
        self.check_range(address, len(block))
        self._data[address:address + len(block)] = block

    def __repr__(self) -> str:
        return f"Memory(size={MEMORY_SIZE})"
