"""
ROM loading service for the CHIP-8 emulator.

Responsibilities:
  - Read program images from disk and reject anything that cannot be run
    (missing, unreadable, empty, or larger than the 3584 bytes available
    above address 0x200).
  - Summarise a ROM for the ``--info`` command-line mode.

CHIP-8 program files are raw binary with no header; the whole file is
copied verbatim into memory at 0x200.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from chip8.core.errors import DecodeFault, RomLoadFault
from chip8.core.instructions import decode, mnemonic
from chip8.core.memory import MAX_PROGRAM_SIZE, PROGRAM_START


# ---------------------------------------------------------------------------
# ROM summary data-class
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RomInfo:
    """Metadata describing a program image."""

    path: str
    size: int
    free_bytes: int
    load_address: int
    first_opcode: Optional[int]
    first_instruction: str


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class RomBytesService:
    """Static utility for loading ROM files."""

    @staticmethod
    def read(path: str) -> bytes:
        """Read the program image at *path*.

        Returns:
            The raw ROM bytes.

        Raises:
            RomLoadFault: If the file does not exist, cannot be read, is
                empty, or is too large to fit in memory.
        """
        if not os.path.isfile(path):
            raise RomLoadFault("file not found", path)
        try:
            with open(path, "rb") as fh:
                data = fh.read(MAX_PROGRAM_SIZE + 1)
        except OSError as exc:
            raise RomLoadFault(exc.strerror or str(exc), path) from exc

        RomBytesService.validate(data, path)
        return data

    @staticmethod
    def validate(data: bytes, path: Optional[str] = None) -> None:
        """Check that *data* is a loadable program image.

        Raises:
            RomLoadFault: If the image is empty or oversized.
        """
        if not data:
            raise RomLoadFault("file is empty", path)
        if len(data) > MAX_PROGRAM_SIZE:
            raise RomLoadFault(
                f"file exceeds the {MAX_PROGRAM_SIZE}-byte program area", path
            )

    @staticmethod
    def describe(path: str) -> RomInfo:
        """Load the ROM at *path* and summarise it.

        Raises:
            RomLoadFault: As for :meth:`read`.
        """
        data = RomBytesService.read(path)

        first_opcode: Optional[int] = None
        first_instruction = "(no complete opcode)"
        if len(data) >= 2:
            first_opcode = (data[0] << 8) | data[1]
            try:
                first_instruction = mnemonic(decode(first_opcode))
            except DecodeFault:
                first_instruction = "(invalid opcode)"

        return RomInfo(
            path=path,
            size=len(data),
            free_bytes=MAX_PROGRAM_SIZE - len(data),
            load_address=PROGRAM_START,
            first_opcode=first_opcode,
            first_instruction=first_instruction,
        )
