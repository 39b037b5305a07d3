"""
Machine creation factory for the CHIP-8 emulator.

Creates a ready-to-run :class:`~chip8.core.machine.Machine` from a ROM file
path, optionally seeding the random source so runs are reproducible.

Typical usage::

    machine = MachineFactory.create("pong.ch8")
    machine = MachineFactory.create("pong.ch8", seed=1234)
"""

from __future__ import annotations

import logging
import random
from dataclasses import asdict
from typing import Optional

from chip8.core.machine import Machine
from chip8.shell.services.rom_bytes_service import RomBytesService

logger = logging.getLogger(__name__)


class MachineFactory:
    """Create an emulated CHIP-8 machine from a ROM file."""

    @staticmethod
    def create(rom_path: str, seed: Optional[int] = None) -> Machine:
        """Build and return a machine with the ROM at *rom_path* loaded.

        Parameters
        ----------
        rom_path:
            Filesystem path to the raw program image.
        seed:
            Seed for the ``CXNN`` random source.  When ``None`` the source
            is seeded from the operating system.

        Returns
        -------
        Machine
            A machine reset to its power-on state, PC at 0x200.

        Raises
        ------
        RomLoadFault
            If the ROM is missing, unreadable, empty or too large.
        """
        rom = RomBytesService.read(rom_path)
        rng = random.Random(seed)
        machine = Machine(rom, rng=rng)
        logger.info(
            "Created machine for %s (%d bytes, seed=%s)",
            rom_path,
            len(rom),
            seed if seed is not None else "random",
        )
        return machine

    @staticmethod
    def describe(rom_path: str) -> dict:
        """Return a dictionary of human-readable ROM metadata.

        Raises:
            RomLoadFault: If the ROM cannot be loaded.
        """
        info = asdict(RomBytesService.describe(rom_path))
        opcode = info.pop("first_opcode")
        info["first_opcode"] = f"0x{opcode:04X}" if opcode is not None else "-"
        info["load_address"] = f"0x{info['load_address']:03X}"
        return info
