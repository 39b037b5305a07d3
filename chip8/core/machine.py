"""
Machine -- one complete emulated CHIP-8 system.

The machine owns every piece of mutable state for a single emulated
computer:

* **Memory** -- 4 KB with the glyph table and the loaded program.
* **FrameBuffer** -- the 64x32 display.
* **Keypad** -- the 16-key pad written by the host.
* **CPU** -- registers, stack, timers and the execution engine.

Hosts construct exactly one :class:`Machine` per emulated system and drive
it with :meth:`Machine.step`.  A fault raised by the core halts the machine
instead of propagating: the fault is logged, kept in :attr:`Machine.fault`,
and further calls to :meth:`Machine.step` do nothing until :meth:`reset`.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from chip8.core.cpu import CPU
from chip8.core.errors import Chip8Fault
from chip8.core.frame_buffer import FrameBuffer
from chip8.core.instructions import decode, mnemonic
from chip8.core.keypad import Keypad
from chip8.core.memory import Memory

logger = logging.getLogger(__name__)


class Machine:
    """A fully-wired CHIP-8 system.

    Parameters
    ----------
    program:
        The program image, copied into memory at 0x200.  May be empty.
    rng:
        Optional random source handed to the CPU for ``CXNN``.
    """

    def __init__(self, program: bytes = b"", rng: Optional[random.Random] = None) -> None:
        self.memory: Memory = Memory()
        self.frame_buffer: FrameBuffer = FrameBuffer()
        self.keypad: Keypad = Keypad()
        self.cpu: CPU = CPU(self.memory, self.frame_buffer, self.keypad, rng)

        self.program: bytes = b""

        # Run-state.
        self.machine_halt: bool = False
        self.fault: Optional[Chip8Fault] = None
        self.cycle_count: int = 0
        self._beep_pending: bool = False

        if program:
            self.load_program(program)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load_program(self, program: bytes) -> None:
        """Install *program* at 0x200 and reset the machine.

        Raises:
            RomLoadFault: If the image does not fit in memory.
        """
        program = bytes(program)
        self.memory.load_program(program)
        self.program = program
        self.reset()
        logger.info("Loaded %d-byte program", len(program))

    def reset(self) -> None:
        """Return the machine to its power-on state.

        Memory is rebuilt from the glyph table and the stored program image
        so that programs which modify themselves restart cleanly.
        """
        self.memory.reset()
        self.memory.load_program(self.program)
        self.frame_buffer.clear()
        self.cpu.reset()
        self.machine_halt = False
        self.fault = None
        self.cycle_count = 0
        self._beep_pending = False

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def step(self) -> bool:
        """Execute one CPU cycle.

        Returns:
            ``True`` if a cycle ran, ``False`` if the machine is halted
            (either already, or because this cycle faulted).
        """
        if self.machine_halt:
            return False
        try:
            self.cpu.execute_cycle()
        except Chip8Fault as exc:
            self._halt(exc)
            return False
        self.cycle_count += 1
        if self.cpu.beep:
            self._beep_pending = True
        return True

    def run_cycles(self, count: int) -> int:
        """Execute up to *count* cycles, stopping early on halt.

        Returns:
            The number of cycles that actually ran.
        """
        executed = 0
        for _ in range(count):
            if not self.step():
                break
            executed += 1
        return executed

    def consume_beep(self) -> bool:
        """Return ``True`` if the sound timer expired in any cycle since the
        last call, and clear the latch."""
        beep = self._beep_pending
        self._beep_pending = False
        return beep

    def _halt(self, fault: Chip8Fault) -> None:
        self.machine_halt = True
        self.fault = fault
        logger.error(
            "Machine halted at PC=0x%03X (%s) after %d cycles: %s",
            self.cpu.pc,
            self.describe_opcode(self.cpu.opcode),
            self.cycle_count,
            fault,
        )

    @staticmethod
    def describe_opcode(opcode: Optional[int]) -> str:
        """Return ``"XXXX MNEMONIC"`` for *opcode*, or ``"XXXX ???"``."""
        if opcode is None:
            return "no opcode fetched"
        try:
            return f"{opcode:04X} {mnemonic(decode(opcode))}"
        except Chip8Fault:
            return f"{opcode:04X} ???"

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"program={len(self.program)} bytes, "
            f"cycles={self.cycle_count}, "
            f"halted={self.machine_halt})"
        )
