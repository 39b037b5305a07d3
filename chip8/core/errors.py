"""
Fault types raised by the CHIP-8 core.

Every condition that would leave the virtual machine in an undefined state
is reported as a subclass of :class:`Chip8Fault`.  The core never exits the
process on its own; it raises, and the owning :class:`~chip8.core.machine.Machine`
(or whatever host drives the CPU directly) decides whether to halt, log or
reset.
"""

from __future__ import annotations

from typing import Optional


def _hex_word(value: int) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}0x{abs(value):04X}"


class Chip8Fault(Exception):
    """Base class for every fault raised by the emulation core."""


class DecodeFault(Chip8Fault):
    """The opcode matches none of the documented instruction forms."""

    def __init__(self, opcode: int) -> None:
        self.opcode: int = opcode
        super().__init__(f"unrecognized opcode {_hex_word(opcode)}")


class MemoryFault(Chip8Fault):
    """A fetch, read or write fell outside the 4 KB address space."""

    def __init__(self, address: int, length: int = 1) -> None:
        self.address: int = address
        self.length: int = length
        if length == 1:
            where = _hex_word(address)
        else:
            where = f"{_hex_word(address)}..{_hex_word(address + length - 1)}"
        super().__init__(f"memory access out of range: {where}")


class FramebufferFault(Chip8Fault):
    """A sprite pixel would land outside the 64x32 display grid."""

    def __init__(self, x: int, y: int) -> None:
        self.x: int = x
        self.y: int = y
        super().__init__(f"pixel ({x}, {y}) is outside the display")


class StackFault(Chip8Fault):
    """Base class for call-stack faults."""


class StackOverflowFault(StackFault):
    """A call was attempted with the call stack already full."""

    def __init__(self, depth: int) -> None:
        self.depth: int = depth
        super().__init__(f"call stack overflow (depth {depth})")


class StackUnderflowFault(StackFault):
    """A return was attempted with an empty call stack."""

    def __init__(self) -> None:
        super().__init__("return with empty call stack")


class RomLoadFault(Chip8Fault):
    """A program image could not be read or does not fit in memory."""

    def __init__(self, reason: str, path: Optional[str] = None) -> None:
        self.path: Optional[str] = path
        self.reason: str = reason
        if path is not None:
            super().__init__(f"cannot load ROM {path!r}: {reason}")
        else:
            super().__init__(f"cannot load ROM: {reason}")
