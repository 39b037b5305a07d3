# CHIP-8 emulation core
"""
Emulated CHIP-8 machine: memory, display, keypad, CPU and instruction set.

Use :class:`Machine(program) <machine.Machine>` to get a fully-wired system
and drive it with :meth:`~machine.Machine.step`.
"""

from chip8.core.errors import (
    Chip8Fault,
    DecodeFault,
    FramebufferFault,
    MemoryFault,
    RomLoadFault,
    StackFault,
    StackOverflowFault,
    StackUnderflowFault,
)
from chip8.core.frame_buffer import FrameBuffer
from chip8.core.instructions import Instruction, decode, mnemonic
from chip8.core.keypad import Keypad
from chip8.core.memory import Memory
from chip8.core.cpu import CPU
from chip8.core.machine import Machine

__all__ = [
    "CPU",
    "Chip8Fault",
    "DecodeFault",
    "FrameBuffer",
    "FramebufferFault",
    "Instruction",
    "Keypad",
    "Machine",
    "Memory",
    "MemoryFault",
    "RomLoadFault",
    "StackFault",
    "StackOverflowFault",
    "StackUnderflowFault",
    "decode",
    "mnemonic",
]
