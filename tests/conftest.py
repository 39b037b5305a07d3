"""Shared fixtures for the CHIP-8 test-suite."""

import os
import random

# Headless SDL for the renderer / input / window tests.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pytest

from chip8.core.cpu import CPU
from chip8.core.frame_buffer import FrameBuffer
from chip8.core.keypad import Keypad
from chip8.core.machine import Machine
from chip8.core.memory import Memory


def program(*opcodes: int) -> bytes:
    """Assemble 16-bit opcodes into a big-endian program image."""
    return b"".join(op.to_bytes(2, "big") for op in opcodes)


@pytest.fixture
def cpu():
    """A bare CPU wired to fresh memory, display and keypad."""
    return CPU(Memory(), FrameBuffer(), Keypad(), random.Random(0))


@pytest.fixture
def load():
    """Factory fixture: ``load(0x6A05, 0x7A03, ...)`` returns a Machine."""

    def _load(*opcodes: int, seed: int = 0) -> Machine:
        return Machine(program(*opcodes), rng=random.Random(seed))

    return _load
