"""
Instruction decoder for the CHIP-8 execution engine.

:func:`decode` turns a raw 16-bit opcode into one of 35 frozen dataclasses,
each carrying only the operand fields its form defines.  Decoding is pure
bit-field extraction:

* the top nibble selects the family;
* families ``0``, ``8``, ``E`` and ``F`` disambiguate on the low nibble or
  the low byte;
* ``5XY0`` and ``9XY0`` require a zero low nibble.

Any word that matches none of the documented forms raises
:class:`~chip8.core.errors.DecodeFault` carrying the raw value; nothing is
silently defaulted.

Operand naming
--------------

========  ============================================
Field     Bits
========  ============================================
address   ``opcode & 0x0FFF`` (NNN)
x         ``(opcode >> 8) & 0xF`` (register index)
y         ``(opcode >> 4) & 0xF`` (register index)
value     ``opcode & 0x00FF`` (NN, 8-bit immediate)
height    ``opcode & 0x000F`` (N, sprite rows)
========  ============================================
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Callable, Dict

from chip8.core.errors import DecodeFault


# ---------------------------------------------------------------------------
# Bit-field extraction
# ---------------------------------------------------------------------------

def _family(opcode: int) -> int:
    return (opcode & 0xF000) >> 12


def _x(opcode: int) -> int:
    return (opcode & 0x0F00) >> 8


def _y(opcode: int) -> int:
    return (opcode & 0x00F0) >> 4


def _nn(opcode: int) -> int:
    return opcode & 0x00FF


def _nnn(opcode: int) -> int:
    return opcode & 0x0FFF


def _n(opcode: int) -> int:
    return opcode & 0x000F


# ---------------------------------------------------------------------------
# Instruction variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Instruction:
    """Base class of every decoded instruction."""


@dataclass(frozen=True)
class SysCall(Instruction):
    """0NNN -- call a host machine-code routine (ignored)."""
    address: int


@dataclass(frozen=True)
class ClearScreen(Instruction):
    """00E0"""


@dataclass(frozen=True)
class Return(Instruction):
    """00EE"""


@dataclass(frozen=True)
class Jump(Instruction):
    """1NNN -- PC = NNN"""
    address: int


@dataclass(frozen=True)
class Call(Instruction):
    """2NNN -- push PC, PC = NNN"""
    address: int


@dataclass(frozen=True)
class SkipIfEqualImmediate(Instruction):
    """3XNN -- skip if Vx == NN"""
    x: int
    value: int


@dataclass(frozen=True)
class SkipIfNotEqualImmediate(Instruction):
    """4XNN -- skip if Vx != NN"""
    x: int
    value: int


@dataclass(frozen=True)
class SkipIfEqualRegister(Instruction):
    """5XY0 -- skip if Vx == Vy"""
    x: int
    y: int


@dataclass(frozen=True)
class LoadImmediate(Instruction):
    """6XNN -- Vx = NN"""
    x: int
    value: int


@dataclass(frozen=True)
class AddImmediate(Instruction):
    """7XNN -- Vx += NN, flag untouched"""
    x: int
    value: int


@dataclass(frozen=True)
class Move(Instruction):
    """8XY0 -- Vx = Vy"""
    x: int
    y: int


@dataclass(frozen=True)
class Or(Instruction):
    """8XY1 -- Vx |= Vy"""
    x: int
    y: int


@dataclass(frozen=True)
class And(Instruction):
    """8XY2 -- Vx &= Vy"""
    x: int
    y: int


@dataclass(frozen=True)
class Xor(Instruction):
    """8XY3 -- Vx ^= Vy"""
    x: int
    y: int


@dataclass(frozen=True)
class AddRegister(Instruction):
    """8XY4 -- Vx += Vy, VF = carry"""
    x: int
    y: int


@dataclass(frozen=True)
class SubtractRegister(Instruction):
    """8XY5 -- Vx -= Vy, VF = no borrow"""
    x: int
    y: int


@dataclass(frozen=True)
class ShiftRight(Instruction):
    """8XY6 -- VF = Vx & 1, Vx >>= 1"""
    x: int


@dataclass(frozen=True)
class SubtractReversed(Instruction):
    """8XY7 -- Vx = Vy - Vx, VF = no borrow"""
    x: int
    y: int


@dataclass(frozen=True)
class ShiftLeft(Instruction):
    """8XYE -- VF = Vx >> 7, Vx <<= 1"""
    x: int


@dataclass(frozen=True)
class SkipIfNotEqualRegister(Instruction):
    """9XY0 -- skip if Vx != Vy"""
    x: int
    y: int


@dataclass(frozen=True)
class LoadIndex(Instruction):
    """ANNN -- I = NNN"""
    address: int


@dataclass(frozen=True)
class JumpWithOffset(Instruction):
    """BNNN -- PC = V0 + NNN"""
    address: int


@dataclass(frozen=True)
class RandomAnd(Instruction):
    """CXNN -- Vx = rand() & NN"""
    x: int
    value: int


@dataclass(frozen=True)
class Draw(Instruction):
    """DXYN -- XOR-blit N sprite rows from I at (Vx, Vy), VF = collision"""
    x: int
    y: int
    height: int


@dataclass(frozen=True)
class SkipIfKeyPressed(Instruction):
    """EX9E"""
    x: int


@dataclass(frozen=True)
class SkipIfKeyNotPressed(Instruction):
    """EXA1"""
    x: int


@dataclass(frozen=True)
class LoadDelayTimer(Instruction):
    """FX07 -- Vx = delay timer"""
    x: int


@dataclass(frozen=True)
class WaitForKey(Instruction):
    """FX0A -- hold PC until key Vx is pressed"""
    x: int


@dataclass(frozen=True)
class SetDelayTimer(Instruction):
    """FX15 -- delay timer = Vx"""
    x: int


@dataclass(frozen=True)
class SetSoundTimer(Instruction):
    """FX18 -- sound timer = Vx"""
    x: int


@dataclass(frozen=True)
class AddToIndex(Instruction):
    """FX1E -- I += Vx"""
    x: int


@dataclass(frozen=True)
class LoadGlyphAddress(Instruction):
    """FX29 -- I = Vx * 5"""
    x: int


@dataclass(frozen=True)
class StoreBCD(Instruction):
    """FX33 -- memory[I..I+2] = BCD(Vx)"""
    x: int


@dataclass(frozen=True)
class StoreRegisters(Instruction):
    """FX55 -- memory[I..I+x] = V0..Vx, I += x + 1"""
    x: int


@dataclass(frozen=True)
class LoadRegisters(Instruction):
    """FX65 -- V0..Vx = memory[I..I+x], I += x + 1"""
    x: int


# ---------------------------------------------------------------------------
# Sub-opcode tables
# ---------------------------------------------------------------------------

_ALU_OPS: Dict[int, Callable[[int], Instruction]] = {
    0x0: lambda op: Move(_x(op), _y(op)),
    0x1: lambda op: Or(_x(op), _y(op)),
    0x2: lambda op: And(_x(op), _y(op)),
    0x3: lambda op: Xor(_x(op), _y(op)),
    0x4: lambda op: AddRegister(_x(op), _y(op)),
    0x5: lambda op: SubtractRegister(_x(op), _y(op)),
    0x6: lambda op: ShiftRight(_x(op)),
    0x7: lambda op: SubtractReversed(_x(op), _y(op)),
    0xE: lambda op: ShiftLeft(_x(op)),
}

_KEY_OPS: Dict[int, Callable[[int], Instruction]] = {
    0x9E: SkipIfKeyPressed,
    0xA1: SkipIfKeyNotPressed,
}

_MISC_OPS: Dict[int, Callable[[int], Instruction]] = {
    0x07: LoadDelayTimer,
    0x0A: WaitForKey,
    0x15: SetDelayTimer,
    0x18: SetSoundTimer,
    0x1E: AddToIndex,
    0x29: LoadGlyphAddress,
    0x33: StoreBCD,
    0x55: StoreRegisters,
    0x65: LoadRegisters,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def decode(opcode: int) -> Instruction:
    """Decode a raw 16-bit *opcode* into its typed instruction.

    Raises:
        DecodeFault: If *opcode* is not a 16-bit value or matches none of
            the 35 documented instruction forms.
    """
    if not 0 <= opcode <= 0xFFFF:
        raise DecodeFault(opcode)

    family = _family(opcode)

    if family == 0x0:
        if opcode == 0x00E0:
            return ClearScreen()
        if opcode == 0x00EE:
            return Return()
        return SysCall(_nnn(opcode))
    if family == 0x1:
        return Jump(_nnn(opcode))
    if family == 0x2:
        return Call(_nnn(opcode))
    if family == 0x3:
        return SkipIfEqualImmediate(_x(opcode), _nn(opcode))
    if family == 0x4:
        return SkipIfNotEqualImmediate(_x(opcode), _nn(opcode))
    if family == 0x5:
        if _n(opcode) != 0:
            raise DecodeFault(opcode)
        return SkipIfEqualRegister(_x(opcode), _y(opcode))
    if family == 0x6:
        return LoadImmediate(_x(opcode), _nn(opcode))
    if family == 0x7:
        return AddImmediate(_x(opcode), _nn(opcode))
    if family == 0x8:
        build = _ALU_OPS.get(_n(opcode))
        if build is None:
            raise DecodeFault(opcode)
        return build(opcode)
    if family == 0x9:
        if _n(opcode) != 0:
            raise DecodeFault(opcode)
        return SkipIfNotEqualRegister(_x(opcode), _y(opcode))
    if family == 0xA:
        return LoadIndex(_nnn(opcode))
    if family == 0xB:
        return JumpWithOffset(_nnn(opcode))
    if family == 0xC:
        return RandomAnd(_x(opcode), _nn(opcode))
    if family == 0xD:
        return Draw(_x(opcode), _y(opcode), _n(opcode))

    # Families E and F select on the low byte and carry only Vx.
    table = _KEY_OPS if family == 0xE else _MISC_OPS
    build = table.get(_nn(opcode))
    if build is None:
        raise DecodeFault(opcode)
    return build(_x(opcode))


_MNEMONICS: Dict[type, str] = {
    SysCall: "SYS 0x{address:03X}",
    ClearScreen: "CLS",
    Return: "RET",
    Jump: "JP 0x{address:03X}",
    Call: "CALL 0x{address:03X}",
    SkipIfEqualImmediate: "SE V{x:X}, 0x{value:02X}",
    SkipIfNotEqualImmediate: "SNE V{x:X}, 0x{value:02X}",
    SkipIfEqualRegister: "SE V{x:X}, V{y:X}",
    LoadImmediate: "LD V{x:X}, 0x{value:02X}",
    AddImmediate: "ADD V{x:X}, 0x{value:02X}",
    Move: "LD V{x:X}, V{y:X}",
    Or: "OR V{x:X}, V{y:X}",
    And: "AND V{x:X}, V{y:X}",
    Xor: "XOR V{x:X}, V{y:X}",
    AddRegister: "ADD V{x:X}, V{y:X}",
    SubtractRegister: "SUB V{x:X}, V{y:X}",
    ShiftRight: "SHR V{x:X}",
    SubtractReversed: "SUBN V{x:X}, V{y:X}",
    ShiftLeft: "SHL V{x:X}",
    SkipIfNotEqualRegister: "SNE V{x:X}, V{y:X}",
    LoadIndex: "LD I, 0x{address:03X}",
    JumpWithOffset: "JP V0, 0x{address:03X}",
    RandomAnd: "RND V{x:X}, 0x{value:02X}",
    Draw: "DRW V{x:X}, V{y:X}, {height}",
    SkipIfKeyPressed: "SKP V{x:X}",
    SkipIfKeyNotPressed: "SKNP V{x:X}",
    LoadDelayTimer: "LD V{x:X}, DT",
    WaitForKey: "LD V{x:X}, K",
    SetDelayTimer: "LD DT, V{x:X}",
    SetSoundTimer: "LD ST, V{x:X}",
    AddToIndex: "ADD I, V{x:X}",
    LoadGlyphAddress: "LD F, V{x:X}",
    StoreBCD: "LD B, V{x:X}",
    StoreRegisters: "LD [I], V{x:X}",
    LoadRegisters: "LD V{x:X}, [I]",
}

assert len(_MNEMONICS) == 35, f"expected 35 instruction forms, got {len(_MNEMONICS)}"


def mnemonic(instruction: Instruction) -> str:
    """Render *instruction* as short assembly-style text, e.g. ``DRW V1, V2, 5``."""
    return _MNEMONICS[type(instruction)].format(**asdict(instruction))
