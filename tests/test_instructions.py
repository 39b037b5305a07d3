"""Unit tests for opcode decoding and mnemonics."""

import dataclasses

import pytest

from chip8.core.errors import Chip8Fault, DecodeFault
from chip8.core import instructions as ins
from chip8.core.instructions import decode, mnemonic


# One representative opcode for each of the 35 instruction forms.
DECODE_TABLE = [
    (0x0123, ins.SysCall(0x123)),
    (0x00E0, ins.ClearScreen()),
    (0x00EE, ins.Return()),
    (0x1ABC, ins.Jump(0xABC)),
    (0x2ABC, ins.Call(0xABC)),
    (0x3A42, ins.SkipIfEqualImmediate(0xA, 0x42)),
    (0x4B17, ins.SkipIfNotEqualImmediate(0xB, 0x17)),
    (0x5120, ins.SkipIfEqualRegister(0x1, 0x2)),
    (0x6C99, ins.LoadImmediate(0xC, 0x99)),
    (0x7D01, ins.AddImmediate(0xD, 0x01)),
    (0x8340, ins.Move(0x3, 0x4)),
    (0x8341, ins.Or(0x3, 0x4)),
    (0x8342, ins.And(0x3, 0x4)),
    (0x8343, ins.Xor(0x3, 0x4)),
    (0x8344, ins.AddRegister(0x3, 0x4)),
    (0x8345, ins.SubtractRegister(0x3, 0x4)),
    (0x8346, ins.ShiftRight(0x3)),
    (0x8347, ins.SubtractReversed(0x3, 0x4)),
    (0x834E, ins.ShiftLeft(0x3)),
    (0x9560, ins.SkipIfNotEqualRegister(0x5, 0x6)),
    (0xA123, ins.LoadIndex(0x123)),
    (0xB456, ins.JumpWithOffset(0x456)),
    (0xC70F, ins.RandomAnd(0x7, 0x0F)),
    (0xD125, ins.Draw(0x1, 0x2, 5)),
    (0xE49E, ins.SkipIfKeyPressed(0x4)),
    (0xE4A1, ins.SkipIfKeyNotPressed(0x4)),
    (0xF207, ins.LoadDelayTimer(0x2)),
    (0xF20A, ins.WaitForKey(0x2)),
    (0xF215, ins.SetDelayTimer(0x2)),
    (0xF218, ins.SetSoundTimer(0x2)),
    (0xF21E, ins.AddToIndex(0x2)),
    (0xF229, ins.LoadGlyphAddress(0x2)),
    (0xF233, ins.StoreBCD(0x2)),
    (0xF255, ins.StoreRegisters(0x2)),
    (0xF265, ins.LoadRegisters(0x2)),
]


class TestDecode:
    """Test decoding of every instruction form."""

    @pytest.mark.parametrize("opcode,expected", DECODE_TABLE)
    def test_decode(self, opcode, expected):
        assert decode(opcode) == expected

    def test_table_covers_every_form(self):
        assert len({type(i) for _, i in DECODE_TABLE}) == 35

    def test_field_extraction_uses_full_ranges(self):
        assert decode(0x1FFF) == ins.Jump(0xFFF)
        assert decode(0x6FFF) == ins.LoadImmediate(0xF, 0xFF)
        assert decode(0xDFEF) == ins.Draw(0xF, 0xE, 0xF)
        assert decode(0xD000) == ins.Draw(0, 0, 0)

    def test_sys_call_covers_rest_of_family_zero(self):
        assert decode(0x0000) == ins.SysCall(0x000)
        assert decode(0x00E1) == ins.SysCall(0x0E1)
        assert decode(0x0FFF) == ins.SysCall(0xFFF)

    def test_instructions_are_frozen(self):
        instruction = decode(0x6A05)
        with pytest.raises(dataclasses.FrozenInstanceError):
            instruction.x = 1

    def test_decode_is_pure(self):
        assert decode(0xD125) == decode(0xD125)

    def test_every_value_decodes_or_faults(self):
        decoded = 0
        for opcode in range(0x10000):
            try:
                decode(opcode)
            except DecodeFault:
                continue
            decoded += 1
        full_families = 11 * 0x1000          # 0-4, 6, 7, A-D take every operand
        register_pairs = 2 * 0x100           # 5XY0, 9XY0
        alu = 9 * 0x100                      # 8XY0-8XY7, 8XYE
        single_register = (2 + 9) * 0x10     # EX9E, EXA1 and the nine FX forms
        assert decoded == full_families + register_pairs + alu + single_register


class TestDecodeRejections:
    """Test that undocumented forms raise DecodeFault."""

    @pytest.mark.parametrize(
        "opcode",
        [0x5001, 0x512F, 0x9001, 0x8008, 0x800D, 0x800F, 0xE000, 0xE09F, 0xF000, 0xF0FF, 0xF056],
    )
    def test_unrecognized_opcode(self, opcode):
        with pytest.raises(DecodeFault) as excinfo:
            decode(opcode)
        assert excinfo.value.opcode == opcode
        assert f"0x{opcode:04X}" in str(excinfo.value)

    @pytest.mark.parametrize("opcode", [-1, 0x10000])
    def test_out_of_range_value(self, opcode):
        with pytest.raises(DecodeFault) as excinfo:
            decode(opcode)
        assert "0x-" not in str(excinfo.value)

    def test_decode_fault_is_a_chip8_fault(self):
        with pytest.raises(Chip8Fault):
            decode(0xFFFF)


class TestMnemonic:
    """Test assembly-style rendering of instructions."""

    @pytest.mark.parametrize(
        "opcode,text",
        [
            (0x00E0, "CLS"),
            (0x00EE, "RET"),
            (0x0123, "SYS 0x123"),
            (0x1228, "JP 0x228"),
            (0x3A08, "SE VA, 0x08"),
            (0x6A05, "LD VA, 0x05"),
            (0x8AB4, "ADD VA, VB"),
            (0x8A0E, "SHL VA"),
            (0xA2F0, "LD I, 0x2F0"),
            (0xB300, "JP V0, 0x300"),
            (0xD125, "DRW V1, V2, 5"),
            (0xF10A, "LD V1, K"),
            (0xF333, "LD B, V3"),
            (0xF355, "LD [I], V3"),
            (0xF365, "LD V3, [I]"),
        ],
    )
    def test_mnemonic(self, opcode, text):
        assert mnemonic(decode(opcode)) == text

    @pytest.mark.parametrize("opcode,_", DECODE_TABLE)
    def test_every_form_has_a_mnemonic(self, opcode, _):
        assert mnemonic(decode(opcode))
