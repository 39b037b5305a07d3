"""Unit tests for the Machine wrapper."""

import logging

import pytest

from chip8.core.errors import DecodeFault, MemoryFault, RomLoadFault, StackUnderflowFault
from chip8.core.machine import Machine
from chip8.core.memory import MAX_PROGRAM_SIZE


class TestStep:
    """Test stepping, halting and cycle accounting."""

    def test_step_counts_cycles(self, load):
        machine = load(0x6A05, 0x7A03, 0x3A08)
        assert machine.step()
        assert machine.step()
        assert machine.cycle_count == 2

    def test_empty_machine_runs_sys_calls(self):
        machine = Machine()
        assert machine.run_cycles(3) == 3
        assert machine.cpu.pc == 0x206

    def test_fault_halts_machine(self, load):
        machine = load(0x6000, 0x5001)
        assert machine.step()
        assert not machine.step()
        assert machine.machine_halt
        assert isinstance(machine.fault, DecodeFault)
        assert machine.cpu.pc == 0x202
        assert machine.cycle_count == 1

        # Further steps do nothing.
        assert not machine.step()
        assert machine.cpu.pc == 0x202

    def test_fault_is_logged(self, load, caplog):
        machine = load(0x00EE)
        with caplog.at_level(logging.ERROR, logger="chip8.core.machine"):
            machine.step()
        assert isinstance(machine.fault, StackUnderflowFault)
        assert "Machine halted at PC=0x200" in caplog.text
        assert "00EE RET" in caplog.text

    def test_fetch_fault_after_jump(self, load):
        machine = load(0x1FFF)
        assert machine.step()
        assert not machine.step()
        assert isinstance(machine.fault, MemoryFault)
        assert machine.cpu.pc == 0xFFF

    def test_run_cycles_stops_on_halt(self, load):
        machine = load(0x6000, 0x6100, 0xF000)
        assert machine.run_cycles(10) == 2
        assert machine.machine_halt


class TestReset:
    """Test reset and program loading."""

    def test_reset_restores_self_modified_program(self, load):
        machine = load(0x6042, 0xA200, 0xF055)
        machine.run_cycles(3)
        assert machine.memory[0x200] == 0x42

        machine.reset()
        assert machine.memory[0x200] == 0x60
        assert machine.cpu.pc == 0x200
        assert machine.cycle_count == 0

    def test_reset_clears_halt_and_display(self, load):
        machine = load(0xA000, 0xD015, 0x5001)
        machine.run_cycles(3)
        assert machine.machine_halt
        assert machine.frame_buffer.lit_count > 0

        machine.reset()
        assert not machine.machine_halt
        assert machine.fault is None
        assert machine.frame_buffer.lit_count == 0

    def test_reset_leaves_held_keys_to_the_host(self, load):
        machine = load(0x6005, 0xF00A)
        machine.keypad.press(5)
        machine.reset()
        assert machine.keypad.is_pressed(5)

        machine.run_cycles(2)
        assert machine.cpu.pc == 0x204

    def test_load_program_replaces_image(self, load):
        machine = load(0x1234, 0x5678)
        machine.load_program(b"\x00\xE0")
        assert machine.program == b"\x00\xE0"
        assert machine.memory.read_block(0x200, 4) == b"\x00\xE0\x00\x00"

    def test_oversized_program(self):
        with pytest.raises(RomLoadFault):
            Machine(b"\x00" * (MAX_PROGRAM_SIZE + 1))


class TestBeep:
    """Test the beep latch seen by hosts."""

    def test_beep_latched_across_cycles(self, load):
        machine = load(0x6002, 0xF018, 0x6100, 0x6100)
        machine.run_cycles(4)
        assert not machine.cpu.beep
        assert machine.consume_beep()
        assert not machine.consume_beep()

    def test_no_beep_without_sound_timer(self, load):
        machine = load(0x6002, 0x6100)
        machine.run_cycles(2)
        assert not machine.consume_beep()


class TestDescribeOpcode:

    @pytest.mark.parametrize(
        "opcode,text",
        [(None, "no opcode fetched"), (0x00E0, "00E0 CLS"), (0xD125, "D125 DRW V1, V2, 5"), (0x5001, "5001 ???")],
    )
    def test_describe(self, opcode, text):
        assert Machine.describe_opcode(opcode) == text
