"""
CHIP-8 execution engine.

One call to :meth:`CPU.execute_cycle` performs a full machine cycle:

1. fetch the big-endian 16-bit word at the program counter;
2. decode it with :func:`~chip8.core.instructions.decode`;
3. execute it through the dispatch table, which yields the next program
   counter (``pc + 2`` normally, ``pc + 4`` for a taken skip, or an
   absolute target for jumps, calls and returns);
4. decrement the delay and sound timers by one if they are non-zero.

Key behaviours:

* ``8XY4`` sets VF to the carry out of bit 7; ``8XY5`` / ``8XY7`` set VF to 1
  when *no* borrow occurred.  The result is written before the flag, so
  when ``x == 0xF`` the flag wins.
* ``8XY6`` / ``8XYE`` shift Vx in place and ignore Vy.
* ``DXYN`` does not wrap coordinates; a lit sprite bit landing off the
  64x32 grid is a :class:`~chip8.core.errors.FramebufferFault`.
* ``FX55`` / ``FX65`` advance the index register by ``x + 1``.
* ``FX0A`` holds the program counter until the key named by Vx is pressed.
* Timers tick once per executed cycle, not on a wall clock.  The one-shot
  :attr:`CPU.beep` flag is raised for the cycle in which the sound timer
  expires (its decrement starts from 1).

A fault aborts the cycle before the program counter moves and before the
timers tick; every handler validates its memory and framebuffer accesses
before mutating state.
"""

from __future__ import annotations

import random
from typing import Callable, Dict, List, Optional

from chip8.core.errors import FramebufferFault, StackOverflowFault, StackUnderflowFault
from chip8.core.frame_buffer import FrameBuffer
from chip8.core.glyph_table import GLYPH_HEIGHT, GLYPH_TABLE_ADDRESS
from chip8.core.instructions import (
    AddImmediate,
    AddRegister,
    AddToIndex,
    And,
    Call,
    ClearScreen,
    Draw,
    Instruction,
    Jump,
    JumpWithOffset,
    LoadDelayTimer,
    LoadGlyphAddress,
    LoadImmediate,
    LoadIndex,
    LoadRegisters,
    Move,
    Or,
    RandomAnd,
    Return,
    SetDelayTimer,
    SetSoundTimer,
    ShiftLeft,
    ShiftRight,
    SkipIfEqualImmediate,
    SkipIfEqualRegister,
    SkipIfKeyNotPressed,
    SkipIfKeyPressed,
    SkipIfNotEqualImmediate,
    SkipIfNotEqualRegister,
    StoreBCD,
    StoreRegisters,
    SubtractRegister,
    SubtractReversed,
    SysCall,
    WaitForKey,
    Xor,
    decode,
)
from chip8.core.keypad import Keypad
from chip8.core.memory import PROGRAM_START, Memory


class CPU:
    """CHIP-8 interpreter core.

    Parameters
    ----------
    memory:
        The 4 KB store holding the glyph table and the program.
    frame_buffer:
        The 64x32 display written by ``00E0`` and ``DXYN``.
    keypad:
        The 16-key pad sampled by ``EX9E``, ``EXA1`` and ``FX0A``.
    rng:
        Source of random bytes for ``CXNN``.  Pass a seeded
        :class:`random.Random` for reproducible runs.
    """

    REGISTER_COUNT: int = 16
    FLAG: int = 0xF
    STACK_DEPTH: int = 16

    def __init__(
        self,
        memory: Memory,
        frame_buffer: FrameBuffer,
        keypad: Keypad,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.memory = memory
        self.frame_buffer = frame_buffer
        self.keypad = keypad
        self.rng: random.Random = rng if rng is not None else random.Random()

        # Registers
        self.v: bytearray = bytearray(self.REGISTER_COUNT)
        self.i: int = 0                   # 16-bit index register
        self.pc: int = PROGRAM_START      # program counter

        # Call stack of return addresses (the address of each CALL)
        self.stack: List[int] = []

        # Timers
        self.delay_timer: int = 0
        self.sound_timer: int = 0
        self.beep: bool = False

        self.opcode: Optional[int] = None
        self.instruction: Optional[Instruction] = None

        self._dispatch: Dict[type, Callable] = self._build_dispatch_table()

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return the registers, stack and timers to their power-on state."""
        for r in range(self.REGISTER_COUNT):
            self.v[r] = 0
        self.i = 0
        self.pc = PROGRAM_START
        self.stack.clear()
        self.delay_timer = 0
        self.sound_timer = 0
        self.beep = False
        self.opcode = None
        self.instruction = None

    # ------------------------------------------------------------------
    # Execute
    # ------------------------------------------------------------------

    def execute_cycle(self) -> Instruction:
        """Fetch, decode and execute one instruction, then tick the timers.

        Returns:
            The instruction that was executed.

        Raises:
            Chip8Fault: Any decode, memory, framebuffer or stack fault.  The
                program counter still points at the faulting instruction.
        """
        self.beep = False
        self.opcode = None
        self.instruction = None

        self.opcode = self.memory.read_word(self.pc)
        instruction = decode(self.opcode)
        self.instruction = instruction

        self.pc = self._dispatch[type(instruction)](instruction)

        self._tick_timers()
        return instruction

    def _tick_timers(self) -> None:
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            if self.sound_timer == 1:
                self.beep = True
            self.sound_timer -= 1

    @property
    def stack_depth(self) -> int:
        return len(self.stack)

    # ------------------------------------------------------------------
    # Program-counter helpers
    # ------------------------------------------------------------------

    def _next(self) -> int:
        return self.pc + 2

    def _skip_if(self, condition: bool) -> int:
        return self.pc + 4 if condition else self.pc + 2

    # ------------------------------------------------------------------
    # Flow control
    # ------------------------------------------------------------------

    def i_sys(self, ins: SysCall) -> int:
        """0NNN -- no host routines exist; treated as a no-op."""
        return self._next()

    def i_cls(self, ins: ClearScreen) -> int:
        self.frame_buffer.clear()
        return self._next()

    def i_ret(self, ins: Return) -> int:
        if not self.stack:
            raise StackUnderflowFault()
        return self.stack.pop() + 2

    def i_jp(self, ins: Jump) -> int:
        return ins.address

    def i_call(self, ins: Call) -> int:
        if len(self.stack) >= self.STACK_DEPTH:
            raise StackOverflowFault(len(self.stack))
        self.stack.append(self.pc)
        return ins.address

    def i_jp_v0(self, ins: JumpWithOffset) -> int:
        return ins.address + self.v[0]

    # ------------------------------------------------------------------
    # Conditional skips
    # ------------------------------------------------------------------

    def i_se_imm(self, ins: SkipIfEqualImmediate) -> int:
        return self._skip_if(self.v[ins.x] == ins.value)

    def i_sne_imm(self, ins: SkipIfNotEqualImmediate) -> int:
        return self._skip_if(self.v[ins.x] != ins.value)

    def i_se_reg(self, ins: SkipIfEqualRegister) -> int:
        return self._skip_if(self.v[ins.x] == self.v[ins.y])

    def i_sne_reg(self, ins: SkipIfNotEqualRegister) -> int:
        return self._skip_if(self.v[ins.x] != self.v[ins.y])

    def i_skp(self, ins: SkipIfKeyPressed) -> int:
        return self._skip_if(self.keypad.is_pressed(self.v[ins.x]))

    def i_sknp(self, ins: SkipIfKeyNotPressed) -> int:
        return self._skip_if(not self.keypad.is_pressed(self.v[ins.x]))

    # ------------------------------------------------------------------
    # Register loads and arithmetic
    # ------------------------------------------------------------------

    def i_ld_imm(self, ins: LoadImmediate) -> int:
        self.v[ins.x] = ins.value
        return self._next()

    def i_add_imm(self, ins: AddImmediate) -> int:
        self.v[ins.x] = (self.v[ins.x] + ins.value) & 0xFF
        return self._next()

    def i_ld_reg(self, ins: Move) -> int:
        self.v[ins.x] = self.v[ins.y]
        return self._next()

    def i_or(self, ins: Or) -> int:
        self.v[ins.x] |= self.v[ins.y]
        return self._next()

    def i_and(self, ins: And) -> int:
        self.v[ins.x] &= self.v[ins.y]
        return self._next()

    def i_xor(self, ins: Xor) -> int:
        self.v[ins.x] ^= self.v[ins.y]
        return self._next()

    def i_add_reg(self, ins: AddRegister) -> int:
        total = self.v[ins.x] + self.v[ins.y]
        self.v[ins.x] = total & 0xFF
        self.v[self.FLAG] = 1 if total > 0xFF else 0
        return self._next()

    def i_sub(self, ins: SubtractRegister) -> int:
        vx, vy = self.v[ins.x], self.v[ins.y]
        self.v[ins.x] = (vx - vy) & 0xFF
        self.v[self.FLAG] = 1 if vx >= vy else 0
        return self._next()

    def i_subn(self, ins: SubtractReversed) -> int:
        vx, vy = self.v[ins.x], self.v[ins.y]
        self.v[ins.x] = (vy - vx) & 0xFF
        self.v[self.FLAG] = 1 if vy >= vx else 0
        return self._next()

    def i_shr(self, ins: ShiftRight) -> int:
        vx = self.v[ins.x]
        self.v[ins.x] = vx >> 1
        self.v[self.FLAG] = vx & 0x01
        return self._next()

    def i_shl(self, ins: ShiftLeft) -> int:
        vx = self.v[ins.x]
        self.v[ins.x] = (vx << 1) & 0xFF
        self.v[self.FLAG] = (vx >> 7) & 0x01
        return self._next()

    def i_rnd(self, ins: RandomAnd) -> int:
        self.v[ins.x] = self.rng.randrange(256) & ins.value
        return self._next()

    # ------------------------------------------------------------------
    # Index register and memory
    # ------------------------------------------------------------------

    def i_ld_i(self, ins: LoadIndex) -> int:
        self.i = ins.address
        return self._next()

    def i_add_i(self, ins: AddToIndex) -> int:
        self.i = (self.i + self.v[ins.x]) & 0xFFFF
        return self._next()

    def i_ld_f(self, ins: LoadGlyphAddress) -> int:
        self.i = GLYPH_TABLE_ADDRESS + self.v[ins.x] * GLYPH_HEIGHT
        return self._next()

    def i_ld_b(self, ins: StoreBCD) -> int:
        vx = self.v[ins.x]
        self.memory.write_block(self.i, (vx // 100, (vx // 10) % 10, vx % 10))
        return self._next()

    def i_ld_mem_v(self, ins: StoreRegisters) -> int:
        count = ins.x + 1
        self.memory.write_block(self.i, self.v[:count])
        self.i = (self.i + count) & 0xFFFF
        return self._next()

    def i_ld_v_mem(self, ins: LoadRegisters) -> int:
        count = ins.x + 1
        self.v[:count] = self.memory.read_block(self.i, count)
        self.i = (self.i + count) & 0xFFFF
        return self._next()

    # ------------------------------------------------------------------
    # Timers and keypad
    # ------------------------------------------------------------------

    def i_ld_v_dt(self, ins: LoadDelayTimer) -> int:
        self.v[ins.x] = self.delay_timer
        return self._next()

    def i_ld_dt(self, ins: SetDelayTimer) -> int:
        self.delay_timer = self.v[ins.x]
        return self._next()

    def i_ld_st(self, ins: SetSoundTimer) -> int:
        self.sound_timer = self.v[ins.x]
        return self._next()

    def i_ld_k(self, ins: WaitForKey) -> int:
        # Spin on the same instruction until the named key is held.
        if self.keypad.is_pressed(self.v[ins.x]):
            return self._next()
        return self.pc

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def i_drw(self, ins: Draw) -> int:
        """DXYN -- XOR-blit an N-row sprite from memory[I] at (Vx, Vy)."""
        x0 = self.v[ins.x]
        y0 = self.v[ins.y]
        rows = self.memory.read_block(self.i, ins.height)

        # Collect every lit pixel first so an off-screen bit faults before
        # the framebuffer or VF is touched.
        pixels = []
        for row, bits in enumerate(rows):
            for col in range(8):
                if bits & (0x80 >> col):
                    px, py = x0 + col, y0 + row
                    if not self.frame_buffer.contains(px, py):
                        raise FramebufferFault(px, py)
                    pixels.append((px, py))

        self.v[self.FLAG] = 0
        for px, py in pixels:
            if self.frame_buffer.flip_pixel(px, py):
                self.v[self.FLAG] = 1
        return self._next()

    # ------------------------------------------------------------------
    # Dispatch table
    # ------------------------------------------------------------------

    def _build_dispatch_table(self) -> Dict[type, Callable]:
        """Map each instruction type to its bound handler."""
        table: Dict[type, Callable] = {
            SysCall: self.i_sys,
            ClearScreen: self.i_cls,
            Return: self.i_ret,
            Jump: self.i_jp,
            Call: self.i_call,
            SkipIfEqualImmediate: self.i_se_imm,
            SkipIfNotEqualImmediate: self.i_sne_imm,
            SkipIfEqualRegister: self.i_se_reg,
            LoadImmediate: self.i_ld_imm,
            AddImmediate: self.i_add_imm,
            Move: self.i_ld_reg,
            Or: self.i_or,
            And: self.i_and,
            Xor: self.i_xor,
            AddRegister: self.i_add_reg,
            SubtractRegister: self.i_sub,
            ShiftRight: self.i_shr,
            SubtractReversed: self.i_subn,
            ShiftLeft: self.i_shl,
            SkipIfNotEqualRegister: self.i_sne_reg,
            LoadIndex: self.i_ld_i,
            JumpWithOffset: self.i_jp_v0,
            RandomAnd: self.i_rnd,
            Draw: self.i_drw,
            SkipIfKeyPressed: self.i_skp,
            SkipIfKeyNotPressed: self.i_sknp,
            LoadDelayTimer: self.i_ld_v_dt,
            WaitForKey: self.i_ld_k,
            SetDelayTimer: self.i_ld_dt,
            SetSoundTimer: self.i_ld_st,
            AddToIndex: self.i_add_i,
            LoadGlyphAddress: self.i_ld_f,
            StoreBCD: self.i_ld_b,
            StoreRegisters: self.i_ld_mem_v,
            LoadRegisters: self.i_ld_v_mem,
        }
        return table

    def __repr__(self) -> str:
        return (
            f"CPU(pc=0x{self.pc:03X}, i=0x{self.i:04X}, "
            f"sp={len(self.stack)}, dt={self.delay_timer}, st={self.sound_timer})"
        )
