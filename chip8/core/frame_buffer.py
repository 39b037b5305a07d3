"""
FrameBuffer -- the 64x32 monochrome display of the CHIP-8 machine.

One byte per cell holding ``0`` (off) or ``1`` (on), laid out in row order::

    cells[y * WIDTH + x]

The execution engine is the only writer: the draw instruction XOR-blits
sprite rows into the grid and the clear-screen instruction zeroes it.
Renderers must treat the buffer as read-only and should sample it through
:meth:`FrameBuffer.snapshot`, which copies all 2048 cells in one go.
"""

from __future__ import annotations

from chip8.core.errors import FramebufferFault


class FrameBuffer:
    """Holds the current contents of the 64x32 one-bit display."""

    WIDTH: int = 64
    HEIGHT: int = 32
    SIZE: int = WIDTH * HEIGHT

    def __init__(self) -> None:
        self.cells: bytearray = bytearray(self.SIZE)

    # ------------------------------------------------------------------
    # Pixel access
    # ------------------------------------------------------------------

    @classmethod
    def contains(cls, x: int, y: int) -> bool:
        """Return ``True`` if ``(x, y)`` lies on the grid."""
        return 0 <= x < cls.WIDTH and 0 <= y < cls.HEIGHT

    def read_pixel(self, x: int, y: int) -> int:
        """Return the cell at ``(x, y)`` (0 or 1).

        Raises:
            FramebufferFault: If the coordinate is off the grid.
        """
        if not self.contains(x, y):
            raise FramebufferFault(x, y)
        return self.cells[y * self.WIDTH + x]

    def flip_pixel(self, x: int, y: int) -> bool:
        """XOR the cell at ``(x, y)`` with 1.

        Returns:
            ``True`` if the cell was lit before the flip (a collision).

        Raises:
            FramebufferFault: If the coordinate is off the grid.
        """
        if not self.contains(x, y):
            raise FramebufferFault(x, y)
        offset = y * self.WIDTH + x
        was_set = self.cells[offset] == 1
        self.cells[offset] ^= 1
        return was_set

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Switch every cell off."""
        for i in range(self.SIZE):
            self.cells[i] = 0

    def snapshot(self) -> bytes:
        """Return an immutable point-in-time copy of all 2048 cells."""
        return bytes(self.cells)

    @property
    def lit_count(self) -> int:
        """Number of cells currently switched on."""
        return sum(self.cells)

    def __repr__(self) -> str:
        return f"FrameBuffer(width={self.WIDTH}, height={self.HEIGHT}, lit={self.lit_count})"
