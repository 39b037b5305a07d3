"""
Frame renderer for the CHIP-8 emulator.
Converts the machine's one-bit FrameBuffer into an RGB pygame Surface.

The emulation core produces one byte per cell (0 = off, 1 = on).  This
module looks up each cell in a two-entry colour table and writes the result
into a 64x32 pygame Surface suitable for scaling and blitting to the
display.

Performance notes
-----------------
The look-up uses **numpy** fancy indexing on a snapshot of the cells, which
is far faster than per-pixel Python iteration.
"""

from __future__ import annotations

import logging
import string
from typing import Tuple

import numpy as np
import pygame

from chip8.core.frame_buffer import FrameBuffer

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

DEFAULT_FOREGROUND: RGB = (0xFF, 0xFF, 0xFF)
DEFAULT_BACKGROUND: RGB = (0x00, 0x00, 0x00)


def parse_colour(text: str) -> RGB:
    """Parse ``"RRGGBB"`` or ``"#RRGGBB"`` into an ``(r, g, b)`` tuple.

    Raises:
        ValueError: If *text* is not a six-digit hex colour.
    """
    value = text.lstrip("#")
    if len(value) != 6 or any(c not in string.hexdigits for c in value):
        raise ValueError(f"colour must be RRGGBB, got {text!r}")
    packed = int(value, 16)
    return ((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF)


class FrameRenderer:
    """Convert a machine's :class:`FrameBuffer` into an RGB
    :class:`pygame.Surface` each display tick.

    Parameters
    ----------
    machine:
        The emulated machine.  Expected attribute:

        * ``frame_buffer`` -- a :class:`~chip8.core.frame_buffer.FrameBuffer`

    foreground:
        Colour of lit cells.
    background:
        Colour of unlit cells.
    """

    def __init__(
        self,
        machine: object,
        foreground: RGB = DEFAULT_FOREGROUND,
        background: RGB = DEFAULT_BACKGROUND,
    ) -> None:
        self._machine = machine

        # (2, 3) look-up table: cell value -> (R, G, B).
        self._lut = np.zeros((2, 3), dtype=np.uint8)
        self.set_colours(foreground, background)

        # Create the output surface (RGB, no alpha needed).
        self._surface: pygame.Surface = pygame.Surface(
            (FrameBuffer.WIDTH, FrameBuffer.HEIGHT)
        )

        logger.info(
            "FrameRenderer: %dx%d, fg=%s bg=%s",
            FrameBuffer.WIDTH,
            FrameBuffer.HEIGHT,
            foreground,
            background,
        )

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def set_colours(self, foreground: RGB, background: RGB) -> None:
        """Replace the lit / unlit colours at runtime."""
        self._lut[0] = background
        self._lut[1] = foreground

    def to_rgb_array(self) -> np.ndarray:
        """Return the current frame as a ``(HEIGHT, WIDTH, 3)`` uint8 array.

        The framebuffer is sampled once through
        :meth:`FrameBuffer.snapshot`, so the result is a consistent
        point-in-time copy.
        """
        fb = self._machine.frame_buffer  # type: ignore[attr-defined]
        cells = np.frombuffer(fb.snapshot(), dtype=np.uint8)
        frame = cells.reshape((FrameBuffer.HEIGHT, FrameBuffer.WIDTH))
        return self._lut[frame]

    def render(self) -> pygame.Surface:
        """Render the current frame and return the surface.

        The same :class:`pygame.Surface` object is reused each frame to avoid
        allocation churn.
        """
        rgb = self.to_rgb_array()
        # pygame surfarray expects (W, H, 3) -- transpose width and height.
        pygame.surfarray.blit_array(self._surface, rgb.transpose(1, 0, 2))
        return self._surface
