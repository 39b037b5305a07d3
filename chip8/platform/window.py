"""
Main application window for the CHIP-8 emulator.
Uses pygame to create a display, drive the emulation main loop, and
coordinate audio, video, and input subsystems.

Typical usage::

    from chip8.platform.window import Window

    machine = MachineFactory.create("pong.ch8")
    window = Window(machine, scale=10)
    window.run()

Scheduling
----------
The loop runs two independent cadences from a single thread, each gated by
comparing elapsed wall-clock time against its period:

* the **instruction cycle** (default 500 Hz) calls ``machine.step()``;
* the **display refresh** (default 60 Hz) renders the framebuffer.

When the loop falls behind, several cycles are executed in one pass to
catch up, up to :data:`_MAX_CATCHUP_CYCLES`; the backlog beyond that is
dropped rather than replayed.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import pygame

from chip8.core.frame_buffer import FrameBuffer
from chip8.platform.audio import AudioDevice
from chip8.platform.input_handler import InputHandler
from chip8.shell.frame_renderer import (
    DEFAULT_BACKGROUND,
    DEFAULT_FOREGROUND,
    RGB,
    FrameRenderer,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE: str = "CHIP-8"

# Minimum / maximum allowed display scale factors.
_MIN_SCALE: int = 1
_MAX_SCALE: int = 20

DEFAULT_CPU_HZ: int = 500
DEFAULT_DISPLAY_HZ: int = 60

# Upper bound on cycles run in one loop pass after a stall.
_MAX_CATCHUP_CYCLES: int = 50

# Sleep granularity when neither cadence is due.
_IDLE_SLEEP: float = 0.0005


class Window:
    """Pygame window that owns the emulation main loop.

    Parameters
    ----------
    machine:
        A fully-wired :class:`~chip8.core.machine.Machine`.
    scale:
        Integer scale factor applied to the native 64x32 resolution.
    cpu_hz:
        Instruction cycles per second.
    display_hz:
        Display refreshes per second.
    enable_audio:
        Set to ``False`` to mute the beep entirely.
    foreground, background:
        Colours of lit and unlit cells.
    """

    def __init__(
        self,
        machine: object,
        scale: int = 10,
        *,
        cpu_hz: int = DEFAULT_CPU_HZ,
        display_hz: int = DEFAULT_DISPLAY_HZ,
        enable_audio: bool = True,
        foreground: RGB = DEFAULT_FOREGROUND,
        background: RGB = DEFAULT_BACKGROUND,
    ) -> None:
        # ---- basic state -------------------------------------------------
        self._machine = machine
        self._scale: int = max(_MIN_SCALE, min(_MAX_SCALE, scale))
        self._cpu_period: float = 1.0 / max(1, cpu_hz)
        self._display_period: float = 1.0 / max(1, display_hz)
        self._running: bool = False
        self._paused: bool = False
        self._halt_reported: bool = False

        # ---- init pygame display -----------------------------------------
        if not pygame.get_init():
            pygame.init()

        self._display_width: int = FrameBuffer.WIDTH * self._scale
        self._display_height: int = FrameBuffer.HEIGHT * self._scale

        self._screen: pygame.Surface = pygame.display.set_mode(
            (self._display_width, self._display_height),
            pygame.RESIZABLE,
        )
        pygame.display.set_caption(_WINDOW_TITLE)

        # ---- subsystems --------------------------------------------------
        self._frame_renderer: FrameRenderer = FrameRenderer(
            machine, foreground=foreground, background=background
        )
        self._audio: AudioDevice = AudioDevice(enabled=enable_audio)
        self._input: InputHandler = InputHandler(machine)

        logger.info(
            "Window: %dx%d display (scale=%d, cpu=%d Hz, display=%d Hz)",
            self._display_width,
            self._display_height,
            self._scale,
            cpu_hz,
            display_hz,
        )

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Enter the main emulation loop.

        This method blocks until the user closes the window or presses
        Escape.  A halted machine stops executing but the window stays open
        on its last frame so the fault can be inspected.
        """
        self._running = True
        now = time.perf_counter()
        cpu_last = now
        display_last = now

        logger.info("Entering main loop")

        try:
            while self._running:
                self._input.poll()
                if self._input.quit_requested:
                    self._running = False
                    break
                if self._input.take_pause_toggle():
                    self._paused = not self._paused
                    self._update_title()

                now = time.perf_counter()

                # ---- instruction cycles ------------------------------------
                due = int((now - cpu_last) / self._cpu_period)
                if due > 0:
                    cpu_last += due * self._cpu_period
                    if not self._paused:
                        self._run_cycles(min(due, _MAX_CATCHUP_CYCLES))
                    if due > _MAX_CATCHUP_CYCLES:
                        cpu_last = now

                # ---- display refresh ---------------------------------------
                if now - display_last >= self._display_period:
                    display_last = now
                    self._present()

                if not due:
                    time.sleep(_IDLE_SLEEP)
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self._shutdown()

    # ------------------------------------------------------------------
    # Per-tick work
    # ------------------------------------------------------------------

    def _run_cycles(self, count: int) -> None:
        machine = self._machine
        machine.run_cycles(count)  # type: ignore[attr-defined]
        if machine.consume_beep():  # type: ignore[attr-defined]
            self._audio.beep()
        halted = machine.machine_halt  # type: ignore[attr-defined]
        if halted != self._halt_reported:
            self._halt_reported = halted
            self._update_title()

    def _present(self) -> None:
        surface = self._frame_renderer.render()
        current_size = self._screen.get_size()
        scaled = pygame.transform.scale(surface, current_size)
        self._screen.blit(scaled, (0, 0))
        pygame.display.flip()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _shutdown(self) -> None:
        """Clean up all subsystems."""
        logger.info("Shutting down")
        self._audio.shutdown()
        pygame.quit()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _update_title(self) -> None:
        title = _WINDOW_TITLE
        fault: Optional[Exception] = getattr(self._machine, "fault", None)
        if fault is not None:
            title = f"{title}  [halted: {fault}]"
        elif self._paused:
            title = f"{title}  [paused]"
        pygame.display.set_caption(title)
