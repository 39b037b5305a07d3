"""
Input handler for the CHIP-8 emulator.
Maps keyboard keys to the 16 slots of the emulated :class:`Keypad`.

Keyboard layout
---------------

The left-hand block of a QWERTY keyboard stands in for the 4x4 hex pad:

=================  =================
Keyboard           CHIP-8 keypad
=================  =================
``1 2 3 4``        ``1 2 3 C``
``Q W E R``        ``4 5 6 D``
``A S D F``        ``7 8 9 E``
``Z X C V``        ``A 0 B F``
=================  =================

Other keys
----------

===========  ===========================
Key          Action
===========  ===========================
Escape       Quit
F5           Reset the machine
P            Pause / resume
===========  ===========================
"""

from __future__ import annotations

import logging

import pygame

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Keyboard -> keypad index
# ---------------------------------------------------------------------------

_KEY_MAP: dict[int, int] = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


class InputHandler:
    """Translates pygame keyboard events into keypad state.

    Parameters
    ----------
    machine:
        The emulated machine.  Expected interface:

        * ``keypad.set_key(key: int, down: bool)``
        * ``keypad.clear_all()``
        * ``reset()``
    """

    def __init__(self, machine: object) -> None:
        self._machine = machine
        self._quit_requested: bool = False
        self._pause_toggled: bool = False

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def quit_requested(self) -> bool:
        """``True`` if the user pressed Escape or closed the window."""
        return self._quit_requested

    def take_pause_toggle(self) -> bool:
        """Return ``True`` once per press of the pause key."""
        toggled = self._pause_toggled
        self._pause_toggled = False
        return toggled

    def poll(self) -> None:
        """Pump the pygame event queue and process all pending events.

        This should be called once per iteration of the main loop.
        """
        for event in pygame.event.get():
            self.handle_event(event)

    def handle_event(self, event: pygame.event.Event) -> None:
        """Process a single pygame event."""
        if event.type == pygame.QUIT:
            self._quit_requested = True
        elif event.type == pygame.KEYDOWN:
            self._on_key_down(event)
        elif event.type == pygame.KEYUP:
            self._on_key_up(event)
        elif event.type == pygame.WINDOWFOCUSLOST:
            # Key-up events never arrive once focus is gone.
            self._machine.keypad.clear_all()  # type: ignore[attr-defined]

    # ------------------------------------------------------------------
    # Keyboard handlers
    # ------------------------------------------------------------------

    def _on_key_down(self, event: pygame.event.Event) -> None:
        key = event.key

        if key == pygame.K_ESCAPE:
            self._quit_requested = True
            return
        if key == pygame.K_F5:
            logger.info("Reset requested")
            self._machine.reset()  # type: ignore[attr-defined]
            return
        if key == pygame.K_p:
            self._pause_toggled = True
            return

        slot = _KEY_MAP.get(key)
        if slot is not None:
            self._send(slot, True)

    def _on_key_up(self, event: pygame.event.Event) -> None:
        slot = _KEY_MAP.get(event.key)
        if slot is not None:
            self._send(slot, False)

    # ------------------------------------------------------------------
    # Machine bridge
    # ------------------------------------------------------------------

    def _send(self, slot: int, down: bool) -> None:
        logger.debug("Key %X %s", slot, "down" if down else "up")
        self._machine.keypad.set_key(slot, down)  # type: ignore[attr-defined]
