"""
Keypad - the 16-key hexadecimal input pad.

The host input collaborator writes key state through :meth:`Keypad.press`,
:meth:`Keypad.release` or :meth:`Keypad.set_key`; the execution engine only
ever samples it through :meth:`Keypad.is_pressed`.

Key indices follow the hex digit printed on the original pad::

    1 2 3 C
    4 5 6 D
    7 8 9 E
    A 0 B F

How physical keys reach these slots is entirely up to the host (see
:mod:`chip8.platform.input_handler`).
"""

from __future__ import annotations

from typing import List

KEY_COUNT: int = 16


class Keypad:
    """Pressed/released state for the 16 keypad slots."""

    def __init__(self) -> None:
        self._keys: List[bool] = [False] * KEY_COUNT

    # ------------------------------------------------------------------
    # Host-side writes
    # ------------------------------------------------------------------

    def set_key(self, key: int, down: bool) -> None:
        """Mark *key* (0-15) as pressed (``down=True``) or released.

        Raises:
            IndexError: If *key* is not a valid keypad index.
        """
        if not 0 <= key < KEY_COUNT:
            raise IndexError(f"keypad index {key} out of range [0, {KEY_COUNT})")
        self._keys[key] = bool(down)

    def press(self, key: int) -> None:
        self.set_key(key, True)

    def release(self, key: int) -> None:
        self.set_key(key, False)

    def clear_all(self) -> None:
        """Release every key."""
        for i in range(KEY_COUNT):
            self._keys[i] = False

    # ------------------------------------------------------------------
    # Engine-side sampling
    # ------------------------------------------------------------------

    def is_pressed(self, key: int) -> bool:
        """Return ``True`` if *key* is currently held.

        Register values can exceed 15; such indices name no key and are
        never pressed.
        """
        if not 0 <= key < KEY_COUNT:
            return False
        return self._keys[key]

    @property
    def pressed_keys(self) -> List[int]:
        """Indices of all keys currently held, in ascending order."""
        return [i for i, down in enumerate(self._keys) if down]

    def __repr__(self) -> str:
        return f"Keypad(pressed={self.pressed_keys})"
