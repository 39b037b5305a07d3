"""Unit tests for Keypad."""

import pytest

from chip8.core.keypad import KEY_COUNT, Keypad


class TestKeypad:

    def test_starts_released(self):
        keypad = Keypad()
        assert KEY_COUNT == 16
        assert keypad.pressed_keys == []

    def test_press_and_release(self):
        keypad = Keypad()
        keypad.press(0xA)
        keypad.set_key(0x3, True)
        assert keypad.is_pressed(0xA)
        assert keypad.pressed_keys == [0x3, 0xA]
        keypad.release(0xA)
        assert not keypad.is_pressed(0xA)

    def test_clear_all(self):
        keypad = Keypad()
        for key in range(16):
            keypad.press(key)
        keypad.clear_all()
        assert keypad.pressed_keys == []

    @pytest.mark.parametrize("key", [-1, 16, 0xFF])
    def test_invalid_index_never_pressed(self, key):
        assert not Keypad().is_pressed(key)

    @pytest.mark.parametrize("key", [-1, 16])
    def test_set_invalid_index(self, key):
        with pytest.raises(IndexError):
            Keypad().set_key(key, True)
