"""Tests for the pygame-facing pieces, run against SDL's dummy drivers."""

import numpy as np
import pygame
import pytest

from chip8.core.machine import Machine
from chip8.platform.audio import AudioDevice, square_wave
from chip8.platform.input_handler import InputHandler
from chip8.platform.window import Window
from chip8.shell.frame_renderer import FrameRenderer, parse_colour

from tests.conftest import program


class TestParseColour:

    @pytest.mark.parametrize(
        "text,rgb",
        [("FF8000", (255, 128, 0)), ("#33ff66", (0x33, 0xFF, 0x66)), ("000000", (0, 0, 0))],
    )
    def test_parse(self, text, rgb):
        assert parse_colour(text) == rgb

    @pytest.mark.parametrize("text", ["", "FFF", "#1234567", "GGGGGG"])
    def test_reject(self, text):
        with pytest.raises(ValueError):
            parse_colour(text)


class TestFrameRenderer:
    """Test conversion of the framebuffer to RGB."""

    def test_rgb_array(self):
        machine = Machine()
        machine.frame_buffer.flip_pixel(3, 1)
        renderer = FrameRenderer(machine, foreground=(10, 20, 30), background=(1, 2, 3))

        rgb = renderer.to_rgb_array()
        assert rgb.shape == (32, 64, 3)
        assert rgb.dtype == np.uint8
        assert tuple(rgb[1, 3]) == (10, 20, 30)
        assert tuple(rgb[0, 0]) == (1, 2, 3)
        assert int((rgb == (10, 20, 30)).all(axis=2).sum()) == 1

    def test_render_to_surface(self):
        machine = Machine()
        machine.frame_buffer.flip_pixel(63, 31)
        renderer = FrameRenderer(machine)

        surface = renderer.render()
        assert surface.get_size() == (64, 32)
        assert tuple(surface.get_at((63, 31)))[:3] == (255, 255, 255)
        assert tuple(surface.get_at((0, 0)))[:3] == (0, 0, 0)

    def test_set_colours(self):
        machine = Machine()
        renderer = FrameRenderer(machine)
        renderer.set_colours((0, 255, 0), (0, 0, 64))
        assert tuple(renderer.to_rgb_array()[5, 5]) == (0, 0, 64)


class TestInputHandler:
    """Test keyboard events reaching the keypad."""

    def _key(self, kind, key):
        return pygame.event.Event(kind, key=key)

    def test_mapped_keys(self):
        machine = Machine()
        handler = InputHandler(machine)
        handler.handle_event(self._key(pygame.KEYDOWN, pygame.K_q))
        handler.handle_event(self._key(pygame.KEYDOWN, pygame.K_v))
        assert machine.keypad.pressed_keys == [0x4, 0xF]

        handler.handle_event(self._key(pygame.KEYUP, pygame.K_q))
        assert machine.keypad.pressed_keys == [0xF]

    def test_escape_and_quit(self):
        handler = InputHandler(Machine())
        assert not handler.quit_requested
        handler.handle_event(self._key(pygame.KEYDOWN, pygame.K_ESCAPE))
        assert handler.quit_requested

        handler = InputHandler(Machine())
        handler.handle_event(pygame.event.Event(pygame.QUIT))
        assert handler.quit_requested

    def test_pause_toggle_is_one_shot(self):
        handler = InputHandler(Machine())
        handler.handle_event(self._key(pygame.KEYDOWN, pygame.K_p))
        assert handler.take_pause_toggle()
        assert not handler.take_pause_toggle()

    def test_reset_key(self):
        machine = Machine(program(0x6A05))
        machine.step()
        InputHandler(machine).handle_event(self._key(pygame.KEYDOWN, pygame.K_F5))
        assert machine.cpu.pc == 0x200
        assert machine.cpu.v[0xA] == 0

    def test_focus_loss_releases_keys(self):
        machine = Machine()
        handler = InputHandler(machine)
        handler.handle_event(self._key(pygame.KEYDOWN, pygame.K_w))
        handler.handle_event(self._key(pygame.KEYDOWN, pygame.K_s))
        assert machine.keypad.pressed_keys == [0x5, 0x8]

        handler.handle_event(pygame.event.Event(pygame.WINDOWFOCUSLOST))
        assert machine.keypad.pressed_keys == []

    def test_unmapped_key_ignored(self):
        machine = Machine()
        InputHandler(machine).handle_event(self._key(pygame.KEYDOWN, pygame.K_m))
        assert machine.keypad.pressed_keys == []


class TestAudio:

    def test_square_wave(self):
        wave = square_wave(441.0, 0.5, 44100, 1000)
        assert wave.dtype == np.int16
        assert len(wave) == 22050
        assert set(np.unique(wave)) == {-1000, 1000}
        assert wave[0] == 1000

    def test_disabled_device_is_silent(self):
        device = AudioDevice(enabled=False)
        assert not device.enabled
        device.beep()
        device.shutdown()

    def test_tone_failure_leaves_device_silent(self, monkeypatch):
        def refuse(**kwargs):
            raise pygame.error("no buffer")

        monkeypatch.setattr(pygame.mixer, "init", lambda **kwargs: None)
        monkeypatch.setattr(pygame.mixer, "get_init", lambda: (44100, -16, 1))
        monkeypatch.setattr(pygame.mixer, "quit", lambda: None)
        monkeypatch.setattr(pygame.mixer, "Sound", refuse)

        device = AudioDevice()
        assert not device.enabled
        device.beep()
        device.shutdown()


class TestWindow:
    """Smoke-test the window against the dummy video driver."""

    def test_scale_is_clamped(self):
        window = Window(Machine(), scale=100, enable_audio=False)
        try:
            assert pygame.display.get_surface().get_size() == (64 * 20, 32 * 20)
        finally:
            window._shutdown()

    def test_halt_updates_title(self):
        machine = Machine(program(0x5001))
        window = Window(machine, scale=1, enable_audio=False)
        try:
            window._run_cycles(5)
            assert machine.machine_halt
            assert "halted" in pygame.display.get_caption()[0]
        finally:
            window._shutdown()
