"""
Audio output device for the CHIP-8 emulator.
Uses pygame.mixer to sound the machine's beep.

The emulation core produces no audio samples of its own: it only raises a
one-shot signal when the sound timer expires.  This module pre-renders a
short square-wave tone with numpy once, and plays it on a dedicated mixer
channel each time :meth:`AudioDevice.beep` is called.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pygame

logger = logging.getLogger(__name__)

_SAMPLE_RATE: int = 44100
_TONE_HZ: float = 440.0
_TONE_SECONDS: float = 0.1
_AMPLITUDE: int = 8000

# Minimum pygame mixer buffer size (in samples).  Smaller values reduce
# latency but may cause underruns on slower machines.
_MIXER_BUFFER_SAMPLES: int = 512


def square_wave(frequency: float, seconds: float, sample_rate: int, amplitude: int) -> np.ndarray:
    """Return a mono signed 16-bit square wave as a 1-D numpy array."""
    count = max(1, int(seconds * sample_rate))
    t = np.arange(count, dtype=np.float64) / sample_rate
    phase = (t * frequency) % 1.0
    return np.where(phase < 0.5, amplitude, -amplitude).astype(np.int16)


class AudioDevice:
    """Play a tone whenever the emulated machine beeps.

    Parameters
    ----------
    enabled:
        Set to ``False`` to create the device in a silent / no-op mode.
    frequency:
        Pitch of the beep in Hz.
    """

    def __init__(self, *, enabled: bool = True, frequency: float = _TONE_HZ) -> None:
        self._enabled: bool = enabled
        self._frequency: float = frequency
        self._channel: Optional[pygame.mixer.Channel] = None
        self._tone: Optional[pygame.mixer.Sound] = None

        if not self._enabled:
            logger.info("AudioDevice: disabled (silent mode)")
            return

        self._init_mixer()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._enabled

    def beep(self) -> None:
        """Start the beep tone unless it is already sounding."""
        if not self._enabled or self._channel is None or self._tone is None:
            return
        if not self._channel.get_busy():
            self._channel.play(self._tone)

    def shutdown(self) -> None:
        """Stop playback and release the mixer."""
        self._shutdown_mixer()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _init_mixer(self) -> None:
        """Initialise the pygame mixer and pre-render the tone.

        Any mixer failure leaves the device in silent mode.
        """
        try:
            pygame.mixer.init(
                frequency=_SAMPLE_RATE,
                size=-16,       # signed 16-bit
                channels=1,     # mono
                buffer=_MIXER_BUFFER_SAMPLES,
            )
            actual_freq, actual_size, actual_channels = pygame.mixer.get_init()
            samples = square_wave(self._frequency, _TONE_SECONDS, actual_freq, _AMPLITUDE)
            if actual_channels > 1:
                # The mixer may refuse mono; duplicate the wave across channels.
                samples = np.repeat(samples[:, np.newaxis], actual_channels, axis=1)
            self._tone = pygame.mixer.Sound(buffer=samples.tobytes())

            pygame.mixer.set_num_channels(1)
            self._channel = pygame.mixer.Channel(0)
        except pygame.error as exc:
            logger.warning("AudioDevice: mixer init failed (%s); sound disabled", exc)
            self._enabled = False
            self._shutdown_mixer()
            return

        logger.info(
            "AudioDevice: mixer ready at %d Hz, %d-bit, %d ch (tone %.0f Hz)",
            actual_freq,
            abs(actual_size),
            actual_channels,
            self._frequency,
        )

    def _shutdown_mixer(self) -> None:
        """Stop the mixer channel and release resources."""
        if self._channel is not None:
            try:
                self._channel.stop()
            except pygame.error:
                logger.debug("AudioDevice: channel stop failed during shutdown")
            self._channel = None
        self._tone = None

        if pygame.mixer.get_init():
            pygame.mixer.quit()
