"""
CHIP-8 interpreter.

The :mod:`chip8.core` package holds the emulated machine and has no
dependencies beyond the standard library.  :mod:`chip8.shell` and
:mod:`chip8.platform` connect it to files on disk and to a pygame window.
"""

__version__ = "1.0.0"
