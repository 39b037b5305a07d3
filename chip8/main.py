"""
CHIP-8 -- interpreter and emulator.

Command-line entry point.  Parses arguments, creates the emulated machine
from a ROM file, and launches the pygame display window.

Usage examples::

    # Run a ROM with default settings
    chip8 roms/pong.ch8

    # Bigger window, faster CPU
    chip8 roms/pong.ch8 --scale 15 --cpu-hz 700

    # Reproducible random numbers
    chip8 roms/pong.ch8 --seed 1234

    # Green-on-black phosphor look
    chip8 roms/pong.ch8 --fg 33FF66 --bg 001100

    # Show ROM metadata without launching
    chip8 roms/pong.ch8 --info

    # Disable audio
    chip8 roms/pong.ch8 --no-audio
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from chip8.core.errors import RomLoadFault
from chip8.shell.frame_renderer import (
    DEFAULT_BACKGROUND,
    DEFAULT_FOREGROUND,
    parse_colour,
)
from chip8.shell.services.machine_factory import MachineFactory

logger = logging.getLogger("chip8.main")


# ---------------------------------------------------------------------------
# CLI definition
# ---------------------------------------------------------------------------

def _colour_arg(text: str):
    try:
        return parse_colour(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser."""
    parser = argparse.ArgumentParser(
        prog="chip8",
        description=(
            "CHIP-8 interpreter.  Load a program image and run it in a "
            "pygame window."
        ),
    )

    parser.add_argument(
        "rom",
        help="Path to the program image (.ch8, .c8, .bin)",
    )

    # Display
    parser.add_argument(
        "--scale", "-s",
        type=int,
        default=10,
        help="Display scale factor (1-20).  Default: 10.",
    )
    parser.add_argument(
        "--fg",
        type=_colour_arg,
        default=DEFAULT_FOREGROUND,
        metavar="RRGGBB",
        help="Colour of lit pixels.  Default: FFFFFF.",
    )
    parser.add_argument(
        "--bg",
        type=_colour_arg,
        default=DEFAULT_BACKGROUND,
        metavar="RRGGBB",
        help="Colour of unlit pixels.  Default: 000000.",
    )

    # Timing
    parser.add_argument(
        "--cpu-hz",
        type=int,
        default=500,
        metavar="HZ",
        help="Instruction cycles per second.  Default: 500.",
    )
    parser.add_argument(
        "--display-hz",
        type=int,
        default=60,
        metavar="HZ",
        help="Display refreshes per second.  Default: 60.",
    )

    # Machine
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        metavar="N",
        help="Seed for the random number instruction (CXNN).",
    )

    # Audio
    parser.add_argument(
        "--no-audio",
        action="store_true",
        default=False,
        help="Disable audio output.",
    )

    # Debugging / info
    parser.add_argument(
        "--info",
        action="store_true",
        default=False,
        help="Print ROM metadata and exit without launching the emulator.",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG).",
    )

    return parser


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _configure_logging(verbosity: int) -> None:
    """Set up the root logger based on requested verbosity."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Info mode
# ---------------------------------------------------------------------------

def _print_rom_info(rom_path: str) -> int:
    """Print human-readable metadata for a ROM."""
    try:
        info = MachineFactory.describe(rom_path)
    except RomLoadFault as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print("CHIP-8 ROM Information")
    print("=" * 40)
    for key, value in info.items():
        label = key.replace("_", " ").title()
        print(f"  {label:20s}: {value}")
    print("=" * 40)
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` to use ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on a clean exit, 1 if the ROM could not be loaded, the
        machine halted on a fault, or the display failed.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    rom_path: str = os.path.expanduser(args.rom)

    # Info-only mode.
    if args.info:
        return _print_rom_info(rom_path)

    # Create the emulated machine.
    try:
        machine = MachineFactory.create(rom_path, seed=args.seed)
    except RomLoadFault as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # Imported here so --info and ROM errors never open a display.
    import pygame

    from chip8.platform.window import Window

    logger.info("Starting emulation ...")
    try:
        window = Window(
            machine,
            scale=args.scale,
            cpu_hz=args.cpu_hz,
            display_hz=args.display_hz,
            enable_audio=not args.no_audio,
            foreground=args.fg,
            background=args.bg,
        )
        window.run()
    except KeyboardInterrupt:
        pass
    except pygame.error as exc:
        logger.exception("Display error")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1

    if machine.fault is not None:
        print(f"Halted: {machine.fault}", file=sys.stderr)
        return 1

    logger.info("Exited cleanly")
    return 0


if __name__ == "__main__":
    sys.exit(main())
