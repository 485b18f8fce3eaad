import argparse
import sys
from pathlib import Path

from . import config
from .errors import Chip8Error
from .machine import Machine


def load_rom(path):
    return Path(path).read_bytes()


def build_parser():
    parser = argparse.ArgumentParser(prog="chip8emu", description="CHIP-8 emulator")
    parser.add_argument("rom", help="path to a CHIP-8 ROM image")
    parser.add_argument("--scale", type=int, default=config.scale,
                        help="window pixels per CHIP-8 pixel (default: %(default)s)")
    parser.add_argument("--hz", type=int, default=config.CPU_HZ,
                        help="instructions per second (default: %(default)s)")
    parser.add_argument("--clip", action="store_true",
                        help="clip sprites at the screen edges instead of wrapping")
    parser.add_argument("--log", action="store_true", help="print executed opcodes")
    return parser


def load_machine(rom_path, clip=False):
    """Build a Machine with the ROM at ``rom_path`` loaded. Exits on a bad ROM."""
    try:
        rom = load_rom(rom_path)
    except OSError as e:
        print(f"Could not read ROM {rom_path}: {e}", file=sys.stderr)
        sys.exit(1)

    machine = Machine(wrap=not clip)
    try:
        machine.load(rom)
    except Chip8Error as e:
        print(f"Could not load ROM {rom_path}: {e}", file=sys.stderr)
        sys.exit(1)
    return machine


def main(argv=None):
    args = build_parser().parse_args(argv)
    config.set_logging(args.log)
    print("Loading ROM:", args.rom)
    machine = load_machine(args.rom, clip=args.clip)

    # pyglet is only imported once there is a window to open
    from .frontend import run
    run(machine, scale=args.scale, cpu_hz=args.hz)


if __name__ == "__main__":
    main()
