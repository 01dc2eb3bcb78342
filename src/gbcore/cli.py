"""
Command line runner: load a raw program image and execute it.
"""
import argparse
import logging
import os
import sys

from .emulator import Emulator
from .errors import EmulationError

logger = logging.getLogger(__name__)


def _address(text):
    value = int(text, 0)
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"{text} is not a 16-bit address")
    return value


def build_parser():
    parser = argparse.ArgumentParser(description='Game Boy CPU core runner')
    parser.add_argument('rom_file', help='Path to the program image to load')
    parser.add_argument('--debug', action='store_true', help='Trace every instruction')
    parser.add_argument('--load-address', type=_address, default=0x0000,
                        help='Address the image is copied to (default 0x0000)')
    parser.add_argument('--entry', type=_address, default=None,
                        help='Initial program counter (default 0x0100)')
    parser.add_argument('--steps', type=int, default=None, help='Stop after N instructions')
    parser.add_argument('--cycles', type=int, default=None, help='Stop after N machine cycles')
    parser.add_argument('--realtime', action='store_true',
                        help='Pace execution to the speed of the real hardware')
    parser.add_argument('--no-post-boot', action='store_true',
                        help='Start from the power-on state instead of the post-boot state')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    debug = args.debug or bool(os.getenv('GBCORE_DEBUG'))

    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    emulator = Emulator(debug=debug, post_boot=not args.no_post_boot)
    try:
        emulator.load_rom(args.rom_file, address=args.load_address)
        if args.entry is not None:
            emulator.cpu.pc = args.entry
        cycles = emulator.run(max_steps=args.steps, max_cycles=args.cycles,
                              realtime=args.realtime)
    except FileNotFoundError:
        logger.error("ROM file '%s' not found.", args.rom_file)
        return 1
    except EmulationError as e:
        logger.error("Error: %s", e)
        logger.error("CPU state: %s", emulator.cpu.format_state())
        return 1

    logger.info("Emulation finished after %d cycles", cycles)
    print(emulator.cpu.format_state())
    return 0


if __name__ == '__main__':
    sys.exit(main())
