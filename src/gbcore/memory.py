"""
Game Boy Memory Management Unit (MMU)
Flat 64KB byte-addressable space the CPU fetches instructions and data from.

Cartridge ROM, work RAM, video RAM and I/O registers all live in this single
linear space; which device backs which range is decided by the host that
writes into it.
"""
import logging
import numbers

import cython
import numpy

from .errors import OutOfRangeAddress

logger = logging.getLogger(__name__)

MEMORY_SIZE = 0x10000


def _check_address(address):
    if isinstance(address, bool) or not isinstance(address, numbers.Integral):
        raise OutOfRangeAddress(address)
    if not 0 <= address < MEMORY_SIZE:
        raise OutOfRangeAddress(address)


class Memory:
    def __init__(self, debug: cython.bint = False):
        self.debug: cython.bint = debug
        self.data = numpy.zeros(MEMORY_SIZE, dtype=numpy.uint8)

    def read_byte(self, address) -> cython.int:
        """Read a byte from the specified memory address"""
        _check_address(address)
        return int(self.data[address])

    def write_byte(self, address, value: cython.int) -> None:
        """Write a byte to the specified memory address"""
        _check_address(address)
        value &= 0xFF
        if self.debug:
            logger.debug("write 0x%04X <- 0x%02X", address, value)
        self.data[address] = value

    def read_word(self, address) -> cython.int:
        """Read a little-endian word; the high byte wraps around at 0xFFFF."""
        _check_address(address)
        low = self.read_byte(address)
        high = self.read_byte((address + 1) & 0xFFFF)
        return (high << 8) | low

    def write_word(self, address, value: cython.int) -> None:
        """Write a little-endian word; the high byte wraps around at 0xFFFF."""
        _check_address(address)
        self.write_byte(address, value & 0xFF)
        self.write_byte((address + 1) & 0xFFFF, (value >> 8) & 0xFF)

    def reset(self):
        """Zero the whole address space."""
        self.data.fill(0)

    def load(self, data, address=0):
        """Copy a block of bytes into memory starting at address."""
        _check_address(address)
        block = numpy.frombuffer(bytes(data), dtype=numpy.uint8)
        end = address + len(block)
        if end > MEMORY_SIZE:
            raise OutOfRangeAddress(end - 1)
        self.data[address:end] = block
        if self.debug:
            logger.debug("loaded %d bytes at 0x%04X", len(block), address)

    def dump(self, address, length):
        """Return length bytes starting at address."""
        _check_address(address)
        if length < 0 or address + length > MEMORY_SIZE:
            raise OutOfRangeAddress(address + length - 1)
        return self.data[address:address + length].tobytes()
