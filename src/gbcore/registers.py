"""
LR35902 register file.

Eight 8-bit registers A F B C D E H L stored side by side. Adjacent pairs form
the 16-bit registers AF BC DE HL (high byte first). F holds the flags in its
upper nibble; its lower nibble always reads as zero.
"""
from enum import Enum

import cython

from .errors import InvalidRegisterWidth

FLAG_REGISTER_MASK = 0xF0


class Register(Enum):
    A = (8, 0)
    F = (8, 1)
    B = (8, 2)
    C = (8, 3)
    D = (8, 4)
    E = (8, 5)
    H = (8, 6)
    L = (8, 7)

    AF = (16, 0)
    BC = (16, 2)
    DE = (16, 4)
    HL = (16, 6)

    def __init__(self, width, offset):
        self.width = width
        self.offset = offset

    @property
    def is_pair(self):
        return self.width == 16


class Flag(Enum):
    Z = 0x80  # Zero
    N = 0x40  # Subtract
    H = 0x20  # Half carry
    C = 0x10  # Carry

    @property
    def mask(self):
        return self.value


class RegisterFile:
    def __init__(self):
        self.slots: list = [0] * 8

    def read8(self, register: Register) -> cython.int:
        self._validate(register, 8)
        return self.slots[register.offset]

    def write8(self, register: Register, value: cython.int) -> None:
        self._validate(register, 8)
        value &= 0xFF
        if register is Register.F:
            value &= FLAG_REGISTER_MASK
        self.slots[register.offset] = value

    def read16(self, register: Register) -> cython.int:
        self._validate(register, 16)
        offset = register.offset
        high = (self.slots[offset] << 8) & 0xFF00
        low = self.slots[offset + 1] & 0x00FF
        return high | low

    def write16(self, register: Register, value: cython.int) -> None:
        self._validate(register, 16)
        offset = register.offset
        low = value & 0xFF
        if register is Register.AF:
            low &= FLAG_REGISTER_MASK
        self.slots[offset] = (value >> 8) & 0xFF
        self.slots[offset + 1] = low

    def reset(self):
        for index in range(len(self.slots)):
            self.slots[index] = 0

    @staticmethod
    def _validate(register, width):
        if register.width != width:
            raise InvalidRegisterWidth(register, width)
