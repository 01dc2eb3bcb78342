"""
Game Boy (Sharp LR35902) processor and memory emulation core.
"""
from .clock import Clock
from .cpu import CPU
from .errors import EmulationError, InvalidRegisterWidth, OutOfRangeAddress, UnknownOpcode
from .instructions import Instruction, InstructionTable
from .memory import Memory
from .registers import Flag, Register, RegisterFile

__all__ = [
    'CPU', 'Clock', 'EmulationError', 'Flag', 'Instruction', 'InstructionTable',
    'InvalidRegisterWidth', 'Memory', 'OutOfRangeAddress', 'Register', 'RegisterFile',
    'UnknownOpcode',
]
