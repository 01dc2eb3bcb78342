"""
Instruction tables.

Every opcode maps to an Instruction: a mnemonic, an operation, a fixed cycle
cost and a flag descriptor. Decoding is a list lookup indexed by the opcode
byte, so adding an opcode never touches the dispatch path.

The flag descriptor lists Z N H C in order:
    Z/N/H/C  flag is computed from the result
    0/1      flag is forced clear/set
    -        flag is left untouched

Operations receive (cpu, memory). Operand bytes follow the opcode at pc and
the operation moves pc past them. An operation returns None to record its
fixed cost, or a cycle count when the cost depends on the outcome (taken
branches, 0xCB dispatch).
"""
import numbers
from typing import Callable, NamedTuple, Optional

from .errors import UnknownOpcode
from .registers import Register

TABLE_SIZE = 0x100

# Operand encoding shared by the register families: bits 0-2 (source) or
# bits 3-5 (target); index 6 is the byte at (HL)
R8_NAMES = ('B', 'C', 'D', 'E', 'H', 'L', '(HL)', 'A')
R8 = (Register.B, Register.C, Register.D, Register.E,
      Register.H, Register.L, None, Register.A)
HL_INDIRECT = 6


def _is_opcode(value):
    # Any integer byte, numpy scalars included; bools are not opcodes
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        return False
    return 0 <= value < TABLE_SIZE


class Instruction(NamedTuple):
    opcode: int
    mnemonic: str
    operation: Callable
    cycles: int
    flags: str = '----'
    taken_cycles: Optional[int] = None

    def run(self, cpu, memory):
        """Run the operation and return the cycles it cost"""
        cycles = self.operation(cpu, memory)
        return self.cycles if cycles is None else cycles

    def execute(self, cpu, memory):
        cpu.set_last_cycles(self.run(cpu, memory))


class InstructionTable:
    def __init__(self, name='base'):
        self.name = name
        self._entries: list = [None] * TABLE_SIZE

    def add(self, opcode, mnemonic, operation, cycles, flags='----', taken_cycles=None):
        if not 0 <= opcode < TABLE_SIZE:
            raise ValueError(f"Opcode 0x{opcode:X} doesn't fit in a byte")
        if self._entries[opcode] is not None:
            raise ValueError(f"Opcode 0x{opcode:02X} already mapped to "
                             f"{self._entries[opcode].mnemonic}")
        instruction = Instruction(opcode, mnemonic, operation, cycles, flags, taken_cycles)
        self._entries[opcode] = instruction
        return instruction

    def decode(self, opcode) -> Instruction:
        if _is_opcode(opcode):
            instruction = self._entries[int(opcode)]
            if instruction is not None:
                return instruction
        raise UnknownOpcode(opcode, self.name)

    def opcodes(self):
        return [opcode for opcode, entry in enumerate(self._entries) if entry is not None]

    def __contains__(self, opcode):
        return _is_opcode(opcode) and self._entries[int(opcode)] is not None

    def __iter__(self):
        return (entry for entry in self._entries if entry is not None)

    def __len__(self):
        return sum(1 for entry in self._entries if entry is not None)

    def __repr__(self):
        return f"InstructionTable({self.name!r}, {len(self)} opcodes)"


# === OPERAND ACCESS ===

def read_immediate8(cpu, memory):
    """Fetch the byte at pc and step over it"""
    value = memory.read_byte(cpu.pc)
    cpu.increment_pc()
    return value


def read_immediate16(cpu, memory):
    """Fetch the little-endian word at pc and step over it"""
    value = memory.read_word(cpu.pc)
    cpu.increment_pc_twice()
    return value


def read_r8(cpu, memory, register):
    if register is None:
        return memory.read_byte(cpu.get16(Register.HL))
    return cpu.get8(register)


def write_r8(cpu, memory, register, value):
    if register is None:
        memory.write_byte(cpu.get16(Register.HL), value)
    else:
        cpu.set8(register, value)
