"""
Game Boy CPU (Sharp LR35902) emulation
Based on the Z80 architecture with some modifications.

The CPU holds registers, flags, program counter, stack pointer and the cycle
clock. Memory is never owned here: it is passed into every call that needs it,
so one CPU can be driven against any Memory instance.
"""
import logging

import cython

from .clock import Clock
from .cb_opcodes import build_cb_table
from .instructions import InstructionTable
from .opcodes import build_base_table
from .registers import Flag, Register, RegisterFile

logger = logging.getLogger(__name__)

INITIAL_PROGRAM_COUNTER = 0x0100
INITIAL_STACK_POINTER = 0xFFFE

# Interrupt dispatch costs 5 machine cycles (2 wait, 2 push, 1 jump)
INTERRUPT_CYCLES = 5


class CPU:
    def __init__(self, debug: cython.bint = False,
                 instructions: InstructionTable = None,
                 cb_instructions: InstructionTable = None):
        self.debug: cython.bint = debug

        self.registers = RegisterFile()
        self.clock = Clock()

        # Instruction tables (0xCB-prefixed opcodes live in their own table)
        if cb_instructions is None:
            cb_instructions = build_cb_table()
        if instructions is None:
            instructions = build_base_table(cb_instructions)
        self.cb_instructions = cb_instructions
        self.instructions = instructions

        self._pc: cython.int = INITIAL_PROGRAM_COUNTER
        self._sp: cython.int = INITIAL_STACK_POINTER
        self.last_cycles: cython.int = 0

        # Interrupt master enable and low power states
        self.ime: cython.bint = False
        self.ei_delay: cython.int = 0
        self.halted: cython.bint = False
        self.stopped: cython.bint = False

    def reset(self):
        """Return to the power-on state"""
        self.registers.reset()
        self.clock.reset()
        self._pc = INITIAL_PROGRAM_COUNTER
        self._sp = INITIAL_STACK_POINTER
        self.last_cycles = 0
        self.ime = False
        self.ei_delay = 0
        self.halted = False
        self.stopped = False

    # === REGISTERS ===

    def get8(self, register: Register) -> cython.int:
        return self.registers.read8(register)

    def set8(self, register: Register, value: cython.int) -> None:
        self.registers.write8(register, value)

    def get16(self, register: Register) -> cython.int:
        return self.registers.read16(register)

    def set16(self, register: Register, value: cython.int) -> None:
        self.registers.write16(register, value)

    # === FLAGS ===

    def enable_flag(self, flag: Flag) -> None:
        f = self.registers.read8(Register.F)
        self.registers.write8(Register.F, f | flag.mask)

    def disable_flag(self, flag: Flag) -> None:
        f = self.registers.read8(Register.F)
        self.registers.write8(Register.F, f & ~flag.mask)

    def is_flag_set(self, flag: Flag) -> cython.bint:
        return bool(self.registers.read8(Register.F) & flag.mask)

    def update_flag(self, flag: Flag, condition) -> None:
        """Set the flag when condition holds, clear it otherwise"""
        if condition:
            self.enable_flag(flag)
        else:
            self.disable_flag(flag)

    # === PROGRAM COUNTER / STACK POINTER ===

    @property
    def pc(self):
        return self._pc

    @pc.setter
    def pc(self, value):
        self._pc = value & 0xFFFF

    @property
    def sp(self):
        return self._sp

    @sp.setter
    def sp(self, value):
        self._sp = value & 0xFFFF

    def increment_pc(self):
        self.pc = self._pc + 1

    def increment_pc_twice(self):
        self.pc = self._pc + 2

    def push_word(self, memory, value):
        """Push word onto stack (high byte first, so it ends up little-endian)"""
        self.sp = self._sp - 1
        memory.write_byte(self._sp, (value >> 8) & 0xFF)
        self.sp = self._sp - 1
        memory.write_byte(self._sp, value & 0xFF)

    def pop_word(self, memory):
        """Pop word from stack"""
        low = memory.read_byte(self._sp)
        self.sp = self._sp + 1
        high = memory.read_byte(self._sp)
        self.sp = self._sp + 1
        return (high << 8) | low

    # === EXECUTION ===

    def set_last_cycles(self, cycles: cython.int) -> None:
        self.last_cycles = cycles

    def advance_clock(self):
        """Fold the cost of the last instruction into the running clock"""
        self.clock.tick(self.last_cycles)

    def execute(self, opcode, memory) -> None:
        """Decode opcode through the base table and run it.

        The opcode must already have been fetched and pc moved past it.
        UnknownOpcode is raised before anything is touched.
        """
        instruction = self.instructions.decode(opcode)
        if self.debug:
            logger.debug("0x%04X: %s", (self._pc - 1) & 0xFFFF, instruction.mnemonic)
        instruction.execute(self, memory)

    def step(self, memory) -> cython.int:
        """Execute one fetch-decode-execute cycle and return the cycles it took"""
        if self.halted or self.stopped:
            # Low power: no fetch, time still passes
            self.set_last_cycles(1)
        else:
            opcode = memory.read_byte(self._pc)
            instruction = self.instructions.decode(opcode)
            self.increment_pc()
            if self.debug:
                logger.debug("0x%04X: %-14s %s", (self._pc - 1) & 0xFFFF,
                             instruction.mnemonic, self.format_state())
            instruction.execute(self, memory)

        self._update_ei_delay()
        self.advance_clock()
        return self.last_cycles

    def _update_ei_delay(self):
        # EI arms a delay of 2: it expires at the end of the instruction after EI
        if self.ei_delay > 0:
            self.ei_delay -= 1
            if self.ei_delay == 0:
                self.ime = True

    # === INTERRUPTS ===

    def enable_interrupts(self):
        """EI: IME turns on after the instruction that follows"""
        # A pending or completed EI is not re-armed
        if not self.ime and self.ei_delay == 0:
            self.ei_delay = 2

    def disable_interrupts(self):
        self.ime = False
        self.ei_delay = 0

    def service_interrupt(self, vector, memory):
        """Jump to an interrupt vector chosen by the host's interrupt controller"""
        self.ime = False
        self.ei_delay = 0
        self.halted = False
        self.push_word(memory, self._pc)
        self.pc = vector
        self.set_last_cycles(INTERRUPT_CYCLES)
        self.advance_clock()

    # === INSPECTION ===

    def state(self):
        """Snapshot of the register state, for debuggers and tests"""
        return {
            'AF': self.get16(Register.AF),
            'BC': self.get16(Register.BC),
            'DE': self.get16(Register.DE),
            'HL': self.get16(Register.HL),
            'SP': self._sp,
            'PC': self._pc,
            'IME': self.ime,
            'cycles': self.clock.m,
        }

    def format_state(self):
        flags = ''.join(flag.name if self.is_flag_set(flag) else '-' for flag in Flag)
        return (f"PC: 0x{self._pc:04X}, SP: 0x{self._sp:04X}, "
                f"AF: 0x{self.get16(Register.AF):04X}, BC: 0x{self.get16(Register.BC):04X}, "
                f"DE: 0x{self.get16(Register.DE):04X}, HL: 0x{self.get16(Register.HL):04X}, "
                f"F: {flags}, Cycles: {self.clock.m}")
