"""
0xCB-prefixed LR35902 opcode table.

CB instructions are organized as:
0x00-0x3F: rotate and shift operations
0x40-0x7F: BIT operations
0x80-0xBF: RES operations
0xC0-0xFF: SET operations

Costs include the prefix byte fetch.
"""
from . import alu
from .instructions import HL_INDIRECT, R8, R8_NAMES, InstructionTable, read_r8, write_r8

SHIFT_OPERATIONS = (
    ('RLC', alu.rlc, 'Z00C'),
    ('RRC', alu.rrc, 'Z00C'),
    ('RL', alu.rl, 'Z00C'),
    ('RR', alu.rr, 'Z00C'),
    ('SLA', alu.sla, 'Z00C'),
    ('SRA', alu.sra, 'Z00C'),
    ('SWAP', alu.swap, 'Z000'),
    ('SRL', alu.srl, 'Z00C'),
)


def build_cb_table():
    """Build the 256-entry table for 0xCB-prefixed opcodes"""
    table = InstructionTable('cb')

    for op_idx, (name, shift, flags) in enumerate(SHIFT_OPERATIONS):
        for reg_idx, reg_name in enumerate(R8_NAMES):
            opcode = (op_idx * 8) + reg_idx
            cycles = 4 if reg_idx == HL_INDIRECT else 2
            table.add(opcode, f'{name} {reg_name}', _shift_op(shift, R8[reg_idx]), cycles, flags)

    for bit in range(8):
        for reg_idx, reg_name in enumerate(R8_NAMES):
            register = R8[reg_idx]
            offset = (bit * 8) + reg_idx
            indirect = reg_idx == HL_INDIRECT
            # BIT only reads (HL), RES/SET read and write it back
            table.add(0x40 + offset, f'BIT {bit},{reg_name}', _bit_op(bit, register),
                      3 if indirect else 2, 'Z01-')
            table.add(0x80 + offset, f'RES {bit},{reg_name}', _res_op(bit, register),
                      4 if indirect else 2)
            table.add(0xC0 + offset, f'SET {bit},{reg_name}', _set_op(bit, register),
                      4 if indirect else 2)

    return table


def _shift_op(shift, register):
    def operation(cpu, memory):
        write_r8(cpu, memory, register, shift(cpu, read_r8(cpu, memory, register)))
    return operation


def _bit_op(bit, register):
    def operation(cpu, memory):
        alu.bit(cpu, bit, read_r8(cpu, memory, register))
    return operation


def _res_op(bit, register):
    def operation(cpu, memory):
        value = read_r8(cpu, memory, register)
        write_r8(cpu, memory, register, value & ~(1 << bit) & 0xFF)
    return operation


def _set_op(bit, register):
    def operation(cpu, memory):
        value = read_r8(cpu, memory, register)
        write_r8(cpu, memory, register, value | (1 << bit))
    return operation
