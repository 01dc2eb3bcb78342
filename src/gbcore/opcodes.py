"""
Base (unprefixed) LR35902 opcode table.

Cycle costs are machine cycles. Conditional branches list the not-taken cost
as the fixed cost and return the taken cost from the operation.

The hardware leaves 0xD3 0xDB 0xDD 0xE3 0xE4 0xEB 0xEC 0xED 0xF4 0xFC 0xFD
undefined; they stay unmapped and decode to UnknownOpcode.
"""
from . import alu
from .instructions import (HL_INDIRECT, R8, R8_NAMES, InstructionTable,
                           read_immediate8, read_immediate16, read_r8, write_r8)
from .registers import Flag, Register

# 16-bit operand encodings (bits 4-5). None stands for SP.
R16 = (('BC', Register.BC), ('DE', Register.DE), ('HL', Register.HL), ('SP', None))
R16_STACK = (('BC', Register.BC), ('DE', Register.DE), ('HL', Register.HL), ('AF', Register.AF))

# Branch conditions (bits 3-4): flag and the state it must be in
CONDITIONS = (('NZ', Flag.Z, False), ('Z', Flag.Z, True),
              ('NC', Flag.C, False), ('C', Flag.C, True))

UNDEFINED_OPCODES = (0xD3, 0xDB, 0xDD, 0xE3, 0xE4, 0xEB, 0xEC, 0xED, 0xF4, 0xFC, 0xFD)


def build_base_table(cb_table):
    """Build the instruction table for the 245 defined unprefixed opcodes"""
    table = InstructionTable('base')

    _build_control_instructions(table)
    _build_8bit_load_instructions(table)
    _build_16bit_load_instructions(table)
    _build_8bit_arithmetic_instructions(table)
    _build_16bit_arithmetic_instructions(table)
    _build_rotate_instructions(table)
    _build_jump_instructions(table)
    _build_call_instructions(table)

    def cb_prefix(cpu, memory):
        instruction = cb_table.decode(read_immediate8(cpu, memory))
        return instruction.run(cpu, memory)

    table.add(0xCB, 'PREFIX CB', cb_prefix, 1, 'ZNHC')
    return table


def _get_r16(cpu, register):
    return cpu.sp if register is None else cpu.get16(register)


def _set_r16(cpu, register, value):
    if register is None:
        cpu.sp = value
    else:
        cpu.set16(register, value)


def _condition_met(cpu, flag, expected):
    return cpu.is_flag_set(flag) == expected


# === MISC / CONTROL (NOP, STOP, HALT, DI, EI, DAA, CPL, SCF, CCF) ===

def _nop(cpu, memory):
    pass


def _stop(cpu, memory):
    # STOP is encoded as 0x10 0x00; the second byte is skipped
    cpu.increment_pc()
    cpu.stopped = True


def _halt(cpu, memory):
    cpu.halted = True


def _di(cpu, memory):
    cpu.disable_interrupts()


def _ei(cpu, memory):
    cpu.enable_interrupts()


def _daa(cpu, memory):
    cpu.set8(Register.A, alu.daa(cpu, cpu.get8(Register.A)))


def _cpl(cpu, memory):
    cpu.set8(Register.A, ~cpu.get8(Register.A) & 0xFF)
    cpu.enable_flag(Flag.N)
    cpu.enable_flag(Flag.H)


def _scf(cpu, memory):
    cpu.disable_flag(Flag.N)
    cpu.disable_flag(Flag.H)
    cpu.enable_flag(Flag.C)


def _ccf(cpu, memory):
    cpu.disable_flag(Flag.N)
    cpu.disable_flag(Flag.H)
    cpu.update_flag(Flag.C, not cpu.is_flag_set(Flag.C))


def _build_control_instructions(table):
    table.add(0x00, 'NOP', _nop, 1)
    table.add(0x10, 'STOP', _stop, 1)
    table.add(0x76, 'HALT', _halt, 1)
    table.add(0xF3, 'DI', _di, 1)
    table.add(0xFB, 'EI', _ei, 1)
    table.add(0x27, 'DAA', _daa, 1, 'Z-0C')
    table.add(0x2F, 'CPL', _cpl, 1, '-11-')
    table.add(0x37, 'SCF', _scf, 1, '-001')
    table.add(0x3F, 'CCF', _ccf, 1, '-00C')


# === 8-BIT LOADS ===

def _ld_r_r(target, source):
    def operation(cpu, memory):
        write_r8(cpu, memory, target, read_r8(cpu, memory, source))
    return operation


def _ld_r_n(target):
    def operation(cpu, memory):
        write_r8(cpu, memory, target, read_immediate8(cpu, memory))
    return operation


def _ld_indirect_a(pair, step=0):
    """LD (rr),A with optional post increment/decrement of the pair"""
    def operation(cpu, memory):
        address = cpu.get16(pair)
        memory.write_byte(address, cpu.get8(Register.A))
        if step:
            cpu.set16(pair, (address + step) & 0xFFFF)
    return operation


def _ld_a_indirect(pair, step=0):
    """LD A,(rr) with optional post increment/decrement of the pair"""
    def operation(cpu, memory):
        address = cpu.get16(pair)
        cpu.set8(Register.A, memory.read_byte(address))
        if step:
            cpu.set16(pair, (address + step) & 0xFFFF)
    return operation


def _ldh_n_a(cpu, memory):
    address = 0xFF00 + read_immediate8(cpu, memory)
    memory.write_byte(address, cpu.get8(Register.A))


def _ldh_a_n(cpu, memory):
    address = 0xFF00 + read_immediate8(cpu, memory)
    cpu.set8(Register.A, memory.read_byte(address))


def _ld_c_a(cpu, memory):
    memory.write_byte(0xFF00 + cpu.get8(Register.C), cpu.get8(Register.A))


def _ld_a_c(cpu, memory):
    cpu.set8(Register.A, memory.read_byte(0xFF00 + cpu.get8(Register.C)))


def _ld_nn_a(cpu, memory):
    memory.write_byte(read_immediate16(cpu, memory), cpu.get8(Register.A))


def _ld_a_nn(cpu, memory):
    cpu.set8(Register.A, memory.read_byte(read_immediate16(cpu, memory)))


def _build_8bit_load_instructions(table):
    """LD r,r' (0x40-0x7F), LD r,n and the indirect/high-page loads"""
    for dst_idx, dst in enumerate(R8_NAMES):
        for src_idx, src in enumerate(R8_NAMES):
            opcode = 0x40 + (dst_idx * 8) + src_idx
            # LD (HL),(HL) slot is HALT
            if opcode == 0x76:
                continue
            cycles = 2 if HL_INDIRECT in (dst_idx, src_idx) else 1
            table.add(opcode, f'LD {dst},{src}', _ld_r_r(R8[dst_idx], R8[src_idx]), cycles)

    for idx, name in enumerate(R8_NAMES):
        opcode = 0x06 + (idx * 8)
        cycles = 3 if idx == HL_INDIRECT else 2
        table.add(opcode, f'LD {name},n', _ld_r_n(R8[idx]), cycles)

    table.add(0x02, 'LD (BC),A', _ld_indirect_a(Register.BC), 2)
    table.add(0x12, 'LD (DE),A', _ld_indirect_a(Register.DE), 2)
    table.add(0x22, 'LD (HL+),A', _ld_indirect_a(Register.HL, 1), 2)
    table.add(0x32, 'LD (HL-),A', _ld_indirect_a(Register.HL, -1), 2)
    table.add(0x0A, 'LD A,(BC)', _ld_a_indirect(Register.BC), 2)
    table.add(0x1A, 'LD A,(DE)', _ld_a_indirect(Register.DE), 2)
    table.add(0x2A, 'LD A,(HL+)', _ld_a_indirect(Register.HL, 1), 2)
    table.add(0x3A, 'LD A,(HL-)', _ld_a_indirect(Register.HL, -1), 2)

    table.add(0xE0, 'LDH (n),A', _ldh_n_a, 3)
    table.add(0xF0, 'LDH A,(n)', _ldh_a_n, 3)
    table.add(0xE2, 'LD (C),A', _ld_c_a, 2)
    table.add(0xF2, 'LD A,(C)', _ld_a_c, 2)
    table.add(0xEA, 'LD (nn),A', _ld_nn_a, 4)
    table.add(0xFA, 'LD A,(nn)', _ld_a_nn, 4)


# === 16-BIT LOADS / STACK ===

def _ld_rr_nn(register):
    def operation(cpu, memory):
        _set_r16(cpu, register, read_immediate16(cpu, memory))
    return operation


def _push(register):
    def operation(cpu, memory):
        cpu.push_word(memory, cpu.get16(register))
    return operation


def _pop(register):
    def operation(cpu, memory):
        cpu.set16(register, cpu.pop_word(memory))
    return operation


def _ld_nn_sp(cpu, memory):
    memory.write_word(read_immediate16(cpu, memory), cpu.sp)


def _ld_sp_hl(cpu, memory):
    cpu.sp = cpu.get16(Register.HL)


def _ld_hl_sp_e(cpu, memory):
    offset = read_immediate8(cpu, memory)
    cpu.set16(Register.HL, alu.add_sp_offset(cpu, cpu.sp, offset))


def _build_16bit_load_instructions(table):
    for idx, (name, register) in enumerate(R16):
        table.add(0x01 + (idx * 0x10), f'LD {name},nn', _ld_rr_nn(register), 3)

    for idx, (name, register) in enumerate(R16_STACK):
        table.add(0xC5 + (idx * 0x10), f'PUSH {name}', _push(register), 4)
        # POP AF restores every flag from the stack
        flags = 'ZNHC' if register is Register.AF else '----'
        table.add(0xC1 + (idx * 0x10), f'POP {name}', _pop(register), 3, flags)

    table.add(0x08, 'LD (nn),SP', _ld_nn_sp, 5)
    table.add(0xF9, 'LD SP,HL', _ld_sp_hl, 2)
    table.add(0xF8, 'LD HL,SP+e', _ld_hl_sp_e, 3, '00HC')


# === 8-BIT ARITHMETIC / LOGIC ===

def _adc(cpu, a, value):
    return alu.add8(cpu, a, value, 1 if cpu.is_flag_set(Flag.C) else 0)


def _sbc(cpu, a, value):
    return alu.sub8(cpu, a, value, 1 if cpu.is_flag_set(Flag.C) else 0)


def _cp(cpu, a, value):
    # Compare is a subtraction that throws the result away
    alu.sub8(cpu, a, value)
    return a


ALU_OPERATIONS = (
    ('ADD', 'A,', alu.add8, 'Z0HC'),
    ('ADC', 'A,', _adc, 'Z0HC'),
    ('SUB', '', alu.sub8, 'Z1HC'),
    ('SBC', 'A,', _sbc, 'Z1HC'),
    ('AND', '', alu.and8, 'Z010'),
    ('XOR', '', alu.xor8, 'Z000'),
    ('OR', '', alu.or8, 'Z000'),
    ('CP', '', _cp, 'Z1HC'),
)


def _alu_register(apply, register):
    def operation(cpu, memory):
        value = read_r8(cpu, memory, register)
        cpu.set8(Register.A, apply(cpu, cpu.get8(Register.A), value))
    return operation


def _alu_immediate(apply):
    def operation(cpu, memory):
        value = read_immediate8(cpu, memory)
        cpu.set8(Register.A, apply(cpu, cpu.get8(Register.A), value))
    return operation


def _inc_r(register):
    def operation(cpu, memory):
        write_r8(cpu, memory, register, alu.inc8(cpu, read_r8(cpu, memory, register)))
    return operation


def _dec_r(register):
    def operation(cpu, memory):
        write_r8(cpu, memory, register, alu.dec8(cpu, read_r8(cpu, memory, register)))
    return operation


def _build_8bit_arithmetic_instructions(table):
    """ALU A,r (0x80-0xBF), ALU A,n and INC/DEC r"""
    for op_idx, (name, prefix, apply, flags) in enumerate(ALU_OPERATIONS):
        for reg_idx, reg_name in enumerate(R8_NAMES):
            opcode = 0x80 + (op_idx * 8) + reg_idx
            cycles = 2 if reg_idx == HL_INDIRECT else 1
            table.add(opcode, f'{name} {prefix}{reg_name}',
                      _alu_register(apply, R8[reg_idx]), cycles, flags)
        table.add(0xC6 + (op_idx * 8), f'{name} {prefix}n', _alu_immediate(apply), 2, flags)

    for idx, name in enumerate(R8_NAMES):
        # Read-modify-write through (HL) costs a read and a write on top
        cycles = 3 if idx == HL_INDIRECT else 1
        table.add(0x04 + (idx * 8), f'INC {name}', _inc_r(R8[idx]), cycles, 'Z0H-')
        table.add(0x05 + (idx * 8), f'DEC {name}', _dec_r(R8[idx]), cycles, 'Z1H-')


# === 16-BIT ARITHMETIC ===

def _inc_rr(register):
    def operation(cpu, memory):
        _set_r16(cpu, register, (_get_r16(cpu, register) + 1) & 0xFFFF)
    return operation


def _dec_rr(register):
    def operation(cpu, memory):
        _set_r16(cpu, register, (_get_r16(cpu, register) - 1) & 0xFFFF)
    return operation


def _add_hl_rr(register):
    def operation(cpu, memory):
        hl = cpu.get16(Register.HL)
        cpu.set16(Register.HL, alu.add16(cpu, hl, _get_r16(cpu, register)))
    return operation


def _add_sp_e(cpu, memory):
    offset = read_immediate8(cpu, memory)
    cpu.sp = alu.add_sp_offset(cpu, cpu.sp, offset)


def _build_16bit_arithmetic_instructions(table):
    for idx, (name, register) in enumerate(R16):
        table.add(0x03 + (idx * 0x10), f'INC {name}', _inc_rr(register), 2)
        table.add(0x0B + (idx * 0x10), f'DEC {name}', _dec_rr(register), 2)
        table.add(0x09 + (idx * 0x10), f'ADD HL,{name}', _add_hl_rr(register), 2, '-0HC')
    table.add(0xE8, 'ADD SP,e', _add_sp_e, 4, '00HC')


# === ACCUMULATOR ROTATES ===

def _rotate_a(rotate):
    # Unlike the CB forms, the accumulator rotates always clear Z
    def operation(cpu, memory):
        cpu.set8(Register.A, rotate(cpu, cpu.get8(Register.A)))
        cpu.disable_flag(Flag.Z)
    return operation


def _build_rotate_instructions(table):
    table.add(0x07, 'RLCA', _rotate_a(alu.rlc), 1, '000C')
    table.add(0x0F, 'RRCA', _rotate_a(alu.rrc), 1, '000C')
    table.add(0x17, 'RLA', _rotate_a(alu.rl), 1, '000C')
    table.add(0x1F, 'RRA', _rotate_a(alu.rr), 1, '000C')


# === JUMPS ===

def _jp_nn(cpu, memory):
    cpu.pc = read_immediate16(cpu, memory)


def _jp_hl(cpu, memory):
    cpu.pc = cpu.get16(Register.HL)


def _jr_e(cpu, memory):
    offset = alu.signed8(read_immediate8(cpu, memory))
    cpu.pc = cpu.pc + offset


def _jp_cc(flag, expected, taken_cycles):
    def operation(cpu, memory):
        address = read_immediate16(cpu, memory)
        if _condition_met(cpu, flag, expected):
            cpu.pc = address
            return taken_cycles
    return operation


def _jr_cc(flag, expected, taken_cycles):
    def operation(cpu, memory):
        offset = alu.signed8(read_immediate8(cpu, memory))
        if _condition_met(cpu, flag, expected):
            cpu.pc = cpu.pc + offset
            return taken_cycles
    return operation


def _build_jump_instructions(table):
    table.add(0xC3, 'JP nn', _jp_nn, 4)
    table.add(0xE9, 'JP (HL)', _jp_hl, 1)
    table.add(0x18, 'JR e', _jr_e, 3)
    for idx, (name, flag, expected) in enumerate(CONDITIONS):
        table.add(0xC2 + (idx * 8), f'JP {name},nn', _jp_cc(flag, expected, 4), 3, taken_cycles=4)
        table.add(0x20 + (idx * 8), f'JR {name},e', _jr_cc(flag, expected, 3), 2, taken_cycles=3)


# === CALLS / RETURNS / RESTARTS ===

def _call_nn(cpu, memory):
    address = read_immediate16(cpu, memory)
    cpu.push_word(memory, cpu.pc)
    cpu.pc = address


def _ret(cpu, memory):
    cpu.pc = cpu.pop_word(memory)


def _reti(cpu, memory):
    cpu.pc = cpu.pop_word(memory)
    # RETI enables interrupts immediately, without the EI delay
    cpu.ime = True
    cpu.ei_delay = 0


def _call_cc(flag, expected, taken_cycles):
    def operation(cpu, memory):
        address = read_immediate16(cpu, memory)
        if _condition_met(cpu, flag, expected):
            cpu.push_word(memory, cpu.pc)
            cpu.pc = address
            return taken_cycles
    return operation


def _ret_cc(flag, expected, taken_cycles):
    def operation(cpu, memory):
        if _condition_met(cpu, flag, expected):
            cpu.pc = cpu.pop_word(memory)
            return taken_cycles
    return operation


def _rst(vector):
    def operation(cpu, memory):
        cpu.push_word(memory, cpu.pc)
        cpu.pc = vector
    return operation


def _build_call_instructions(table):
    table.add(0xCD, 'CALL nn', _call_nn, 6)
    table.add(0xC9, 'RET', _ret, 4)
    table.add(0xD9, 'RETI', _reti, 4)
    for idx, (name, flag, expected) in enumerate(CONDITIONS):
        table.add(0xC4 + (idx * 8), f'CALL {name},nn', _call_cc(flag, expected, 6), 3, taken_cycles=6)
        table.add(0xC0 + (idx * 8), f'RET {name}', _ret_cc(flag, expected, 5), 2, taken_cycles=5)
    for idx in range(8):
        vector = idx * 8
        table.add(0xC7 + vector, f'RST {vector:02X}H', _rst(vector), 4)
