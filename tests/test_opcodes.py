"""
Opcode behaviour tests: results, flags and taken/not-taken costs
"""
import logging

import pytest

from gbcore.registers import Flag, Register


def flags(cpu):
    return ''.join(flag.name if cpu.is_flag_set(flag) else '-' for flag in Flag)


# === 8-BIT ARITHMETIC ===

def test_add_a_b_overflows_to_zero(cpu, run_program):
    cpu.set8(Register.A, 0x3A)
    cpu.set8(Register.B, 0xC6)

    run_program([0x80])

    assert cpu.get8(Register.A) == 0x00
    assert flags(cpu) == 'Z-HC'


def test_adc_adds_carry_in(cpu, run_program):
    cpu.set8(Register.A, 0xE1)
    cpu.set8(Register.E, 0x0F)
    cpu.enable_flag(Flag.C)

    run_program([0x8B])

    assert cpu.get8(Register.A) == 0xF1
    assert flags(cpu) == '--H-'


def test_sbc_subtracts_carry_in(cpu, run_program):
    cpu.set8(Register.A, 0x3B)
    cpu.set8(Register.H, 0x2A)
    cpu.enable_flag(Flag.C)

    run_program([0x9C])

    assert cpu.get8(Register.A) == 0x10
    assert flags(cpu) == '-N--'


def test_sub_borrow(cpu, run_program):
    cpu.set8(Register.A, 0x10)

    run_program([0xD6, 0x20])

    assert cpu.get8(Register.A) == 0xF0
    assert flags(cpu) == '-N-C'


def test_cp_keeps_accumulator(cpu, run_program):
    cpu.set8(Register.A, 0x3C)

    run_program([0xFE, 0x2F])

    assert cpu.get8(Register.A) == 0x3C
    assert flags(cpu) == '-NH-'
    assert cpu.pc == 0xC002
    assert cpu.last_cycles == 2


def test_cp_equal_sets_zero(cpu, run_program):
    cpu.set8(Register.A, 0x3C)
    cpu.set8(Register.B, 0x3C)

    run_program([0xB8])

    assert flags(cpu) == 'ZN--'


def test_and_or_xor(cpu, run_program):
    cpu.set8(Register.A, 0x5A)
    run_program([0xE6, 0x0F])
    assert cpu.get8(Register.A) == 0x0A
    assert flags(cpu) == '--H-'

    run_program([0xF6, 0xF0])
    assert cpu.get8(Register.A) == 0xFA
    assert flags(cpu) == '----'

    run_program([0xAF])  # XOR A
    assert cpu.get8(Register.A) == 0x00
    assert flags(cpu) == 'Z---'


def test_alu_through_hl_pointer(cpu, memory, run_program):
    cpu.set16(Register.HL, 0xD000)
    memory.write_byte(0xD000, 0x05)
    cpu.set8(Register.A, 0x03)

    run_program([0x86])

    assert cpu.get8(Register.A) == 0x08
    assert cpu.last_cycles == 2


def test_dec_to_zero(cpu, run_program):
    cpu.set8(Register.B, 0x01)
    cpu.enable_flag(Flag.C)

    run_program([0x05])

    assert cpu.get8(Register.B) == 0x00
    assert flags(cpu) == 'ZN-C'


def test_dec_borrows_from_high_nibble(cpu, run_program):
    cpu.set8(Register.A, 0x10)

    run_program([0x3D])

    assert cpu.get8(Register.A) == 0x0F
    assert flags(cpu) == '-NH-'


def test_daa_after_addition(cpu, run_program):
    run_program([0x3E, 0x15, 0xC6, 0x27, 0x27], steps=3)

    assert cpu.get8(Register.A) == 0x42
    assert not cpu.is_flag_set(Flag.C)


def test_daa_after_subtraction(cpu, run_program):
    run_program([0x3E, 0x42, 0xD6, 0x15, 0x27], steps=3)

    assert cpu.get8(Register.A) == 0x27
    assert cpu.is_flag_set(Flag.N)
    assert not cpu.is_flag_set(Flag.H)


def test_daa_decimal_carry(cpu, run_program):
    run_program([0x3E, 0x99, 0xC6, 0x01, 0x27], steps=3)

    assert cpu.get8(Register.A) == 0x00
    assert flags(cpu) == 'Z--C'


def test_cpl_scf_ccf(cpu, run_program):
    cpu.set8(Register.A, 0x35)
    run_program([0x2F])
    assert cpu.get8(Register.A) == 0xCA
    assert flags(cpu) == '-NH-'

    run_program([0x37])
    assert flags(cpu) == '---C'

    run_program([0x3F])
    assert flags(cpu) == '----'


# === 16-BIT ARITHMETIC ===

def test_add_hl_bc(cpu, run_program):
    cpu.set16(Register.HL, 0x8A23)
    cpu.set16(Register.BC, 0x0605)

    run_program([0x09])

    assert cpu.get16(Register.HL) == 0x9028
    assert flags(cpu) == '--H-'


def test_add_hl_hl_carry(cpu, run_program):
    cpu.set16(Register.HL, 0x8A23)

    run_program([0x29])

    assert cpu.get16(Register.HL) == 0x1446
    assert flags(cpu) == '--HC'


def test_inc_dec_pairs_wrap_without_flags(cpu, run_program):
    cpu.set16(Register.BC, 0xFFFF)
    cpu.set8(Register.F, 0xA0)

    run_program([0x03])
    assert cpu.get16(Register.BC) == 0x0000
    assert cpu.get8(Register.F) == 0xA0

    cpu.sp = 0x0000
    run_program([0x3B])
    assert cpu.sp == 0xFFFF
    assert cpu.last_cycles == 2


def test_add_sp_negative_offset(cpu, run_program):
    cpu.sp = 0x0001
    cpu.enable_flag(Flag.Z)

    run_program([0xE8, 0xFF])

    assert cpu.sp == 0x0000
    assert flags(cpu) == '--HC'
    assert cpu.last_cycles == 4


def test_add_sp_positive_offset(cpu, run_program):
    cpu.sp = 0xFFF8

    run_program([0xE8, 0x02])

    assert cpu.sp == 0xFFFA
    assert flags(cpu) == '----'


def test_ld_hl_sp_offset(cpu, run_program):
    cpu.sp = 0xFFF8
    cpu.set8(Register.F, 0xF0)

    run_program([0xF8, 0x02])

    assert cpu.get16(Register.HL) == 0xFFFA
    assert cpu.sp == 0xFFF8
    assert flags(cpu) == '----'
    assert cpu.last_cycles == 3


# === ROTATES AND SHIFTS ===

def test_rlca(cpu, run_program):
    cpu.set8(Register.A, 0x85)

    run_program([0x07])

    assert cpu.get8(Register.A) == 0x0B
    assert flags(cpu) == '---C'


def test_rla_through_carry(cpu, run_program):
    cpu.set8(Register.A, 0x95)
    cpu.enable_flag(Flag.C)

    run_program([0x17])

    assert cpu.get8(Register.A) == 0x2B
    assert flags(cpu) == '---C'


def test_rra_never_sets_zero(cpu, run_program):
    cpu.set8(Register.A, 0x01)

    run_program([0x1F])

    assert cpu.get8(Register.A) == 0x00
    assert flags(cpu) == '---C'


def test_rrca(cpu, run_program):
    cpu.set8(Register.A, 0x3B)

    run_program([0x0F])

    assert cpu.get8(Register.A) == 0x9D
    assert flags(cpu) == '---C'


def test_cb_rlc_register(cpu, run_program):
    cpu.set8(Register.B, 0x85)

    run_program([0xCB, 0x00])

    assert cpu.get8(Register.B) == 0x0B
    assert flags(cpu) == '---C'
    assert cpu.last_cycles == 2


def test_cb_rl_through_hl_pointer(cpu, memory, run_program):
    cpu.set16(Register.HL, 0xD000)
    memory.write_byte(0xD000, 0x80)

    run_program([0xCB, 0x16])

    assert memory.read_byte(0xD000) == 0x00
    assert flags(cpu) == 'Z--C'
    assert cpu.last_cycles == 4


def test_cb_sra_keeps_sign(cpu, run_program):
    cpu.set8(Register.A, 0x8A)

    run_program([0xCB, 0x2F])

    assert cpu.get8(Register.A) == 0xC5
    assert flags(cpu) == '----'


def test_cb_srl(cpu, run_program):
    cpu.set8(Register.A, 0x01)

    run_program([0xCB, 0x3F])

    assert cpu.get8(Register.A) == 0x00
    assert flags(cpu) == 'Z--C'


def test_cb_sla(cpu, run_program):
    cpu.set8(Register.D, 0x80)

    run_program([0xCB, 0x22])

    assert cpu.get8(Register.D) == 0x00
    assert flags(cpu) == 'Z--C'


def test_cb_rr(cpu, run_program):
    cpu.set8(Register.L, 0x01)
    cpu.enable_flag(Flag.C)

    run_program([0xCB, 0x1D])

    assert cpu.get8(Register.L) == 0x80
    assert flags(cpu) == '---C'


def test_cb_swap_clears_carry(cpu, run_program):
    cpu.set8(Register.A, 0xF1)
    cpu.enable_flag(Flag.C)

    run_program([0xCB, 0x37])

    assert cpu.get8(Register.A) == 0x1F
    assert flags(cpu) == '----'


@pytest.mark.parametrize("value, zero", [(0x80, False), (0x7F, True)])
def test_cb_bit(cpu, run_program, value, zero):
    cpu.set8(Register.H, value)
    cpu.enable_flag(Flag.C)
    cpu.enable_flag(Flag.N)

    run_program([0xCB, 0x7C])

    assert cpu.is_flag_set(Flag.Z) is zero
    assert not cpu.is_flag_set(Flag.N)
    assert cpu.is_flag_set(Flag.H)
    assert cpu.is_flag_set(Flag.C)
    assert cpu.get8(Register.H) == value


def test_cb_bit_hl_pointer_cost(cpu, memory, run_program):
    cpu.set16(Register.HL, 0xD000)
    memory.write_byte(0xD000, 0x01)

    run_program([0xCB, 0x46])

    assert not cpu.is_flag_set(Flag.Z)
    assert cpu.last_cycles == 3


def test_cb_res_and_set(cpu, memory, run_program):
    cpu.set16(Register.HL, 0xD000)
    memory.write_byte(0xD000, 0xFF)
    cpu.set8(Register.F, 0xF0)

    run_program([0xCB, 0x86])

    assert memory.read_byte(0xD000) == 0xFE
    assert cpu.last_cycles == 4
    assert cpu.get8(Register.F) == 0xF0

    run_program([0xCB, 0xDF])

    assert cpu.get8(Register.A) == 0x08
    assert cpu.last_cycles == 2


# === LOADS ===

def test_ld_register_to_register(cpu, run_program):
    cpu.set8(Register.E, 0x77)

    run_program([0x7B])  # LD A,E

    assert cpu.get8(Register.A) == 0x77
    assert cpu.last_cycles == 1


def test_ld_immediate_into_hl_pointer(cpu, memory, run_program):
    cpu.set16(Register.HL, 0xD000)

    run_program([0x36, 0x5C])

    assert memory.read_byte(0xD000) == 0x5C
    assert cpu.pc == 0xC002
    assert cpu.last_cycles == 3


def test_ld_rr_immediate(cpu, run_program):
    run_program([0x21, 0x34, 0x12, 0x31, 0xF0, 0xDF], steps=2)

    assert cpu.get16(Register.HL) == 0x1234
    assert cpu.sp == 0xDFF0
    assert cpu.pc == 0xC006


def test_ld_hl_increment_store(cpu, memory, run_program):
    cpu.set16(Register.HL, 0xC100)
    cpu.set8(Register.A, 0x42)

    run_program([0x22])

    assert memory.read_byte(0xC100) == 0x42
    assert cpu.get16(Register.HL) == 0xC101


def test_ld_hl_decrement_load(cpu, memory, run_program):
    cpu.set16(Register.HL, 0xC100)
    memory.write_byte(0xC100, 0x99)

    run_program([0x3A])

    assert cpu.get8(Register.A) == 0x99
    assert cpu.get16(Register.HL) == 0xC0FF


def test_ldh_round_trip(cpu, memory, run_program):
    cpu.set8(Register.A, 0xAB)

    run_program([0xE0, 0x80])
    assert memory.read_byte(0xFF80) == 0xAB
    assert cpu.last_cycles == 3

    cpu.set8(Register.A, 0x00)
    run_program([0xF0, 0x80])
    assert cpu.get8(Register.A) == 0xAB


def test_ld_through_c(cpu, memory, run_program):
    cpu.set8(Register.C, 0x10)
    cpu.set8(Register.A, 0x3F)

    run_program([0xE2])

    assert memory.read_byte(0xFF10) == 0x3F


def test_ld_absolute(cpu, memory, run_program):
    cpu.set8(Register.A, 0x66)

    run_program([0xEA, 0x00, 0xD0])

    assert memory.read_byte(0xD000) == 0x66
    assert cpu.last_cycles == 4


def test_ld_nn_sp(cpu, memory, run_program):
    cpu.sp = 0xFFF8

    run_program([0x08, 0x00, 0xD0])

    assert memory.read_word(0xD000) == 0xFFF8
    assert cpu.last_cycles == 5


def test_ld_sp_hl(cpu, run_program):
    cpu.set16(Register.HL, 0xD123)

    run_program([0xF9])

    assert cpu.sp == 0xD123


# === JUMPS ===

def test_jr_backwards(cpu, run_program):
    run_program([0x18, 0xFE])

    assert cpu.pc == 0xC000
    assert cpu.last_cycles == 3


@pytest.mark.parametrize("zero, pc, cycles", [(False, 0xC007, 3), (True, 0xC002, 2)])
def test_jr_nz(cpu, run_program, zero, pc, cycles):
    cpu.update_flag(Flag.Z, zero)

    run_program([0x20, 0x05])

    assert cpu.pc == pc
    assert cpu.last_cycles == cycles


@pytest.mark.parametrize("carry, pc, cycles", [(True, 0x1234, 4), (False, 0xC003, 3)])
def test_jp_c(cpu, run_program, carry, pc, cycles):
    cpu.update_flag(Flag.C, carry)

    run_program([0xDA, 0x34, 0x12])

    assert cpu.pc == pc
    assert cpu.last_cycles == cycles


def test_jp_nn(cpu, run_program):
    run_program([0xC3, 0x34, 0x12])

    assert cpu.pc == 0x1234
    assert cpu.last_cycles == 4


def test_jp_hl(cpu, run_program):
    cpu.set16(Register.HL, 0xD000)

    run_program([0xE9])

    assert cpu.pc == 0xD000
    assert cpu.last_cycles == 1


# === CALLS / STACK ===

def test_call_and_ret(cpu, memory, run_program):
    memory.write_byte(0xD000, 0xC9)

    run_program([0xCD, 0x00, 0xD0])

    assert cpu.pc == 0xD000
    assert cpu.sp == 0xFFFC
    assert memory.read_word(0xFFFC) == 0xC003
    assert cpu.last_cycles == 6

    cpu.step(memory)

    assert cpu.pc == 0xC003
    assert cpu.sp == 0xFFFE
    assert cpu.last_cycles == 4


@pytest.mark.parametrize("zero, cycles", [(True, 6), (False, 3)])
def test_call_z(cpu, run_program, zero, cycles):
    cpu.update_flag(Flag.Z, zero)

    run_program([0xCC, 0x00, 0xD0])

    assert cpu.last_cycles == cycles
    assert cpu.pc == (0xD000 if zero else 0xC003)
    assert cpu.sp == (0xFFFC if zero else 0xFFFE)


@pytest.mark.parametrize("zero, cycles", [(True, 5), (False, 2)])
def test_ret_z(cpu, memory, run_program, zero, cycles):
    cpu.sp = 0xDFFE
    memory.write_word(0xDFFE, 0xC123)
    cpu.update_flag(Flag.Z, zero)

    run_program([0xC8])

    assert cpu.last_cycles == cycles
    assert cpu.pc == (0xC123 if zero else 0xC001)


def test_rst(cpu, memory, run_program):
    run_program([0xFF])

    assert cpu.pc == 0x0038
    assert memory.read_word(cpu.sp) == 0xC001
    assert cpu.last_cycles == 4


def test_push_pop(cpu, run_program):
    cpu.set16(Register.BC, 0x1234)

    run_program([0xC5, 0xD1], steps=2)

    assert cpu.get16(Register.DE) == 0x1234
    assert cpu.sp == 0xFFFE


def test_pop_af_masks_flag_nibble(cpu, memory, run_program):
    cpu.sp = 0xD000
    memory.write_word(0xD000, 0x12FF)

    run_program([0xF1])

    assert cpu.get16(Register.AF) == 0x12F0
    assert cpu.sp == 0xD002


# === INTERRUPTS / LOW POWER ===

def test_ei_takes_effect_after_next_instruction(cpu, memory, run_program):
    run_program([0xFB, 0x00])
    assert not cpu.ime

    cpu.step(memory)
    assert cpu.ime


def test_repeated_ei_does_not_postpone_ime(cpu, memory, run_program):
    run_program([0xFB, 0xFB, 0x00])
    assert not cpu.ime

    cpu.step(memory)
    assert cpu.ime


def test_ei_while_enabled_keeps_ime(cpu, memory, run_program):
    cpu.ime = True

    run_program([0xFB])

    assert cpu.ime
    assert cpu.ei_delay == 0


def test_di_cancels_pending_ei(cpu, memory, run_program):
    run_program([0xFB, 0xF3], steps=2)

    assert not cpu.ime

    cpu.step(memory)
    assert not cpu.ime


def test_reti_enables_immediately(cpu, memory, run_program):
    cpu.sp = 0xDFFE
    memory.write_word(0xDFFE, 0xC123)

    run_program([0xD9])

    assert cpu.pc == 0xC123
    assert cpu.ime
    assert cpu.last_cycles == 4


def test_halt_keeps_time_moving(cpu, memory, run_program):
    run_program([0x76])

    assert cpu.halted
    assert cpu.pc == 0xC001

    assert cpu.step(memory) == 1
    assert cpu.pc == 0xC001
    assert cpu.clock.m == 2


def test_stop_skips_padding_byte(cpu, run_program):
    run_program([0x10, 0x00])

    assert cpu.stopped
    assert cpu.pc == 0xC002


def test_service_interrupt(cpu, memory):
    cpu.pc = 0xC000
    cpu.ime = True
    cpu.halted = True

    cpu.service_interrupt(0x40, memory)

    assert cpu.pc == 0x0040
    assert cpu.sp == 0xFFFC
    assert memory.read_word(0xFFFC) == 0xC000
    assert not cpu.ime
    assert not cpu.halted
    assert cpu.clock.m == 5


# === CLOCK AND TRACING ===

def test_step_advances_clock(cpu, run_program):
    run_program([0x00, 0x01, 0x00, 0x00, 0xCD, 0x00, 0xD0], steps=3)

    assert cpu.clock.m == 1 + 3 + 6
    assert cpu.clock.t == (1 + 3 + 6) * 4


def test_debug_trace(cpu_with_debug, memory, caplog):
    memory.load(bytes([0x00]), 0xC000)
    cpu_with_debug.pc = 0xC000

    with caplog.at_level(logging.DEBUG, logger="gbcore.cpu"):
        cpu_with_debug.step(memory)

    assert "0xC000: NOP" in caplog.text
