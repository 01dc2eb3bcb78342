"""
Arithmetic and logic helpers shared by the opcode families.

Each helper takes the CPU first, computes the result, updates the flags the
operation defines through the CPU's flag operations and returns the result.
Flags an operation does not define are left alone.
"""
from .registers import Flag


def inc8(cpu, value):
    """INC: Z 0 H -"""
    result = (value + 1) & 0xFF
    cpu.update_flag(Flag.Z, result == 0)
    cpu.disable_flag(Flag.N)
    # Half-carry occurs when incrementing causes overflow from bit 3 to bit 4
    cpu.update_flag(Flag.H, (value & 0x0F) + 1 > 0x0F)
    return result


def dec8(cpu, value):
    """DEC: Z 1 H -"""
    result = (value - 1) & 0xFF
    cpu.update_flag(Flag.Z, result == 0)
    cpu.enable_flag(Flag.N)
    # Borrow from bit 4 when the low nibble was zero
    cpu.update_flag(Flag.H, (value & 0x0F) == 0x00)
    return result


def add8(cpu, a, value, carry=0):
    """ADD/ADC: Z 0 H C"""
    result = a + value + carry
    cpu.update_flag(Flag.Z, (result & 0xFF) == 0)
    cpu.disable_flag(Flag.N)
    cpu.update_flag(Flag.H, (a & 0x0F) + (value & 0x0F) + carry > 0x0F)
    cpu.update_flag(Flag.C, result > 0xFF)
    return result & 0xFF


def sub8(cpu, a, value, carry=0):
    """SUB/SBC/CP: Z 1 H C"""
    result = a - value - carry
    cpu.update_flag(Flag.Z, (result & 0xFF) == 0)
    cpu.enable_flag(Flag.N)
    cpu.update_flag(Flag.H, (a & 0x0F) - (value & 0x0F) - carry < 0)
    cpu.update_flag(Flag.C, result < 0)
    return result & 0xFF


def and8(cpu, a, value):
    """AND: Z 0 1 0"""
    result = a & value
    cpu.update_flag(Flag.Z, result == 0)
    cpu.disable_flag(Flag.N)
    cpu.enable_flag(Flag.H)
    cpu.disable_flag(Flag.C)
    return result


def xor8(cpu, a, value):
    """XOR: Z 0 0 0"""
    return _logic_result(cpu, a ^ value)


def or8(cpu, a, value):
    """OR: Z 0 0 0"""
    return _logic_result(cpu, a | value)


def _logic_result(cpu, result):
    cpu.update_flag(Flag.Z, result == 0)
    cpu.disable_flag(Flag.N)
    cpu.disable_flag(Flag.H)
    cpu.disable_flag(Flag.C)
    return result


def add16(cpu, a, b):
    """16-bit ADD HL,rr: - 0 H C

    Half carry is the carry out of bit 11, carry the carry out of bit 15.
    The result wraps at 16 bits.
    """
    result = a + b
    cpu.disable_flag(Flag.N)
    cpu.update_flag(Flag.H, (a & 0x0FFF) + (b & 0x0FFF) > 0x0FFF)
    cpu.update_flag(Flag.C, result > 0xFFFF)
    return result & 0xFFFF


def signed8(value):
    """Interpret an unsigned byte as a two's complement offset"""
    return value - 256 if value > 127 else value


def add_sp_offset(cpu, sp, offset):
    """SP + e8 (ADD SP,e8 and LD HL,SP+e8): 0 0 H C

    Flags come from the unsigned addition of the offset to the low byte of SP.
    """
    cpu.disable_flag(Flag.Z)
    cpu.disable_flag(Flag.N)
    cpu.update_flag(Flag.H, (sp & 0x0F) + (offset & 0x0F) > 0x0F)
    cpu.update_flag(Flag.C, (sp & 0xFF) + (offset & 0xFF) > 0xFF)
    return (sp + signed8(offset)) & 0xFFFF


def daa(cpu, a):
    """Decimal adjust A after a BCD addition or subtraction: Z - 0 C"""
    correction = 0
    carry = cpu.is_flag_set(Flag.C)
    if not cpu.is_flag_set(Flag.N):
        if carry or a > 0x99:
            correction |= 0x60
            carry = True
        if cpu.is_flag_set(Flag.H) or (a & 0x0F) > 0x09:
            correction |= 0x06
        result = (a + correction) & 0xFF
    else:
        if carry:
            correction |= 0x60
        if cpu.is_flag_set(Flag.H):
            correction |= 0x06
        result = (a - correction) & 0xFF
    cpu.update_flag(Flag.Z, result == 0)
    cpu.disable_flag(Flag.H)
    cpu.update_flag(Flag.C, carry)
    return result


# Rotate and shift family: Z 0 0 C

def _shift_result(cpu, result, carry):
    cpu.update_flag(Flag.Z, result == 0)
    cpu.disable_flag(Flag.N)
    cpu.disable_flag(Flag.H)
    cpu.update_flag(Flag.C, carry)
    return result


def rlc(cpu, value):
    """Rotate left circular"""
    carry = (value >> 7) & 0x01
    return _shift_result(cpu, ((value << 1) | carry) & 0xFF, carry)


def rrc(cpu, value):
    """Rotate right circular"""
    carry = value & 0x01
    return _shift_result(cpu, (value >> 1) | (carry << 7), carry)


def rl(cpu, value):
    """Rotate left through carry"""
    carry_in = 1 if cpu.is_flag_set(Flag.C) else 0
    carry = (value >> 7) & 0x01
    return _shift_result(cpu, ((value << 1) | carry_in) & 0xFF, carry)


def rr(cpu, value):
    """Rotate right through carry"""
    carry_in = 1 if cpu.is_flag_set(Flag.C) else 0
    carry = value & 0x01
    return _shift_result(cpu, (value >> 1) | (carry_in << 7), carry)


def sla(cpu, value):
    """Shift left arithmetic"""
    carry = (value >> 7) & 0x01
    return _shift_result(cpu, (value << 1) & 0xFF, carry)


def sra(cpu, value):
    """Shift right arithmetic (bit 7 kept)"""
    carry = value & 0x01
    return _shift_result(cpu, (value >> 1) | (value & 0x80), carry)


def swap(cpu, value):
    """Swap nibbles: Z 0 0 0"""
    return _shift_result(cpu, ((value & 0x0F) << 4) | ((value & 0xF0) >> 4), 0)


def srl(cpu, value):
    """Shift right logical"""
    carry = value & 0x01
    return _shift_result(cpu, value >> 1, carry)


def bit(cpu, index, value):
    """BIT: Z 0 1 -"""
    cpu.update_flag(Flag.Z, not value & (1 << index))
    cpu.disable_flag(Flag.N)
    cpu.enable_flag(Flag.H)
