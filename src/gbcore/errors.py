"""
Exceptions raised by the processor and memory core.
"""
import numbers


class EmulationError(Exception):
    """Base class for every fault the core reports."""


class InvalidRegisterWidth(EmulationError):
    """An 8-bit accessor was used on a 16-bit register, or the other way round."""

    def __init__(self, register, expected_width):
        self.register = register
        self.expected_width = expected_width
        super().__init__(
            f"Register {register.name} is {register.width}-bit, "
            f"it can't be accessed as a {expected_width}-bit register"
        )


class UnknownOpcode(EmulationError):
    """The fetched byte has no entry in the instruction table."""

    def __init__(self, opcode, table="base"):
        self.opcode = opcode
        self.table = table
        if isinstance(opcode, numbers.Integral) and not isinstance(opcode, bool):
            text = f"0x{int(opcode):02X}"
        else:
            text = repr(opcode)
        prefix = "CB " if table == "cb" else ""
        super().__init__(f"Unknown opcode {prefix}{text}")


class OutOfRangeAddress(EmulationError):
    """A memory access fell outside 0x0000-0xFFFF."""

    def __init__(self, address):
        self.address = address
        super().__init__(f"Address {address!r} is outside the 16-bit address space")
