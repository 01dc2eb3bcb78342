"""
Machine cycle counter.

The LR35902 documents its timing in machine cycles (M); each one is four
clock ticks (T) of the 4.194304 MHz oscillator.
"""
import cython

TICKS_PER_M_CYCLE = 4


class Clock:
    def __init__(self):
        self.m: cython.longlong = 0
        self.t: cython.longlong = 0

    def tick(self, m_cycles: cython.int) -> None:
        """Add elapsed machine cycles. The counter only moves forward."""
        if m_cycles < 0:
            raise ValueError(f"Clock can't go backwards ({m_cycles} cycles)")
        self.m += m_cycles
        self.t += m_cycles * TICKS_PER_M_CYCLE

    def reset(self):
        self.m = 0
        self.t = 0

    def __repr__(self):
        return f"Clock(m={self.m}, t={self.t})"
