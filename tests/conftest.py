"""
Pytest configuration and shared fixtures for the CPU core tests
"""
import pytest
import sys
import os

# Add src to Python path so we can import gbcore modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from gbcore.memory import Memory
from gbcore.cpu import CPU


@pytest.fixture
def memory():
    """Create a fresh Memory instance for testing."""
    return Memory()


@pytest.fixture
def cpu():
    """Create a CPU instance for testing."""
    return CPU(debug=False)


@pytest.fixture
def cpu_with_debug():
    """Create a CPU instance with debug enabled for testing."""
    return CPU(debug=True)


@pytest.fixture
def run_program(cpu, memory):
    """Load program bytes at 0xC000 and step the CPU through them."""
    def _run(program, steps=1, address=0xC000):
        memory.load(bytes(program), address)
        cpu.pc = address
        for _ in range(steps):
            cpu.step(memory)
        return cpu
    return _run
