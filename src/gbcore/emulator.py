"""
Driving loop for the CPU core.
Owns one Memory and one CPU and runs fetch-decode-execute steps over them.
"""
import logging
import os

import pygame

from .clock import TICKS_PER_M_CYCLE
from .cpu import CPU
from .memory import Memory
from .post_boot_init import init_post_boot_dmg

logger = logging.getLogger(__name__)

# Game Boy timing constants
GB_CPU_FREQ = 4194304  # 4.194304 MHz
CYCLES_PER_SCANLINE = 456  # clock ticks per scanline
CYCLES_PER_FRAME = CYCLES_PER_SCANLINE * 154  # 70224 clock ticks per frame
GB_FRAME_RATE = GB_CPU_FREQ / CYCLES_PER_FRAME  # ~59.7 Hz
M_CYCLES_PER_FRAME = CYCLES_PER_FRAME // TICKS_PER_M_CYCLE


class Emulator:
    def __init__(self, debug=False, post_boot=True):
        self.debug = debug
        self.memory = Memory(debug)
        self.cpu = CPU(debug=debug)
        self.running = False

        if post_boot:
            init_post_boot_dmg(self.cpu, self.memory)

    def load_rom(self, rom, address=0x0000):
        """Copy a program image (path or bytes) into memory at address"""
        if isinstance(rom, (str, os.PathLike)):
            with open(rom, 'rb') as f:
                rom_data = f.read()
        else:
            rom_data = bytes(rom)

        self.memory.load(rom_data, address)
        logger.info("Loaded %d bytes at 0x%04X", len(rom_data), address)
        return len(rom_data)

    def step(self):
        """Execute one instruction and return the machine cycles it took"""
        return self.cpu.step(self.memory)

    def stop(self):
        self.running = False

    def run(self, max_steps=None, max_cycles=None, realtime=False):
        """Run until the CPU halts or stops, or a limit is reached.

        With realtime the loop sleeps once per emulated frame so the program
        runs at the speed of the real hardware. Returns the machine cycles
        elapsed during this call.
        """
        start_cycles = self.cpu.clock.m
        steps = 0
        frame_cycles = 0
        clock = pygame.time.Clock() if realtime else None

        self.running = True
        try:
            while self.running:
                if max_steps is not None and steps >= max_steps:
                    break
                if max_cycles is not None and self.cpu.clock.m - start_cycles >= max_cycles:
                    break

                cycles = self.step()
                steps += 1

                if self.cpu.halted or self.cpu.stopped:
                    logger.info("CPU %s at PC 0x%04X after %d steps",
                                'halted' if self.cpu.halted else 'stopped', self.cpu.pc, steps)
                    break

                if clock is not None:
                    frame_cycles += cycles
                    if frame_cycles >= M_CYCLES_PER_FRAME:
                        frame_cycles -= M_CYCLES_PER_FRAME
                        clock.tick(GB_FRAME_RATE)
        finally:
            self.running = False

        elapsed = self.cpu.clock.m - start_cycles
        if self.debug:
            logger.debug("Run finished: %d steps, %d cycles, %s",
                         steps, elapsed, self.cpu.format_state())
        return elapsed
