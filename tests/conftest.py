import random

import pytest

from chip8emu import Machine


def assemble(words):
    """Pack 16-bit opcode words big-endian into ROM bytes."""
    rom = bytearray()
    for word in words:
        rom += bytes([(word >> 8) & 0xFF, word & 0xFF])
    return bytes(rom)


@pytest.fixture
def machine():
    return Machine(rng=random.Random(1234))


@pytest.fixture
def run_program(machine):
    """Load opcode words at 0x200 and step once per word (or ``steps`` times)."""
    def run(*words, steps=None):
        machine.load(assemble(words))
        for _ in range(len(words) if steps is None else steps):
            machine.step()
        return machine
    return run
