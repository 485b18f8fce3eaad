# Memory - can hold up to 4096 bytes which includes: the interpreter, fonts, and inputted ROM.

from .config import MEMORY_SIZE, PROGRAM_START, fontset, log
from .errors import MemoryAccessError


class Memory:
    """Flat 4 KiB store with the hex font seeded at address 0."""

    def __init__(self):
        self.data = bytearray(MEMORY_SIZE)
        # Load fontset into memory
        self.data[:len(fontset)] = bytes(fontset)

    def __len__(self):
        return len(self.data)

    def _check(self, addr):
        if addr < 0 or addr >= MEMORY_SIZE:
            raise MemoryAccessError(addr)

    def check_range(self, addr, length):
        """Fail before a multi-byte access if any byte of it would be out of bounds."""
        self._check(addr)
        self._check(addr + length - 1)

    def read(self, addr):
        self._check(addr)
        return self.data[addr]

    def write(self, addr, value):
        self._check(addr)
        self.data[addr] = value & 0xFF

    def load(self, rom, start=PROGRAM_START):
        """Copy a ROM image verbatim at ``start``; nothing is written if it does not fit."""
        rom = bytes(rom)
        if start < PROGRAM_START:
            raise MemoryAccessError(start, "Refusing to load below 0x%03X: 0x%03X" % (PROGRAM_START, start))
        end = start + len(rom)
        if end > MEMORY_SIZE:
            raise MemoryAccessError(
                end - 1,
                "ROM of %d bytes does not fit at 0x%03X (%d bytes free)" % (len(rom), start, MEMORY_SIZE - start),
            )
        self.data[start:end] = rom
        log("Loaded", len(rom), "bytes at", hex(start))
