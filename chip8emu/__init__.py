# CHIP-8 interpreter core plus a small pyglet frontend.
# Memory - 4096 bytes holding the fonts and the inputted ROM.
# Machine - registers, stack, timers, keypad and the 64x32 display buffer.

from .errors import (
    Chip8Error,
    IllegalInstructionError,
    MemoryAccessError,
    StackOverflowError,
    StackUnderflowError,
)
from .memory import Memory
from .keypad import Keypad
from .display import Framebuffer
from .machine import Machine

__version__ = "0.1.0"

__all__ = [
    "Chip8Error",
    "IllegalInstructionError",
    "MemoryAccessError",
    "StackOverflowError",
    "StackUnderflowError",
    "Memory",
    "Keypad",
    "Framebuffer",
    "Machine",
]
