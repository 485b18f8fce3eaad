class Chip8Error(Exception):
    """Base class for every fatal interpreter condition."""


class MemoryAccessError(Chip8Error, IndexError):
    """Address outside 0x000..0xFFF, or a ROM that does not fit."""

    def __init__(self, address, message=None):
        self.address = address
        if message is None:
            message = "Memory access out of bounds: 0x%X" % address
        super().__init__(message)


class StackOverflowError(Chip8Error):
    pass


class StackUnderflowError(Chip8Error):
    pass


class IllegalInstructionError(Chip8Error):
    """No decode pattern matched the fetched word."""

    def __init__(self, opcode, address):
        self.opcode = opcode
        self.address = address
        super().__init__("Unknown opcode: %04X at 0x%03X" % (opcode, address))
