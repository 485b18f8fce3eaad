# CHIP8 Virtual Machine Steps:
# CPU - CowGods CHIP8 Technical reference http://devernay.free.fr/hacks/chip8/C8TECH10.HTM#0.0
#----------------------------------------------------------------------------------------------
# We will be storing register values as 16 zeros. The two timer registers are plain ints
# that we decrement per executed cycle, and the stack is 16 words with a stack pointer.
# Nothing in here knows about windows, clocks or sound: the frontend calls step() at its
# own pace, feeds key events in and pulls finished frames out.

import random

import numpy as np

from .config import PROGRAM_START, STACK_DEPTH, GLYPH_SIZE, log
from .display import Framebuffer
from .errors import Chip8Error, IllegalInstructionError, StackOverflowError, StackUnderflowError
from .keypad import Keypad
from .memory import Memory


class Machine:

    def __init__(self, rng=None, wrap=True):
        # ---- CPU state ----
        self.memory = Memory()
        self.V = [0] * 16           # 16 general-purpose registers
        self.I = 0                  # index register (memory pointer)
        self.pc = PROGRAM_START     # program counter starts at 0x200
        self.stack = np.zeros(STACK_DEPTH, dtype=np.uint16)
        self.sp = 0
        self.delay_timer = 0
        self.sound_timer = 0
        self.keypad = Keypad()
        self.display = Framebuffer(wrap=wrap)
        self.rng = rng if rng is not None else random.Random()
        self.cycle_count = 0

        # dispatch table
        self.opcodes = [
            (0xFFFF, 0x00E0, self.op_CLS),
            (0xFFFF, 0x00EE, self.op_RET),

            (0xF000, 0x1000, self.op_JP),
            (0xF000, 0x2000, self.op_CALL),
            (0xF000, 0x3000, self.op_SE_Vx_kk),
            (0xF000, 0x4000, self.op_SNE_Vx_kk),
            (0xF00F, 0x5000, self.op_SE_Vx_Vy),
            (0xF000, 0x6000, self.op_LD_Vx_kk),
            (0xF000, 0x7000, self.op_ADD_Vx_kk),

            (0xF00F, 0x8000, self.op_LD_Vx_Vy),
            (0xF00F, 0x8001, self.op_OR),
            (0xF00F, 0x8002, self.op_AND),
            (0xF00F, 0x8003, self.op_XOR),
            (0xF00F, 0x8004, self.op_ADD),
            (0xF00F, 0x8005, self.op_SUB),
            (0xF00F, 0x8006, self.op_SHR),
            (0xF00F, 0x8007, self.op_SUBN),
            (0xF00F, 0x800E, self.op_SHL),

            (0xF00F, 0x9000, self.op_SNE_Vx_Vy),
            (0xF000, 0xA000, self.op_LD_I),
            (0xF000, 0xB000, self.op_JP_V0),
            (0xF000, 0xC000, self.op_RND),
            (0xF000, 0xD000, self.op_DRW),

            (0xF0FF, 0xE09E, self.op_SKP),
            (0xF0FF, 0xE0A1, self.op_SKNP),

            (0xF0FF, 0xF007, self.op_LD_Vx_DT),
            (0xF0FF, 0xF00A, self.op_WAITKEY),
            (0xF0FF, 0xF015, self.op_LD_DT_Vx),
            (0xF0FF, 0xF018, self.op_LD_ST_Vx),
            (0xF0FF, 0xF01E, self.op_ADD_I_Vx),
            (0xF0FF, 0xF029, self.op_FONT),
            (0xF0FF, 0xF033, self.op_BCD),
            (0xF0FF, 0xF055, self.op_STORE),
            (0xF0FF, 0xF065, self.op_LOAD),
        ]

    # ---- Program load ----
    def load(self, rom):
        self.memory.load(rom, PROGRAM_START)

    # ---- Input ----
    def set_key(self, code):
        self.keypad.press(code)

    def clear_key(self, code):
        self.keypad.release(code)

    # ---- Output ----
    def take_frame(self):
        return self.display.take_frame()

    @property
    def draw_flag(self):
        return self.display.draw_flag

    @property
    def sound_active(self):
        return self.sound_timer > 0

    @property
    def waiting_for_key(self):
        return self.keypad.waiting

    # ---- Cycle ----
    def fetch(self):
        return (self.memory.read(self.pc) << 8) | self.memory.read(self.pc + 1)

    def decode(self, opcode):
        for mask, pattern, handler in self.opcodes:
            if (opcode & mask) == pattern:
                return handler
        raise IllegalInstructionError(opcode, self.pc)

    def step(self):
        """Run one fetch-decode-execute cycle. Returns True if an instruction completed."""
        if self.keypad.waiting:
            delivered = self.keypad.take_key()
            if delivered is None:
                return False
            x, key = delivered
            self.V[x] = key
            self.pc += 2
            return self._finish_cycle()

        opcode = self.fetch()
        if opcode == 0x0000:
            return False

        handler = self.decode(opcode)
        pc = self.pc
        self.pc += 2
        try:
            handler(opcode)
        except Chip8Error:
            # PC stays on the faulting instruction
            self.pc = pc
            raise

        if self.keypad.waiting:
            return False
        return self._finish_cycle()

    def _finish_cycle(self):
        self.cycle_count += 1
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1
        return True

    def _skip(self):
        self.pc += 2

    # ---- Opcode handlers ----

    # 00E0 - Clear the display
    def op_CLS(self, opcode):
        self.display.clear()
        log("Clear the display (all pixels turned off)")

    # 00EE - Return from subroutine
    def op_RET(self, opcode):
        if self.sp == 0:
            raise StackUnderflowError("Stack underflow on 00EE at 0x%03X" % (self.pc - 2))
        self.sp -= 1
        self.pc = int(self.stack[self.sp])
        log("Return to", hex(self.pc))

    # 1nnn - Jump to address NNN
    def op_JP(self, opcode):
        self.pc = opcode & 0x0FFF
        log("Jump to address", hex(self.pc))

    # 2nnn - Call subroutine at NNN
    def op_CALL(self, opcode):
        if self.sp >= STACK_DEPTH:
            raise StackOverflowError("Stack overflow on CALL at 0x%03X" % (self.pc - 2))
        self.stack[self.sp] = self.pc
        self.sp += 1
        self.pc = opcode & 0x0FFF
        log("Call subroutine at", hex(self.pc))

    # 3xkk - Skip next instruction if Vx == kk
    def op_SE_Vx_kk(self, opcode):
        x = (opcode >> 8) & 0xF
        kk = opcode & 0xFF
        if self.V[x] == kk:
            self._skip()
            log(f"Skip next instruction: V{x:X} == {kk}")

    # 4xkk - Skip next instruction if Vx != kk
    def op_SNE_Vx_kk(self, opcode):
        x = (opcode >> 8) & 0xF
        kk = opcode & 0xFF
        if self.V[x] != kk:
            self._skip()
            log(f"Skip next instruction: V{x:X} != {kk}")

    # 5xy0 - Skip next instruction if Vx == Vy
    def op_SE_Vx_Vy(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        if self.V[x] == self.V[y]:
            self._skip()
            log(f"Skip next instruction: V{x:X} == V{y:X}")

    # 6xkk - Set Vx = kk
    def op_LD_Vx_kk(self, opcode):
        x = (opcode >> 8) & 0xF
        self.V[x] = opcode & 0xFF
        log(f"Set V{x:X} = {self.V[x]}")

    # 7xkk - Add immediate, no carry
    def op_ADD_Vx_kk(self, opcode):
        x = (opcode >> 8) & 0xF
        kk = opcode & 0xFF
        self.V[x] = (self.V[x] + kk) & 0xFF
        log(f"Add {kk} to V{x:X}: {self.V[x]}")

    # 8xy0..8xyE - VF is always written last so that X == F keeps the flag
    def op_LD_Vx_Vy(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        self.V[x] = self.V[y]

    def op_OR(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        self.V[x] |= self.V[y]

    def op_AND(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        self.V[x] &= self.V[y]

    def op_XOR(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        self.V[x] ^= self.V[y]

    def op_ADD(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        total = self.V[x] + self.V[y]
        self.V[x] = total & 0xFF
        self.V[0xF] = 1 if total > 0xFF else 0
        log(f"Add V{y:X} to V{x:X}: result {self.V[x]}, carry={self.V[0xF]}")

    def op_SUB(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        not_borrow = 1 if self.V[x] >= self.V[y] else 0
        self.V[x] = (self.V[x] - self.V[y]) & 0xFF
        self.V[0xF] = not_borrow
        log(f"Subtract V{y:X} from V{x:X}: result {self.V[x]}, NOT borrow={not_borrow}")

    # Shifts read VY, not VX (original COSMAC behaviour)
    def op_SHR(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        lsb = self.V[y] & 1
        self.V[x] = self.V[y] >> 1
        self.V[0xF] = lsb

    def op_SUBN(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        not_borrow = 1 if self.V[y] >= self.V[x] else 0
        self.V[x] = (self.V[y] - self.V[x]) & 0xFF
        self.V[0xF] = not_borrow
        log(f"Set V{x:X} = V{y:X} - V{x:X}: result {self.V[x]}, NOT borrow={not_borrow}")

    def op_SHL(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        msb = self.V[y] >> 7
        self.V[x] = (self.V[y] << 1) & 0xFF
        self.V[0xF] = msb

    # 9xy0 - Skip next instruction if Vx != Vy
    def op_SNE_Vx_Vy(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        if self.V[x] != self.V[y]:
            self._skip()
            log(f"Skip next instruction: V{x:X} != V{y:X}")

    # Annn - Set I = NNN
    def op_LD_I(self, opcode):
        self.I = opcode & 0x0FFF
        log(f"Set I = {self.I:03X}")

    # Bnnn - Jump to address NNN + V0
    def op_JP_V0(self, opcode):
        self.pc = (opcode & 0x0FFF) + self.V[0]
        log(f"Jump to address V0 + {opcode & 0x0FFF:03X} = {self.pc:03X}")

    # Cxkk - Vx = random byte AND kk
    def op_RND(self, opcode):
        x = (opcode >> 8) & 0xF
        kk = opcode & 0xFF
        self.V[x] = self.rng.getrandbits(8) & kk
        log(f"Set V{x:X} = random_byte & {kk} -> {self.V[x]}")

    # Dxyn - Draw n-byte sprite from memory at I at (Vx, Vy), VF = collision
    def op_DRW(self, opcode):
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        n = opcode & 0xF
        px, py = self.V[x], self.V[y]
        rows = [self.memory.read(self.I + row) for row in range(n)]
        self.V[0xF] = 0
        if self.display.draw_sprite(px, py, rows):
            self.V[0xF] = 1

    # Ex9E - Skip next instruction if key Vx is pressed
    def op_SKP(self, opcode):
        x = (opcode >> 8) & 0xF
        if self.keypad.is_pressed(self.V[x]):
            self._skip()

    # ExA1 - Skip next instruction if key Vx is not pressed
    def op_SKNP(self, opcode):
        x = (opcode >> 8) & 0xF
        if not self.keypad.is_pressed(self.V[x]):
            self._skip()

    # Fx07 - Vx = delay timer
    def op_LD_Vx_DT(self, opcode):
        x = (opcode >> 8) & 0xF
        self.V[x] = self.delay_timer

    # Fx0A - wait for a key press, PC stays on this instruction until one arrives
    def op_WAITKEY(self, opcode):
        x = (opcode >> 8) & 0xF
        self.pc -= 2
        self.keypad.begin_wait(x)

    # Fx15 - delay timer = Vx
    def op_LD_DT_Vx(self, opcode):
        x = (opcode >> 8) & 0xF
        self.delay_timer = self.V[x]

    # Fx18 - sound timer = Vx
    def op_LD_ST_Vx(self, opcode):
        x = (opcode >> 8) & 0xF
        self.sound_timer = self.V[x]

    # Fx1E - I = I + Vx
    def op_ADD_I_Vx(self, opcode):
        x = (opcode >> 8) & 0xF
        self.I = (self.I + self.V[x]) & 0xFFFF

    # Fx29 - I = address of hex glyph Vx
    def op_FONT(self, opcode):
        x = (opcode >> 8) & 0xF
        self.I = self.V[x] * GLYPH_SIZE

    # Fx33 - BCD of Vx at I, I+1, I+2
    def op_BCD(self, opcode):
        x = (opcode >> 8) & 0xF
        v = self.V[x]
        self.memory.check_range(self.I, 3)
        self.memory.write(self.I, v // 100)
        self.memory.write(self.I + 1, (v // 10) % 10)
        self.memory.write(self.I + 2, v % 10)

    # Fx55 - store V0..Vx at I
    def op_STORE(self, opcode):
        x = (opcode >> 8) & 0xF
        self.memory.check_range(self.I, x + 1)
        for i in range(x + 1):
            self.memory.write(self.I + i, self.V[i])

    # Fx65 - load V0..Vx from I
    def op_LOAD(self, opcode):
        x = (opcode >> 8) & 0xF
        self.memory.check_range(self.I, x + 1)
        for i in range(x + 1):
            self.V[i] = self.memory.read(self.I + i)
