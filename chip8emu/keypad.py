# Input - store key input states and check these per cycle.
# FX0A blocks the machine until a key goes down: Idle -> AwaitingKey -> Idle.

import numpy as np

from .config import log


class Keypad:

    def __init__(self):
        self.keys = np.zeros(16, dtype=np.uint8)

        # ---- Key-wait state ----
        self.waiting = False    # blocked on FX0A
        self.register = 0       # X of the pending FX0A
        self.key = None         # key delivered while waiting
        self.key_event = False  # set by press() while waiting

    @staticmethod
    def _check(code):
        if not 0 <= code <= 0xF:
            raise ValueError("Key code out of range: %r" % (code,))

    def press(self, code):
        self._check(code)
        self.keys[code] = 1
        if self.waiting and not self.key_event:
            self.key = code
            self.key_event = True
            log(f"Key {code:X} delivered to V{self.register:X}")

    def release(self, code):
        self._check(code)
        self.keys[code] = 0

    def is_pressed(self, code):
        return bool(self.keys[code & 0xF])

    def begin_wait(self, register):
        self.waiting = True
        self.register = register
        self.key = None
        self.key_event = False
        log(f"Waiting for key into V{register:X}")

    def take_key(self):
        """Return ``(register, key)`` and go back to idle once a key arrived, else None."""
        if not (self.waiting and self.key_event):
            return None
        result = (self.register, self.key)
        self.waiting = False
        self.key = None
        self.key_event = False
        return result
