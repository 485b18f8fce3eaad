# The window-independent half of the frontend: how many steps run per clock tick,
# when emulation stops, and how a finished frame becomes RGBA pixels.

import numpy as np

from . import config
from .errors import Chip8Error


def steps_per_tick(cpu_hz, tick_hz=config.timer_HZ):
    return max(1, round(cpu_hz / tick_hz))


def new_framebuf():
    """64x32 RGBA buffer, opaque black."""
    framebuf = np.zeros((config.height, config.width, 4), dtype=np.uint8)
    framebuf[..., 3] = 255
    return framebuf


def paint_frame(frame, framebuf):
    # lit pixels white, everything else black; alpha untouched
    framebuf[..., :3] = (frame * 255)[..., None]
    return framebuf


class Runner:

    def __init__(self, machine, cpu_hz=config.CPU_HZ):
        self.machine = machine
        self.steps_per_tick = steps_per_tick(cpu_hz)
        self.has_exit = False
        self.error = None
        self._last_count = machine.cycle_count

    def tick(self):
        """Run one tick's worth of steps. Returns a new frame or None."""
        if self.has_exit:
            return None
        try:
            for _ in range(self.steps_per_tick):
                self.machine.step()
        except Chip8Error as e:
            print("Emulation error:", e)
            self.error = e
            self.has_exit = True
            return None
        return self.machine.take_frame()

    def cycles_since_last(self):
        count = self.machine.cycle_count
        done = count - self._last_count
        self._last_count = count
        return done
