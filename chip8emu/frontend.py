# We're subclassing pyglet (that handles graphics and keyboard handling) and overriding
# whatever def we need from there. The window only talks to the Machine through
# step(), set_key(), clear_key() and take_frame().

import pyglet
from pyglet.window import key
import numpy as np

from . import config
from .config import log
from .runner import Runner, new_framebuf, paint_frame

#map binding keys
keymap = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}


def hud_label(text, y):
    return pyglet.text.Label(
        text,
        font_size=12,
        x=5,
        y=y,
        anchor_x='left',
        anchor_y='center',
        color=(255, 255, 255, 255)
    )


class Chip8Window(pyglet.window.Window):

    def __init__(self, machine, scale=config.scale, cpu_hz=config.CPU_HZ):
        self.scale = scale
        window_width, window_height = config.width * scale, config.height * scale
        super().__init__(
            width=window_width,
            height=window_height,
            caption="CHIP-8 Emulator",
            vsync=False
        )
        self.machine = machine
        self.runner = Runner(machine, cpu_hz=cpu_hz)

        # Pre-allocated small framebuffer (64x32 RGBA). We'll upscale on CPU using numpy.repeat
        self._small_framebuf = new_framebuf()

        #creating ImageData once (initialized empty)
        self.image = pyglet.image.ImageData(
            window_width,
            window_height,
            'RGBA',
            self._upscale().tobytes()
        )

        # Performance tracking counters
        self._fps_counter = 0
        self._bench_time = pyglet.clock.get_default().time()

        # Labels for HUD
        self.fps_label = hud_label("FPS: 0", window_height - 15)
        self.cps_label = hud_label("Cycles/s: 0", window_height - 30)
        self.sound_label = hud_label("BEEP", window_height - 45)

        # Schedule the loops
        pyglet.clock.schedule_interval(self.tick, 1 / config.timer_HZ)
        pyglet.clock.schedule_interval(self._update_bench, 1.0)

    def _upscale(self):
        # pyglet's origin is bottom-left, CHIP-8's is top-left
        flipped = self._small_framebuf[::-1]
        if self.scale != 1:
            return np.repeat(np.repeat(flipped, self.scale, axis=0), self.scale, axis=1)
        return np.ascontiguousarray(flipped)

    # FPS / CPS
    def _update_bench(self, dt):
        now = pyglet.clock.get_default().time()
        elapsed = now - self._bench_time
        if elapsed >= 1.0:
            self.fps_label.text = f"FPS: {self._fps_counter / elapsed:.1f}"
            self.cps_label.text = f"Cycles/s: {self.runner.cycles_since_last()}"

            self._fps_counter = 0
            self._bench_time = now

    # cpu tick
    def tick(self, dt):
        frame = self.runner.tick()
        if self.runner.has_exit:
            self.close()
            return
        if frame is not None:
            paint_frame(frame, self._small_framebuf)
            self.image.set_data('RGBA', self.width * 4, self._upscale().tobytes())

    # draw
    def on_draw(self):
        self.clear()
        self.image.blit(0, 0)
        self.fps_label.draw()
        self.cps_label.draw()
        if self.machine.sound_active:
            self.sound_label.draw()
        self._fps_counter += 1

    def close(self):
        pyglet.clock.unschedule(self.tick)
        pyglet.clock.unschedule(self._update_bench)
        super().close()

    # keyboard
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
            return
        if symbol == key.F1:
            log("logsOn:", config.set_logging(not config.logsOn))
        if symbol in keymap:
            self.machine.set_key(keymap[symbol])

    def on_key_release(self, symbol, modifiers):
        if symbol in keymap:
            self.machine.clear_key(keymap[symbol])


def run(machine, scale=config.scale, cpu_hz=config.CPU_HZ):
    window = Chip8Window(machine, scale=scale, cpu_hz=cpu_hz)
    pyglet.app.run()
    return window
