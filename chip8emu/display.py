# Output - 64x32 display (array of pixels are either in the on or off state (0 || 1)).

import numpy as np

from .config import width, height, log


def frame_view(vram):
    """Read-only (height, width) uint8 snapshot of a flat framebuffer."""
    return np.frombuffer(bytes(vram), dtype=np.uint8).reshape(height, width)


class Framebuffer:

    def __init__(self, wrap=True):
        self.vram = bytearray(width * height)
        self.wrap = wrap
        self.draw_flag = False

    def __getitem__(self, xy):
        x, y = xy
        return self.vram[x + y * width]

    def clear(self):
        self.vram[:] = b'\x00' * len(self.vram)
        self.draw_flag = True

    def draw_sprite(self, x, y, rows):
        """XOR sprite rows in at (x, y). Returns True if any lit pixel was turned off."""
        px = x % width
        py = y % height
        collision = False
        for row, sprite in enumerate(rows):
            vy = py + row
            if vy >= height:
                if not self.wrap:
                    break
                vy %= height
            for bit in range(8):
                if not sprite & (0x80 >> bit):
                    continue
                vx = px + bit
                if vx >= width:
                    if not self.wrap:
                        break
                    vx %= width
                index = vx + vy * width
                if self.vram[index] == 1:
                    collision = True
                self.vram[index] ^= 1
        self.draw_flag = True
        log(f"Drew sprite at ({px}, {py}), collision={int(collision)}")
        return collision

    def view(self):
        return frame_view(self.vram)

    def take_frame(self):
        if not self.draw_flag:
            return None
        self.draw_flag = False
        return self.view()
