import pytest

from chip8emu import Machine, StackUnderflowError
from chip8emu.runner import Runner, new_framebuf, paint_frame, steps_per_tick

from conftest import assemble


@pytest.mark.parametrize("cpu_hz,steps", [(600, 10), (700, 12), (60, 1), (10, 1)])
def test_steps_per_tick(cpu_hz, steps):
    assert steps_per_tick(cpu_hz) == steps


def test_tick_runs_steps_per_tick(machine):
    machine.load(assemble([0x7001] * 20))
    runner = Runner(machine, cpu_hz=600)
    assert runner.tick() is None
    assert machine.V[0] == 10
    assert machine.pc == 0x200 + 20
    assert runner.cycles_since_last() == 10
    assert runner.cycles_since_last() == 0


def test_fatal_error_stops_emulation(machine, capsys):
    machine.load(assemble([0x00EE, 0x7001]))
    runner = Runner(machine, cpu_hz=600)
    assert runner.tick() is None
    assert runner.has_exit
    assert isinstance(runner.error, StackUnderflowError)
    assert "Emulation error" in capsys.readouterr().out
    runner.tick()
    assert machine.pc == 0x200
    assert machine.V[0] == 0


def test_tick_returns_frame_after_draw(machine):
    machine.load(assemble([0x6003, 0x6102, 0xA000, 0xD011]))
    runner = Runner(machine, cpu_hz=240)
    frame = runner.tick()
    assert frame is not None
    framebuf = paint_frame(frame, new_framebuf())
    assert framebuf.shape == (32, 64, 4)
    assert list(framebuf[2, 3]) == [255, 255, 255, 255]
    assert list(framebuf[2, 7]) == [0, 0, 0, 255]
    assert list(framebuf[0, 0]) == [0, 0, 0, 255]
    assert (framebuf[..., 0] == 255).sum() == 4
    assert runner.tick() is None
