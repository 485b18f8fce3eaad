import pytest

try:
    from chip8emu import frontend
except Exception as e:  # pyglet needs a working windowing library to import
    pytest.skip(f"pyglet window unavailable: {e}", allow_module_level=True)

from chip8emu.runner import Runner

from conftest import assemble


def bare_window(machine):
    window = object.__new__(frontend.Chip8Window)
    window.machine = machine
    window.runner = Runner(machine, cpu_hz=600)
    return window


def test_keymap_covers_keypad():
    assert sorted(frontend.keymap.values()) == list(range(16))


def test_close_unschedules_callbacks(machine, monkeypatch):
    calls = []
    monkeypatch.setattr(frontend.pyglet.clock, "unschedule", calls.append)
    monkeypatch.setattr(frontend.pyglet.window.Window, "close", lambda self: calls.append("closed"))
    window = bare_window(machine)
    window.close()
    assert calls == [window.tick, window._update_bench, "closed"]


def test_tick_closes_on_fatal_error(machine, monkeypatch):
    machine.load(assemble([0x00EE]))
    window = bare_window(machine)
    closed = []
    monkeypatch.setattr(frontend.Chip8Window, "close", lambda self: closed.append(True))
    window.tick(1 / 60)
    assert closed == [True]
    assert window.runner.has_exit
