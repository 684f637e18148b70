from __future__ import annotations

from propctl.config.hardware import HardwareConfig
from propctl.errors import HardwareError
from propctl.hardware.audio import render_beep
from propctl.hardware.base import Device
from propctl.hardware.provider import DeviceFactory
from propctl.simulator.mock_hardware import (
    SimulatedBeeper,
    SimulatedButtonPanel,
    SimulatedEncoders,
    SimulatedJoystick,
    SimulatedKeypad,
    SimulatedLedBank,
    SimulatedLevers,
    SimulatedNavigation,
)
from propctl.testing import EventRecorder, FakeLoop


class _Real(Device):
    pass


def test_mock_mode_builds_only_simulated_devices():
    hw = HardwareConfig()
    factory = DeviceFactory(mock=True, loop=FakeLoop())

    assert factory.gpio is False
    assert isinstance(factory.buttons({1: 16, 2: 19}), SimulatedButtonPanel)
    assert isinstance(factory.leds({1: 0}), SimulatedLedBank)
    assert isinstance(factory.encoders(hw.encoders), SimulatedEncoders)
    assert isinstance(factory.beeper(800, 60), SimulatedBeeper)
    assert isinstance(factory.keypad(hw.keypad), SimulatedKeypad)
    assert isinstance(factory.levers(hw.vehicle, 4, 10, 0.1), SimulatedLevers)
    assert isinstance(factory.navigation(hw.vehicle), SimulatedNavigation)
    assert isinstance(factory.joystick(hw.joystick), SimulatedJoystick)
    assert factory.degraded == []


def test_failed_device_falls_back_and_is_recorded():
    factory = DeviceFactory(mock=False, gpio=True, loop=FakeLoop())

    def claim() -> Device:
        raise OSError("pin 16 busy")

    device = factory._build("buttons", claim, lambda: SimulatedButtonPanel([1]))

    assert isinstance(device, SimulatedButtonPanel)
    assert factory.degraded == ["buttons"]


def test_other_surfaces_keep_real_driver():
    factory = DeviceFactory(mock=False, gpio=True, loop=FakeLoop())

    def claim() -> Device:
        raise HardwareError("leds: no pin factory")

    factory._build("leds", claim, lambda: SimulatedLedBank([1]))
    real = factory._build("buttons", _Real, lambda: SimulatedButtonPanel([1]))

    assert isinstance(real, _Real)
    assert factory.degraded == ["leds"]


def test_simulated_button_panel_drops_unknown_ids():
    panel = SimulatedButtonPanel([1, 2, 3])
    pressed: list[int] = []
    panel.on_press(pressed.append)

    for value in (2, 7, "2", True, None):
        panel.simulate_press(value)

    assert pressed == [2]


def test_simulated_leds_broadcast_changes():
    leds = SimulatedLedBank([0, 1, 2], id_field="index")
    recorder = EventRecorder(leds.events)

    leds.set(1, True)
    leds.set(9, True)

    assert leds.states() == [False, True, False]
    assert [e.to_message() for e in recorder.events] == [{"type": "ledChange", "index": 1, "state": True}]


def test_simulated_levers_clamp_adjustments():
    levers = SimulatedLevers(count=2, positions=10)
    changes: list[list[int | None]] = []
    levers.on_change(changes.append)

    levers.simulate_adjust(0, 3)
    levers.simulate_adjust(0, 20)
    levers.simulate_adjust(1, -5)
    levers.simulate_set(1, 11)

    assert levers.positions() == [10, 1]
    assert changes == [[4, None], [10, None], [10, 1]]


def test_simulated_keypad_only_passes_keypad_keys():
    keypad = SimulatedKeypad()
    keys: list[str] = []
    keypad.on_key(keys.append)

    for key in ("1", "#", "a", 5, "*"):
        keypad.simulate_key(key)

    assert keys == ["1", "#", "*"]


def test_beep_buffer_is_stereo_and_panned():
    left = render_beep(800, 10, "left")
    right = render_beep(800, 10, "right")

    assert len(left) == 2 * int(44100 * 10 / 1000)
    assert any(left[0::2]) and not any(left[1::2])
    assert any(right[1::2]) and not any(right[0::2])
