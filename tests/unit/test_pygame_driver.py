"""
Unit tests for the pygame device driver.

SDL is replaced with mocks so no hardware or display is needed.
"""

import unittest
from unittest.mock import Mock, patch

import pygame

from gpadder.core.exceptions import DriverError
from gpadder.input import StructuredButton, DPadDirection
from gpadder.input.pygame_driver import PygameDriver, normalize_axis


def make_controller(buttons=(), axes=None, name="Xbox Controller"):
    """Create a mock SDL game controller with the given pressed button codes."""
    axes = axes or {}
    controller = Mock()
    controller.name = name
    controller.attached.return_value = True
    controller.get_button.side_effect = lambda code: code in buttons
    controller.get_axis.side_effect = lambda axis: axes.get(axis, 0)
    controller.rumble.return_value = True
    return controller


def make_joystick(buttons=(0, 0, 0), axes=(0.0, 0.0), hats=((0, 0),), name="Generic Joystick"):
    """Create a mock pygame joystick."""
    joystick = Mock()
    joystick.get_init.return_value = True
    joystick.get_name.return_value = name
    joystick.get_numbuttons.return_value = len(buttons)
    joystick.get_numaxes.return_value = len(axes)
    joystick.get_numhats.return_value = len(hats)
    joystick.get_button.side_effect = lambda i: buttons[i]
    joystick.get_axis.side_effect = lambda i: axes[i]
    joystick.get_hat.side_effect = lambda i: hats[i]
    return joystick


class PygameDriverTestCase(unittest.TestCase):
    """Base test case patching the SDL entry points the driver touches."""

    def setUp(self):
        self.joysticks = {}
        self.controllers = {}
        self.device_events = []

        self.sdl2 = Mock()
        self.sdl2.get_init.return_value = True
        self.sdl2.is_controller.side_effect = lambda index: index in self.controllers
        self.sdl2.Controller.side_effect = lambda index: self.controllers[index]

        patches = [
            patch("gpadder.input.pygame_driver.sdl2_controller", self.sdl2),
            patch("pygame.get_init", return_value=True),
            patch("pygame.joystick.get_init", return_value=True),
            patch("pygame.joystick.get_count", side_effect=lambda: len(self.joysticks)),
            patch("pygame.joystick.Joystick", side_effect=lambda index: self.joysticks[index]),
            patch("pygame.event.get", side_effect=self.take_device_events),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def take_device_events(self, eventtype=None, *args, **kwargs):
        events, self.device_events = self.device_events, []
        return events

    def add_gamepad(self, index, **kwargs):
        self.joysticks[index] = make_joystick(name="Xbox Controller")
        self.controllers[index] = make_controller(**kwargs)
        return self.controllers[index]

    def add_joystick(self, index, **kwargs):
        self.joysticks[index] = make_joystick(**kwargs)
        return self.joysticks[index]


class TestNormalizeAxis(unittest.TestCase):
    """Test raw axis scaling."""

    def test_range(self):
        self.assertEqual(normalize_axis(0), 0.0)
        self.assertEqual(normalize_axis(32767), 1.0)
        self.assertEqual(normalize_axis(-32768), -1.0)
        self.assertAlmostEqual(normalize_axis(16384), 0.5, places=3)


class TestStructuredPoll(PygameDriverTestCase):
    """Test reading the game controller family."""

    def test_buttons_sticks_and_triggers(self):
        self.add_gamepad(0, buttons=(pygame.CONTROLLER_BUTTON_A, pygame.CONTROLLER_BUTTON_DPAD_UP), axes={
            pygame.CONTROLLER_AXIS_LEFTY: -32768,
            pygame.CONTROLLER_AXIS_RIGHTX: 32767,
            pygame.CONTROLLER_AXIS_TRIGGERLEFT: 16384,
        })
        driver = PygameDriver()

        state = driver.poll(0)

        self.assertTrue(state.connected)
        self.assertEqual(state.buttons, frozenset({StructuredButton.A}))
        self.assertEqual(state.dpad, frozenset({DPadDirection.UP}))
        self.assertEqual(state.left_stick, (0.0, 1.0))
        self.assertEqual(state.right_stick[0], 1.0)
        self.assertAlmostEqual(state.left_trigger, 0.5, places=3)
        self.assertEqual(state.right_trigger, 0.0)

    def test_plain_joystick_has_no_structured_state(self):
        self.add_joystick(0)
        driver = PygameDriver()

        self.assertFalse(driver.poll(0).connected)

    def test_missing_index(self):
        driver = PygameDriver()
        self.assertFalse(driver.poll(3).connected)

    def test_detached_controller(self):
        controller = self.add_gamepad(0)
        driver = PygameDriver()
        controller.attached.return_value = False

        self.assertFalse(driver.poll(0).connected)

    def test_sdl_error_reads_as_disconnected(self):
        controller = self.add_gamepad(0)
        driver = PygameDriver()
        controller.get_button.side_effect = pygame.error("device removed")

        self.assertFalse(driver.poll(0).connected)


class TestGenericPoll(PygameDriverTestCase):
    """Test reading the joystick family."""

    def test_raw_controls(self):
        self.add_gamepad(0)
        self.add_joystick(1, buttons=(0, 1), axes=(0.5, -0.25), hats=((1, 0),))
        driver = PygameDriver()

        state = driver.poll_generic(1)

        self.assertTrue(state.connected)
        self.assertEqual(state.buttons, (False, True))
        self.assertEqual(state.axes, (0.5, -0.25))
        self.assertEqual(state.hats, ((1, 0),))

    def test_missing_index(self):
        driver = PygameDriver()
        self.assertFalse(driver.poll_generic(0).connected)

    def test_gamepad_also_reports_generic(self):
        self.add_gamepad(0)
        driver = PygameDriver()
        self.assertTrue(driver.poll_generic(0).connected)


class TestCapabilities(PygameDriverTestCase):
    """Test device descriptions."""

    def test_gamepad(self):
        self.add_gamepad(0, name="Xbox Series Controller")
        driver = PygameDriver()

        info = driver.capabilities(0)

        self.assertTrue(info.structured.connected)
        self.assertEqual(info.structured.display_name, "Xbox Series Controller")
        self.assertTrue(info.supports_vibration)
        self.assertTrue(info.generic.connected)

    def test_joystick(self):
        self.add_joystick(0, name="Flight Stick", buttons=(0,) * 8, axes=(0.0,) * 3)
        driver = PygameDriver()

        info = driver.capabilities(0)

        self.assertFalse(info.structured.connected)
        self.assertFalse(info.supports_vibration)
        self.assertEqual(info.generic.display_name, "Flight Stick")
        self.assertEqual(info.generic.button_count, 8)
        self.assertEqual(info.generic.axis_count, 3)

    def test_empty_index(self):
        driver = PygameDriver()
        self.assertFalse(driver.capabilities(2).connected)


class TestVibration(PygameDriverTestCase):
    """Test rumble commands."""

    def test_rumble_uses_hold_duration(self):
        controller = self.add_gamepad(0)
        driver = PygameDriver(rumble_hold_ms=5000)

        driver.set_vibration(0, 0.5, 0.25)

        controller.rumble.assert_called_once_with(0.5, 0.25, 5000)

    def test_zero_stops_rumble(self):
        controller = self.add_gamepad(0)
        driver = PygameDriver()

        driver.set_vibration(0, 0.0, 0.0)

        controller.stop_rumble.assert_called_once_with()
        controller.rumble.assert_not_called()

    def test_no_controller_is_ignored(self):
        self.add_joystick(0)
        driver = PygameDriver()
        driver.set_vibration(0, 1.0, 1.0)

    def test_sdl_error_is_logged(self):
        controller = self.add_gamepad(0)
        controller.rumble.side_effect = pygame.error("haptics unavailable")
        driver = PygameDriver()

        with self.assertLogs("gpadder.pygame_driver", level="WARNING"):
            driver.set_vibration(0, 1.0, 1.0)


class TestHotPlug(PygameDriverTestCase):
    """Test reopening devices when the SDL device list changes."""

    def test_pump_opens_new_devices(self):
        driver = PygameDriver()
        self.assertFalse(driver.poll(0).connected)

        self.add_gamepad(0)
        driver.pump()

        self.assertTrue(driver.poll(0).connected)

    def test_pump_closes_removed_devices(self):
        controller = self.add_gamepad(0)
        driver = PygameDriver()

        self.joysticks.clear()
        self.controllers.clear()
        driver.pump()

        controller.quit.assert_called_once_with()
        self.assertFalse(driver.poll(0).connected)
        self.assertFalse(driver.poll_generic(0).connected)

    def test_unchanged_count_keeps_devices(self):
        self.add_gamepad(0)
        driver = PygameDriver()
        driver.pump()

        self.assertEqual(self.sdl2.Controller.call_count, 1)

    def test_swap_between_pumps_reopens_devices(self):
        old_pad = self.add_gamepad(0)
        driver = PygameDriver()

        # Pad unplugged and a joystick plugged in before the next pump
        del self.controllers[0]
        self.add_joystick(0, name="Flight Stick")
        self.device_events = [
            pygame.event.Event(pygame.JOYDEVICEREMOVED, instance_id=0),
            pygame.event.Event(pygame.JOYDEVICEADDED, device_index=0),
        ]
        driver.pump()

        old_pad.quit.assert_called_once_with()
        self.assertFalse(driver.poll(0).connected)
        self.assertEqual(driver.capabilities(0).generic.display_name, "Flight Stick")

    def test_pump_only_takes_device_events(self):
        driver = PygameDriver()
        driver.pump()

        pygame.event.get.assert_called_with([pygame.JOYDEVICEADDED, pygame.JOYDEVICEREMOVED])


class TestLifecycle(PygameDriverTestCase):
    """Test initialization and shutdown."""

    def test_init_failure_raises_driver_error(self):
        self.sdl2.get_init.return_value = False
        self.sdl2.init.side_effect = pygame.error("no controller subsystem")

        with self.assertRaises(DriverError) as ctx:
            PygameDriver()

        self.assertEqual(ctx.exception.context.get("backend"), "pygame")

    def test_shutdown_closes_devices(self):
        controller = self.add_gamepad(0)
        joystick = self.joysticks[0]
        driver = PygameDriver()

        driver.shutdown()

        controller.quit.assert_called_once_with()
        joystick.quit.assert_called_once_with()
        self.assertFalse(driver.poll(0).connected)


if __name__ == "__main__":
    unittest.main()
