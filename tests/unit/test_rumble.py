"""
Unit tests for the rumble stop scheduler.
"""

import unittest
from unittest.mock import Mock

from gpadder.input import RumbleScheduler


class TestRumbleScheduler(unittest.TestCase):
    """Test per-device cancellable timers."""

    def setUp(self):
        self.timers = []
        self.scheduler = RumbleScheduler(timer_factory=self.create_timer)

    def create_timer(self, delay, function):
        timer = Mock()
        timer.delay = delay
        timer.function = function
        self.timers.append(timer)
        return timer

    def test_schedule_starts_daemon_timer(self):
        action = Mock()
        self.scheduler.schedule(0, 0.5, action)

        timer = self.timers[0]
        self.assertEqual(timer.delay, 0.5)
        self.assertTrue(timer.daemon)
        timer.start.assert_called_once_with()
        self.assertTrue(self.scheduler.is_pending(0))

    def test_fired_timer_runs_action_once(self):
        action = Mock()
        self.scheduler.schedule(0, 0.5, action)

        self.timers[0].function()
        self.timers[0].function()

        action.assert_called_once_with()
        self.assertFalse(self.scheduler.is_pending(0))

    def test_reschedule_cancels_previous(self):
        stale, fresh = Mock(), Mock()
        self.scheduler.schedule(1, 0.5, stale)
        self.scheduler.schedule(1, 1.0, fresh)

        self.timers[0].cancel.assert_called_once_with()
        # Even if the stale timer thread already woke up it must not act
        self.timers[0].function()
        stale.assert_not_called()

        self.timers[1].function()
        fresh.assert_called_once_with()

    def test_indices_are_independent(self):
        first, second = Mock(), Mock()
        self.scheduler.schedule(0, 0.5, first)
        self.scheduler.schedule(1, 0.5, second)

        self.timers[0].cancel.assert_not_called()
        self.assertTrue(self.scheduler.cancel(1))
        self.assertTrue(self.scheduler.is_pending(0))
        self.assertFalse(self.scheduler.is_pending(1))

    def test_cancel_unknown_index(self):
        self.assertFalse(self.scheduler.cancel(3))

    def test_cancel_all(self):
        self.scheduler.schedule(0, 0.5, Mock())
        self.scheduler.schedule(2, 0.5, Mock())
        self.assertEqual(self.scheduler.cancel_all(), [0, 2])

        for timer in self.timers:
            timer.cancel.assert_called_once_with()
        self.assertFalse(self.scheduler.is_pending(0))

    def test_failing_action_is_logged(self):
        self.scheduler.schedule(0, 0.1, Mock(side_effect=RuntimeError("device gone")))

        with self.assertLogs("gpadder.rumble_scheduler", level="ERROR"):
            self.timers[0].function()


if __name__ == "__main__":
    unittest.main()
