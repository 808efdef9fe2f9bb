"""
Input arbitration across several controllers.

``InputArbiter`` keeps one device index active, reports when it connects or
disconnects, recovers from a dead index with periodic rescans and, when
auto-switch is on, follows whichever device the user is touching. Consumers
such as a settings panel subscribe to its events and use its command and
query methods; they never read devices themselves.
"""

import numbers
from datetime import timedelta
from typing import Callable, Iterator, List, Optional, Union

from .driver import DeviceDriver
from .state import DeviceSnapshot
from .events import ArbiterEvent, ArbiterEventType, EventBus
from .significance import SignificanceClassifier, SignificanceThresholds
from .rumble import RumbleScheduler
from .diagnostics import DiagnosticLog
from ..config import Settings, get_settings
from ..core.logging import get_logger


UNKNOWN_CONTROLLER = "Unknown Controller"

# Seconds of accumulated tick time between performance log lines
_STATS_INTERVAL = 10.0


def detect_transition(previous: DeviceSnapshot, current: DeviceSnapshot) -> Optional[ArbiterEventType]:
    """
    Compare connectivity of two consecutive snapshots of one index.

    Args:
        previous: Snapshot before the poll
        current: Snapshot after the poll

    Returns:
        CONNECTED or DISCONNECTED when connectivity flipped, else None
    """
    if previous.connected == current.connected:
        return None
    return ArbiterEventType.CONNECTED if current.connected else ArbiterEventType.DISCONNECTED


def _clamp_motor(value: float) -> float:
    return max(0.0, min(float(value), 1.0))


class InputArbiter:
    """
    Poll-and-diff state machine choosing the active controller.

    Call ``tick(elapsed)`` once per frame. Each tick polls the active index,
    publishes connect/disconnect transitions, advances the rescan clock and,
    when enabled, runs the auto-switch scan. At most one selection change
    happens per tick.
    """

    def __init__(self,
                 driver: DeviceDriver,
                 settings: Optional[Settings] = None,
                 classifier: Optional[SignificanceClassifier] = None,
                 rumble_scheduler: Optional[RumbleScheduler] = None,
                 diagnostic_log: Optional[DiagnosticLog] = None):
        """
        Initialize the arbiter and pick a default device.

        The first connected index in the scan range becomes active, or 0
        when nothing is connected.

        Args:
            driver: Device backend to poll
            settings: Settings to read arbitration options from
            classifier: Significance classifier for auto-switch
            rumble_scheduler: Scheduler for delayed rumble stops
            diagnostic_log: Optional event trail, defaults to the
                ``input.diagnostic_log`` setting
        """
        self.logger = get_logger("input_arbiter")
        self.settings = settings or get_settings()
        self.driver = driver

        # Configuration
        self._scan_width = self.settings.scan_width
        self._rescan_interval = self.settings.rescan_interval
        self._auto_switch_interval = self.settings.auto_switch_interval
        self._auto_switch = self.settings.auto_switch

        self._classifier = classifier or SignificanceClassifier(
            SignificanceThresholds.from_settings(self.settings)
        )
        self._rumble = rumble_scheduler or RumbleScheduler()

        # Event delivery
        self._events = EventBus()
        if diagnostic_log is None and self.settings.diagnostic_log is not None:
            diagnostic_log = DiagnosticLog(self.settings.diagnostic_log)
        self._diagnostic_log = diagnostic_log
        if diagnostic_log is not None:
            self._events.subscribe_all(diagnostic_log.record)

        # Clocks
        self._rescan_elapsed = 0.0
        self._auto_switch_elapsed = 0.0
        self._stats_elapsed = 0.0

        # Performance tracking
        self._tick_count = 0
        self._ticks_since_stats = 0
        self._switch_count = 0

        self._shut_down = False

        # Initial full scan for a sane default
        self._active_index = 0
        self._current = DeviceSnapshot.disconnected()
        for index in range(self._scan_width):
            snapshot = self._refresh(index)
            if snapshot.connected:
                self._active_index = index
                self._current = snapshot
                break
        else:
            self._current = self._refresh(0)
        self._previous = self._current

        self.logger.info("InputArbiter initialized", extra={
            "driver": driver.name,
            "active_index": self._active_index,
            "connected": self._current.connected,
            "scan_width": self._scan_width,
            "rescan_interval": self._rescan_interval,
            "auto_switch": self._auto_switch
        })

    # Polling

    def _refresh(self, index: int) -> DeviceSnapshot:
        """Read both families of ``index`` from the driver."""
        return DeviceSnapshot(
            structured=self.driver.poll(index),
            generic=self.driver.poll_generic(index),
        )

    def tick(self, elapsed: Union[float, timedelta]) -> None:
        """
        Advance the arbiter by one frame.

        Args:
            elapsed: Time since the previous tick, in seconds
        """
        if self._shut_down:
            return

        if isinstance(elapsed, timedelta):
            elapsed = elapsed.total_seconds()
        elapsed = max(0.0, float(elapsed))

        self.driver.pump()

        # Poll the active index
        self._previous = self._current
        self._current = self._refresh(self._active_index)

        transition = detect_transition(self._previous, self._current)
        if transition is not None:
            self.logger.info("Active device %s", transition.value, extra={
                "device_index": self._active_index
            })
            self._publish(transition, self._active_index)

        switched = False

        self._rescan_elapsed += elapsed
        if self._rescan_elapsed >= self._rescan_interval:
            self._rescan_elapsed = 0.0
            switched = self._rescan()

        if self._auto_switch and not switched:
            self._auto_switch_elapsed += elapsed
            if self._auto_switch_elapsed >= self._auto_switch_interval:
                self._auto_switch_elapsed = 0.0
                self._auto_switch_scan()

        self._tick_count += 1
        self._ticks_since_stats += 1
        self._stats_elapsed += elapsed
        if self._stats_elapsed >= _STATS_INTERVAL:
            self._log_performance_stats()

    def _rescan(self) -> bool:
        """
        Recover from a disconnected active device.

        Returns:
            True if another index was selected
        """
        if self._current.connected:
            return False

        for index in range(self._scan_width):
            if index == self._active_index:
                continue
            snapshot = self._refresh(index)
            if snapshot.connected:
                self.logger.info("Rescan found a connected device", extra={
                    "previous_index": self._active_index,
                    "device_index": index
                })
                self._switch_to(index, snapshot)
                self._publish(ArbiterEventType.CONNECTED, index)
                self._publish(ArbiterEventType.SELECTION_CHANGED, index)
                return True

        self.logger.debug("Rescan found no connected device", extra={
            "active_index": self._active_index
        })
        return False

    def _auto_switch_scan(self) -> bool:
        """
        Select the lowest index currently receiving deliberate input.

        Returns:
            True if the active index changed
        """
        for index in range(self._scan_width):
            snapshot = self._current if index == self._active_index else self._refresh(index)
            if not snapshot.connected or not self._classifier.is_significant(snapshot):
                continue

            if index == self._active_index:
                return False

            self.logger.info("Auto-switching to device with input", extra={
                "previous_index": self._active_index,
                "device_index": index
            })
            self._switch_to(index, snapshot)
            self._publish(ArbiterEventType.SELECTION_CHANGED, index)
            return True

        return False

    def _switch_to(self, index: int, snapshot: Optional[DeviceSnapshot] = None) -> None:
        """Make ``index`` active with previous and current snapshots equal."""
        self._active_index = index
        self._current = snapshot if snapshot is not None else self._refresh(index)
        self._previous = self._current
        self._switch_count += 1

    def _publish(self, event_type: ArbiterEventType, index: int) -> None:
        self._events.publish(ArbiterEvent(event_type, index))

    def _log_performance_stats(self) -> None:
        self.logger.debug("Arbiter performance stats", extra={
            "tick_rate": self._ticks_since_stats / self._stats_elapsed,
            "total_ticks": self._tick_count,
            "selection_changes": self._switch_count,
            "active_index": self._active_index,
            "auto_switch": self._auto_switch
        })
        self._ticks_since_stats = 0
        self._stats_elapsed = 0.0

    # Commands

    def select_device(self, index: int) -> bool:
        """
        Make ``index`` the active device.

        Selecting the active index does nothing. Indices outside the scan
        range are ignored with a warning.

        Args:
            index: Device index to activate

        Returns:
            True if the active index changed
        """
        if self._shut_down:
            return False

        if isinstance(index, bool) or not isinstance(index, numbers.Integral) or not 0 <= index < self._scan_width:
            self.logger.warning("Ignoring selection of invalid device index", extra={
                "device_index": index,
                "scan_width": self._scan_width
            })
            return False

        index = int(index)
        if index == self._active_index:
            return False

        previous_index = self._active_index
        self._switch_to(index)
        self.logger.info("Selected device", extra={
            "previous_index": previous_index,
            "device_index": index,
            "connected": self._current.connected
        })
        self._publish(ArbiterEventType.SELECTION_CHANGED, index)
        return True

    def set_auto_switch(self, enabled: bool) -> None:
        """
        Enable or disable following the device that receives input.

        Args:
            enabled: True to enable, False to disable
        """
        self._auto_switch = bool(enabled)
        self.logger.info("Auto-switch setting updated", extra={"enabled": self._auto_switch})

    def trigger_rumble(self, left_motor: float, right_motor: float,
                       duration: Union[float, timedelta] = 0.0) -> bool:
        """
        Vibrate the active device.

        Only devices exposing the structured family can vibrate. A positive
        duration schedules the motors to stop later without blocking; a new
        rumble cancels the stop still pending from an earlier one.

        Args:
            left_motor: Low frequency (large) motor speed in [0, 1]
            right_motor: High frequency (small) motor speed in [0, 1]
            duration: Seconds until the motors stop, 0 to keep running

        Returns:
            True if the vibration command was sent
        """
        if self._shut_down:
            return False

        if not self.is_connected():
            self.logger.debug("Rumble ignored, active device disconnected", extra={
                "device_index": self._active_index
            })
            return False

        index = self._active_index
        if not self.driver.capabilities(index).supports_vibration:
            self.logger.debug("Rumble ignored, device cannot vibrate", extra={
                "device_index": index
            })
            return False

        if isinstance(duration, timedelta):
            duration = duration.total_seconds()

        left = _clamp_motor(left_motor)
        right = _clamp_motor(right_motor)

        self._rumble.cancel(index)
        self.driver.set_vibration(index, left, right)

        if duration > 0:
            self._rumble.schedule(index, duration, lambda: self.driver.set_vibration(index, 0.0, 0.0))

        self.logger.debug("Rumble started", extra={
            "device_index": index,
            "left": left,
            "right": right,
            "duration": duration
        })
        return True

    def stop_rumble(self) -> None:
        """Stop the active device's motors and any pending stop timer."""
        if self._shut_down:
            return

        index = self._active_index
        self._rumble.cancel(index)
        if self.is_connected() and self.driver.capabilities(index).supports_vibration:
            self.driver.set_vibration(index, 0.0, 0.0)

    # Queries

    def is_connected(self) -> bool:
        """Whether the active device was connected at the last poll."""
        return self._current.connected

    def current_state(self) -> DeviceSnapshot:
        return self._current

    def previous_state(self) -> DeviceSnapshot:
        return self._previous

    def selected_index(self) -> int:
        return self._active_index

    @property
    def auto_switch_enabled(self) -> bool:
        return self._auto_switch

    @property
    def scan_width(self) -> int:
        return self._scan_width

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def connected_devices(self) -> Iterator[int]:
        """
        Lazily yield every connected index in the scan range.

        Each call scans the driver again, nothing is cached.
        """
        for index in range(self._scan_width):
            if self._refresh(index).connected:
                yield index

    def device_name(self, index: int) -> str:
        """
        Human-readable name for ``index``.

        Prefers the structured family's name, then the generic family's,
        then a synthesized "Gamepad N" or "Joystick N" label.

        Args:
            index: Device index

        Returns:
            Display name, or "Unknown Controller" if nothing is connected
        """
        if not 0 <= index < self._scan_width:
            return UNKNOWN_CONTROLLER

        info = self.driver.capabilities(index)
        if info.structured.connected and info.structured.display_name:
            return info.structured.display_name
        if info.generic.connected and info.generic.display_name:
            return info.generic.display_name
        if info.structured.connected:
            return f"Gamepad {index}"
        if info.generic.connected:
            return f"Joystick {index}"
        return UNKNOWN_CONTROLLER

    def pressed_generic_buttons(self) -> List[int]:
        """Generic-family button indices held on the active device."""
        if not self._current.generic.connected:
            return []
        return self._current.generic.pressed_buttons()

    # Event subscription

    def subscribe(self, event_type: ArbiterEventType, callback: Callable[[ArbiterEvent], None]) -> None:
        self._events.subscribe(event_type, callback)

    def unsubscribe(self, event_type: ArbiterEventType, callback: Callable[[ArbiterEvent], None]) -> None:
        self._events.unsubscribe(event_type, callback)

    def subscribe_all(self, callback: Callable[[ArbiterEvent], None]) -> None:
        """Receive every event regardless of type."""
        self._events.subscribe_all(callback)

    def unsubscribe_all(self, callback: Callable[[ArbiterEvent], None]) -> None:
        self._events.unsubscribe_all(callback)

    def add_connect_callback(self, callback: Callable[[ArbiterEvent], None]) -> None:
        """Register a callback for device connect events."""
        self.subscribe(ArbiterEventType.CONNECTED, callback)

    def add_disconnect_callback(self, callback: Callable[[ArbiterEvent], None]) -> None:
        """Register a callback for device disconnect events."""
        self.subscribe(ArbiterEventType.DISCONNECTED, callback)

    def add_selection_callback(self, callback: Callable[[ArbiterEvent], None]) -> None:
        """Register a callback for active device changes."""
        self.subscribe(ArbiterEventType.SELECTION_CHANGED, callback)

    def remove_connect_callback(self, callback: Callable[[ArbiterEvent], None]) -> None:
        self.unsubscribe(ArbiterEventType.CONNECTED, callback)

    def remove_disconnect_callback(self, callback: Callable[[ArbiterEvent], None]) -> None:
        self.unsubscribe(ArbiterEventType.DISCONNECTED, callback)

    def remove_selection_callback(self, callback: Callable[[ArbiterEvent], None]) -> None:
        self.unsubscribe(ArbiterEventType.SELECTION_CHANGED, callback)

    # Lifecycle

    def shutdown(self) -> None:
        """Stop vibration, cancel pending timers and release the driver."""
        if self._shut_down:
            return

        self.logger.info("Shutting down InputArbiter")

        # Devices with a cancelled timed stop may no longer be the active one
        rumbling = set(self._rumble.cancel_all())
        try:
            if self.is_connected() and self.driver.capabilities(self._active_index).supports_vibration:
                rumbling.add(self._active_index)
            for index in sorted(rumbling):
                self.driver.set_vibration(index, 0.0, 0.0)
        finally:
            self.driver.shutdown()
            self._events.clear()
            self._shut_down = True

        self.logger.info("InputArbiter shutdown complete", extra={
            "total_ticks": self._tick_count
        })

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()


# Global arbiter instance
_input_arbiter: Optional[InputArbiter] = None


def get_input_arbiter() -> InputArbiter:
    """
    Get the global arbiter, creating it on the pygame driver if needed.

    Raises:
        DriverError: If the pygame backend cannot be initialized
    """
    global _input_arbiter
    if _input_arbiter is None:
        # pygame is only loaded once the global arbiter is requested
        from .pygame_driver import PygameDriver

        settings = get_settings()
        driver = PygameDriver(rumble_hold_ms=settings.rumble_hold_ms)
        _input_arbiter = InputArbiter(driver, settings=settings)
    return _input_arbiter


def reset_input_arbiter() -> None:
    """Shut down and forget the global arbiter instance."""
    global _input_arbiter
    if _input_arbiter is not None:
        _input_arbiter.shutdown()
    _input_arbiter = None

