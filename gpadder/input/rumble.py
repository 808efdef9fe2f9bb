"""
Delayed rumble stop scheduling.

A rumble with a duration needs its motors zeroed later without blocking the
tick loop. Pending stops are kept per device index so a newer rumble on the
same device cancels the stale stop instead of being cut short by it.
"""

import threading
from typing import Callable, Dict, List, Optional

from ..core.logging import get_logger


TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


class RumbleScheduler:
    """
    Cancellable one-shot timers keyed by device index.

    Timers run as daemon threads so a pending stop never keeps the
    process alive.
    """

    def __init__(self, timer_factory: Optional[TimerFactory] = None):
        """
        Initialize the scheduler.

        Args:
            timer_factory: Builds an unstarted timer from (delay, function);
                defaults to ``threading.Timer``
        """
        self.logger = get_logger("rumble_scheduler")
        self._timer_factory = timer_factory or threading.Timer
        self._pending: Dict[int, threading.Timer] = {}
        self._lock = threading.Lock()

    def schedule(self, index: int, delay: float, action: Callable[[], None]) -> None:
        """
        Run ``action`` after ``delay`` seconds unless cancelled first.

        Any stop already pending for ``index`` is cancelled.

        Args:
            index: Device index the action belongs to
            delay: Delay in seconds
            action: Callable run on the timer thread
        """
        def fire() -> None:
            with self._lock:
                # A replaced timer must not run its action
                if self._pending.get(index) is not timer:
                    return
                del self._pending[index]
            try:
                action()
            except Exception as e:
                self.logger.error("Scheduled rumble stop failed", extra={
                    "device_index": index,
                    "error": str(e)
                })

        timer = self._timer_factory(delay, fire)
        timer.daemon = True

        with self._lock:
            previous = self._pending.pop(index, None)
            self._pending[index] = timer
        if previous is not None:
            previous.cancel()

        timer.start()
        self.logger.debug("Rumble stop scheduled", extra={
            "device_index": index,
            "delay": delay
        })

    def cancel(self, index: int) -> bool:
        """
        Cancel the pending stop for ``index``.

        Returns:
            True if a pending stop was cancelled
        """
        with self._lock:
            timer = self._pending.pop(index, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def cancel_all(self) -> List[int]:
        """
        Cancel every pending stop.

        Returns:
            Indices whose stop was cancelled
        """
        with self._lock:
            pending = dict(self._pending)
            self._pending.clear()
        for timer in pending.values():
            timer.cancel()
        return sorted(pending)

    def is_pending(self, index: int) -> bool:
        with self._lock:
            return index in self._pending
