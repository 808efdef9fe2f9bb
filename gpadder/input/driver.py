"""
Driver interface the arbiter polls devices through.

The arbiter never talks to a device library directly; it only calls the
methods below. Implementations must report a vanished device as a
disconnected state instead of raising.
"""

from abc import ABC, abstractmethod

from .state import StructuredState, GenericState, DeviceInfo


class DeviceDriver(ABC):
    """
    Abstract device backend.

    ``poll`` and ``poll_generic`` return the structured and generic family
    state for one index; ``capabilities`` describes the index;
    ``set_vibration`` drives the structured family's motors.
    """

    name = "abstract"

    @abstractmethod
    def poll(self, index: int) -> StructuredState:
        """Read the structured family at ``index``."""

    @abstractmethod
    def poll_generic(self, index: int) -> GenericState:
        """Read the generic family at ``index``."""

    @abstractmethod
    def capabilities(self, index: int) -> DeviceInfo:
        """Describe what ``index`` currently exposes."""

    @abstractmethod
    def set_vibration(self, index: int, left: float, right: float) -> None:
        """
        Set motor speeds for ``index``.

        Args:
            index: Device index
            left: Low frequency (large) motor speed in [0, 1]
            right: High frequency (small) motor speed in [0, 1]
        """

    def pump(self) -> None:
        """Process backend events once per tick. Optional."""

    def shutdown(self) -> None:
        """Release backend resources. Optional."""
