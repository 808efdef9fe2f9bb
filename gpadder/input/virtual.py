"""
In-memory device driver.

Lets headless hosts, demos and tests script what each device index
reports without any hardware attached.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .driver import DeviceDriver
from .state import StructuredState, GenericState, DeviceInfo, FamilyInfo
from ..core.logging import get_logger
from ..core.exceptions import DeviceError


@dataclass
class VirtualDevice:
    """What one virtual index currently reports."""
    structured: StructuredState = field(default_factory=StructuredState)
    generic: GenericState = field(default_factory=GenericState)
    structured_name: str = ""
    generic_name: str = ""
    motors: Tuple[float, float] = (0.0, 0.0)


class VirtualDriver(DeviceDriver):
    """
    Scriptable driver keeping device states in a dictionary.

    Unknown indices read as disconnected. Every ``set_vibration`` call is
    recorded in ``vibration_log``.
    """

    name = "virtual"

    def __init__(self):
        self.logger = get_logger("virtual_driver")
        self._devices: Dict[int, VirtualDevice] = {}
        self.vibration_log: List[Tuple[int, float, float]] = []
        self.poll_count = 0
        self.pump_count = 0
        self.shut_down = False

    # Scripting

    def _device(self, index: int) -> VirtualDevice:
        if index < 0:
            raise DeviceError(f"Device index must be non-negative, got {index}", device_index=index)
        return self._devices.setdefault(index, VirtualDevice())

    def connect_gamepad(self, index: int, name: str = "Virtual Gamepad",
                        generic_name: Optional[str] = None) -> None:
        """
        Plug a console-style controller into ``index``.

        Args:
            index: Device index
            name: Structured family display name ("" for unnamed)
            generic_name: Also expose the generic family under this name
        """
        device = self._device(index)
        device.structured = StructuredState(connected=True)
        device.structured_name = name
        if generic_name is not None:
            device.generic = GenericState(connected=True, buttons=(False,) * 10,
                                          axes=(0.0,) * 6, hats=((0, 0),))
            device.generic_name = generic_name
        self.logger.debug("Virtual gamepad connected", extra={"device_index": index})

    def connect_joystick(self, index: int, name: str = "Virtual Joystick",
                         buttons: int = 12, axes: int = 4, hats: int = 1) -> None:
        """Plug a generic HID joystick into ``index``."""
        device = self._device(index)
        device.generic = GenericState(connected=True, buttons=(False,) * buttons,
                                      axes=(0.0,) * axes, hats=((0, 0),) * hats)
        device.generic_name = name
        self.logger.debug("Virtual joystick connected", extra={"device_index": index})

    def disconnect(self, index: int) -> None:
        """Unplug every family at ``index``."""
        self._devices.pop(index, None)
        self.logger.debug("Virtual device disconnected", extra={"device_index": index})

    def set_structured(self, index: int, state: StructuredState) -> None:
        self._device(index).structured = state

    def set_generic(self, index: int, state: GenericState) -> None:
        self._device(index).generic = state

    def motors(self, index: int) -> Tuple[float, float]:
        """Current (left, right) motor speeds at ``index``."""
        device = self._devices.get(index)
        return device.motors if device else (0.0, 0.0)

    # DeviceDriver

    def pump(self) -> None:
        self.pump_count += 1

    def poll(self, index: int) -> StructuredState:
        self.poll_count += 1
        device = self._devices.get(index)
        return device.structured if device else StructuredState()

    def poll_generic(self, index: int) -> GenericState:
        device = self._devices.get(index)
        return device.generic if device else GenericState()

    def capabilities(self, index: int) -> DeviceInfo:
        device = self._devices.get(index)
        if device is None:
            return DeviceInfo(index=index)

        structured = FamilyInfo()
        if device.structured.connected:
            structured = FamilyInfo(connected=True, display_name=device.structured_name,
                                    button_count=15, axis_count=6)

        generic = FamilyInfo()
        if device.generic.connected:
            generic = FamilyInfo(connected=True, display_name=device.generic_name,
                                 button_count=len(device.generic.buttons),
                                 axis_count=len(device.generic.axes),
                                 hat_count=len(device.generic.hats))

        return DeviceInfo(index=index, structured=structured, generic=generic)

    def set_vibration(self, index: int, left: float, right: float) -> None:
        self.vibration_log.append((index, left, right))
        device = self._devices.get(index)
        if device is not None:
            device.motors = (left, right)

    def shutdown(self) -> None:
        self.shut_down = True
