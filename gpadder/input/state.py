"""
Device state model shared by drivers, the classifier and the arbiter.

A device index may expose a structured (game controller) family, a generic
(raw HID joystick) family, both, or neither. Each poll produces immutable
per-family states; ``DeviceSnapshot`` pairs them for one index.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Tuple


class StructuredButton(Enum):
    """Named buttons of a console-style controller."""
    A = "a"
    B = "b"
    X = "x"
    Y = "y"
    BACK = "back"
    GUIDE = "guide"
    START = "start"
    LEFT_STICK = "left_stick"
    RIGHT_STICK = "right_stick"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"


class DPadDirection(Enum):
    """D-pad directions of a console-style controller."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class DeviceFamily(Enum):
    """Device families an index can expose."""
    STRUCTURED = "structured"
    GENERIC = "generic"


Vector2 = Tuple[float, float]
Hat = Tuple[int, int]


@dataclass(frozen=True)
class StructuredState:
    """Snapshot of the structured family at one index."""
    connected: bool = False
    buttons: FrozenSet[StructuredButton] = frozenset()
    dpad: FrozenSet[DPadDirection] = frozenset()
    left_trigger: float = 0.0
    right_trigger: float = 0.0
    left_stick: Vector2 = (0.0, 0.0)
    right_stick: Vector2 = (0.0, 0.0)

    def __post_init__(self):
        # Accept any iterable for the sets so callers can pass lists
        object.__setattr__(self, "buttons", frozenset(self.buttons))
        object.__setattr__(self, "dpad", frozenset(self.dpad))

    def is_button_down(self, button: StructuredButton) -> bool:
        return button in self.buttons

    @property
    def triggers(self) -> Vector2:
        """(left, right) trigger travel in [0, 1]."""
        return (self.left_trigger, self.right_trigger)

    @property
    def thumbsticks(self) -> Tuple[Vector2, Vector2]:
        """(left, right) stick positions."""
        return (self.left_stick, self.right_stick)


@dataclass(frozen=True)
class GenericState:
    """Snapshot of the generic family at one index."""
    connected: bool = False
    buttons: Tuple[bool, ...] = ()
    axes: Tuple[float, ...] = ()
    hats: Tuple[Hat, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "buttons", tuple(bool(b) for b in self.buttons))
        object.__setattr__(self, "axes", tuple(float(a) for a in self.axes))
        object.__setattr__(self, "hats", tuple(tuple(h) for h in self.hats))

    def pressed_buttons(self) -> List[int]:
        """Indices of the buttons currently held down."""
        return [i for i, pressed in enumerate(self.buttons) if pressed]


@dataclass(frozen=True)
class DeviceSnapshot:
    """Both families of one device index at one poll."""
    structured: StructuredState = field(default_factory=StructuredState)
    generic: GenericState = field(default_factory=GenericState)

    @property
    def connected(self) -> bool:
        """A device counts as connected if either family reports it."""
        return self.structured.connected or self.generic.connected

    @classmethod
    def disconnected(cls) -> "DeviceSnapshot":
        return cls(StructuredState(), GenericState())


@dataclass(frozen=True)
class FamilyInfo:
    """Capabilities reported by one family at an index."""
    connected: bool = False
    display_name: str = ""
    button_count: int = 0
    axis_count: int = 0
    hat_count: int = 0


@dataclass(frozen=True)
class DeviceInfo:
    """Capabilities of a device index across both families."""
    index: int
    structured: FamilyInfo = field(default_factory=FamilyInfo)
    generic: FamilyInfo = field(default_factory=FamilyInfo)

    @property
    def connected(self) -> bool:
        return self.structured.connected or self.generic.connected

    @property
    def supports_vibration(self) -> bool:
        """Only the structured family has a standard haptic API."""
        return self.structured.connected

    def family_info(self, family: DeviceFamily) -> FamilyInfo:
        if family is DeviceFamily.STRUCTURED:
            return self.structured
        return self.generic
