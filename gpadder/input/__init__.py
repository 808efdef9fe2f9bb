"""
Controller input arbitration

The pygame backend lives in ``gpadder.input.pygame_driver`` and is not
imported here, so the arbiter can run on the virtual driver without SDL.
"""

from .state import (
    StructuredButton,
    DPadDirection,
    DeviceFamily,
    StructuredState,
    GenericState,
    DeviceSnapshot,
    FamilyInfo,
    DeviceInfo,
)
from .driver import DeviceDriver
from .virtual import VirtualDriver, VirtualDevice
from .events import ArbiterEvent, ArbiterEventType, EventBus
from .significance import SignificanceClassifier, SignificanceThresholds
from .rumble import RumbleScheduler
from .diagnostics import DiagnosticLog
from .arbiter import (
    InputArbiter,
    detect_transition,
    get_input_arbiter,
    reset_input_arbiter,
    UNKNOWN_CONTROLLER,
)

__all__ = [
    # Core
    "InputArbiter",
    "SignificanceClassifier",
    "RumbleScheduler",
    "EventBus",
    "DiagnosticLog",

    # Drivers
    "DeviceDriver",
    "VirtualDriver",
    "VirtualDevice",

    # Data classes
    "StructuredState",
    "GenericState",
    "DeviceSnapshot",
    "FamilyInfo",
    "DeviceInfo",
    "ArbiterEvent",
    "SignificanceThresholds",

    # Enums
    "StructuredButton",
    "DPadDirection",
    "DeviceFamily",
    "ArbiterEventType",

    # Functions
    "detect_transition",
    "get_input_arbiter",
    "reset_input_arbiter",
    "UNKNOWN_CONTROLLER",
]
