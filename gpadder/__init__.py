"""
GPadder - controller input arbitration for gamepads and HID joysticks

Tracks several input devices, keeps one of them active and follows the
one the player is actually using.
"""

__version__ = "0.1.0"
__author__ = "GPadder Contributors"

from .input import InputArbiter
from .config import Config

__all__ = [
    "InputArbiter",
    "Config",
]
