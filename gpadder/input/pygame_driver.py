"""
pygame backend for the device driver interface.

The structured family is read through SDL's game controller API
(``pygame._sdl2.controller``), which gives named buttons, sticks, triggers
and rumble for XInput-style pads. The generic family is read through
``pygame.joystick`` and covers every HID joystick SDL can open.
"""

from typing import Dict, Optional

import pygame
from pygame._sdl2 import controller as sdl2_controller

from .driver import DeviceDriver
from .state import (
    StructuredState, GenericState, DeviceInfo, FamilyInfo,
    StructuredButton, DPadDirection,
)
from ..core.logging import get_logger
from ..core.exceptions import DriverError


_BUTTON_CODES = {
    StructuredButton.A: pygame.CONTROLLER_BUTTON_A,
    StructuredButton.B: pygame.CONTROLLER_BUTTON_B,
    StructuredButton.X: pygame.CONTROLLER_BUTTON_X,
    StructuredButton.Y: pygame.CONTROLLER_BUTTON_Y,
    StructuredButton.BACK: pygame.CONTROLLER_BUTTON_BACK,
    StructuredButton.GUIDE: pygame.CONTROLLER_BUTTON_GUIDE,
    StructuredButton.START: pygame.CONTROLLER_BUTTON_START,
    StructuredButton.LEFT_STICK: pygame.CONTROLLER_BUTTON_LEFTSTICK,
    StructuredButton.RIGHT_STICK: pygame.CONTROLLER_BUTTON_RIGHTSTICK,
    StructuredButton.LEFT_SHOULDER: pygame.CONTROLLER_BUTTON_LEFTSHOULDER,
    StructuredButton.RIGHT_SHOULDER: pygame.CONTROLLER_BUTTON_RIGHTSHOULDER,
}

_DPAD_CODES = {
    DPadDirection.UP: pygame.CONTROLLER_BUTTON_DPAD_UP,
    DPadDirection.DOWN: pygame.CONTROLLER_BUTTON_DPAD_DOWN,
    DPadDirection.LEFT: pygame.CONTROLLER_BUTTON_DPAD_LEFT,
    DPadDirection.RIGHT: pygame.CONTROLLER_BUTTON_DPAD_RIGHT,
}

_AXIS_MAX = 32767.0


def normalize_axis(raw: int) -> float:
    """Scale a raw SDL controller axis (-32768..32767) to [-1, 1]."""
    return max(-1.0, min(1.0, raw / _AXIS_MAX))


class PygameDriver(DeviceDriver):
    """
    Device driver backed by pygame/SDL.

    Device indices are SDL joystick device indices. Opened devices are
    cached and reopened whenever the joystick count changes.
    """

    name = "pygame"

    def __init__(self, rumble_hold_ms: int = 60000):
        """
        Initialize the pygame subsystems used for polling.

        Args:
            rumble_hold_ms: Duration passed to SDL with every rumble command;
                the arbiter clears motors itself when a rumble should end

        Raises:
            DriverError: If SDL's joystick or controller subsystem fails
        """
        self.logger = get_logger("pygame_driver")
        self._rumble_hold_ms = rumble_hold_ms
        self._pygame_initialized = False

        self._joysticks: Dict[int, pygame.joystick.JoystickType] = {}
        self._controllers: Dict[int, sdl2_controller.Controller] = {}
        self._device_count = -1

        try:
            if not pygame.get_init():
                pygame.init()
                self._pygame_initialized = True
                self.logger.debug("Pygame initialized")

            if not pygame.joystick.get_init():
                pygame.joystick.init()

            if not sdl2_controller.get_init():
                sdl2_controller.init()
        except pygame.error as e:
            raise DriverError("Failed to initialize SDL input subsystems",
                              backend=self.name, cause=e) from e

        self._sync_devices()

        self.logger.info("Pygame driver ready", extra={
            "devices": self._device_count,
            "controllers": sorted(self._controllers),
        })

    def pump(self) -> None:
        """Process SDL events and reopen devices after hot-plugging."""
        try:
            # Only device events are taken off the queue, the host keeps the rest
            device_events = pygame.event.get([pygame.JOYDEVICEADDED, pygame.JOYDEVICEREMOVED])
        except pygame.error as e:
            self.logger.debug("Event pump failed", extra={"error": str(e)})
            device_events = []
        self._sync_devices(force=bool(device_events))

    def _sync_devices(self, force: bool = False) -> None:
        """
        Reopen the device caches when SDL's device list changed.

        Args:
            force: Reopen even if the device count is unchanged, as after an
                unplug and a replug between two pumps
        """
        try:
            count = pygame.joystick.get_count()
        except pygame.error as e:
            self.logger.warning("Could not query joystick count", extra={"error": str(e)})
            count = 0

        if count == self._device_count and not force:
            return

        self._close_devices()

        for index in range(count):
            try:
                self._joysticks[index] = pygame.joystick.Joystick(index)
            except pygame.error as e:
                self.logger.warning("Failed to open joystick", extra={
                    "device_index": index,
                    "error": str(e)
                })
                continue

            try:
                if sdl2_controller.is_controller(index):
                    self._controllers[index] = sdl2_controller.Controller(index)
            except pygame.error as e:
                self.logger.warning("Failed to open game controller", extra={
                    "device_index": index,
                    "error": str(e)
                })

        self.logger.debug("Device list changed", extra={
            "previous_count": max(self._device_count, 0),
            "device_count": count
        })
        self._device_count = count

    def _close_devices(self) -> None:
        for controller in self._controllers.values():
            try:
                controller.quit()
            except pygame.error:
                pass  # already gone
        for joystick in self._joysticks.values():
            try:
                joystick.quit()
            except pygame.error:
                pass
        self._controllers.clear()
        self._joysticks.clear()

    def poll(self, index: int) -> StructuredState:
        controller = self._controllers.get(index)
        if controller is None:
            return StructuredState()

        try:
            if not controller.attached():
                return StructuredState()

            buttons = frozenset(
                button for button, code in _BUTTON_CODES.items()
                if controller.get_button(code)
            )
            dpad = frozenset(
                direction for direction, code in _DPAD_CODES.items()
                if controller.get_button(code)
            )
            # SDL reports y growing downwards, flip it so up is positive
            left_stick = (
                normalize_axis(controller.get_axis(pygame.CONTROLLER_AXIS_LEFTX)),
                -normalize_axis(controller.get_axis(pygame.CONTROLLER_AXIS_LEFTY)),
            )
            right_stick = (
                normalize_axis(controller.get_axis(pygame.CONTROLLER_AXIS_RIGHTX)),
                -normalize_axis(controller.get_axis(pygame.CONTROLLER_AXIS_RIGHTY)),
            )
            left_trigger = max(0.0, normalize_axis(controller.get_axis(pygame.CONTROLLER_AXIS_TRIGGERLEFT)))
            right_trigger = max(0.0, normalize_axis(controller.get_axis(pygame.CONTROLLER_AXIS_TRIGGERRIGHT)))
        except pygame.error as e:
            self.logger.debug("Controller vanished during poll", extra={
                "device_index": index,
                "error": str(e)
            })
            return StructuredState()

        return StructuredState(
            connected=True,
            buttons=buttons,
            dpad=dpad,
            left_trigger=left_trigger,
            right_trigger=right_trigger,
            left_stick=left_stick,
            right_stick=right_stick,
        )

    def poll_generic(self, index: int) -> GenericState:
        joystick = self._joysticks.get(index)
        if joystick is None:
            return GenericState()

        try:
            if not joystick.get_init():
                return GenericState()

            return GenericState(
                connected=True,
                buttons=tuple(joystick.get_button(i) for i in range(joystick.get_numbuttons())),
                axes=tuple(joystick.get_axis(i) for i in range(joystick.get_numaxes())),
                hats=tuple(joystick.get_hat(i) for i in range(joystick.get_numhats())),
            )
        except pygame.error as e:
            self.logger.debug("Joystick vanished during poll", extra={
                "device_index": index,
                "error": str(e)
            })
            return GenericState()

    def capabilities(self, index: int) -> DeviceInfo:
        structured = FamilyInfo()
        generic = FamilyInfo()

        controller = self._controllers.get(index)
        if controller is not None:
            try:
                if controller.attached():
                    structured = FamilyInfo(
                        connected=True,
                        display_name=controller.name or "",
                        button_count=len(_BUTTON_CODES) + len(_DPAD_CODES),
                        axis_count=6,
                        hat_count=0,
                    )
            except pygame.error:
                pass  # reported as absent

        joystick = self._joysticks.get(index)
        if joystick is not None:
            try:
                if joystick.get_init():
                    generic = FamilyInfo(
                        connected=True,
                        display_name=joystick.get_name() or "",
                        button_count=joystick.get_numbuttons(),
                        axis_count=joystick.get_numaxes(),
                        hat_count=joystick.get_numhats(),
                    )
            except pygame.error:
                pass

        return DeviceInfo(index=index, structured=structured, generic=generic)

    def set_vibration(self, index: int, left: float, right: float) -> None:
        controller: Optional[sdl2_controller.Controller] = self._controllers.get(index)
        if controller is None:
            self.logger.debug("No game controller for vibration", extra={"device_index": index})
            return

        try:
            if left <= 0.0 and right <= 0.0:
                controller.stop_rumble()
            elif not controller.rumble(left, right, self._rumble_hold_ms):
                self.logger.debug("Controller has no rumble support", extra={"device_index": index})
        except pygame.error as e:
            self.logger.warning("Failed to set vibration", extra={
                "device_index": index,
                "error": str(e)
            })

    def shutdown(self) -> None:
        """Close opened devices and the subsystems this driver started."""
        self._close_devices()
        self._device_count = -1

        try:
            if self._pygame_initialized and pygame.get_init():
                pygame.quit()
                self._pygame_initialized = False
                self.logger.debug("Pygame shutdown")
        except pygame.error as e:
            self.logger.warning("Error during pygame shutdown", extra={"error": str(e)})
