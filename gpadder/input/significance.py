"""
Input significance heuristics.

Decides whether a device's current state looks like deliberate user action,
which is what auto-switching follows. Resting sticks drift a little and
triggers rarely read exactly zero, so analog inputs only count once they
leave a deadzone.
"""

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .state import StructuredState, GenericState, DeviceSnapshot
from ..config import Settings, get_settings
from ..core.exceptions import InvalidConfigValueError


@dataclass(frozen=True)
class SignificanceThresholds:
    """Activation thresholds for analog inputs, all in [0, 1]."""
    trigger_threshold: float = 0.1
    stick_deadzone: float = 0.2
    axis_deadzone: float = 0.2

    def __post_init__(self):
        for key in ("trigger_threshold", "stick_deadzone", "axis_deadzone"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise InvalidConfigValueError(f"input.{key}", value, "a number between 0.0 and 1.0")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SignificanceThresholds":
        return cls(
            trigger_threshold=settings.trigger_threshold,
            stick_deadzone=settings.stick_deadzone,
            axis_deadzone=settings.axis_deadzone,
        )


class SignificanceClassifier:
    """
    Classifies device states as intentional input or noise.

    Structured states are significant when any named button or D-pad
    direction is held, a trigger passes ``trigger_threshold`` or a stick
    leaves ``stick_deadzone``. Generic states are significant when any
    button is held, an axis leaves ``axis_deadzone`` or a hat is pushed.
    """

    def __init__(self, thresholds: Optional[SignificanceThresholds] = None):
        if thresholds is None:
            thresholds = SignificanceThresholds.from_settings(get_settings())
        self.thresholds = thresholds

    def structured_significant(self, state: StructuredState) -> bool:
        if state.buttons or state.dpad:
            return True

        if max(state.triggers) > self.thresholds.trigger_threshold:
            return True

        sticks = np.asarray(state.thumbsticks, dtype=float)
        magnitudes = np.hypot(sticks[:, 0], sticks[:, 1])
        return bool(np.any(magnitudes > self.thresholds.stick_deadzone))

    def generic_significant(self, state: GenericState) -> bool:
        if any(state.buttons):
            return True

        if state.axes and bool(np.any(np.abs(np.asarray(state.axes)) > self.thresholds.axis_deadzone)):
            return True

        return any(hat != (0, 0) for hat in state.hats)

    def is_significant(self, state: Union[StructuredState, GenericState, DeviceSnapshot]) -> bool:
        """
        Check whether a state reflects deliberate input.

        A snapshot is judged on its own connected families only.

        Args:
            state: Structured state, generic state or a whole snapshot

        Returns:
            True if the state counts as intentional input
        """
        if isinstance(state, DeviceSnapshot):
            return ((state.structured.connected and self.structured_significant(state.structured))
                    or (state.generic.connected and self.generic_significant(state.generic)))
        if isinstance(state, StructuredState):
            return self.structured_significant(state)
        if isinstance(state, GenericState):
            return self.generic_significant(state)
        raise TypeError(f"Cannot classify {type(state).__name__}")
