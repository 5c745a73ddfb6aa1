"""Automatic eye blinking driven by a small state machine."""

from __future__ import annotations

import math
import random
from collections.abc import Callable, Iterable
from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .model import Model


class _EyeBlinkSource(Protocol):
    def get_eye_blink_parameter_ids(self) -> list[str]: ...


class EyeState(Enum):
    """Phase of a blink."""

    FIRST = auto()
    INTERVAL = auto()
    CLOSING = auto()
    CLOSED = auto()
    OPENING = auto()


def _progress(elapsed: float, length: float) -> float:
    """Return ``elapsed / length`` with IEEE results for a zero length."""
    if length != 0.0:
        return elapsed / length
    if elapsed == 0.0 or math.isnan(elapsed):
        return math.nan
    return math.copysign(math.inf, elapsed) * math.copysign(1.0, length)


class EyeBlink:
    """Closes and reopens the eyes at random intervals.

    The eye parameters are driven from 1.0 (open) to 0.0 (closed) and back.
    """

    def __init__(
        self,
        parameter_ids: Iterable[str] = (),
        *,
        rng: Callable[[], float] | None = None,
    ) -> None:
        self.parameter_ids = list(parameter_ids)
        self.blink_state = EyeState.FIRST
        self.next_blink_time = 0.0
        self.state_start_time_seconds = 0.0
        self.blink_interval_seconds = 4.0
        self.closing_seconds = 0.1
        self.closed_seconds = 0.05
        self.opening_seconds = 0.15
        self.user_time_seconds = 0.0
        self._rng = rng if rng is not None else random.random

    @classmethod
    def from_model_setting(cls, model_setting: _EyeBlinkSource) -> EyeBlink:
        """Blink the parameters of the model's ``EyeBlink`` group."""
        return cls(model_setting.get_eye_blink_parameter_ids())

    def _next_blinking_time(self) -> float:
        r = self._rng()
        return self.user_time_seconds + r * (2.0 * self.blink_interval_seconds - 1.0)

    def set_blinking_interval(self, interval: float) -> None:
        """Set the mean time between blinks, in seconds."""
        self.blink_interval_seconds = interval

    def set_blinking_settings(self, closing: float, closed: float, opening: float) -> None:
        """Set how long the eyes take to close, stay closed and open again."""
        self.closing_seconds = closing
        self.closed_seconds = closed
        self.opening_seconds = opening

    def update_parameters(self, model: Model, delta_time_seconds: float) -> None:
        """Advance the blink by ``delta_time_seconds`` and write the eye openness."""
        self.user_time_seconds += delta_time_seconds
        now = self.user_time_seconds
        state = self.blink_state

        if state is EyeState.CLOSING:
            t = _progress(now - self.state_start_time_seconds, self.closing_seconds)
            if t >= 1.0:
                t = 1.0
                self.blink_state = EyeState.CLOSED
                self.state_start_time_seconds = now
            value = 1.0 - t
        elif state is EyeState.CLOSED:
            t = _progress(now - self.state_start_time_seconds, self.closed_seconds)
            if t >= 1.0:
                self.blink_state = EyeState.OPENING
                self.state_start_time_seconds = now
            value = 0.0
        elif state is EyeState.OPENING:
            t = _progress(now - self.state_start_time_seconds, self.opening_seconds)
            if t >= 1.0:
                t = 1.0
                self.blink_state = EyeState.INTERVAL
                self.next_blink_time = self._next_blinking_time()
            value = t
        elif state is EyeState.INTERVAL:
            if self.next_blink_time < now:
                self.blink_state = EyeState.CLOSING
                self.state_start_time_seconds = now
            value = 1.0
        else:
            self.blink_state = EyeState.INTERVAL
            self.next_blink_time = self._next_blinking_time()
            value = 1.0

        for param_id in self.parameter_ids:
            model.set_parameter_value_by_id(param_id, value, 1.0)