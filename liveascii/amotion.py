"""Keyframed motions and the timing rules shared by every motion."""

from __future__ import annotations

import math
from enum import Enum, auto
from typing import TYPE_CHECKING

from .motion_json import (
    CurveTargetType,
    MotionCurve,
    MotionData,
    MotionSegment,
    MotionSegmentType,
    SegmentPoint,
)

if TYPE_CHECKING:
    from .model import Model
    from .queue import MotionQueueEntry

MAX_TARGET_SIZE = 64
_BEZIER_ITERATIONS = 20


def _clamp(value: float, low: float, high: float) -> float:
    # ``value`` goes first so that NaN survives the comparison.
    return min(max(value, low), high)


def _divide(numerator: float, denominator: float) -> float:
    """Divide with IEEE semantics instead of raising on zero."""
    if denominator != 0.0:
        return numerator / denominator
    if numerator == 0.0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def get_easing_sine(value: float) -> float:
    """Ease ``value`` (clamped to [0, 1]) along a quarter sine wave."""
    return math.sin(_clamp(value, 0.0, 1.0) * math.pi / 2.0)


def linear_evaluate(p0: SegmentPoint, p1: SegmentPoint, time: float) -> float:
    """Interpolate linearly between two points, holding the ends."""
    t = _clamp(_divide(time - p0.time, p1.time - p0.time), 0.0, 1.0)
    return p0.value + (p1.value - p0.value) * t


def bezier_evaluate(
    p0: SegmentPoint,
    p1: SegmentPoint,
    p2: SegmentPoint,
    p3: SegmentPoint,
    time: float,
) -> float:
    """Evaluate a cubic Bezier at ``time``, solving for its parameter by bisection."""
    t_min, t_max, t = 0.0, 1.0, 0.0
    for _ in range(_BEZIER_ITERATIONS):
        t = (t_min + t_max) / 2.0
        mt = 1.0 - t
        current_time = (
            mt * mt * mt * p0.time
            + 3.0 * mt * mt * t * p1.time
            + 3.0 * mt * t * t * p2.time
            + t * t * t * p3.time
        )
        if current_time < time:
            t_min = t
        else:
            t_max = t
    mt = 1.0 - t
    return (
        mt * mt * mt * p0.value
        + 3.0 * mt * mt * t * p1.value
        + 3.0 * mt * t * t * p2.value
        + t * t * t * p3.value
    )


def correct_end_point(
    motion_data: MotionData,
    first_point_index: int,
    last_point_index: int,
    time: float,
    end_time: float,
) -> float:
    """Blend from the last point back to the first one, for seamless loops."""
    first = motion_data.points[first_point_index]
    last = motion_data.points[last_point_index]
    t = _divide(time - last.time, end_time - last.time)
    return last.value + (first.value - last.value) * t


def _evaluate_segment(
    segment: MotionSegment, points: list[SegmentPoint], time: float
) -> float:
    base = segment.base_point_index
    kind = segment.segment_type
    if kind is MotionSegmentType.LINEAR:
        return linear_evaluate(points[base], points[base + 1], time)
    if kind is MotionSegmentType.BEZIER:
        return bezier_evaluate(
            points[base], points[base + 1], points[base + 2], points[base + 3], time
        )
    if kind is MotionSegmentType.STEPPED:
        return points[base].value
    return points[base + 1].value


def evaluate_curve(
    motion_data: MotionData,
    curve: MotionCurve,
    time: float,
    is_correction: bool,
    end_time: float,
) -> float:
    """Return the value of ``curve`` at ``time``."""
    target: int | None = None
    point_position = 0
    total = curve.base_segment_index + curve.segment_count

    for i in range(curve.base_segment_index, total):
        segment = motion_data.segments[i]
        step = 3 if segment.segment_type is MotionSegmentType.BEZIER else 1
        point_position = segment.base_point_index + step
        if motion_data.points[point_position].time > time:
            target = i
            break

    if target is None:
        if is_correction and time < end_time:
            first_index = motion_data.segments[curve.base_segment_index].base_point_index
            return correct_end_point(
                motion_data, first_index, point_position, time, end_time
            )
        return motion_data.points[point_position].value

    return _evaluate_segment(motion_data.segments[target], motion_data.points, time)


class MotionBehavior(Enum):
    """How a looping motion restarts."""

    V1 = auto()
    V2 = auto()


class MotionBase:
    """Fade and timing rules shared by every motion; applies no values itself."""

    def __init__(
        self,
        *,
        fade_in_seconds: float = -1.0,
        fade_out_seconds: float = -1.0,
        weight: float = 1.0,
        offset_seconds: float = 0.0,
        is_loop: bool = True,
        is_loop_fade_in: bool = True,
    ) -> None:
        self.fade_in_seconds = fade_in_seconds
        self.fade_out_seconds = fade_out_seconds
        self.weight = weight
        self.offset_seconds = offset_seconds
        self.is_loop = is_loop
        self.is_loop_fade_in = is_loop_fade_in
        self.previous_loop_state = False
        self.fired_event_values: list[str] = []

    def get_duration(self) -> float:
        """Length in seconds; negative means endless."""
        return -1.0

    def adjust_end_time(self, entry: MotionQueueEntry) -> None:
        duration = self.get_duration()
        entry.end_time_seconds = (
            -1.0 if duration <= 0.0 else entry.start_time_seconds + duration
        )

    def setup_motion_queue_entry(self, entry: MotionQueueEntry, user_time: float) -> None:
        """Start ``entry`` at ``user_time`` unless it is already running or done."""
        if not entry.available or entry.finished or entry.started:
            return
        entry.started = True
        entry.start_time_seconds = user_time - self.offset_seconds
        entry.fade_in_start_time_seconds = user_time
        if entry.end_time_seconds < 0.0:
            self.adjust_end_time(entry)

    def update_fade_weight(self, entry: MotionQueueEntry, user_time: float) -> float:
        """Return the weight after fade-in and fade-out, clamped to [0, 1]."""
        if self.fade_in_seconds <= 0.0:
            fade_in = 1.0
        else:
            fade_in = get_easing_sine(
                (user_time - entry.fade_in_start_time_seconds) / self.fade_in_seconds
            )
        if self.fade_out_seconds <= 0.0 or entry.end_time_seconds < 0.0:
            fade_out = 1.0
        else:
            fade_out = get_easing_sine(
                (entry.end_time_seconds - user_time) / self.fade_out_seconds
            )
        fade_weight = self.weight * fade_in * fade_out
        entry.set_state(user_time, fade_weight)
        return _clamp(fade_weight, 0.0, 1.0)

    def update_parameters(
        self, model: Model, entry: MotionQueueEntry, user_time_seconds: float
    ) -> None:
        """Apply this motion to ``model`` and mark ``entry`` finished past its end."""
        if not entry.available or entry.finished:
            return
        self.setup_motion_queue_entry(entry, user_time_seconds)
        fade_weight = self.update_fade_weight(entry, user_time_seconds)
        self.do_update_parameters(model, user_time_seconds, fade_weight, entry)
        if 0.0 < entry.end_time_seconds < user_time_seconds:
            entry.finished = True

    def do_update_parameters(
        self,
        model: Model,
        user_time_seconds: float,
        fade_weight: float,
        entry: MotionQueueEntry,
    ) -> None:
        """Write this motion's values into ``model``; a bare motion has none."""

    def get_fired_events(
        self, before_check_time_seconds: float, motion_time_seconds: float
    ) -> list[str]:
        """Return the events fired in the interval; a bare motion has none."""
        self.fired_event_values.clear()
        return []


class CubismMotion(MotionBase):
    """A motion driven by keyframed curves."""

    def __init__(
        self, motion_data: MotionData, behavior: MotionBehavior = MotionBehavior.V2
    ) -> None:
        super().__init__()
        self.motion_data = motion_data
        self.source_frame_rate = motion_data.fps
        self.loop_duration_seconds = motion_data.duration
        self.motion_behavior = behavior
        self.last_weight = 0.0
        self.model_curve_id_eye_blink: list[str] = []
        self.model_curve_id_lip_sync: list[str] = []
        self.model_curve_id_opacity: list[str] = []
        self.model_opacity = 1.0

    def get_duration(self) -> float:
        return -1.0 if self.is_loop else self.loop_duration_seconds

    def do_update_parameters(
        self,
        model: Model,
        user_time_seconds: float,
        fade_weight: float,
        entry: MotionQueueEntry,
    ) -> None:
        """Evaluate every curve and blend the results into ``model``."""
        is_v2 = self.motion_behavior is MotionBehavior.V2
        if is_v2 and self.previous_loop_state != self.is_loop:
            self.adjust_end_time(entry)
            self.previous_loop_state = self.is_loop

        time_offset = max(user_time_seconds - entry.start_time_seconds, 0.0)

        lip_sync_value: float | None = None
        eye_blink_value: float | None = None
        lip_sync_hits: set[int] = set()
        eye_blink_hits: set[int] = set()

        if self.fade_in_seconds <= 0.0:
            tmp_fade_in = 1.0
        else:
            tmp_fade_in = get_easing_sine(
                (user_time_seconds - entry.fade_in_start_time_seconds) / self.fade_in_seconds
            )
        if self.fade_out_seconds <= 0.0 or entry.end_time_seconds < 0.0:
            tmp_fade_out = 1.0
        else:
            tmp_fade_out = get_easing_sine(
                (entry.end_time_seconds - user_time_seconds) / self.fade_out_seconds
            )

        time = time_offset
        duration = self.motion_data.duration
        is_correction = is_v2 and self.is_loop

        if self.is_loop:
            if is_v2:
                duration += _divide(1.0, self.source_frame_rate)
            if duration <= 0.0:
                duration = 0.001
            time = math.fmod(time, duration)

        for curve in self.motion_data.curves:
            value = evaluate_curve(self.motion_data, curve, time, is_correction, duration)

            if curve.target_type is CurveTargetType.MODEL:
                if curve.id == "EyeBlink":
                    eye_blink_value = value
                elif curve.id == "LipSync":
                    lip_sync_value = value
                elif curve.id == "Opacity":
                    self.model_opacity = value
                    model.model_opacity = value
                continue

            if curve.target_type is CurveTargetType.PART_OPACITY:
                model.set_parameter_value(model.get_parameter_index(curve.id), value, 1.0)
                continue

            parameter_index = model.get_parameter_index(curve.id)
            source_value = model.get_parameter_value(parameter_index)
            current_value = value

            if eye_blink_value is not None and curve.id in self.model_curve_id_eye_blink:
                pos = self.model_curve_id_eye_blink.index(curve.id)
                if pos < MAX_TARGET_SIZE:
                    current_value *= eye_blink_value
                    eye_blink_hits.add(pos)

            if lip_sync_value is not None and curve.id in self.model_curve_id_lip_sync:
                pos = self.model_curve_id_lip_sync.index(curve.id)
                if pos < MAX_TARGET_SIZE:
                    current_value += lip_sync_value
                    lip_sync_hits.add(pos)

            if model.is_repeat(parameter_index):
                current_value = model.get_parameter_repeat_value(parameter_index, current_value)

            if curve.fade_in_time < 0.0 and curve.fade_out_time < 0.0:
                param_weight = fade_weight
            else:
                if curve.fade_in_time < 0.0:
                    fin = tmp_fade_in
                elif curve.fade_in_time == 0.0:
                    fin = 1.0
                else:
                    fin = get_easing_sine(
                        (user_time_seconds - entry.fade_in_start_time_seconds)
                        / curve.fade_in_time
                    )
                if curve.fade_out_time < 0.0:
                    fout = tmp_fade_out
                elif curve.fade_out_time == 0.0 or entry.end_time_seconds < 0.0:
                    fout = 1.0
                else:
                    fout = get_easing_sine(
                        (entry.end_time_seconds - user_time_seconds) / curve.fade_out_time
                    )
                param_weight = self.weight * fin * fout

            final_value = source_value + (current_value - source_value) * param_weight
            model.set_parameter_value(parameter_index, final_value, 1.0)

        for effect_value, ids, hits in (
            (eye_blink_value, self.model_curve_id_eye_blink, eye_blink_hits),
            (lip_sync_value, self.model_curve_id_lip_sync, lip_sync_hits),
        ):
            if effect_value is None:
                continue
            for pos, param_id in enumerate(ids[:MAX_TARGET_SIZE]):
                if pos in hits:
                    continue
                source_value = model.get_parameter_value_by_id(param_id)
                blended = source_value + (effect_value - source_value) * fade_weight
                model.set_parameter_value_by_id(param_id, blended, 1.0)

        if time_offset >= duration:
            if self.is_loop:
                self.update_for_next_loop(user_time_seconds, time, entry)
            else:
                entry.finished = True

        self.last_weight = fade_weight

    def update_for_next_loop(
        self, user_time_seconds: float, time: float, entry: MotionQueueEntry
    ) -> None:
        """Restart ``entry`` for the next pass of a looping motion."""
        if self.motion_behavior is MotionBehavior.V1:
            restart = user_time_seconds
        else:
            restart = user_time_seconds - time
        entry.start_time_seconds = restart
        if self.is_loop_fade_in:
            entry.fade_in_start_time_seconds = restart

    def _find_curve(self, curve_id: str) -> MotionCurve | None:
        return next((c for c in self.motion_data.curves if c.id == curve_id), None)

    def set_fade_in_time(self, curve_id: str, value: float) -> None:
        curve = self._find_curve(curve_id)
        if curve is not None:
            curve.fade_in_time = value

    def set_fade_out_time(self, curve_id: str, value: float) -> None:
        curve = self._find_curve(curve_id)
        if curve is not None:
            curve.fade_out_time = value

    def get_fade_in_time(self, curve_id: str) -> float | None:
        curve = self._find_curve(curve_id)
        return None if curve is None else curve.fade_in_time

    def get_fade_out_time(self, curve_id: str) -> float | None:
        curve = self._find_curve(curve_id)
        return None if curve is None else curve.fade_out_time

    def set_effect_ids(self, eye_blink_ids: list[str], lip_sync_ids: list[str]) -> None:
        """Set the parameters driven by the eye-blink and lip-sync curves."""
        self.model_curve_id_eye_blink = list(eye_blink_ids)
        self.model_curve_id_lip_sync = list(lip_sync_ids)

    def is_exist_model_opacity(self) -> bool:
        return self.get_model_opacity_index() is not None

    def get_model_opacity_index(self) -> int | None:
        """Return the index of the model opacity curve, if there is one."""
        return next(
            (
                i
                for i, curve in enumerate(self.motion_data.curves)
                if curve.target_type is CurveTargetType.MODEL and curve.id == "Opacity"
            ),
            None,
        )

    def get_fired_events(
        self, before_check_time_seconds: float, motion_time_seconds: float
    ) -> list[str]:
        """Return the values of events with time in (before, current]."""
        self.fired_event_values = [
            event.value
            for event in self.motion_data.events
            if before_check_time_seconds < event.time <= motion_time_seconds
        ]
        return list(self.fired_event_values)