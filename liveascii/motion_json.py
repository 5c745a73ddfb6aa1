"""Motion data as read from a ``.motion3.json`` file, flattened for evaluation."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

_DEFAULT_FADE_TIME = -1.0
_MISSING = object()


class MotionFormatError(ValueError):
    """Raised when motion data is malformed."""


def _get(data: dict, key: str, default: Any = _MISSING) -> Any:
    if key in data:
        return data[key]
    if default is _MISSING:
        raise MotionFormatError(f"missing field {key!r}")
    return default


def _as_dict(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise MotionFormatError(f"{what} must be an object")
    return value


def _as_list(value: Any, what: str) -> list:
    if not isinstance(value, list):
        raise MotionFormatError(f"{what} must be an array")
    return value


def _as_str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise MotionFormatError(f"{what} must be a string")
    return value


def _as_bool(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise MotionFormatError(f"{what} must be a boolean")
    return value


def _as_float(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MotionFormatError(f"{what} must be a number")
    return float(value)


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MotionFormatError(f"{what} must be an integer")
    return value


@dataclass(frozen=True)
class SegmentPoint:
    """A keyframe: a value at a time."""

    time: float
    value: float


class CurveTargetType(Enum):
    """What a curve animates."""

    PARAMETER = "Parameter"
    PART_OPACITY = "PartOpacity"
    MODEL = "Model"


class MotionSegmentType(Enum):
    """Interpolation of a segment, valued by its code in the file."""

    LINEAR = 0
    BEZIER = 1
    STEPPED = 2
    INVERSE_STEPPED = 3


_SEGMENT_NAMES = {
    MotionSegmentType.LINEAR: "linear",
    MotionSegmentType.BEZIER: "bezier",
    MotionSegmentType.STEPPED: "stepped",
    MotionSegmentType.INVERSE_STEPPED: "inv-stepped",
}


@dataclass
class MotionCurve:
    """A curve: a run of segments in :attr:`MotionData.segments`."""

    target_type: CurveTargetType
    id: str
    segment_count: int
    base_segment_index: int
    fade_in_time: float = _DEFAULT_FADE_TIME
    fade_out_time: float = _DEFAULT_FADE_TIME


@dataclass
class MotionSegment:
    """A segment starting at ``base_point_index`` in :attr:`MotionData.points`."""

    base_point_index: int
    segment_type: MotionSegmentType


@dataclass
class MotionEvent:
    """A user-data event fired at a point in time."""

    time: float
    value: str


Segment = tuple[MotionSegmentType, tuple[SegmentPoint, ...]]


def parse_segments(values: Iterable[Any]) -> list[Segment]:
    """Decode the flat number list of a curve into segments.

    Each segment carries all its points, its start point shared with the end
    of the previous one: two points for linear and stepped segments, four
    for a Bezier.
    """
    items: Iterator[Any] = iter(values)

    def number(what: str) -> float:
        try:
            raw = next(items)
        except StopIteration:
            raise MotionFormatError(f"Missing {what}") from None
        return _as_float(raw, what)

    last = SegmentPoint(number("start time"), number("start value"))
    result: list[Segment] = []
    for raw in items:
        code = _as_int(raw, "segment type")
        try:
            seg_type = MotionSegmentType(code)
        except ValueError:
            raise MotionFormatError("Unknown segment format.") from None
        name = _SEGMENT_NAMES[seg_type]
        if seg_type is MotionSegmentType.BEZIER:
            c0 = SegmentPoint(number(f"{name} t0"), number(f"{name} v0"))
            c1 = SegmentPoint(number(f"{name} t1"), number(f"{name} v1"))
            end = SegmentPoint(number(f"{name} t2"), number(f"{name} v2"))
            points: tuple[SegmentPoint, ...] = (last, c0, c1, end)
        else:
            end = SegmentPoint(number(f"{name} time"), number(f"{name} value"))
            points = (last, end)
        result.append((seg_type, points))
        last = end
    return result


def _parse_event(data: Any) -> MotionEvent:
    data = _as_dict(data, "user data")
    return MotionEvent(
        time=_as_float(_get(data, "Time"), "Time"),
        value=_as_str(_get(data, "Value"), "Value"),
    )


@dataclass
class MotionData:
    """Curves, segments and points of a motion, flattened into lists."""

    duration: float
    loop: bool
    fps: float
    curves: list[MotionCurve] = field(default_factory=list)
    segments: list[MotionSegment] = field(default_factory=list)
    points: list[SegmentPoint] = field(default_factory=list)
    events: list[MotionEvent] = field(default_factory=list)

    @classmethod
    def from_path(cls, base_dir: str | Path, path: str | Path) -> MotionData:
        """Read ``path`` relative to ``base_dir``."""
        full_path = Path(base_dir) / path
        text = full_path.read_text(encoding="utf-8")
        try:
            return cls.from_dict(json.loads(text))
        except (json.JSONDecodeError, MotionFormatError) as exc:
            raise MotionFormatError(f"Failed to parse JSON ({full_path}): {exc}") from exc

    @classmethod
    def from_dict(cls, data: Any) -> MotionData:
        """Build motion data from decoded JSON; raises MotionFormatError."""
        data = _as_dict(data, "motion")
        version = _as_int(_get(data, "Version"), "Version")
        if version < 0:
            raise MotionFormatError("Version must be a non-negative integer")

        meta = _as_dict(_get(data, "Meta"), "Meta")
        duration = _as_float(_get(meta, "Duration"), "Duration")
        fps = _as_float(_get(meta, "Fps"), "Fps")
        loop = _as_bool(_get(meta, "Loop"), "Loop")
        _as_bool(_get(meta, "AreBeziersRestricted", False), "AreBeziersRestricted")
        for key in ("CurveCount", "TotalSegmentCount", "TotalPointCount"):
            _as_int(_get(meta, key), key)
        for key in ("UserDataCount", "TotalUserDataSize"):
            _as_int(_get(meta, key, 0), key)
        for key in ("FadeInTime", "FadeOutTime"):
            if meta.get(key) is not None:
                _as_float(meta[key], key)

        curves: list[MotionCurve] = []
        segments: list[MotionSegment] = []
        points: list[SegmentPoint] = []

        for raw_curve in _as_list(_get(data, "Curves"), "Curves"):
            curve = _as_dict(raw_curve, "curve")
            target_name = _as_str(_get(curve, "Target"), "Target")
            curve_id = _as_str(_get(curve, "Id"), "Id")
            fade_in = _as_float(_get(curve, "FadeInTime", _DEFAULT_FADE_TIME), "FadeInTime")
            fade_out = _as_float(
                _get(curve, "FadeOutTime", _DEFAULT_FADE_TIME), "FadeOutTime"
            )
            parsed = parse_segments(_as_list(_get(curve, "Segments"), "Segments"))

            base_segment_index = len(segments)
            for position, (seg_type, seg_points) in enumerate(parsed):
                base_point_index = len(points)
                points.extend(seg_points if position == 0 else seg_points[1:])
                segments.append(MotionSegment(base_point_index, seg_type))

            try:
                target_type = CurveTargetType(target_name)
            except ValueError:
                raise MotionFormatError("Unknown target type.") from None

            curves.append(
                MotionCurve(
                    target_type=target_type,
                    id=curve_id,
                    segment_count=len(parsed),
                    base_segment_index=base_segment_index,
                    fade_in_time=fade_in,
                    fade_out_time=fade_out,
                )
            )

        events = [
            _parse_event(e) for e in _as_list(_get(data, "UserData", []), "UserData")
        ]
        return cls(
            duration=duration,
            loop=loop,
            fps=fps,
            curves=curves,
            segments=segments,
            points=points,
            events=events,
        )