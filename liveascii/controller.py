"""Maps face-tracking packets onto model parameters."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .model import Model

Quaternion = tuple[float, float, float, float]

HEAD_X_GAIN = 40.0
HEAD_Y_GAIN = 40.0
HEAD_Z_GAIN = 40.0
BODY_X_GAIN = 10.0
BODY_Y_GAIN = 10.0
BODY_Z_GAIN = 10.0
EYE_BALL_GAIN = 0.60
MOUTH_OPEN_GAIN = 1.50
MOUTH_FORM_GAIN = 2.00
MOUTH_CORNER_GAIN = 1.5


class _Packet(Protocol):
    quaternion: Sequence[float]
    eye_blink_left: float
    eye_blink_right: float
    mouth_open: float
    mouth_wide: float
    mouth_corner_updown_left: float
    mouth_corner_updown_right: float
    mouth_corner_inout_left: float
    mouth_corner_inout_right: float
    eye_steepness_left: float
    eye_steepness_right: float
    eye_up_down_left: float
    eye_up_down_right: float
    eye_quirk_left: float
    eye_quirk_right: float
    eye_left: float
    eye_right: float


def _clamp(value: float, low: float, high: float) -> float:
    if math.isnan(value):
        return low
    return min(max(value, low), high)


def _clamp01(value: float) -> float:
    return _clamp(value, 0.0, 1.0)


def _lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def _quat_mul(a: Quaternion, b: Quaternion) -> Quaternion:
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return (
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    )


def quaternion_from_euler_xyz(x: float, y: float, z: float) -> Quaternion:
    """Return the (x, y, z, w) quaternion rotating about X, then Y, then Z (intrinsic)."""
    qx = (math.sin(x / 2.0), 0.0, 0.0, math.cos(x / 2.0))
    qy = (0.0, math.sin(y / 2.0), 0.0, math.cos(y / 2.0))
    qz = (0.0, 0.0, math.sin(z / 2.0), math.cos(z / 2.0))
    return _quat_mul(_quat_mul(qx, qy), qz)


def quaternion_to_euler_xyz(q: Sequence[float]) -> tuple[float, float, float]:
    """Return the intrinsic X, Y, Z angles of the unit quaternion ``q`` (x, y, z, w)."""
    x, y, z, w = q
    r00 = 1.0 - 2.0 * (y * y + z * z)
    r01 = 2.0 * (x * y - w * z)
    r02 = 2.0 * (x * z + w * y)
    r12 = 2.0 * (y * z - w * x)
    r22 = 1.0 - 2.0 * (x * x + y * y)
    angle_y = math.asin(_clamp(r02, -1.0, 1.0))
    angle_x = math.atan2(-r12, r22)
    angle_z = math.atan2(-r01, r00)
    return angle_x, angle_y, angle_z


_CORRECTION = quaternion_from_euler_xyz(math.pi, 0.0, math.pi / 2.0)


class FaceController:
    """Drives head, eye and mouth parameters from tracker packets, with smoothing."""

    def __init__(self, smooth_factor: float) -> None:
        self.smooth_factor = _clamp(smooth_factor, 0.0, 1.0)
        self._current_values: dict[str, float] = {}

    def _set_smoothed(self, model: Model, param_id: str, target: float) -> None:
        current = self._current_values.setdefault(param_id, target)
        current = _lerp(current, target, self.smooth_factor)
        self._current_values[param_id] = current
        model.set_parameter_value_by_id(param_id, current, 1.0)

    def update_parameters(self, model: Model, packet: _Packet) -> None:
        """Write the pose and expression carried by ``packet`` into ``model``."""
        qx, qy, qz, qw = packet.quaternion
        raw = (qx, -qy, -qz, qw)
        pitch, yaw, roll = quaternion_to_euler_xyz(_quat_mul(raw, _CORRECTION))

        def corner(value: float) -> float:
            return _clamp(value * MOUTH_CORNER_GAIN, -1.0, 1.0)

        def unit(value: float) -> float:
            return _clamp(value, -1.0, 1.0)

        targets = (
            ("ParamAngleX", yaw * HEAD_X_GAIN),
            ("ParamAngleY", pitch * HEAD_Y_GAIN),
            ("ParamAngleZ", roll * HEAD_Z_GAIN),
            ("ParamBodyAngleX", yaw * BODY_X_GAIN),
            ("ParamBodyAngleY", pitch * BODY_Y_GAIN),
            ("ParamBodyAngleZ", roll * BODY_Z_GAIN),
            ("ParamEyeLOpen", _clamp01(packet.eye_blink_left)),
            ("ParamEyeROpen", _clamp01(packet.eye_blink_right)),
            ("ParamEyeBallX", yaw * EYE_BALL_GAIN),
            ("ParamEyeBallY", pitch * EYE_BALL_GAIN),
            ("ParamMouthOpenY", _clamp(packet.mouth_open * MOUTH_OPEN_GAIN, 0.0, 1.2)),
            ("ParamMouthForm", _clamp(packet.mouth_wide * MOUTH_FORM_GAIN - 1.0, -1.0, 1.0)),
            ("ParamMouthCornerLeft", corner(packet.mouth_corner_updown_left)),
            ("ParamMouthCornerRight", corner(packet.mouth_corner_updown_right)),
            ("ParamMouthCornerInOutLeft", corner(packet.mouth_corner_inout_left)),
            ("ParamMouthCornerInOutRight", corner(packet.mouth_corner_inout_right)),
            ("ParamEyeSteepnessLeft", unit(packet.eye_steepness_left)),
            ("ParamEyeUpDownLeft", unit(packet.eye_up_down_left)),
            ("ParamEyeQuirkLeft", unit(packet.eye_quirk_left)),
            ("ParamEyeSteepnessRight", unit(packet.eye_steepness_right)),
            ("ParamEyeUpDownRight", unit(packet.eye_up_down_right)),
            ("ParamEyeQuirkRight", unit(packet.eye_quirk_right)),
            ("ParamEyeL", _clamp01(packet.eye_left)),
            ("ParamEyeR", _clamp01(packet.eye_right)),
        )
        for param_id, target in targets:
            self._set_smoothed(model, param_id, target)