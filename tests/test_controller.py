import math
from dataclasses import dataclass, field, replace

import pytest

from liveascii.controller import (
    FaceController,
    quaternion_from_euler_xyz,
    quaternion_to_euler_xyz,
)
from liveascii.model import Model


def _neutral_quaternion():
    cx, cy, cz, cw = quaternion_from_euler_xyz(math.pi, 0.0, math.pi / 2.0)
    # The controller negates y and z before applying the correction.
    return (-cx, cy, cz, cw)


@dataclass
class FakePacket:
    quaternion: tuple = field(default_factory=_neutral_quaternion)
    eye_blink_left: float = 1.0
    eye_blink_right: float = 1.0
    mouth_open: float = 0.0
    mouth_wide: float = 0.5
    mouth_corner_updown_left: float = 0.0
    mouth_corner_updown_right: float = 0.0
    mouth_corner_inout_left: float = 0.0
    mouth_corner_inout_right: float = 0.0
    eye_steepness_left: float = 0.0
    eye_steepness_right: float = 0.0
    eye_up_down_left: float = 0.0
    eye_up_down_right: float = 0.0
    eye_quirk_left: float = 0.0
    eye_quirk_right: float = 0.0
    eye_left: float = 0.0
    eye_right: float = 0.0


def test_identity_quaternion_from_zero_angles():
    assert quaternion_from_euler_xyz(0.0, 0.0, 0.0) == pytest.approx((0.0, 0.0, 0.0, 1.0))


def test_single_axis_rotation():
    half = math.sqrt(0.5)
    assert quaternion_from_euler_xyz(math.pi / 2, 0.0, 0.0) == pytest.approx(
        (half, 0.0, 0.0, half)
    )


@pytest.mark.parametrize(
    "angles",
    [(0.1, 0.2, 0.3), (-0.7, 0.4, 1.2), (2.5, -1.0, -2.9), (0.0, 0.0, 0.0)],
)
def test_euler_round_trip(angles):
    q = quaternion_from_euler_xyz(*angles)
    assert math.fsum(c * c for c in q) == pytest.approx(1.0)
    assert quaternion_to_euler_xyz(q) == pytest.approx(angles, abs=1e-9)


def test_smooth_factor_is_clamped():
    assert FaceController(2.0).smooth_factor == 1.0
    assert FaceController(-3.0).smooth_factor == 0.0


def test_neutral_head_gives_zero_angles():
    model = Model()
    FaceController(1.0).update_parameters(model, FakePacket())
    for pid in (
        "ParamAngleX",
        "ParamAngleY",
        "ParamAngleZ",
        "ParamBodyAngleX",
        "ParamBodyAngleY",
        "ParamBodyAngleZ",
        "ParamEyeBallX",
        "ParamEyeBallY",
    ):
        assert model.get_parameter_value_by_id(pid) == pytest.approx(0.0, abs=1e-9)


def test_values_are_clamped_to_source_limits():
    model = Model()
    packet = FakePacket(
        eye_blink_left=5.0,
        eye_blink_right=-5.0,
        mouth_open=100.0,
        mouth_wide=100.0,
        mouth_corner_updown_left=-10.0,
        eye_quirk_right=10.0,
        eye_left=3.0,
    )
    FaceController(1.0).update_parameters(model, packet)
    assert model.get_parameter_value_by_id("ParamEyeLOpen") == 1.0
    assert model.get_parameter_value_by_id("ParamEyeROpen") == 0.0
    assert model.get_parameter_value_by_id("ParamMouthOpenY") == 1.2
    assert model.get_parameter_value_by_id("ParamMouthForm") == 1.0
    assert model.get_parameter_value_by_id("ParamMouthCornerLeft") == -1.0
    assert model.get_parameter_value_by_id("ParamEyeQuirkRight") == 1.0
    assert model.get_parameter_value_by_id("ParamEyeL") == 1.0


def test_zero_smoothing_holds_first_value():
    model = Model()
    controller = FaceController(0.0)
    controller.update_parameters(model, FakePacket(eye_blink_left=0.25))
    first = model.get_parameter_value_by_id("ParamEyeLOpen")
    controller.update_parameters(model, FakePacket(eye_blink_left=0.9))
    assert model.get_parameter_value_by_id("ParamEyeLOpen") == first


def test_full_smoothing_follows_target():
    model = Model()
    controller = FaceController(1.0)
    controller.update_parameters(model, FakePacket(eye_right=0.25))
    controller.update_parameters(model, FakePacket(eye_right=0.75))
    assert model.get_parameter_value_by_id("ParamEyeR") == 0.75


def test_partial_smoothing_lies_between_old_and_new():
    model = Model()
    controller = FaceController(0.3)
    controller.update_parameters(model, FakePacket(eye_left=0.2))
    controller.update_parameters(model, FakePacket(eye_left=0.8))
    value = model.get_parameter_value_by_id("ParamEyeL")
    assert 0.2 < value < 0.8


def test_head_turn_moves_head_more_than_body():
    model = Model()
    base = _neutral_quaternion()
    turn = quaternion_from_euler_xyz(0.0, 0.0, 0.2)
    bx, by, bz, bw = base
    tx, ty, tz, tw = turn
    # Compose a small extra rotation in packet space.
    packet_q = (
        tw * bx + tx * bw + ty * bz - tz * by,
        tw * by - tx * bz + ty * bw + tz * bx,
        tw * bz + tx * by - ty * bx + tz * bw,
        tw * bw - tx * bx - ty * by - tz * bz,
    )
    FaceController(1.0).update_parameters(model, replace(FakePacket(), quaternion=packet_q))
    head = [model.get_parameter_value_by_id(p) for p in ("ParamAngleX", "ParamAngleY", "ParamAngleZ")]
    body = [
        model.get_parameter_value_by_id(p)
        for p in ("ParamBodyAngleX", "ParamBodyAngleY", "ParamBodyAngleZ")
    ]
    assert max(abs(v) for v in head) > 0.0
    for h, b in zip(head, body):
        assert h == pytest.approx(4.0 * b, abs=1e-9)