import pytest

from liveascii.amotion import CubismMotion
from liveascii.model import Model, ParameterSpec
from liveascii.motion_json import (
    CurveTargetType,
    MotionCurve,
    MotionData,
    MotionSegment,
    MotionSegmentType,
    SegmentPoint,
)
from liveascii.motion_manager import MotionManager


def _motion():
    data = MotionData(
        duration=1.0,
        loop=False,
        fps=30.0,
        curves=[MotionCurve(CurveTargetType.PARAMETER, "ParamA", 1, 0)],
        segments=[MotionSegment(0, MotionSegmentType.LINEAR)],
        points=[SegmentPoint(0.0, 0.0), SegmentPoint(1.0, 1.0)],
    )
    motion = CubismMotion(data)
    motion.is_loop = False
    return motion


def _model():
    return Model(parameters=[ParameterSpec("ParamA", 0.0, 1.0)])


def test_reserve_motion():
    manager = MotionManager()
    assert manager.reserve_motion(1) is True
    assert manager.reserve_prior == 1
    assert manager.reserve_motion(1) is False
    assert manager.reserve_motion(0) is False


def test_reserve_below_current_priority_fails():
    manager = MotionManager()
    manager.start_motion_priority(_motion(), False, 2)
    assert manager.reserve_motion(2) is False
    assert manager.reserve_motion(3) is True


def test_start_clears_matching_reservation():
    manager = MotionManager()
    manager.reserve_motion(2)
    entry_id = manager.start_motion_priority(_motion(), False, 2)
    assert manager.reserve_prior == 0
    assert manager.current_prior == 2
    assert manager.qm.is_finished(entry_id) is False


def test_start_keeps_other_reservation():
    manager = MotionManager()
    manager.reserve_motion(3)
    manager.start_motion_priority(_motion(), False, 2)
    assert manager.reserve_prior == 3


def test_update_with_empty_queue():
    manager = MotionManager()
    assert manager.update_motion(_model(), 0.1) is False
    assert manager.current_prior == 0


def test_motion_plays_and_finishes():
    manager = MotionManager()
    model = _model()
    manager.start_motion_priority(_motion(), False, 2)

    assert manager.update_motion(model, 0.5) is True
    assert manager.current_prior == 2
    assert model.get_parameter_value_by_id("ParamA") == pytest.approx(0.0)

    manager.update_motion(model, 0.5)
    assert model.get_parameter_value_by_id("ParamA") == pytest.approx(0.5)
    assert len(manager.qm.motions) == 1

    manager.update_motion(model, 1.0)
    assert manager.qm.motions == []
    assert manager.current_prior == 0


def test_user_time_accumulates():
    manager = MotionManager()
    manager.update_motion(_model(), 0.25)
    manager.update_motion(_model(), 0.5)
    assert manager.qm.user_time_seconds == pytest.approx(0.75)