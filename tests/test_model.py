import pytest

from liveascii.model import Model, ParameterSpec

SPECS = [
    ParameterSpec("ParamAngleX", -30.0, 30.0, 0.0),
    ParameterSpec("ParamEyeLOpen", 0.0, 1.0, 1.0),
    ParameterSpec("ParamRotate", 0.0, 10.0, 0.0, repeat=True),
]


def make_model():
    return Model(SPECS, part_ids=["PartB", "PartA"])


def test_defaults_loaded():
    model = make_model()
    assert model.get_parameter_value_by_id("ParamEyeLOpen") == SPECS[1].default
    assert model.get_all_parameter_ids() == [s.id for s in SPECS]


def test_unknown_parameter_gets_virtual_index():
    model = make_model()
    idx = model.get_parameter_index("Missing")
    assert idx == len(SPECS)
    assert model.get_parameter_index("Missing") == idx
    assert model.get_parameter_index("Other") == idx + 1
    assert model.get_parameter_value(idx) == 0.0


def test_virtual_parameter_not_clamped():
    model = make_model()
    model.set_parameter_value_by_id("Missing", 500.0, 1.0)
    assert model.get_parameter_value_by_id("Missing") == 500.0
    assert model.is_repeat(model.get_parameter_index("Missing")) is False


def test_clamp_to_range():
    model = make_model()
    model.set_parameter_value_by_id("ParamAngleX", 100.0, 1.0)
    assert model.get_parameter_value_by_id("ParamAngleX") == SPECS[0].maximum
    model.set_parameter_value_by_id("ParamAngleX", -100.0, 1.0)
    assert model.get_parameter_value_by_id("ParamAngleX") == SPECS[0].minimum


def test_weighted_blend():
    model = make_model()
    model.set_parameter_value_by_id("ParamAngleX", 10.0, 0.5)
    assert model.get_parameter_value_by_id("ParamAngleX") == pytest.approx(5.0)


def test_repeat_wraps():
    model = make_model()
    idx = model.get_parameter_index("ParamRotate")
    assert model.is_repeat(idx)
    assert model.get_parameter_repeat_value(idx, 12.0) == pytest.approx(2.0)
    wrapped = model.get_parameter_repeat_value(idx, -3.0)
    assert SPECS[2].minimum <= wrapped <= SPECS[2].maximum


def test_repeat_zero_range_returns_bound():
    model = Model([ParameterSpec("P", 5.0, 5.0, 5.0, repeat=True)])
    assert model.get_parameter_repeat_value(0, 9.0) == 5.0
    assert model.get_parameter_repeat_value(0, 1.0) == 5.0


def test_is_repeat_out_of_range_raises():
    model = make_model()
    with pytest.raises(IndexError):
        model.is_repeat(len(SPECS) + 5)


def test_add_and_multiply():
    model = make_model()
    model.add_parameter_value_by_id("ParamAngleX", 3.0, 1.0)
    assert model.get_parameter_value_by_id("ParamAngleX") == pytest.approx(3.0)
    before = model.get_parameter_value_by_id("ParamAngleX")
    model.add_parameter_value_by_id("ParamAngleX", 7.0, 0.0)
    model.multiply_parameter_value_by_id("ParamAngleX", 4.0, 0.0)
    model.multiply_parameter_value_by_id("ParamAngleX", 1.0, 1.0)
    assert model.get_parameter_value_by_id("ParamAngleX") == before


def test_save_and_load_round_trip():
    model = make_model()
    model.set_parameter_value_by_id("ParamAngleX", 12.0, 1.0)
    model.save_parameters()
    model.set_parameter_value_by_id("ParamAngleX", -12.0, 1.0)
    model.load_parameters()
    assert model.get_parameter_value_by_id("ParamAngleX") == 12.0
    assert len(model.saved_params) == len(SPECS)


def test_load_without_save_keeps_values():
    model = make_model()
    model.set_parameter_value_by_id("ParamAngleX", 12.0, 1.0)
    model.load_parameters()
    assert model.get_parameter_value_by_id("ParamAngleX") == 12.0


def test_part_opacities():
    model = make_model()
    assert model.get_part_index("PartA") == 1
    assert model.get_part_opacity_by_id("PartA") == 1.0
    model.set_part_opacity_by_id("PartA", 0.25)
    assert model.get_part_opacity(1) == 0.25
    assert model.get_all_part_opacities() == [("PartA", 0.25), ("PartB", 1.0)]


def test_unknown_part_virtual():
    model = make_model()
    idx = model.get_part_index("Ghost")
    assert idx == model.part_count
    assert model.get_part_index("Ghost") == idx
    assert model.get_part_opacity(idx) == 0.0
    model.set_part_opacity(idx, 0.75)
    assert model.get_part_opacity_by_id("Ghost") == 0.75


def test_get_all_parameters_sorted():
    model = make_model()
    model.get_parameter_index("AAA")
    ids = [pid for pid, _ in model.get_all_parameters()]
    assert ids == sorted(s.id for s in SPECS)


def test_bad_spec_and_opacity_length():
    with pytest.raises(ValueError):
        ParameterSpec("P", 2.0, 1.0)
    with pytest.raises(ValueError):
        Model([], part_ids=["A"], part_opacities=[1.0, 0.5])