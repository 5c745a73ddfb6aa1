import json

import pytest

from liveascii.model_setting import (
    ExpressionRef,
    FileRef,
    Group,
    HitArea,
    Layout,
    ModelSetting,
    MotionRef,
    Target,
)

MODEL3 = {
    "Version": 3,
    "FileReferences": {
        "Moc": "model.moc3",
        "Textures": ["texture_00.png"],
        "Physics": "model.physics3.json",
        "Pose": "model.pose3.json",
        "Expressions": [
            {"Name": "smile", "File": "exp_smile.json"},
            {"Name": "angry", "File": "exp_angry.json"},
        ],
        "Motions": {
            "Idle": [
                {"File": "idle.motion3.json", "FadeInTime": 1.0, "FadeOutTime": 1.0}
            ],
            "TapBody": [{"File": "tap_body.motion3.json"}],
        },
    },
    "Groups": [
        {
            "Target": "Parameter",
            "Name": "EyeBlink",
            "Ids": ["ParamEyeLOpen", "ParamEyeROpen"],
        },
        {"Target": "Parameter", "Name": "LipSync", "Ids": ["ParamMouthOpenY"]},
    ],
    "HitAreas": [
        {"Id": "HitAreaHead", "Name": "head"},
        {"Id": "HitAreaBody", "Name": "body"},
    ],
}


@pytest.fixture
def model3_path(tmp_path):
    path = tmp_path / "test.model3.json"
    path.write_text(json.dumps(MODEL3), encoding="utf-8")
    return path


@pytest.fixture
def setting():
    return ModelSetting.from_dict(MODEL3)


def test_parse_model3_json(model3_path):
    model3 = ModelSetting.from_path(str(model3_path))
    expected = ModelSetting(
        version=3,
        file_references=FileRef(
            moc="model.moc3",
            textures=["texture_00.png"],
            physics="model.physics3.json",
            display_info=None,
            pose="model.pose3.json",
            expressions=[
                ExpressionRef(name="smile", file="exp_smile.json"),
                ExpressionRef(name="angry", file="exp_angry.json"),
            ],
            motions={
                "Idle": [
                    MotionRef(
                        file="idle.motion3.json",
                        sound=None,
                        fade_in_time=1.0,
                        fade_out_time=1.0,
                    )
                ],
                "TapBody": [
                    MotionRef(
                        file="tap_body.motion3.json",
                        sound=None,
                        fade_in_time=-1.0,
                        fade_out_time=-1.0,
                    )
                ],
            },
        ),
        groups=[
            Group(
                target=Target.PARAMETER,
                name="EyeBlink",
                ids=["ParamEyeLOpen", "ParamEyeROpen"],
            ),
            Group(target=Target.PARAMETER, name="LipSync", ids=["ParamMouthOpenY"]),
        ],
        hit_areas=[
            HitArea(id="HitAreaHead", name="head"),
            HitArea(id="HitAreaBody", name="body"),
        ],
        layout=None,
    )
    assert model3 == expected


def test_motion_lookups(setting):
    assert setting.is_exist_motion_group_name("Idle")
    assert not setting.is_exist_motion_group_name("Missing")
    assert setting.get_motion_count("Idle") == 1
    assert setting.get_motion_count("Missing") == 0
    assert setting.get_motion_file_name("TapBody", 0) == "tap_body.motion3.json"
    assert setting.get_motion_file_name("TapBody", 1) is None
    assert setting.get_motion_fade_in_time_value("Idle", 0) == 1.0
    assert setting.get_motion_fade_out_time_value("TapBody", 0) == -1.0
    assert setting.get_motion_fade_in_time_value("Missing", 0) == -1.0
    assert sorted(setting.get_motion_group_names()) == ["Idle", "TapBody"]


def test_all_motion_names_sorted(setting):
    assert setting.get_all_motion_names() == [
        "idle.motion3.json",
        "tap_body.motion3.json",
    ]


def test_sound_files():
    data = {
        "Version": 3,
        "FileReferences": {
            "Motions": {"Idle": [{"File": "a.motion3.json", "Sound": "a.wav"}]}
        },
    }
    setting = ModelSetting.from_dict(data)
    assert setting.is_exist_motion_sound_file("Idle", 0)
    assert setting.get_motion_sound_file_name("Idle", 0) == "a.wav"
    assert not setting.is_exist_motion_sound_file("Idle", 1)
    assert setting.get_motion_sound_file_name("Other", 0) is None


def test_groups(setting):
    assert setting.is_exist_eye_blink_parameters()
    assert setting.is_exist_lip_sync_parameters()
    assert setting.get_eye_blink_parameter_ids() == ["ParamEyeLOpen", "ParamEyeROpen"]
    assert setting.get_lip_sync_parameter_ids() == ["ParamMouthOpenY"]


def test_missing_groups_give_empty_ids():
    setting = ModelSetting.from_dict({"Version": 3})
    assert not setting.is_exist_eye_blink_parameters()
    assert setting.get_eye_blink_parameter_ids() == []
    assert setting.file_references == FileRef()


def test_hit_areas_and_expressions(setting):
    assert setting.get_hit_area_id(1) == "HitAreaBody"
    assert setting.get_hit_area_name(0) == "head"
    assert setting.get_hit_area_id(2) is None
    assert setting.get_hit_area_name(-1) is None
    assert setting.get_expression_name(1) == "angry"
    assert setting.get_expression_file_name(0) == "exp_smile.json"
    assert setting.get_expression_file_name(5) is None


def test_texture_directory(setting):
    assert setting.get_texture_directory() == ""
    nested = ModelSetting.from_dict(
        {"Version": 3, "FileReferences": {"Textures": ["textures/texture_00.png"]}}
    )
    assert nested.get_texture_directory() == "textures"
    assert ModelSetting.from_dict({"Version": 3}).get_texture_directory() is None


def test_layout_parsed():
    setting = ModelSetting.from_dict(
        {
            "Version": 3,
            "Layout": {
                "CenterX": 0.5,
                "CenterY": 0.25,
                "X": 1.0,
                "Y": 2.0,
                "Width": 3.0,
                "Height": 4.0,
            },
        }
    )
    assert setting.layout == Layout(0.5, 0.25, 1.0, 2.0, 3.0, 4.0)


def test_missing_version_is_rejected():
    with pytest.raises(ValueError):
        ModelSetting.from_dict({"FileReferences": {}})


def test_unknown_group_target_is_rejected():
    data = {"Version": 3, "Groups": [{"Target": "Bone", "Name": "X", "Ids": []}]}
    with pytest.raises(ValueError):
        ModelSetting.from_dict(data)


def test_invalid_json_file_is_rejected(tmp_path):
    path = tmp_path / "broken.model3.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        ModelSetting.from_path(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ModelSetting.from_path(tmp_path / "absent.model3.json")