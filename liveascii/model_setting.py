"""Model settings as read from a ``.model3.json`` file."""

from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

_DEFAULT_FADE_TIME = -1.0
_MISSING = object()


def _get(data: dict, key: str, default: Any = _MISSING) -> Any:
    if key in data:
        return data[key]
    if default is _MISSING:
        raise ValueError(f"missing field {key!r}")
    return default


def _as_dict(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be an object")
    return value


def _as_list(value: Any, what: str) -> list:
    if not isinstance(value, list):
        raise ValueError(f"{what} must be an array")
    return value


def _as_str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string")
    return value


def _as_opt_str(value: Any, what: str) -> str | None:
    return None if value is None else _as_str(value, what)


def _as_float(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{what} must be a number")
    return float(value)


def _as_count(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{what} must be a non-negative integer")
    return value


def _at(items: list, index: int) -> Any:
    return items[index] if 0 <= index < len(items) else None


class Target(Enum):
    """What the ids of a group refer to."""

    PARAMETER = "Parameter"
    PART = "Part"


@dataclass
class Group:
    """A named list of ids, such as the eye-blink parameters."""

    name: str
    ids: list[str]
    target: Target


@dataclass
class ExpressionRef:
    """An expression name and the file that defines it."""

    name: str
    file: str


@dataclass
class MotionRef:
    """A motion file with its optional sound and fade times."""

    file: str
    sound: str | None = None
    fade_in_time: float = _DEFAULT_FADE_TIME
    fade_out_time: float = _DEFAULT_FADE_TIME


@dataclass
class HitArea:
    """A named hit area bound to a drawable id."""

    name: str
    id: str


@dataclass
class Layout:
    """Placement of the model on its canvas."""

    center_x: float
    center_y: float
    x: float
    y: float
    width: float
    height: float


@dataclass
class FileRef:
    """Files that make up a model, relative to the settings file."""

    moc: str | None = None
    textures: list[str] = field(default_factory=list)
    physics: str | None = None
    display_info: str | None = None
    pose: str | None = None
    expressions: list[ExpressionRef] = field(default_factory=list)
    motions: dict[str, list[MotionRef]] = field(default_factory=dict)


def _parse_group(data: Any) -> Group:
    data = _as_dict(data, "group")
    try:
        target = Target(_as_str(_get(data, "Target"), "Target"))
    except ValueError as exc:
        raise ValueError(f"invalid group target: {exc}") from exc
    return Group(
        name=_as_str(_get(data, "Name"), "Name"),
        ids=[_as_str(i, "Ids item") for i in _as_list(_get(data, "Ids"), "Ids")],
        target=target,
    )


def _parse_motion(data: Any) -> MotionRef:
    data = _as_dict(data, "motion")
    return MotionRef(
        file=_as_str(_get(data, "File"), "File"),
        sound=_as_opt_str(data.get("Sound"), "Sound"),
        fade_in_time=_as_float(_get(data, "FadeInTime", _DEFAULT_FADE_TIME), "FadeInTime"),
        fade_out_time=_as_float(
            _get(data, "FadeOutTime", _DEFAULT_FADE_TIME), "FadeOutTime"
        ),
    )


def _parse_file_refs(data: Any) -> FileRef:
    data = _as_dict(data, "FileReferences")
    expressions = [
        ExpressionRef(
            name=_as_str(_get(_as_dict(e, "expression"), "Name"), "Name"),
            file=_as_str(_get(e, "File"), "File"),
        )
        for e in _as_list(_get(data, "Expressions", []), "Expressions")
    ]
    motions = {
        _as_str(name, "motion group"): [
            _parse_motion(m) for m in _as_list(entries, "motion group")
        ]
        for name, entries in _as_dict(_get(data, "Motions", {}), "Motions").items()
    }
    return FileRef(
        moc=_as_opt_str(data.get("Moc"), "Moc"),
        textures=[
            _as_str(t, "texture") for t in _as_list(_get(data, "Textures", []), "Textures")
        ],
        physics=_as_opt_str(data.get("Physics"), "Physics"),
        display_info=_as_opt_str(data.get("DisplayInfo"), "DisplayInfo"),
        pose=_as_opt_str(data.get("Pose"), "Pose"),
        expressions=expressions,
        motions=motions,
    )


def _parse_layout(data: Any) -> Layout | None:
    if data is None:
        return None
    data = _as_dict(data, "Layout")
    keys = ("CenterX", "CenterY", "X", "Y", "Width", "Height")
    return Layout(*(_as_float(_get(data, key), key) for key in keys))


@dataclass
class ModelSetting:
    """The contents of a ``.model3.json`` file."""

    version: int
    file_references: FileRef = field(default_factory=FileRef)
    groups: list[Group] = field(default_factory=list)
    hit_areas: list[HitArea] = field(default_factory=list)
    layout: Layout | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> ModelSetting:
        """Read and parse a settings file."""
        text = Path(path).read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"failed to parse JSON ({path}): {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> ModelSetting:
        """Build settings from decoded JSON; raises ValueError on bad input."""
        data = _as_dict(data, "model setting")
        hit_areas = [
            HitArea(
                name=_as_str(_get(_as_dict(h, "hit area"), "Name"), "Name"),
                id=_as_str(_get(h, "Id"), "Id"),
            )
            for h in _as_list(_get(data, "HitAreas", []), "HitAreas")
        ]
        return cls(
            version=_as_count(_get(data, "Version"), "Version"),
            file_references=_parse_file_refs(_get(data, "FileReferences", {})),
            groups=[_parse_group(g) for g in _as_list(_get(data, "Groups", []), "Groups")],
            hit_areas=hit_areas,
            layout=_parse_layout(data.get("Layout")),
        )

    def _find_group(self, name: str) -> Group | None:
        return next((g for g in self.groups if g.name == name), None)

    def _get_motion(self, group_name: str, index: int) -> MotionRef | None:
        return _at(self.file_references.motions.get(group_name, []), index)

    def is_exist_motion_group_name(self, group_name: str) -> bool:
        return group_name in self.file_references.motions

    def is_exist_motion_sound_file(self, group_name: str, index: int) -> bool:
        motion = self._get_motion(group_name, index)
        return motion is not None and motion.sound is not None

    def is_exist_eye_blink_parameters(self) -> bool:
        return self._find_group("EyeBlink") is not None

    def is_exist_lip_sync_parameters(self) -> bool:
        return self._find_group("LipSync") is not None

    def get_texture_directory(self) -> str | None:
        """Return the directory of the first texture, or None without textures."""
        textures = self.file_references.textures
        if not textures or textures[0] in ("", "/"):
            return None
        return posixpath.dirname(textures[0])

    def get_hit_area_id(self, index: int) -> str | None:
        area = _at(self.hit_areas, index)
        return area.id if area else None

    def get_hit_area_name(self, index: int) -> str | None:
        area = _at(self.hit_areas, index)
        return area.name if area else None

    def get_expression_name(self, index: int) -> str | None:
        exp = _at(self.file_references.expressions, index)
        return exp.name if exp else None

    def get_expression_file_name(self, index: int) -> str | None:
        exp = _at(self.file_references.expressions, index)
        return exp.file if exp else None

    def get_motion_group_names(self) -> list[str]:
        return list(self.file_references.motions)

    def get_motion_count(self, group_name: str) -> int:
        return len(self.file_references.motions.get(group_name, []))

    def get_motion_file_name(self, group_name: str, index: int) -> str | None:
        motion = self._get_motion(group_name, index)
        return motion.file if motion else None

    def get_motion_sound_file_name(self, group_name: str, index: int) -> str | None:
        motion = self._get_motion(group_name, index)
        return motion.sound if motion else None

    def get_motion_fade_in_time_value(self, group_name: str, index: int) -> float:
        motion = self._get_motion(group_name, index)
        return motion.fade_in_time if motion else -1.0

    def get_motion_fade_out_time_value(self, group_name: str, index: int) -> float:
        motion = self._get_motion(group_name, index)
        return motion.fade_out_time if motion else -1.0

    def get_all_motion_names(self) -> list[str]:
        """Return every motion file of every group, sorted."""
        return sorted(
            motion.file
            for group in self.file_references.motions.values()
            for motion in group
        )

    def get_eye_blink_parameter_ids(self) -> list[str]:
        group = self._find_group("EyeBlink")
        return list(group.ids) if group else []

    def get_lip_sync_parameter_ids(self) -> list[str]:
        group = self._find_group("LipSync")
        return list(group.ids) if group else []