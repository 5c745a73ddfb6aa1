"""Pose groups: only one part of each group is shown, with cross-fading."""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .model import Model

DEFAULT_FADE_IN_SECONDS = 0.5
EPSILON = 0.001
PHI = 0.5
BACK_OPACITY_THRESHOLD = 0.15


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


@dataclass
class PartData:
    """A part of a pose group together with the parts linked to it."""

    part_id: str
    param_index: int = 0
    part_index: int = 0
    link: list[PartData] = field(default_factory=list)

    def initialize(self, model: Model) -> None:
        """Resolve indices against ``model`` and mark the part's parameter visible."""
        self.param_index = model.get_parameter_index(self.part_id)
        self.part_index = model.get_part_index(self.part_id)
        model.set_parameter_value(self.param_index, 1.0, 1.0)
        for linked in self.link:
            linked.part_index = model.get_part_index(linked.part_id)
            linked.param_index = model.get_parameter_index(linked.part_id)
            model.set_parameter_value(self.param_index, 1.0, 1.0)


def _parse_item(data: Any) -> PartData:
    data = _as_dict(data, "pose part")
    if "Id" not in data:
        raise ValueError("missing field 'Id'")
    links = _as_list(data.get("Link", []), "Link")
    return PartData(
        part_id=_as_str(data["Id"], "Id"),
        link=[PartData(part_id=_as_str(link_id, "Link item")) for link_id in links],
    )


@dataclass
class Pose:
    """Pose groups stored flat, with the size of each group."""

    part_groups: list[PartData] = field(default_factory=list)
    part_group_counts: list[int] = field(default_factory=list)
    fade_time_seconds: float = DEFAULT_FADE_IN_SECONDS

    @classmethod
    def from_path(cls, base_dir: str | Path, path: str | Path) -> Pose:
        """Read a ``.pose3.json`` file relative to ``base_dir``."""
        full_path = Path(base_dir) / path
        text = full_path.read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"failed to parse JSON ({full_path}): {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> Pose:
        """Build a pose from decoded JSON; raises ValueError on bad input."""
        data = _as_dict(data, "pose")
        fade = data.get("FadeInTime")
        if fade is not None and (isinstance(fade, bool) or not isinstance(fade, (int, float))):
            raise ValueError("FadeInTime must be a number")
        part_groups: list[PartData] = []
        counts: list[int] = []
        for group in _as_list(data.get("Groups", []), "Groups"):
            items = [_parse_item(item) for item in _as_list(group, "group")]
            part_groups.extend(items)
            counts.append(len(items))
        return cls(
            part_groups=part_groups,
            part_group_counts=counts,
            fade_time_seconds=float(fade)
            if fade is not None and fade >= 0.0
            else DEFAULT_FADE_IN_SECONDS,
        )

    def _group_ranges(self) -> Iterator[range]:
        begin = 0
        for count in self.part_group_counts:
            yield range(begin, begin + count)
            begin += count

    def reset(self, model: Model) -> None:
        """Show the first part of every group and hide the rest."""
        for indices in self._group_ranges():
            for j in indices:
                data = self.part_groups[j]
                data.initialize(model)
                value = 1.0 if j == indices.start else 0.0
                model.set_part_opacity(data.part_index, value)
                model.set_parameter_value(data.param_index, value, 1.0)

    def update_parameters(self, model: Model, delta_time_seconds: float) -> None:
        """Advance the cross-fade of every group by ``delta_time_seconds``."""
        dt = max(delta_time_seconds, 0.0)
        for indices in self._group_ranges():
            self._do_fade(model, dt, indices)
        self.copy_part_opacities(model)

    def _do_fade(self, model: Model, delta_time_seconds: float, indices: range) -> None:
        visible_index = -1
        new_opacity = 1.0

        for i in indices:
            data = self.part_groups[i]
            if model.get_parameter_value(data.param_index) > EPSILON:
                if visible_index >= 0:
                    break
                visible_index = i
                if self.fade_time_seconds <= 0.0:
                    new_opacity = 1.0
                else:
                    new_opacity = min(
                        model.get_part_opacity(data.part_index)
                        + delta_time_seconds / self.fade_time_seconds,
                        1.0,
                    )

        if visible_index < 0:
            visible_index = 0
            new_opacity = 1.0

        for i in indices:
            part_index = self.part_groups[i].part_index
            if i == visible_index:
                model.set_part_opacity(part_index, new_opacity)
                continue
            current = model.get_part_opacity(part_index)
            if new_opacity < PHI:
                a1 = new_opacity * (PHI - 1.0) / PHI + 1.0
            else:
                a1 = (1.0 - new_opacity) * PHI / (1.0 - PHI)
            back_opacity = (1.0 - a1) * (1.0 - new_opacity)
            if back_opacity > BACK_OPACITY_THRESHOLD:
                a1 = 1.0 - BACK_OPACITY_THRESHOLD / (1.0 - new_opacity)
            if current > a1:
                model.set_part_opacity(part_index, a1)

    def copy_part_opacities(self, model: Model) -> None:
        """Give linked parts the opacity of the part they are linked to."""
        for data in self.part_groups:
            if not data.link:
                continue
            opacity = model.get_part_opacity(data.part_index)
            for linked in data.link:
                model.set_part_opacity(linked.part_index, opacity)