"""Expressions: fixed parameter offsets blended onto a model."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .amotion import MotionBase

if TYPE_CHECKING:
    from .model import Model
    from .queue import MotionQueueEntry

_DEFAULT_FADE_TIME = -1.0
_DEFAULT_ADDITIVE = 0.0
_DEFAULT_MULTIPLY = 1.0
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


def _as_float(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{what} must be a number")
    return float(value)


class ExpBlendType(Enum):
    """How an expression value is combined with the parameter."""

    ADD = "Add"
    MULTIPLY = "Multiply"
    OVERWRITE = "Overwrite"

    @classmethod
    def from_name(cls, name: str) -> ExpBlendType:
        """Return the blend type called ``name``; unknown names mean ADD."""
        try:
            return cls(name)
        except ValueError:
            return cls.ADD


@dataclass
class ExpParam:
    """One parameter entry of an expression."""

    id: str
    blend_type: ExpBlendType
    value: float


@dataclass
class ExpValue:
    """Accumulated add, multiply and overwrite values for one parameter."""

    id: str
    add_value: float = _DEFAULT_ADDITIVE
    mul_value: float = _DEFAULT_MULTIPLY
    ow_value: float = 0.0

    def reset(self, default_value: float) -> None:
        """Return to neutral values, overwriting with ``default_value``."""
        self.add_value = _DEFAULT_ADDITIVE
        self.mul_value = _DEFAULT_MULTIPLY
        self.ow_value = default_value


def _parse_param(data: Any) -> ExpParam:
    data = _as_dict(data, "expression parameter")
    return ExpParam(
        id=_as_str(_get(data, "Id"), "Id"),
        blend_type=ExpBlendType.from_name(_as_str(_get(data, "Blend", "Add"), "Blend")),
        value=_as_float(_get(data, "Value"), "Value"),
    )


class ExpMotion(MotionBase):
    """A non-looping motion that applies an expression's parameters."""

    def __init__(
        self,
        params: list[ExpParam],
        *,
        fade_in_seconds: float = _DEFAULT_FADE_TIME,
        fade_out_seconds: float = _DEFAULT_FADE_TIME,
    ) -> None:
        super().__init__(
            fade_in_seconds=fade_in_seconds,
            fade_out_seconds=fade_out_seconds,
            is_loop=False,
        )
        self.params = list(params)
        self.fade_weight = 0.0

    @classmethod
    def from_path(cls, base_dir: str | Path, path: str | Path) -> ExpMotion:
        """Read an ``.exp3.json`` file relative to ``base_dir``."""
        full_path = Path(base_dir) / path
        text = full_path.read_text(encoding="utf-8")
        try:
            return cls.from_dict(json.loads(text))
        except (json.JSONDecodeError, ValueError) as exc:
            raise ValueError(f"Failed to parse JSON ({full_path}): {exc}") from exc

    @classmethod
    def from_dict(cls, data: Any) -> ExpMotion:
        """Build an expression from decoded JSON; raises ValueError on bad input."""
        data = _as_dict(data, "expression")
        _as_str(_get(data, "Type"), "Type")
        fade_in = _as_float(_get(data, "FadeInTime", _DEFAULT_FADE_TIME), "FadeInTime")
        fade_out = _as_float(_get(data, "FadeOutTime", _DEFAULT_FADE_TIME), "FadeOutTime")
        params = [_parse_param(p) for p in _as_list(_get(data, "Parameters"), "Parameters")]
        return cls(params, fade_in_seconds=fade_in, fade_out_seconds=fade_out)

    def do_update_parameters(
        self,
        model: Model,
        user_time_seconds: float,
        fade_weight: float,
        entry: MotionQueueEntry,
    ) -> None:
        """Apply every parameter directly to ``model`` with ``fade_weight``."""
        for param in self.params:
            if param.blend_type is ExpBlendType.ADD:
                model.add_parameter_value_by_id(param.id, param.value, fade_weight)
            elif param.blend_type is ExpBlendType.MULTIPLY:
                model.multiply_parameter_value_by_id(param.id, param.value, fade_weight)
            else:
                model.set_parameter_value_by_id(param.id, param.value, fade_weight)

    def cal_exp_params(
        self,
        model: Model,
        user_time_seconds: float,
        entry: MotionQueueEntry,
        expression_values: list[ExpValue],
        expression_index: int,
        fade_weight: float,
    ) -> None:
        """Blend this expression into the accumulated ``expression_values``.

        The first expression in the queue starts from neutral values; later
        ones blend from what the earlier ones left behind.
        """
        if not entry.available:
            return

        self.fade_weight = self.update_fade_weight(entry, user_time_seconds)

        configs: dict[str, ExpParam] = {}
        for param in self.params:
            configs.setdefault(param.id, param)

        for value in expression_values:
            current = model.get_parameter_value_by_id(value.id)
            config = configs.get(value.id)

            if config is None:
                if expression_index == 0:
                    value.reset(current)
                    continue
                targets = (_DEFAULT_ADDITIVE, _DEFAULT_MULTIPLY, current)
            elif config.blend_type is ExpBlendType.ADD:
                targets = (config.value, _DEFAULT_MULTIPLY, current)
            elif config.blend_type is ExpBlendType.MULTIPLY:
                targets = (_DEFAULT_ADDITIVE, config.value, current)
            else:
                targets = (_DEFAULT_ADDITIVE, _DEFAULT_MULTIPLY, config.value)

            if config is not None and expression_index == 0:
                sources = (_DEFAULT_ADDITIVE, _DEFAULT_MULTIPLY, current)
            else:
                sources = (value.add_value, value.mul_value, value.ow_value)

            value.add_value = self.cal_value(sources[0], targets[0], fade_weight)
            value.mul_value = self.cal_value(sources[1], targets[1], fade_weight)
            value.ow_value = self.cal_value(sources[2], targets[2], fade_weight)

    def cal_value(self, source: float, dest: float, fade_weight: float) -> float:
        """Interpolate from ``source`` to ``dest`` by ``fade_weight``."""
        return source * (1.0 - fade_weight) + dest * fade_weight