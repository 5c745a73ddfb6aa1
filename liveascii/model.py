"""In-memory model state: parameters and part opacities addressed by id."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class ParameterSpec:
    """Static description of one model parameter."""

    id: str
    minimum: float
    maximum: float
    default: float = 0.0
    repeat: bool = False

    def __post_init__(self) -> None:
        if self.minimum > self.maximum:
            raise ValueError(
                f"parameter {self.id!r}: minimum {self.minimum} exceeds maximum {self.maximum}"
            )


class Model:
    """Parameter values and part opacities of a model.

    Ids unknown to the model get virtual indices past the real ones; their
    values are stored separately and never clamped.
    """

    def __init__(
        self,
        parameters: Iterable[ParameterSpec] = (),
        part_ids: Iterable[str] = (),
        drawable_ids: Iterable[str] = (),
        part_opacities: Iterable[float] | None = None,
    ) -> None:
        self._specs = list(parameters)
        self.param_ids = [spec.id for spec in self._specs]
        self.param_values = [float(spec.default) for spec in self._specs]
        self.param_id_to_index = {pid: i for i, pid in enumerate(self.param_ids)}

        self.part_ids = list(part_ids)
        if part_opacities is None:
            self.part_opacities = [1.0] * len(self.part_ids)
        else:
            self.part_opacities = [float(v) for v in part_opacities]
            if len(self.part_opacities) != len(self.part_ids):
                raise ValueError("part_opacities must have one value per part")

        self.drawable_ids = list(drawable_ids)
        self.model_opacity = 1.0

        self.not_exist_param_values: dict[int, float] = {}
        self.not_exist_part_opacities: dict[int, float] = {}
        self.not_exist_param_id: dict[str, int] = {}
        self.not_exist_part_id: dict[str, int] = {}
        self.saved_params: list[float] = []

    @property
    def param_count(self) -> int:
        return len(self._specs)

    @property
    def part_count(self) -> int:
        return len(self.part_ids)

    @property
    def drawable_count(self) -> int:
        return len(self.drawable_ids)

    def load_parameters(self) -> None:
        """Restore the values stored by :meth:`save_parameters`."""
        count = min(self.param_count, len(self.saved_params))
        self.param_values[:count] = self.saved_params[:count]

    def save_parameters(self) -> None:
        """Remember the current values of all real parameters."""
        count = self.param_count
        saved = self.saved_params
        saved[: min(count, len(saved))] = self.param_values[: len(saved)]
        saved.extend(self.param_values[len(saved) : count])

    def get_parameter_index(self, param_id: str) -> int:
        """Return the index of ``param_id``, allocating a virtual one if unknown."""
        index = self.param_id_to_index.get(param_id)
        if index is not None:
            return index
        index = self.not_exist_param_id.get(param_id)
        if index is not None:
            return index
        virtual_index = self.param_count + len(self.not_exist_param_id)
        self.not_exist_param_id[param_id] = virtual_index
        self.not_exist_param_values[virtual_index] = 0.0
        return virtual_index

    def get_parameter_value(self, index: int) -> float:
        if index >= self.param_count:
            return self.not_exist_param_values.get(index, 0.0)
        return self.param_values[index]

    def get_parameter_value_by_id(self, param_id: str) -> float:
        return self.get_parameter_value(self.get_parameter_index(param_id))

    def set_parameter_value(self, index: int, value: float, weight: float) -> None:
        """Blend ``value`` into a parameter; real parameters are wrapped or clamped."""
        if index >= self.param_count:
            current = self.not_exist_param_values.get(index, 0.0)
            new_value = value if weight == 1.0 else current * (1.0 - weight) + value * weight
            self.not_exist_param_values[index] = new_value
            return

        if self.is_repeat(index):
            value = self.get_parameter_repeat_value(index, value)
        else:
            spec = self._specs[index]
            value = min(max(value, spec.minimum), spec.maximum)

        current = self.param_values[index]
        self.param_values[index] = (
            value if weight == 1.0 else current * (1.0 - weight) + value * weight
        )

    def set_parameter_value_by_id(self, param_id: str, value: float, weight: float) -> None:
        self.set_parameter_value(self.get_parameter_index(param_id), value, weight)

    def add_parameter_value(self, index: int, value: float, weight: float) -> None:
        self.set_parameter_value(index, self.get_parameter_value(index) + value * weight, 1.0)

    def add_parameter_value_by_id(self, param_id: str, value: float, weight: float) -> None:
        self.add_parameter_value(self.get_parameter_index(param_id), value, weight)

    def multiply_parameter_value(self, index: int, value: float, weight: float) -> None:
        self.set_parameter_value(
            index, self.get_parameter_value(index) * (1.0 + (value - 1.0) * weight), 1.0
        )

    def multiply_parameter_value_by_id(self, param_id: str, value: float, weight: float) -> None:
        self.multiply_parameter_value(self.get_parameter_index(param_id), value, weight)

    def _check_real_index(self, index: int) -> None:
        if not 0 <= index < self.param_count:
            raise IndexError(f"parameter index {index} out of range")

    def is_repeat(self, index: int) -> bool:
        """Return True when the parameter wraps around instead of clamping."""
        if index in self.not_exist_param_values:
            return False
        self._check_real_index(index)
        return self._specs[index].repeat

    def get_parameter_repeat_value(self, index: int, value: float) -> float:
        """Wrap ``value`` into the parameter's range."""
        if index in self.not_exist_param_values:
            return value
        self._check_real_index(index)
        spec = self._specs[index]
        max_value, min_value = spec.maximum, spec.minimum
        size = max_value - min_value

        def _wrap(over: float) -> float:
            if size == 0 or math.isinf(over) or math.isnan(over) or math.isnan(size):
                return math.nan
            return math.fmod(over, size)

        if value > max_value:
            over = _wrap(value - max_value)
            value = max_value if math.isnan(over) else min_value + over
        if value < min_value:
            over = _wrap(min_value - value)
            value = min_value if math.isnan(over) else max_value - over
        return value

    def get_part_index(self, part_id: str) -> int:
        """Return the index of ``part_id``, allocating a virtual one if unknown."""
        try:
            return self.part_ids.index(part_id)
        except ValueError:
            pass
        next_index = self.part_count + len(self.not_exist_part_id)
        return self.not_exist_part_id.setdefault(part_id, next_index)

    def get_part_opacity(self, index: int) -> float:
        if index >= self.part_count:
            return self.not_exist_part_opacities.get(index, 0.0)
        return self.part_opacities[index]

    def get_part_opacity_by_id(self, part_id: str) -> float:
        return self.get_part_opacity(self.get_part_index(part_id))

    def set_part_opacity(self, index: int, opacity: float) -> None:
        if index >= self.part_count:
            self.not_exist_part_opacities[index] = opacity
        else:
            self.part_opacities[index] = opacity

    def set_part_opacity_by_id(self, part_id: str, opacity: float) -> None:
        self.set_part_opacity(self.get_part_index(part_id), opacity)

    def get_all_parameter_ids(self) -> list[str]:
        return list(self.param_ids)

    def get_all_parameters(self) -> list[tuple[str, float]]:
        """Return (id, value) for every real parameter, sorted by id."""
        return sorted(
            (pid, self.get_parameter_value(idx)) for pid, idx in self.param_id_to_index.items()
        )

    def get_all_part_opacities(self) -> list[tuple[str, float]]:
        """Return (id, opacity) for every real part, sorted by id."""
        return sorted(
            ((pid, self.get_part_opacity(i)) for i, pid in enumerate(self.part_ids)),
            key=lambda item: item[0],
        )