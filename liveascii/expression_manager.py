"""Plays expressions, blending several of them into shared parameter values."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .expression import ExpMotion, ExpValue
from .queue import MotionQueueManager

if TYPE_CHECKING:
    from .model import Model


class ExpressionManager:
    """Queue of expressions and the blended parameter values they produce."""

    def __init__(self) -> None:
        self.qm = MotionQueueManager()
        self.current_prior = 0
        self.reserve_prior = 0
        self.expression_parameters: list[ExpValue] = []
        self.fade_weights: list[float] = []

    def start_expression(self, motion: ExpMotion, auto_delete: bool) -> int:
        """Queue ``motion``; expressions already playing start fading out."""
        return self.qm.start_motion(motion, auto_delete)

    def update_motion(self, model: Model, delta_time: float) -> bool:
        """Advance time and apply the blended expressions; True if any was applied."""
        self.qm.user_time_seconds += delta_time
        user_time = self.qm.user_time_seconds
        motions = self.qm.motions

        if len(self.fade_weights) < len(motions):
            self.fade_weights.extend([0.0] * (len(motions) - len(self.fade_weights)))

        known = {value.id for value in self.expression_parameters}
        expression_weight = 0.0

        for index, entry in enumerate(motions):
            motion = entry.motion
            if not isinstance(motion, ExpMotion):
                raise TypeError("expression queue holds a motion that is not an expression")

            if entry.available:
                for param in motion.params:
                    if param.id not in known:
                        known.add(param.id)
                        self.expression_parameters.append(
                            ExpValue(
                                id=param.id,
                                ow_value=model.get_parameter_value_by_id(param.id),
                            )
                        )

            motion.setup_motion_queue_entry(entry, user_time)
            fade_weight = motion.update_fade_weight(entry, user_time)
            self.fade_weights[index] = fade_weight

            motion.cal_exp_params(
                model, user_time, entry, self.expression_parameters, index, fade_weight
            )

            fade_in = motion.fade_in_seconds
            if fade_in <= 0.0:
                expression_weight += 1.0
            else:
                t = (user_time - entry.fade_in_start_time_seconds) / fade_in
                t = min(max(t, 0.0), 1.0)
                expression_weight += 0.5 - 0.5 * math.cos(t * math.pi)

            if entry.is_triggered_fade_out:
                entry.start_fade_out(entry.fade_out_seconds, user_time)

        updated = bool(motions)

        if len(motions) > 1 and self.fade_weights[len(motions) - 1] >= 1.0:
            del motions[:-1]
            del self.fade_weights[:-1]

        final_weight = min(expression_weight, 1.0)
        for value in self.expression_parameters:
            target = (value.ow_value + value.add_value) * value.mul_value
            model.set_parameter_value_by_id(value.id, target, final_weight)
            value.add_value = 0.0
            value.mul_value = 1.0

        return updated

    def get_fade_weight(self, index: int) -> float:
        """Return the fade weight of the expression at ``index``."""
        if not 0 <= index < len(self.fade_weights):
            raise IndexError(f"no fade weight at index {index}")
        return self.fade_weights[index]

    def set_fade_weight(self, index: int, fade_weight: float) -> None:
        """Replace the fade weight of the expression at ``index``."""
        if not 0 <= index < len(self.fade_weights):
            raise IndexError(f"no fade weight at index {index}")
        self.fade_weights[index] = fade_weight