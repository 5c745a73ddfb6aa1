"""Motion playback with priorities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .queue import MotionQueueManager

if TYPE_CHECKING:
    from .amotion import MotionBase
    from .model import Model


class MotionManager:
    """Plays motions, tracking the priority of the current and reserved ones."""

    def __init__(self) -> None:
        self.qm = MotionQueueManager()
        self.current_prior = 0
        self.reserve_prior = 0

    def start_motion_priority(
        self, motion: MotionBase, auto_delete: bool, priority: int
    ) -> int:
        """Start ``motion`` at ``priority`` and return its queue entry id."""
        if priority == self.reserve_prior:
            self.reserve_prior = 0
        self.current_prior = priority
        return self.qm.start_motion(motion, auto_delete)

    def update_motion(self, model: Model, delta_time_seconds: float) -> bool:
        """Advance time and apply the queued motions; True if any was applied."""
        self.qm.user_time_seconds += delta_time_seconds
        updated = self.qm.do_update_motion(model, self.qm.user_time_seconds)
        if self.qm.is_all_finished():
            self.current_prior = 0
        return updated

    def reserve_motion(self, priority: int) -> bool:
        """Reserve ``priority`` if it beats both the current and reserved ones."""
        if priority <= self.reserve_prior or priority <= self.current_prior:
            return False
        self.reserve_prior = priority
        return True