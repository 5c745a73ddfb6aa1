"""Queue of playing motions with their timing state."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .model import Model


class QueuedMotion(Protocol):
    """What the queue needs from a motion."""

    fade_out_seconds: float

    def update_parameters(
        self, model: Model, entry: MotionQueueEntry, user_time_seconds: float
    ) -> None: ...

    def get_fired_events(
        self, before_check_time_seconds: float, motion_time_seconds: float
    ) -> list[str]: ...


@dataclass
class MotionQueueEntry:
    """A motion in the queue together with its playback state."""

    motion: Any
    id: int
    auto_delete: bool = False
    available: bool = True
    finished: bool = False
    started: bool = False
    start_time_seconds: float = -1.0
    fade_in_start_time_seconds: float = 0.0
    end_time_seconds: float = -1.0
    state_time_seconds: float = 0.0
    state_weight: float = 0.0
    last_event_check_seconds: float = 0.0
    fade_out_seconds: float = 0.0
    is_triggered_fade_out: bool = False

    def set_fade_out(self, fade_out_seconds: float) -> None:
        """Request a fade-out of the given length on the next update."""
        self.fade_out_seconds = fade_out_seconds
        self.is_triggered_fade_out = True

    def start_fade_out(self, fade_out_seconds: float, user_time_seconds: float) -> None:
        """Bring the end time forward so the motion fades out from now."""
        new_end = user_time_seconds + fade_out_seconds
        self.is_triggered_fade_out = True
        if self.end_time_seconds < 0.0 or new_end < self.end_time_seconds:
            self.end_time_seconds = new_end

    def set_state(self, time_seconds: float, weight: float) -> None:
        self.state_time_seconds = time_seconds
        self.state_weight = weight


@dataclass
class MotionQueueManager:
    """Plays queued motions, fading out older ones when a new one starts."""

    user_time_seconds: float = 0.0
    motions: list[MotionQueueEntry] = field(default_factory=list)
    event_callback: Callable[[str], None] | None = None
    id_counter: int = 0

    def start_motion(self, motion: QueuedMotion, auto_delete: bool) -> int:
        """Queue ``motion`` and return its entry id; playing motions start fading out."""
        for entry in self.motions:
            entry.set_fade_out(entry.motion.fade_out_seconds)
        entry = MotionQueueEntry(motion=motion, id=self.id_counter, auto_delete=auto_delete)
        self.id_counter += 1
        self.motions.append(entry)
        return entry.id

    def do_update_motion(self, model: Model, user_time_seconds: float) -> bool:
        """Apply every queued motion; drop finished ones. True if any was applied."""
        updated = False
        remaining: list[MotionQueueEntry] = []
        for entry in self.motions:
            entry.motion.update_parameters(model, entry, user_time_seconds)
            updated = True

            before = entry.last_event_check_seconds - entry.start_time_seconds
            current = user_time_seconds - entry.start_time_seconds
            for event_name in entry.motion.get_fired_events(before, current):
                if self.event_callback is not None:
                    self.event_callback(event_name)

            entry.last_event_check_seconds = user_time_seconds

            if entry.finished:
                continue
            if entry.is_triggered_fade_out:
                entry.start_fade_out(entry.fade_out_seconds, user_time_seconds)
            remaining.append(entry)

        self.motions = remaining
        return updated

    def is_all_finished(self) -> bool:
        return all(entry.finished for entry in self.motions)

    def is_finished(self, entry_id: int) -> bool:
        """Return the entry's finished flag; unknown ids count as finished."""
        for entry in self.motions:
            if entry.id == entry_id:
                return entry.finished
        return True

    def stop_all_motions(self) -> None:
        self.motions.clear()