"""Hotkey configuration read from a ``.live.json`` file."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any

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


def _as_str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string")
    return value


def _as_bool(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{what} must be a boolean")
    return value


def _as_float(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{what} must be a number")
    return float(value)


def _as_count(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{what} must be a non-negative integer")
    return value


class HotkeyAction(Enum):
    """Actions a hotkey can be bound to, by their names in the file."""

    SET_UNSET_EXPRESSION = "Set/UnSet Expression"
    OPEN_CLOSE_MOTION_PANEL = "Open/Close Motion Panel"
    OPEN_CLOSE_DEBUG_PANEL = "Open/Close Debug Panel"
    ENABLE_DISABLE_PHYSICS = "Enable/Disable Physics"
    OPEN_CLOSE_CAMERA = "Open/Close Camera"
    NEXT_SHADER = "Next Shader"
    PREV_SHADER = "Previous Shader"
    OPEN_CLOSE_RECEIVER = "Open/Close Receiver"


class ActionKind(Enum):
    """Kinds of queued actions."""

    SET_UNSET_EXPRESSION = auto()
    OPEN_CLOSE_MOTION_PANEL = auto()
    OPEN_CLOSE_DEBUG_PANEL = auto()
    ENABLE_DISABLE_PHYSICS = auto()
    OPEN_CLOSE_CAMERA = auto()
    NEXT_SHADER = auto()
    PREV_SHADER = auto()
    OPEN_CLOSE_RECEIVER = auto()


_KIND_OF_ACTION = {action: ActionKind[action.name] for action in HotkeyAction}


@dataclass(frozen=True)
class Action:
    """A pending action; ``file`` is set for expressions, ``port`` for the receiver."""

    kind: ActionKind
    show_log: bool
    file: str | None = None
    port: int | None = None


@dataclass
class HotkeyTriggers:
    """Up to three keys that must be held together; empty strings are unused."""

    trigger1: str
    trigger2: str
    trigger3: str


@dataclass
class Hotkey:
    """A key combination bound to an action."""

    action: HotkeyAction
    triggers: HotkeyTriggers
    file: str = ""
    fade_seconds: float = 0.5
    stop_after_seconds: float = -1.0
    stop_when_release_key: bool = False
    port: int | None = None
    show_log: bool = True

    def is_trigger(self, pressed_keys: Iterable[str]) -> bool:
        """Return True when every configured trigger key is pressed."""
        pressed = set(pressed_keys)
        required = [
            key
            for key in (
                self.triggers.trigger1,
                self.triggers.trigger2,
                self.triggers.trigger3,
            )
            if key
        ]
        return bool(required) and all(key in pressed for key in required)

    def apply(self, action_queue: list[Action]) -> None:
        """Queue this hotkey's action unless an equal one is already queued."""
        kind = _KIND_OF_ACTION[self.action]
        action = Action(
            kind=kind,
            show_log=self.show_log,
            file=self.file if kind is ActionKind.SET_UNSET_EXPRESSION else None,
            port=self.port if kind is ActionKind.OPEN_CLOSE_RECEIVER else None,
        )
        if action not in action_queue:
            action_queue.append(action)


def _parse_hotkey(data: Any) -> Hotkey:
    data = _as_dict(data, "hotkey")
    try:
        action = HotkeyAction(_as_str(_get(data, "Action"), "Action"))
    except ValueError as exc:
        raise ValueError(f"invalid hotkey action: {exc}") from exc
    triggers = _as_dict(_get(data, "Triggers"), "Triggers")
    port = data.get("Port")
    return Hotkey(
        action=action,
        triggers=HotkeyTriggers(
            *(_as_str(_get(triggers, k), k) for k in ("Trigger1", "Trigger2", "Trigger3"))
        ),
        file=_as_str(_get(data, "File", ""), "File"),
        fade_seconds=_as_float(_get(data, "FadeSeconds", 0.5), "FadeSeconds"),
        stop_after_seconds=_as_float(
            _get(data, "StopAfterSeconds", -1.0), "StopAfterSeconds"
        ),
        stop_when_release_key=_as_bool(
            _get(data, "StopWhenReleaseKey", False), "StopWhenReleaseKey"
        ),
        port=None if port is None else _as_count(port, "Port"),
        show_log=_as_bool(_get(data, "ShowLog", True), "ShowLog"),
    )


@dataclass
class Live:
    """Hotkey settings of a model."""

    version: int
    name: str
    hotkeys: list[Hotkey] = field(default_factory=list)

    @classmethod
    def from_path(cls, base_dir: str | Path, path: str | Path) -> Live:
        """Read ``path`` relative to ``base_dir``."""
        full_path = Path(base_dir) / path
        text = full_path.read_text(encoding="utf-8")
        try:
            return cls.from_data(text)
        except ValueError as exc:
            raise ValueError(f"failed to parse JSON ({full_path}): {exc}") from exc

    @classmethod
    def from_data(cls, data: str) -> Live:
        """Parse JSON text; raises ValueError on bad input."""
        decoded = _as_dict(json.loads(data), "live setting")
        hotkeys = _get(decoded, "Hotkeys", [])
        if not isinstance(hotkeys, list):
            raise ValueError("Hotkeys must be an array")
        return cls(
            version=_as_count(_get(decoded, "Version"), "Version"),
            name=_as_str(_get(decoded, "Name"), "Name"),
            hotkeys=[_parse_hotkey(h) for h in hotkeys],
        )

    def handle_hotkeys(
        self, key: str, modifiers: Iterable[str], action_queue: list[Action]
    ) -> None:
        """Queue the actions of every hotkey matched by ``key`` plus ``modifiers``."""
        pressed = set(modifiers)
        if key:
            pressed.add(key)
        for hotkey in self.hotkeys:
            if hotkey.is_trigger(pressed):
                hotkey.apply(action_queue)