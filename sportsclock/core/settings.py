"""User settings for the countdown, sounds and workout defaults."""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

from sportsclock.core.sound import SILENT, SoundPolicy


class SettingsError(ValueError):
    """Raised when a settings file cannot be read."""


def _default_settings_path() -> Path:
    return Path.home() / ".sportsclock" / "settings.json"


@dataclass(frozen=True)
class TimerSettings:
    countdown_duration: int = 40
    countdown_rest_duration: int = 3
    all_sounds_enabled: bool = True
    stealth_mode_enabled: bool = False
    play_sound_at_halfway: bool = True
    play_sound_at_end: bool = True
    play_sound_on_restart: bool = True
    volume: float = 0.5
    is_muted: bool = False
    default_exercise_duration: int = 40
    default_rest_duration: int = 20
    pre_workout_countdown_duration: int = 10
    is_warmup_enabled: bool = False
    rest_after_warmup_duration: int = 15

    def sound_policy(self) -> SoundPolicy:
        if not self.all_sounds_enabled or self.stealth_mode_enabled:
            return SILENT
        return SoundPolicy(
            play_halfway=self.play_sound_at_halfway,
            play_on_end=self.play_sound_at_end,
            play_on_restart=self.play_sound_on_restart,
            muted=self.is_muted,
            volume=self.volume,
        )


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def settings_from_dict(data: dict[str, Any]) -> TimerSettings:
    defaults = TimerSettings()
    known = {f.name: f for f in fields(TimerSettings)}
    values: dict[str, Any] = {}
    for raw_key, raw_value in data.items():
        key = _snake_case(str(raw_key))
        if key not in known:
            continue
        default = getattr(defaults, key)
        try:
            if isinstance(default, bool):
                if not isinstance(raw_value, bool):
                    raise TypeError(key)
                values[key] = raw_value
            elif isinstance(default, int):
                values[key] = int(raw_value)
            else:
                values[key] = float(raw_value)
        except (TypeError, ValueError) as exc:
            raise SettingsError(f"Invalid value for setting '{key}': {raw_value!r}") from exc
    return replace(defaults, **values)


def load_settings(path: Path | None = None) -> TimerSettings:
    target = path or _default_settings_path()
    if not target.exists():
        return TimerSettings()
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError("Settings JSON must be an object")
    return settings_from_dict(data)


def save_settings(settings: TimerSettings, path: Path | None = None) -> Path:
    target = path or _default_settings_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(asdict(settings), ensure_ascii=True, indent=2), encoding="utf-8")
    return target
