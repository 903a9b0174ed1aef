from __future__ import annotations

from pathlib import Path

import pytest

from sportsclock.core.settings import (
    SettingsError,
    TimerSettings,
    load_settings,
    save_settings,
)
from sportsclock.core.sound import SILENT


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "nope.json")

    assert settings == TimerSettings()
    assert settings.countdown_duration == 40
    assert settings.countdown_rest_duration == 3


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    save_settings(TimerSettings(countdown_duration=30, volume=0.8), path=target)

    loaded = load_settings(target)

    assert loaded.countdown_duration == 30
    assert loaded.volume == 0.8


def test_exported_camel_case_keys_and_unknown_keys(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    target.write_text(
        '{"countdownDuration": 45, "playSoundAtHalfway": false, "backgroundColor": "#000"}',
        encoding="utf-8",
    )

    loaded = load_settings(target)

    assert loaded.countdown_duration == 45
    assert loaded.play_sound_at_halfway is False


def test_invalid_value_raises(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    target.write_text('{"isMuted": "sometimes"}', encoding="utf-8")

    with pytest.raises(SettingsError):
        load_settings(target)


def test_sound_policy_snapshot() -> None:
    policy = TimerSettings(play_sound_on_restart=False, volume=0.3).sound_policy()

    assert policy.allows("halfway")
    assert not policy.allows("restart")
    assert policy.volume == 0.3
    assert TimerSettings(stealth_mode_enabled=True).sound_policy() == SILENT
    assert not TimerSettings(is_muted=True).sound_policy().allows("end")
