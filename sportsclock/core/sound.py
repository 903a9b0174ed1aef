"""Sound cues reported by the timer; playback belongs to the front end."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal


SoundCue = Literal["halfway", "end", "restart", "tick"]
Waveform = Literal["sine", "triangle"]


@dataclass(frozen=True)
class SoundPolicy:
    play_halfway: bool = True
    play_on_end: bool = True
    play_on_restart: bool = True
    play_ticks: bool = True
    muted: bool = False
    volume: float = 0.5

    @property
    def audible(self) -> bool:
        return not self.muted and self.volume > 0

    def allows(self, cue: SoundCue) -> bool:
        if not self.audible:
            return False
        if cue == "halfway":
            return self.play_halfway
        if cue == "end":
            return self.play_on_end
        if cue == "restart":
            return self.play_on_restart
        return self.play_ticks


SILENT = SoundPolicy(muted=True)


@dataclass(frozen=True)
class SoundRequest:
    cue: SoundCue
    volume: float


SoundCallback = Callable[[SoundRequest], None]


@dataclass(frozen=True)
class Tone:
    frequency_hz: float
    duration_ms: int
    waveform: Waveform = "sine"
    delay_ms: int = 0


# end is a two-tone chime: C5 then G4
TONES: dict[SoundCue, tuple[Tone, ...]] = {
    "restart": (Tone(659.25, 100),),
    "halfway": (Tone(880.0, 100, "triangle"),),
    "tick": (Tone(1200.0, 80),),
    "end": (Tone(523.25, 150), Tone(392.0, 150, delay_ms=160)),
}


def clamp_volume(volume: float) -> float:
    return max(0.0, min(1.0, volume))
