"""Data models for RingGuard."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

CATEGORY_CALL = "call"


class AlertVoice(str, Enum):
    RINGTONE = "ringtone"
    SIREN = "siren"
    BEEP = "beep"


@dataclass(frozen=True)
class TrustedContact:
    display_name: str
    phone_number: str


@dataclass
class NotificationEvent:
    source_identifier: str
    category: Optional[str] = None
    template_hint: Optional[str] = None
    title: str = ""
    body_text: str = ""
    expanded_text: str = ""
    sub_text: str = ""


@dataclass(frozen=True)
class ClassificationVerdict:
    is_incoming_call: bool
    matched_contact: Optional[TrustedContact] = None
    signals: Tuple[str, ...] = ()


@dataclass
class AlertSession:
    active_voice: Optional[AlertVoice] = None
    is_playing: bool = False
    vibration_active: bool = False
    strobe_active: bool = False
    auto_stop_deadline: Optional[float] = None  # time.monotonic() seconds
    is_preview: bool = False


@dataclass
class DeviceAudioSnapshot:
    ringer_mode: Optional[str] = None
    volumes: Dict[str, Tuple[int, int]] = field(default_factory=dict)
    interruption_filter: Optional[str] = None

    def describe(self) -> str:
        vols = ", ".join(
            f"{stream}={level}/{maximum}"
            for stream, (level, maximum) in sorted(self.volumes.items())
        )
        return (
            f"filter={self.interruption_filter} ringer={self.ringer_mode}"
            f" volumes[{vols}]"
        )


STEP_APPLIED = "applied"
STEP_RETRIED = "retried"
STEP_BEST_EFFORT = "best_effort"
STEP_SKIPPED = "skipped"
STEP_FAILED = "failed"


@dataclass
class StepOutcome:
    name: str
    status: str
    attempts: int = 0
    detail: str = ""

    @property
    def took_effect(self) -> bool:
        return self.status in (STEP_APPLIED, STEP_RETRIED)


@dataclass
class OverrideResult:
    steps: List[StepOutcome] = field(default_factory=list)
    before: Optional[DeviceAudioSnapshot] = None
    after: Optional[DeviceAudioSnapshot] = None

    @property
    def fully_applied(self) -> bool:
        return bool(self.steps) and all(step.took_effect for step in self.steps)

    def step(self, name: str) -> Optional[StepOutcome]:
        for outcome in self.steps:
            if outcome.name == name:
                return outcome
        return None
