"""Force the device out of silent / Do-Not-Disturb before alerting."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .device import (
    ALL_STREAMS,
    FILTER_ALL,
    RINGER_NORMAL,
    STREAM_ALARM,
    STREAM_NOTIFICATION,
    STREAM_RING,
    STREAM_VOICE_CALL,
    AudioService,
    InterruptionPolicyService,
)
from .errors import PermissionDenied, ResourceUnavailable, VerificationMismatch
from .models import (
    STEP_APPLIED,
    STEP_BEST_EFFORT,
    STEP_FAILED,
    STEP_RETRIED,
    STEP_SKIPPED,
    DeviceAudioSnapshot,
    OverrideResult,
    StepOutcome,
)

logger = logging.getLogger("ringguard")

STEP_INTERRUPTION_FILTER = "interruption_filter"
STEP_RINGER_MODE = "ringer_mode"


def _volume_step(stream: str) -> str:
    return f"{stream}_volume"


class DeviceStateOverride:
    """Best-effort "make this device audible" procedure.

    Each step writes, reads back, and writes once more if the read-back
    disagrees. A failing step is recorded and the remaining steps still run.
    Safe to call repeatedly.
    """

    def __init__(
        self,
        policy: Optional[InterruptionPolicyService] = None,
        audio: Optional[AudioService] = None,
        settle_seconds: float = 0.05,
    ) -> None:
        self.policy = policy
        self.audio = audio
        self.settle_seconds = settle_seconds

    def force_audible(self) -> OverrideResult:
        result = OverrideResult(before=self.snapshot())
        if result.before is not None:
            logger.info("Device before override: %s", result.before.describe())

        result.steps.append(self._override_interruption_filter())
        result.steps.append(self._override_ringer_mode())
        for stream in (STREAM_RING, STREAM_VOICE_CALL, STREAM_NOTIFICATION):
            result.steps.append(self._raise_volume(stream))
        # Alert voices play on the alarm stream, so it is raised on its own
        # in case the ring-stream writes are refused.
        result.steps.append(self._raise_volume(STREAM_ALARM))

        result.after = self.snapshot()
        if result.after is not None:
            logger.info("Device after override: %s", result.after.describe())
        for step in result.steps:
            if not step.took_effect:
                logger.warning(
                    "Override step %s: %s %s", step.name, step.status, step.detail
                )
        return result

    def snapshot(self) -> Optional[DeviceAudioSnapshot]:
        if self.policy is None and self.audio is None:
            return None
        snap = DeviceAudioSnapshot()
        if self.policy is not None:
            try:
                snap.interruption_filter = self.policy.get_interruption_filter()
            except Exception as exc:
                logger.debug("Filter read failed: %s", exc)
        if self.audio is not None:
            try:
                snap.ringer_mode = self.audio.get_ringer_mode()
            except Exception as exc:
                logger.debug("Ringer mode read failed: %s", exc)
            for stream in ALL_STREAMS:
                try:
                    snap.volumes[stream] = (
                        self.audio.get_volume(stream),
                        self.audio.get_max_volume(stream),
                    )
                except Exception as exc:
                    logger.debug("Volume read failed for %s: %s", stream, exc)
        return snap

    def _override_interruption_filter(self) -> StepOutcome:
        name = STEP_INTERRUPTION_FILTER
        if self.policy is None:
            return StepOutcome(name, STEP_SKIPPED, detail="policy service unavailable")
        try:
            granted = self.policy.is_policy_access_granted()
        except Exception as exc:
            return StepOutcome(name, STEP_SKIPPED, detail=f"access check failed: {exc}")
        if not granted:
            logger.warning("No interruption policy access; DND left as is")
            return StepOutcome(name, STEP_SKIPPED, detail="policy access not granted")

        policy = self.policy
        return self._apply_verified(
            name,
            apply=lambda: policy.set_interruption_filter(FILTER_ALL),
            read=policy.get_interruption_filter,
            expected=lambda: FILTER_ALL,
        )

    def _override_ringer_mode(self) -> StepOutcome:
        name = STEP_RINGER_MODE
        if self.audio is None:
            return StepOutcome(name, STEP_SKIPPED, detail="audio service unavailable")
        audio = self.audio

        def _apply() -> None:
            audio.unmute(STREAM_RING)
            audio.set_ringer_mode(RINGER_NORMAL)

        return self._apply_verified(
            name,
            apply=_apply,
            read=audio.get_ringer_mode,
            expected=lambda: RINGER_NORMAL,
        )

    def _raise_volume(self, stream: str) -> StepOutcome:
        name = _volume_step(stream)
        if self.audio is None:
            return StepOutcome(name, STEP_SKIPPED, detail="audio service unavailable")
        audio = self.audio
        return self._apply_verified(
            name,
            apply=lambda: audio.set_volume(stream, audio.get_max_volume(stream)),
            read=lambda: audio.get_volume(stream),
            expected=lambda: audio.get_max_volume(stream),
        )

    def _apply_verified(
        self,
        name: str,
        apply: Callable[[], None],
        read: Callable[[], object],
        expected: Callable[[], object],
    ) -> StepOutcome:
        attempts = 0
        last_error = ""
        for attempt in range(2):
            attempts = attempt + 1
            try:
                apply()
                if self.settle_seconds and name == STEP_INTERRUPTION_FILTER:
                    time.sleep(self.settle_seconds)
                want = expected()
                got = read()
                if got == want:
                    status = STEP_APPLIED if attempts == 1 else STEP_RETRIED
                    return StepOutcome(name, status, attempts=attempts)
                raise VerificationMismatch(
                    f"{name} reads {got!r}, expected {want!r}",
                    expected=want,
                    actual=got,
                )
            except VerificationMismatch as exc:
                last_error = exc.message
                logger.info("Override %s not applied (attempt %s)", name, attempts)
            except (PermissionDenied, ResourceUnavailable) as exc:
                return StepOutcome(name, STEP_FAILED, attempts=attempts, detail=exc.message)
            except Exception as exc:
                return StepOutcome(name, STEP_FAILED, attempts=attempts, detail=str(exc))
        return StepOutcome(name, STEP_BEST_EFFORT, attempts=attempts, detail=last_error)
