"""Platform service interfaces and host implementations.

The override and the actuator only talk to the duck-typed protocols below.
``InMemoryDevice`` keeps policy and audio state for hosts that have no
platform DND/volume service; it is also what the tests drive.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Protocol

from .errors import PermissionDenied, ResourceUnavailable

logger = logging.getLogger("ringguard")

RINGER_SILENT = "silent"
RINGER_VIBRATE = "vibrate"
RINGER_NORMAL = "normal"

FILTER_ALL = "all"
FILTER_PRIORITY = "priority"
FILTER_ALARMS = "alarms"
FILTER_NONE = "none"

STREAM_RING = "ring"
STREAM_VOICE_CALL = "voice_call"
STREAM_NOTIFICATION = "notification"
STREAM_ALARM = "alarm"

ALL_STREAMS = (STREAM_RING, STREAM_VOICE_CALL, STREAM_NOTIFICATION, STREAM_ALARM)


class InterruptionPolicyService(Protocol):
    def is_policy_access_granted(self) -> bool: ...

    def get_interruption_filter(self) -> str: ...

    def set_interruption_filter(self, value: str) -> None: ...


class AudioService(Protocol):
    def get_ringer_mode(self) -> str: ...

    def set_ringer_mode(self, mode: str) -> None: ...

    def unmute(self, stream: str) -> None: ...

    def get_volume(self, stream: str) -> int: ...

    def get_max_volume(self, stream: str) -> int: ...

    def set_volume(self, stream: str, level: int) -> None: ...


class Vibrator(Protocol):
    def vibrate(self, duration_ms: int) -> None: ...

    def cancel(self) -> None: ...


class Torch(Protocol):
    def set_torch(self, on: bool) -> None: ...


class WakeHold(Protocol):
    held: bool

    def acquire(self, timeout_s: float) -> None: ...

    def release(self) -> None: ...


class InMemoryDevice:
    """Interruption policy and audio state kept in process memory.

    ``policy_access`` mimics the DND access grant. ``locked_filter`` and
    ``locked_streams`` simulate a platform that silently ignores writes,
    which is what the override's read-back verification exists for.
    """

    def __init__(
        self,
        ringer_mode: str = RINGER_NORMAL,
        interruption_filter: str = FILTER_ALL,
        policy_access: bool = True,
        max_volume: int = 7,
        volumes: Optional[Dict[str, int]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self.ringer_mode = ringer_mode
        self.interruption_filter = interruption_filter
        self.policy_access = policy_access
        self.max_volumes = {stream: max_volume for stream in ALL_STREAMS}
        self.volumes = {stream: max_volume // 2 for stream in ALL_STREAMS}
        if volumes:
            self.volumes.update(volumes)
        self.muted = {stream: False for stream in ALL_STREAMS}
        self.locked_filter = False
        self.locked_streams: set = set()
        self.writes = 0

    def is_policy_access_granted(self) -> bool:
        return self.policy_access

    def get_interruption_filter(self) -> str:
        return self.interruption_filter

    def set_interruption_filter(self, value: str) -> None:
        if not self.policy_access:
            raise PermissionDenied("Interruption policy access not granted.")
        with self._lock:
            self.writes += 1
            if not self.locked_filter:
                self.interruption_filter = value

    def get_ringer_mode(self) -> str:
        return self.ringer_mode

    def set_ringer_mode(self, mode: str) -> None:
        with self._lock:
            self.writes += 1
            self.ringer_mode = mode

    def unmute(self, stream: str) -> None:
        self._check_stream(stream)
        with self._lock:
            self.muted[stream] = False

    def get_volume(self, stream: str) -> int:
        self._check_stream(stream)
        return 0 if self.muted[stream] else self.volumes[stream]

    def get_max_volume(self, stream: str) -> int:
        self._check_stream(stream)
        return self.max_volumes[stream]

    def set_volume(self, stream: str, level: int) -> None:
        self._check_stream(stream)
        with self._lock:
            self.writes += 1
            if stream not in self.locked_streams:
                self.volumes[stream] = max(0, min(level, self.max_volumes[stream]))

    def _check_stream(self, stream: str) -> None:
        if stream not in self.max_volumes:
            raise ResourceUnavailable(f"Unknown audio stream: {stream}")


class LoggingVibrator:
    """Vibrator for hosts without a motor; records pulses in the log."""

    def __init__(self) -> None:
        self.pulses = 0

    def vibrate(self, duration_ms: int) -> None:
        self.pulses += 1
        logger.debug("Vibrate %sms", duration_ms)

    def cancel(self) -> None:
        logger.debug("Vibration cancelled")


class LoggingTorch:
    """Torch for hosts without a camera flash; records state in the log."""

    def __init__(self) -> None:
        self.on = False
        self.toggles = 0

    def set_torch(self, on: bool) -> None:
        self.on = bool(on)
        self.toggles += 1
        logger.debug("Torch %s", "on" if on else "off")


class TimedWakeHold:
    """Keep-awake hold that releases itself after a safety ceiling."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self.held = False

    def acquire(self, timeout_s: float) -> None:
        with self._lock:
            self._cancel_timer()
            self.held = True
            self._timer = threading.Timer(timeout_s, self._expire)
            self._timer.daemon = True
            self._timer.start()

    def release(self) -> None:
        with self._lock:
            self._cancel_timer()
            self.held = False

    def _expire(self) -> None:
        with self._lock:
            if self.held:
                logger.warning("Wake hold reached its ceiling; releasing")
            self._timer = None
            self.held = False

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
