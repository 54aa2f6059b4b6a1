"""Alert actuator: owns the single active alert session."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, List, Optional

from .channels import SideChannel, StrobeChannel, VibrationChannel
from .config import AlertSettings
from .device import TimedWakeHold, Torch, Vibrator, WakeHold
from .models import AlertSession, AlertVoice
from .voices import Voice, build_voice

logger = logging.getLogger("ringguard")

VoiceFactory = Callable[[AlertVoice, AlertSettings], Voice]
SessionListener = Callable[[AlertSession], None]


class AlertState:
    """Observable alert session. The actuator is its only writer."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._session = AlertSession()
        self._listeners: List[SessionListener] = []

    @property
    def session(self) -> AlertSession:
        with self._lock:
            return replace(self._session)

    @property
    def is_playing(self) -> bool:
        return self._session.is_playing

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def update(self, **changes) -> None:
        with self._lock:
            self._session = replace(self._session, **changes)
            snapshot = replace(self._session)
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Alert state listener failed")

    def reset(self) -> None:
        with self._lock:
            idle = self._session == AlertSession()
        if not idle:
            self.update(**vars(AlertSession()))


class AlertActuator:
    """Start and stop alerts; at most one alert is ever live.

    ``trigger`` always tears the previous alert down before starting a new
    one, and ``stop`` is the single teardown path for explicit stops, the
    auto-stop deadline and natural completion of the voice. Neither raises.
    """

    def __init__(
        self,
        settings: AlertSettings,
        state: Optional[AlertState] = None,
        voice_factory: VoiceFactory = build_voice,
        vibrator: Optional[Vibrator] = None,
        torch: Optional[Torch] = None,
        wake_hold: Optional[WakeHold] = None,
    ) -> None:
        self.settings = settings
        self.state = state or AlertState()
        self._voice_factory = voice_factory
        self._vibrator = vibrator
        self._torch = torch
        self._wake_hold = wake_hold if wake_hold is not None else TimedWakeHold()
        self._lock = threading.RLock()
        self._generation = 0
        self._voice: Optional[Voice] = None
        self._vibration: Optional[SideChannel] = None
        self._strobe: Optional[SideChannel] = None
        self._timer: Optional[threading.Timer] = None

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    @property
    def session(self) -> AlertSession:
        return self.state.session

    @property
    def active_voice(self) -> Optional[Voice]:
        return self._voice

    def trigger(
        self,
        voice: Optional[AlertVoice] = None,
        duration: Optional[float] = None,
        is_preview: bool = False,
    ) -> bool:
        """Start an alert. Returns True when the voice started."""
        with self._lock:
            self.stop()
            try:
                return self._start(voice, duration, is_preview)
            except Exception:
                logger.exception("Alert trigger failed")
                self.stop()
                return False

    def stop(self) -> None:
        with self._lock:
            self._generation += 1
            try:
                timer, self._timer = self._timer, None
                if timer is not None:
                    self._safely(timer.cancel, "cancel auto-stop timer")
                voice, self._voice = self._voice, None
                if voice is not None:
                    self._safely(voice.stop, f"stop {voice.kind.value} voice")
                self._stop_side_channels()
                self._safely(self._wake_hold.release, "release wake hold")
                self.state.reset()
            except Exception:
                logger.exception("Alert stop failed")

    def _start(
        self,
        voice: Optional[AlertVoice],
        duration: Optional[float],
        is_preview: bool,
    ) -> bool:
        settings = self.settings
        generation = self._generation
        selected = voice if voice is not None else settings.alert_voice
        if duration is None:
            duration = settings.preview_seconds if is_preview else settings.auto_stop_seconds

        self._safely(
            lambda: self._wake_hold.acquire(settings.wake_ceiling_seconds), "acquire wake hold"
        )
        voice_started = self._start_voice(selected, generation)

        vibration_on = strobe_on = False
        if not is_preview:
            if settings.vibrate:
                self._vibration = self._start_channel(
                    "vibration", self._vibrator, VibrationChannel
                )
                vibration_on = self._vibration is not None
            if settings.strobe:
                self._strobe = self._start_channel("strobe", self._torch, StrobeChannel)
                strobe_on = self._strobe is not None

        if not (voice_started or vibration_on or strobe_on):
            logger.error("No alert modality could start")
            self.stop()
            return False

        timer = threading.Timer(duration, self._on_deadline, args=(generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

        self.state.update(
            active_voice=selected if voice_started else None,
            is_playing=True,
            vibration_active=vibration_on,
            strobe_active=strobe_on,
            auto_stop_deadline=time.monotonic() + duration,
            is_preview=is_preview,
        )
        logger.info(
            "Alert started: voice=%s vibrate=%s strobe=%s preview=%s auto-stop=%.1fs",
            selected.value if voice_started else "none",
            vibration_on,
            strobe_on,
            is_preview,
            duration,
        )
        return voice_started

    def _start_voice(self, selected: AlertVoice, generation: int) -> bool:
        voice = None
        try:
            voice = self._voice_factory(selected, self.settings)
            voice.start(on_complete=lambda: self._voice_completed(generation))
        except Exception as exc:
            logger.error("Alert voice %s unavailable: %s", selected.value, exc)
            if voice is not None:
                self._safely(voice.stop, f"stop {selected.value} voice")
            return False
        self._voice = voice
        return True

    def _start_channel(self, name: str, backend, channel_cls) -> Optional[SideChannel]:
        if backend is None:
            logger.info("No %s backend on this host; skipping", name)
            return None
        try:
            channel = channel_cls(backend)
            channel.start()
        except Exception as exc:
            logger.error("%s failed to start: %s", name.capitalize(), exc)
            return None
        return channel

    def _stop_side_channels(self) -> None:
        vibration, self._vibration = self._vibration, None
        strobe, self._strobe = self._strobe, None
        if vibration is not None:
            self._safely(vibration.stop, "stop vibration")
        if strobe is not None:
            self._safely(strobe.stop, "stop strobe")

    def _voice_completed(self, generation: int) -> None:
        # Called from the voice's own thread; hand off so stop() can join it.
        threading.Thread(
            target=self._finish_voice,
            args=(generation,),
            name="ringguard-voice-complete",
            daemon=True,
        ).start()

    def _finish_voice(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._voice is None:
                return
            logger.info("Alert voice finished playing")
            voice, self._voice = self._voice, None
            self._safely(voice.stop, f"stop {voice.kind.value} voice")
            self._stop_side_channels()
            self._safely(self._wake_hold.release, "release wake hold")
            self.state.update(
                active_voice=None,
                is_playing=False,
                vibration_active=False,
                strobe_active=False,
            )

    def _on_deadline(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            logger.info("Auto-stop deadline reached; stopping alert")
            self.stop()

    @staticmethod
    def _safely(action: Callable[[], None], label: str) -> None:
        try:
            action()
        except Exception as exc:
            logger.warning("Could not %s: %s", label, exc)
