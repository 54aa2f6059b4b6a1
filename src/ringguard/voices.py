"""Alert voices: ringtone, siren and beep.

Each voice owns one output stream and at most one background task. The
actuator starts exactly one voice per alert and stops it on teardown.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional, Type

import numpy as np

from .audio_utils import (
    BEEP_HZ,
    SIREN_HIGH_HZ,
    SIREN_LOW_HZ,
    default_ring_pattern,
    ringtone_buffer,
    sine_tone,
    volume_gain,
)
from .config import AlertSettings
from .devices import resolve_device_index
from .errors import ResourceUnavailable
from .models import AlertVoice
from .tasks import RepeatingTask

logger = logging.getLogger("ringguard")

SIREN_TONE_SECONDS = 0.4
BEEP_TONE_SECONDS = 0.2
BEEP_PERIOD_SECONDS = 0.5

CompletionCallback = Callable[[], None]


def _sounddevice():
    try:
        import sounddevice as sd
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise ResourceUnavailable("sounddevice is required for alert playback.") from exc
    return sd


class Voice:
    kind: AlertVoice

    def __init__(self, settings: AlertSettings) -> None:
        self.settings = settings

    @property
    def alive(self) -> bool:
        raise NotImplementedError

    def start(self, on_complete: Optional[CompletionCallback] = None) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError


class ToneVoice(Voice):
    """Repeating synthesized tone pattern written to a blocking stream."""

    def __init__(self, settings: AlertSettings) -> None:
        super().__init__(settings)
        self._stream = None
        self._task: Optional[RepeatingTask] = None

    @property
    def alive(self) -> bool:
        return self._task is not None and self._task.alive

    def _tone(self, freq_hz: float, seconds: float) -> np.ndarray:
        return sine_tone(
            (freq_hz,),
            seconds,
            self.settings.sample_rate_hz,
            volume_gain(self.settings.volume_percent),
        )

    def _cycle(self, stop: threading.Event) -> None:
        raise NotImplementedError

    def _play(self, buffer: np.ndarray) -> None:
        self._stream.write(buffer)

    def start(self, on_complete: Optional[CompletionCallback] = None) -> None:
        sd = _sounddevice()
        stream = sd.OutputStream(
            samplerate=self.settings.sample_rate_hz,
            channels=1,
            dtype="float32",
            device=resolve_device_index(self.settings.output_device),
        )
        stream.start()
        self._stream = stream
        self._task = RepeatingTask(f"ringguard-{self.kind.value}", self._cycle, on_complete)
        self._task.start()

    def stop(self) -> None:
        task, self._task = self._task, None
        stream, self._stream = self._stream, None
        # The task blocks in stream.write; let it finish its tone first.
        if task is not None:
            task.cancel()
        if stream is not None:
            try:
                stream.abort()
            finally:
                stream.close()


class SirenVoice(ToneVoice):
    kind = AlertVoice.SIREN

    def __init__(self, settings: AlertSettings) -> None:
        super().__init__(settings)
        self._high = self._tone(SIREN_HIGH_HZ, SIREN_TONE_SECONDS)
        self._low = self._tone(SIREN_LOW_HZ, SIREN_TONE_SECONDS)

    def _cycle(self, stop: threading.Event) -> None:
        for buffer in (self._high, self._low):
            if stop.is_set():
                return
            self._play(buffer)


class BeepVoice(ToneVoice):
    kind = AlertVoice.BEEP

    def __init__(self, settings: AlertSettings) -> None:
        super().__init__(settings)
        self._beep = self._tone(BEEP_HZ, BEEP_TONE_SECONDS)

    def _cycle(self, stop: threading.Event) -> None:
        self._play(self._beep)
        stop.wait(BEEP_PERIOD_SECONDS - BEEP_TONE_SECONDS)


class RingtoneVoice(Voice):
    """Looping playback of the configured ringtone from a callback stream."""

    kind = AlertVoice.RINGTONE

    def __init__(self, settings: AlertSettings) -> None:
        super().__init__(settings)
        self._stream = None
        self._buffer: Optional[np.ndarray] = None
        self._pos = 0
        self._stopping = False

    @property
    def alive(self) -> bool:
        return self._stream is not None and bool(self._stream.active)

    def load(self) -> np.ndarray:
        gain = volume_gain(self.settings.volume_percent)
        try:
            return ringtone_buffer(
                self.settings.ringtone_source,
                self.settings.ringtone_path,
                self.settings.sample_rate_hz,
                gain,
            )
        except Exception as exc:
            logger.warning(
                "Ringtone %s unreadable (%s); using default ring",
                self.settings.ringtone_path,
                exc,
            )
            return default_ring_pattern(self.settings.sample_rate_hz, gain)

    def start(self, on_complete: Optional[CompletionCallback] = None) -> None:
        sd = _sounddevice()
        self._buffer = self.load()
        self._pos = 0
        self._stopping = False
        loop = self.settings.ringtone_loop
        buffer = self._buffer
        total = buffer.shape[0]

        def _callback(outdata, frames, _time, status):
            if status:
                logger.debug("Ringtone stream status: %s", status)
            if total == 0:
                outdata[:] = 0
                raise sd.CallbackStop
            written = 0
            while written < frames:
                take = min(frames - written, total - self._pos)
                outdata[written:written + take] = buffer[self._pos:self._pos + take]
                written += take
                self._pos += take
                if self._pos >= total:
                    if not loop:
                        outdata[written:] = 0
                        raise sd.CallbackStop
                    self._pos = 0

        def _finished():
            if not self._stopping and on_complete is not None:
                on_complete()

        stream = sd.OutputStream(
            samplerate=self.settings.sample_rate_hz,
            channels=1,
            dtype="float32",
            device=resolve_device_index(self.settings.output_device),
            callback=_callback,
            finished_callback=_finished,
        )
        self._stream = stream
        stream.start()

    def stop(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        self._stopping = True
        try:
            stream.abort()
        finally:
            stream.close()


VOICE_CLASSES: Dict[AlertVoice, Type[Voice]] = {
    AlertVoice.RINGTONE: RingtoneVoice,
    AlertVoice.SIREN: SirenVoice,
    AlertVoice.BEEP: BeepVoice,
}


def build_voice(voice: AlertVoice, settings: AlertSettings) -> Voice:
    return VOICE_CLASSES[voice](settings)
