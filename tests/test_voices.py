import threading
import time

import numpy as np
import pytest
import soundfile as sf

from ringguard import voices
from ringguard.audio_utils import RING_OFF_SECONDS, RING_ON_SECONDS
from ringguard.config import AlertSettings
from ringguard.models import AlertVoice
from ringguard.voices import (
    BeepVoice,
    RingtoneVoice,
    SirenVoice,
    VOICE_CLASSES,
    build_voice,
)


def test_every_alert_voice_has_an_implementation():
    assert set(VOICE_CLASSES) == set(AlertVoice)
    settings = AlertSettings(sample_rate_hz=8000)
    assert isinstance(build_voice(AlertVoice.RINGTONE, settings), RingtoneVoice)
    assert isinstance(build_voice(AlertVoice.SIREN, settings), SirenVoice)
    assert isinstance(build_voice(AlertVoice.BEEP, settings), BeepVoice)


def test_unstarted_voice_is_not_alive_and_stops_cleanly():
    settings = AlertSettings(sample_rate_hz=8000)
    for kind in AlertVoice:
        voice = build_voice(kind, settings)
        assert not voice.alive
        voice.stop()


def test_ringtone_falls_back_to_default_ring(tmp_path):
    settings = AlertSettings(
        sample_rate_hz=8000,
        ringtone_source="custom",
        ringtone_path=str(tmp_path / "missing.wav"),
    )
    buffer = RingtoneVoice(settings).load()
    assert buffer.shape == (int((RING_ON_SECONDS + RING_OFF_SECONDS) * 8000), 1)


def test_siren_tones_respect_volume():
    loud = SirenVoice(AlertSettings(sample_rate_hz=8000, volume_percent=100))
    quiet = SirenVoice(AlertSettings(sample_rate_hz=8000, volume_percent=10))
    assert np.max(np.abs(quiet._high)) < np.max(np.abs(loud._high))


class FakeCallbackStop(Exception):
    pass


class FakeStream:
    def __init__(self, callback=None, finished_callback=None, **kwargs):
        self.callback = callback
        self.finished_callback = finished_callback
        self.kwargs = kwargs
        self.active = False
        self.aborted = False
        self.closed = False
        self.written = []

    def start(self):
        self.active = True

    def write(self, buffer):
        self.written.append(buffer)
        time.sleep(0.001)

    def abort(self):
        self.active = False
        self.aborted = True

    def close(self):
        self.closed = True


class FakeSoundDevice:
    CallbackStop = FakeCallbackStop

    def __init__(self):
        self.streams = []

    def OutputStream(self, **kwargs):
        stream = FakeStream(**kwargs)
        self.streams.append(stream)
        return stream


@pytest.fixture
def fake_sd(monkeypatch):
    sd = FakeSoundDevice()
    monkeypatch.setattr(voices, "_sounddevice", lambda: sd)
    return sd


def _ringtone(settings, samples):
    voice = RingtoneVoice(settings)
    voice.load = lambda: np.asarray(samples, dtype=np.float32).reshape(-1, 1)
    return voice


def test_looping_ringtone_wraps_around(fake_sd):
    voice = _ringtone(AlertSettings(sample_rate_hz=8000), [1, 2, 3, 4, 5])
    voice.start()
    stream = fake_sd.streams[0]
    assert voice.alive

    out = np.zeros((12, 1), dtype=np.float32)
    stream.callback(out, 12, None, None)
    assert out[:, 0].tolist() == [1, 2, 3, 4, 5, 1, 2, 3, 4, 5, 1, 2]
    stream.callback(out, 4, None, None)
    assert out[:4, 0].tolist() == [3, 4, 5, 1]
    voice.stop()


def test_single_play_ringtone_stops_after_last_frame(fake_sd):
    settings = AlertSettings(sample_rate_hz=8000, ringtone_loop=False)
    voice = _ringtone(settings, [1, 2, 3, 4, 5])
    voice.start()
    stream = fake_sd.streams[0]

    out = np.ones((8, 1), dtype=np.float32)
    with pytest.raises(FakeCallbackStop):
        stream.callback(out, 8, None, None)
    assert out[:, 0].tolist() == [1, 2, 3, 4, 5, 0, 0, 0]
    voice.stop()


def test_empty_ringtone_buffer_ends_the_stream(fake_sd):
    voice = _ringtone(AlertSettings(sample_rate_hz=8000), [])
    voice.start()
    out = np.ones((4, 1), dtype=np.float32)
    with pytest.raises(FakeCallbackStop):
        fake_sd.streams[0].callback(out, 4, None, None)
    assert not out.any()
    voice.stop()


def test_zero_frame_ringtone_file_uses_default_ring(tmp_path):
    path = tmp_path / "empty.wav"
    sf.write(str(path), np.zeros((0, 1), dtype=np.float32), 8000)
    settings = AlertSettings(
        sample_rate_hz=8000, ringtone_source="custom", ringtone_path=str(path)
    )
    buffer = RingtoneVoice(settings).load()
    assert buffer.shape == (int((RING_ON_SECONDS + RING_OFF_SECONDS) * 8000), 1)


def test_ringtone_completion_reported_only_without_stop(fake_sd):
    completed = []
    settings = AlertSettings(sample_rate_hz=8000, ringtone_loop=False)

    voice = _ringtone(settings, [1, 2])
    voice.start(on_complete=lambda: completed.append("natural"))
    fake_sd.streams[0].finished_callback()
    assert completed == ["natural"]

    stopped = _ringtone(settings, [1, 2])
    stopped.start(on_complete=lambda: completed.append("stopped"))
    stream = fake_sd.streams[1]
    stopped.stop()
    stream.finished_callback()
    assert completed == ["natural"]
    assert stream.aborted and stream.closed
    assert not stopped.alive


def test_beep_voice_writes_until_stopped(fake_sd):
    voice = BeepVoice(AlertSettings(sample_rate_hz=8000))
    voice.start()
    stream = fake_sd.streams[0]
    deadline = time.monotonic() + 1.0
    while not stream.written and time.monotonic() < deadline:
        time.sleep(0.01)

    assert voice.alive
    voice.stop()
    assert not voice.alive
    assert stream.aborted and stream.closed
    assert stream.written[0] is voice._beep
    assert not any(t.name == "ringguard-beep" for t in threading.enumerate())


def test_siren_voice_alternates_tones(fake_sd):
    voice = SirenVoice(AlertSettings(sample_rate_hz=8000))
    voice.start()
    stream = fake_sd.streams[0]
    deadline = time.monotonic() + 1.0
    while len(stream.written) < 3 and time.monotonic() < deadline:
        time.sleep(0.01)
    voice.stop()

    assert stream.written[0] is voice._high
    assert stream.written[1] is voice._low
    assert stream.written[2] is voice._high
    assert stream.closed
