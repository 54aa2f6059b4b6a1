import numpy as np

from ringguard.audio_utils import (
    RING_OFF_SECONDS,
    RING_ON_SECONDS,
    default_ring_pattern,
    resample,
    ringtone_buffer,
    sine_tone,
    volume_gain,
)


def test_volume_gain_clamps():
    assert volume_gain(50) == 0.5
    assert volume_gain(150) == 1.0
    assert volume_gain(-5) == 0.0


def test_sine_tone_shape_and_gain():
    tone = sine_tone((1000.0,), 0.1, sample_rate_hz=8000, gain=0.5)
    assert tone.shape == (800, 1)
    assert tone.dtype == np.float32
    assert np.max(np.abs(tone)) <= 0.5 + 1e-6
    assert tone[0, 0] == 0.0


def test_default_ring_pattern_has_tone_then_silence():
    sr = 8000
    pattern = default_ring_pattern(sr)
    tone_frames = int(RING_ON_SECONDS * sr)
    assert pattern.shape == (int((RING_ON_SECONDS + RING_OFF_SECONDS) * sr), 1)
    assert np.any(pattern[:tone_frames] != 0)
    assert not np.any(pattern[tone_frames:])


def test_resample_changes_length():
    samples = np.ones(1000, dtype=np.float32)
    assert resample(samples, 8000, 16000).shape == (2000,)
    assert resample(samples, 8000, 4000).shape == (500,)


def test_ringtone_buffer_phone_source_ignores_path():
    buffer = ringtone_buffer("phone", "/missing/ring.wav", 8000, 1.0)
    assert buffer.shape[0] == int((RING_ON_SECONDS + RING_OFF_SECONDS) * 8000)
