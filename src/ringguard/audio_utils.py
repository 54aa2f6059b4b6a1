"""Audio helpers: tone synthesis and sound-file loading."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .errors import ResourceUnavailable

SIREN_HIGH_HZ = 960.0
SIREN_LOW_HZ = 770.0
BEEP_HZ = 1400.0
# Dual-tone ring-back pattern used when no ringtone file is configured.
RING_TONES_HZ = (440.0, 480.0)
RING_ON_SECONDS = 2.0
RING_OFF_SECONDS = 4.0


def volume_gain(volume_percent: int) -> float:
    return max(0, min(int(volume_percent), 100)) / 100.0


def sine_tone(
    frequencies_hz: Sequence[float],
    duration_s: float,
    sample_rate_hz: int = 44100,
    gain: float = 1.0,
    fade_s: float = 0.005,
) -> np.ndarray:
    """Mono float32 buffer of summed sines, faded in/out to avoid clicks."""
    frames = int(round(duration_s * sample_rate_hz))
    if frames <= 0:
        raise ValueError("duration_s must be > 0.")
    t = np.arange(frames, dtype=np.float64) / sample_rate_hz
    wave = np.zeros(frames, dtype=np.float64)
    for freq in frequencies_hz:
        wave += np.sin(2.0 * np.pi * freq * t)
    if frequencies_hz:
        wave /= len(frequencies_hz)

    fade = min(int(fade_s * sample_rate_hz), frames // 2)
    if fade > 0:
        ramp = np.linspace(0.0, 1.0, fade)
        wave[:fade] *= ramp
        wave[-fade:] *= ramp[::-1]

    return (wave * gain).astype(np.float32).reshape(-1, 1)


def silence(duration_s: float, sample_rate_hz: int = 44100) -> np.ndarray:
    frames = max(0, int(round(duration_s * sample_rate_hz)))
    return np.zeros((frames, 1), dtype=np.float32)


def default_ring_pattern(sample_rate_hz: int = 44100, gain: float = 1.0) -> np.ndarray:
    tone = sine_tone(RING_TONES_HZ, RING_ON_SECONDS, sample_rate_hz, gain)
    return np.concatenate([tone, silence(RING_OFF_SECONDS, sample_rate_hz)])


def load_sound_file(path: str, sample_rate_hz: int, gain: float = 1.0) -> np.ndarray:
    """Read a sound file as mono float32 at ``sample_rate_hz``."""
    try:
        import soundfile as sf
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise ResourceUnavailable("soundfile is required to play sound files.") from exc

    data, file_rate = sf.read(path, dtype="float32", always_2d=True)
    mono = data.mean(axis=1)
    if file_rate != sample_rate_hz and mono.size:
        mono = resample(mono, file_rate, sample_rate_hz)
    return (mono * gain).astype(np.float32).reshape(-1, 1)


def resample(samples: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
    """Linear-interpolation resample; adequate for alert sounds."""
    duration = samples.shape[0] / float(from_rate)
    target = max(1, int(round(duration * to_rate)))
    src_t = np.arange(samples.shape[0]) / float(from_rate)
    dst_t = np.arange(target) / float(to_rate)
    return np.interp(dst_t, src_t, samples).astype(np.float32)


def ringtone_buffer(
    source: str,
    path: Optional[str],
    sample_rate_hz: int,
    gain: float,
) -> np.ndarray:
    """Custom sound when selected and readable, else the default ring pattern."""
    if source == "custom" and path:
        buffer = load_sound_file(path, sample_rate_hz, gain)
        if buffer.shape[0] == 0:
            raise ValueError(f"{path} has no audio frames.")
        return buffer
    return default_ring_pattern(sample_rate_hz, gain)
