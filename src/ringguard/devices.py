"""Audio output device discovery."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .errors import ResourceUnavailable


def list_output_devices() -> List[Dict[str, Any]]:
    try:
        import sounddevice as sd
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise ResourceUnavailable("sounddevice is required for device detection.") from exc

    devices = sd.query_devices()
    return [d for d in devices if d.get("max_output_channels", 0) > 0]


def select_preferred_device(
    candidates: List[Dict[str, Any]],
    prefer_name: Optional[str] = None,
) -> Dict[str, Any]:
    if not candidates:
        raise ResourceUnavailable("No output devices found.")
    if prefer_name:
        preferred = [
            d for d in candidates if prefer_name.lower() in d.get("name", "").lower()
        ]
        if preferred:
            return preferred[0]
    return candidates[0]


def find_output_device(prefer_name: Optional[str] = None) -> Dict[str, Any]:
    candidates = list_output_devices()
    return select_preferred_device(candidates, prefer_name=prefer_name)


def resolve_device_index(prefer_name: Optional[str]) -> Optional[int]:
    """Index of the preferred output device, or None for the host default."""
    if not prefer_name:
        return None
    return find_output_device(prefer_name).get("index")
