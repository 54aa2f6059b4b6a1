"""Configuration handling."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import yaml

from .classifier import DEFAULT_MONITORED_SOURCES
from .models import AlertVoice, TrustedContact

logger = logging.getLogger("ringguard")

RINGTONE_SOURCE_PHONE = "phone"
RINGTONE_SOURCE_CUSTOM = "custom"


@dataclass
class AlertSettings:
    voice: str = AlertVoice.RINGTONE.value
    volume_percent: int = 100
    auto_stop_seconds: float = 30.0
    preview_seconds: float = 5.0
    vibrate: bool = True
    strobe: bool = False
    ringtone_source: str = RINGTONE_SOURCE_PHONE
    ringtone_path: Optional[str] = None
    ringtone_loop: bool = True
    output_device: Optional[str] = None
    sample_rate_hz: int = 44100
    wake_ceiling_seconds: float = 60.0

    @property
    def alert_voice(self) -> AlertVoice:
        return parse_voice(self.voice)


@dataclass
class ClassifierConfig:
    monitored_sources: List[str] = field(
        default_factory=lambda: list(DEFAULT_MONITORED_SOURCES)
    )
    extra_call_phrases: List[str] = field(default_factory=list)


@dataclass
class Config:
    monitoring_enabled: bool = True
    contacts: List[TrustedContact] = field(default_factory=list)
    alert: AlertSettings = field(default_factory=AlertSettings)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    log_dir: str = "logs"


def parse_voice(value: Optional[str]) -> AlertVoice:
    try:
        return AlertVoice((value or "").strip().lower())
    except ValueError:
        logger.warning("Unknown alert voice %r; using ringtone", value)
        return AlertVoice.RINGTONE


def _alert_settings(data: dict) -> AlertSettings:
    known = {k: v for k, v in data.items() if k in AlertSettings.__dataclass_fields__}
    settings = AlertSettings(**known)
    settings.voice = parse_voice(settings.voice).value
    settings.volume_percent = max(0, min(int(settings.volume_percent), 100))
    if settings.ringtone_source not in (RINGTONE_SOURCE_PHONE, RINGTONE_SOURCE_CUSTOM):
        settings.ringtone_source = RINGTONE_SOURCE_PHONE
    return settings


def contact_from_persistence(value: str) -> Optional[TrustedContact]:
    """Parse the compact "name|number" form."""
    parts = value.split("|", 1)
    if len(parts) < 2:
        return None
    return TrustedContact(display_name=parts[0].strip(), phone_number=parts[1].strip())


def _contacts(items: list) -> List[TrustedContact]:
    contacts: List[TrustedContact] = []
    for item in items or []:
        if isinstance(item, str):
            contact = contact_from_persistence(item)
            if contact is None:
                logger.warning("Skipping malformed contact entry %r", item)
                continue
        else:
            contact = TrustedContact(
                display_name=str(item.get("name", "")).strip(),
                phone_number=str(item.get("number", "")).strip(),
            )
        if contact.display_name and contact not in contacts:
            contacts.append(contact)
    return contacts


def load_config(path: str) -> Config:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    alert = _alert_settings(data.get("alert", {}) or {})
    classifier_data = data.get("classifier", {}) or {}
    classifier = ClassifierConfig(
        monitored_sources=list(
            classifier_data.get("monitored_sources", DEFAULT_MONITORED_SOURCES)
        ),
        extra_call_phrases=list(classifier_data.get("extra_call_phrases", [])),
    )

    return Config(
        monitoring_enabled=bool(data.get("monitoring_enabled", True)),
        contacts=_contacts(data.get("contacts", [])),
        alert=alert,
        classifier=classifier,
        log_dir=data.get("log_dir", "logs"),
    )


def save_config(path: str, config: Config) -> None:
    data = {
        "monitoring_enabled": config.monitoring_enabled,
        "contacts": [
            {"name": c.display_name, "number": c.phone_number} for c in config.contacts
        ],
        "alert": {
            "voice": config.alert.voice,
            "volume_percent": config.alert.volume_percent,
            "auto_stop_seconds": config.alert.auto_stop_seconds,
            "preview_seconds": config.alert.preview_seconds,
            "vibrate": config.alert.vibrate,
            "strobe": config.alert.strobe,
            "ringtone_source": config.alert.ringtone_source,
            "ringtone_path": config.alert.ringtone_path,
            "ringtone_loop": config.alert.ringtone_loop,
            "output_device": config.alert.output_device,
            "sample_rate_hz": config.alert.sample_rate_hz,
            "wake_ceiling_seconds": config.alert.wake_ceiling_seconds,
        },
        "classifier": {
            "monitored_sources": list(config.classifier.monitored_sources),
            "extra_call_phrases": list(config.classifier.extra_call_phrases),
        },
        "log_dir": config.log_dir,
    }
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False)
