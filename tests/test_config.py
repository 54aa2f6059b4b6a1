import os
import tempfile

from ringguard.config import (
    AlertSettings,
    Config,
    contact_from_persistence,
    load_config,
    save_config,
)
from ringguard.models import AlertVoice, TrustedContact


def test_save_and_load_config_roundtrip():
    cfg = Config()
    cfg.contacts.append(TrustedContact("Mom", "+15550001111"))
    cfg.alert.voice = "siren"
    cfg.alert.strobe = True

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "ringguard_config.yml")
        save_config(path, cfg)
        loaded = load_config(path)

    assert loaded.contacts == [TrustedContact("Mom", "+15550001111")]
    assert loaded.alert.alert_voice == AlertVoice.SIREN
    assert loaded.alert.strobe is True
    assert loaded.monitoring_enabled is True
    assert "com.whatsapp" in loaded.classifier.monitored_sources


def test_load_config_clamps_and_validates(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text(
        "alert:\n"
        "  voice: foghorn\n"
        "  volume_percent: 250\n"
        "  ringtone_source: cloud\n"
        "  unknown_key: 1\n",
        encoding="utf-8",
    )
    cfg = load_config(str(path))
    assert cfg.alert.voice == "ringtone"
    assert cfg.alert.volume_percent == 100
    assert cfg.alert.ringtone_source == "phone"


def test_load_config_accepts_compact_contacts(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text(
        "contacts:\n"
        "  - Mom|+15550001111\n"
        "  - Mom|+15550001111\n"
        "  - broken entry\n"
        "  - {name: Dad, number: '555'}\n",
        encoding="utf-8",
    )
    cfg = load_config(str(path))
    assert cfg.contacts == [
        TrustedContact("Mom", "+15550001111"),
        TrustedContact("Dad", "555"),
    ]


def test_empty_config_file_gives_defaults(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text("", encoding="utf-8")
    cfg = load_config(str(path))
    assert cfg.alert == AlertSettings()
    assert cfg.contacts == []


def test_contact_from_persistence():
    assert contact_from_persistence("Jane|123") == TrustedContact("Jane", "123")
    assert contact_from_persistence("Jane|12|3") == TrustedContact("Jane", "12|3")
    assert contact_from_persistence("Jane") is None
