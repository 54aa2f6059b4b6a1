import pytest

from ringguard.contacts import ContactStore
from ringguard.models import TrustedContact


def test_add_list_remove_contacts(tmp_path):
    store = ContactStore(str(tmp_path / "ringguard_config.yml"))
    assert store.list_trusted_contacts() == []

    assert store.add_contact("Mom", "+15550001111") is True
    assert store.add_contact(" Mom ", "+15550001111") is False
    assert store.add_contact("Mom", "+15550009999") is True
    assert store.list_trusted_contacts() == [
        TrustedContact("Mom", "+15550001111"),
        TrustedContact("Mom", "+15550009999"),
    ]

    assert store.remove_contact("Mom", "+15550001111") is True
    assert store.remove_contact("Mom", "+15550001111") is False
    assert store.list_trusted_contacts() == [TrustedContact("Mom", "+15550009999")]


def test_add_contact_requires_name(tmp_path):
    store = ContactStore(str(tmp_path / "cfg.yml"))
    with pytest.raises(ValueError):
        store.add_contact("  ", "123")


def test_monitoring_toggle_persists(tmp_path):
    path = str(tmp_path / "cfg.yml")
    store = ContactStore(path)
    assert store.is_monitoring_enabled() is True
    store.set_monitoring_enabled(False)
    assert ContactStore(path).is_monitoring_enabled() is False


def test_contact_edits_keep_other_settings(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text("alert:\n  voice: beep\n", encoding="utf-8")
    store = ContactStore(str(path))
    store.add_contact("Dad", "555")
    assert "voice: beep" in path.read_text(encoding="utf-8")


def test_same_number_in_another_format_is_a_duplicate(tmp_path):
    store = ContactStore(str(tmp_path / "cfg.yml"))
    assert store.add_contact("Mom", "+1 (555) 000-1111") is True
    assert store.add_contact("Mom", "555-000-1111") is False
    assert store.remove_contact("Mom", "5550001111") is True
    assert store.list_trusted_contacts() == []
