"""Trusted-contact store backed by the YAML config file."""

from __future__ import annotations

import logging
import os
import threading
from typing import List

from .config import Config, load_config, save_config
from .logging_utils import mask_number
from .models import TrustedContact
from .normalizer import normalize_phone

logger = logging.getLogger("ringguard")


def same_contact(a: TrustedContact, b: TrustedContact) -> bool:
    """Same name, and numbers equal once formatting and country prefix are dropped."""
    return a.display_name == b.display_name and normalize_phone(
        a.phone_number
    ) == normalize_phone(b.phone_number)


class ContactStore:
    """Reads and writes trusted contacts and the monitoring toggle.

    Every read goes back to the file so that edits made by another process
    (the CLI while ``replay`` runs, for example) are picked up.
    """

    def __init__(self, config_path: str) -> None:
        self.config_path = config_path
        self._lock = threading.Lock()

    def _load(self) -> Config:
        if not os.path.exists(self.config_path):
            return Config()
        return load_config(self.config_path)

    def list_trusted_contacts(self) -> List[TrustedContact]:
        return list(self._load().contacts)

    def add_contact(self, name: str, number: str) -> bool:
        contact = TrustedContact(display_name=name.strip(), phone_number=number.strip())
        if not contact.display_name:
            raise ValueError("Contact name must not be empty.")
        with self._lock:
            config = self._load()
            if any(same_contact(contact, c) for c in config.contacts):
                return False
            config.contacts.append(contact)
            save_config(self.config_path, config)
        logger.info(
            "Trusted contact added: %s (%s)",
            contact.display_name,
            mask_number(contact.phone_number),
        )
        return True

    def remove_contact(self, name: str, number: str) -> bool:
        contact = TrustedContact(display_name=name.strip(), phone_number=number.strip())
        with self._lock:
            config = self._load()
            existing = next((c for c in config.contacts if same_contact(contact, c)), None)
            if existing is None:
                return False
            config.contacts.remove(existing)
            save_config(self.config_path, config)
        logger.info("Trusted contact removed: %s", contact.display_name)
        return True

    def is_monitoring_enabled(self) -> bool:
        return self._load().monitoring_enabled

    def set_monitoring_enabled(self, enabled: bool) -> None:
        with self._lock:
            config = self._load()
            config.monitoring_enabled = bool(enabled)
            save_config(self.config_path, config)
        logger.info("Monitoring %s", "enabled" if enabled else "paused")
