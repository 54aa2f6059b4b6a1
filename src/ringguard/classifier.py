"""Incoming-call classification for posted notifications."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .models import (
    CATEGORY_CALL,
    ClassificationVerdict,
    NotificationEvent,
    TrustedContact,
)
from .normalizer import indicates_incoming_call, matches

DEFAULT_MONITORED_SOURCES = (
    "com.whatsapp",
    "com.whatsapp.w4b",
    "com.android.server.telecom",
    "com.android.dialer",
    "com.google.android.dialer",
    "com.samsung.android.dialer",
    "com.samsung.android.incallui",
    "com.android.incallui",
    "com.android.phone",
    "com.oneplus.dialer",
    "com.asus.contacts",
    "com.huawei.contacts",
    "com.xiaomi.incallui",
    "android",
)

CALL_RELATED_MARKERS = ("phone", "call", "dialer", "telecom", "whatsapp")

SIGNAL_CATEGORY = "category"
SIGNAL_TEMPLATE = "template"
SIGNAL_TEXT = "text"

NOT_A_CALL = ClassificationVerdict(is_incoming_call=False)


def _join(*parts: str) -> str:
    return " ".join(p for p in parts if p).strip()


class NotificationClassifier:
    """Decide whether a notification is an incoming call from a trusted contact.

    Stateless apart from its configuration; safe to call from any thread.
    """

    def __init__(
        self,
        monitored_sources: Optional[Iterable[str]] = None,
        extra_call_phrases: Sequence[str] = (),
    ) -> None:
        sources = DEFAULT_MONITORED_SOURCES if monitored_sources is None else monitored_sources
        self.monitored_sources = frozenset(sources)
        self.extra_call_phrases = tuple(extra_call_phrases)

    def is_monitored(self, source_identifier: Optional[str]) -> bool:
        return bool(source_identifier) and source_identifier in self.monitored_sources

    def looks_call_related(self, source_identifier: Optional[str]) -> bool:
        """True for unmonitored sources whose name suggests a calling app."""
        if not source_identifier or self.is_monitored(source_identifier):
            return False
        lowered = source_identifier.lower()
        return any(marker in lowered for marker in CALL_RELATED_MARKERS)

    def call_signals(self, event: NotificationEvent) -> List[str]:
        signals: List[str] = []
        if event.category == CATEGORY_CALL:
            signals.append(SIGNAL_CATEGORY)
        if event.template_hint and "call" in event.template_hint.lower():
            signals.append(SIGNAL_TEMPLATE)

        combined = _join(event.body_text, event.expanded_text, event.sub_text)
        texts = (combined, event.body_text, event.expanded_text, event.sub_text)
        if any(indicates_incoming_call(t, self.extra_call_phrases) for t in texts):
            signals.append(SIGNAL_TEXT)
        return signals

    def classify(
        self,
        event: NotificationEvent,
        trusted_contacts: Sequence[TrustedContact],
    ) -> ClassificationVerdict:
        if not self.is_monitored(event.source_identifier):
            return NOT_A_CALL

        signals = tuple(self.call_signals(event))
        if not signals:
            return NOT_A_CALL

        if not trusted_contacts:
            return ClassificationVerdict(is_incoming_call=True, signals=signals)

        # The caller name may sit in the title or in any of the text fields.
        candidate = _join(
            event.title, event.body_text, event.expanded_text, event.sub_text
        )
        for contact in trusted_contacts:
            if matches(contact.display_name, candidate):
                return ClassificationVerdict(
                    is_incoming_call=True,
                    matched_contact=contact,
                    signals=signals,
                )
        return ClassificationVerdict(is_incoming_call=True, signals=signals)
