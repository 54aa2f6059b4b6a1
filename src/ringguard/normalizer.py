"""Text normalization and fuzzy matching for notification text.

Notification titles arrive decorated ("📞 Mom ❤️", "Incoming call · WhatsApp")
and vary by locale and vendor. Everything here works on normalized text:
decorative code points removed, case folded, whitespace collapsed.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, Optional

# So: emoji and dingbats, Sk: modifier symbols, Co: private use,
# Cn: unassigned, Cs: surrogates, Cf: joiners and other format marks,
# Me: enclosing marks such as the keycap.
DECORATIVE_CATEGORIES = frozenset({"So", "Sk", "Co", "Cn", "Cs", "Cf", "Me"})

_WHITESPACE = re.compile(r"\s+")

INCOMING_CALL_PHRASES = (
    # English
    "incoming call",
    "voice call",
    "video call",
    "phone call",
    "ringing",
    "calling",
    "incoming",
    "call",
    # German
    "eingehender anruf",
    "sprachanruf",
    "videoanruf",
    "telefonanruf",
    "klingelt",
    "anruf",
    # French
    "appel entrant",
    "appel vocal",
    "appel vidéo",
    "appel téléphonique",
    "sonnerie",
    "appel",
    # Spanish
    "llamada entrante",
    "llamada de voz",
    "videollamada",
    "llamada telefónica",
    "sonando",
    "llamada",
    # Portuguese
    "chamada recebida",
    "chamada de voz",
    "chamada de vídeo",
    "chamada telefônica",
    "tocando",
    "chamada",
)


def _is_decorative(char: str) -> bool:
    code = ord(char)
    # Emoji variation selectors are combining marks (Mn), not symbols.
    if 0xFE00 <= code <= 0xFE0F or 0xE0100 <= code <= 0xE01EF:
        return True
    # Miscellaneous Symbols and Dingbats, including digits and brackets
    # such as ❶ and ❨ that are not category So.
    if 0x2600 <= code <= 0x27BF:
        return True
    return unicodedata.category(char) in DECORATIVE_CATEGORIES


def normalize(text: Optional[str]) -> str:
    if not text:
        return ""
    stripped = "".join(ch for ch in text if not _is_decorative(ch))
    return _WHITESPACE.sub(" ", stripped.casefold()).strip()


def indicates_incoming_call(
    text: Optional[str],
    extra_phrases: Iterable[str] = (),
) -> bool:
    """Return True when ``text`` contains any known incoming-call phrase.

    Matching is a plain substring test on normalized text, so vendor
    punctuation around the phrase does not matter.
    """
    if text is None or not text.strip():
        return False
    normalized = normalize(text)
    if not normalized:
        return False
    for phrase in INCOMING_CALL_PHRASES:
        if phrase in normalized:
            return True
    for phrase in extra_phrases:
        phrase = normalize(phrase)
        if phrase and phrase in normalized:
            return True
    return False


def matches(trusted_name: Optional[str], candidate_text: Optional[str]) -> bool:
    """Fuzzy match a trusted contact name against notification text.

    True when either normalized string contains the other. This covers a
    nickname inside a full caller name and a full name truncated by the
    notification. The test is intentionally loose: "Ann" also matches
    "Joanne". A false alarm is accepted over a missed emergency call, so do
    not tighten this to whole-word or exact matching.
    """
    name = normalize(trusted_name)
    candidate = normalize(candidate_text)
    if not name or not candidate:
        return False
    return name in candidate or candidate in name


def normalize_phone(number: Optional[str]) -> str:
    """Digits only, keeping the last ten (drops country prefixes)."""
    digits = "".join(ch for ch in (number or "") if ch.isdigit())
    return digits[-10:]
