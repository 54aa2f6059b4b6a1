"""Notification event loading from JSON files."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .models import NotificationEvent

# Android notification extras keys and their event fields.
EXTRA_KEYS = {
    "android.title": "title",
    "android.text": "body_text",
    "android.bigText": "expanded_text",
    "android.subText": "sub_text",
    "android.template": "template_hint",
}

SOURCE_KEYS = ("source_identifier", "package", "packageName")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def event_from_dict(data: Dict[str, Any]) -> NotificationEvent:
    fields: Dict[str, Any] = {}
    extras = data.get("extras") or {}
    for key, name in EXTRA_KEYS.items():
        if key in extras:
            fields[name] = extras[key]
        if key in data:
            fields[name] = data[key]
    for name in ("title", "body_text", "expanded_text", "sub_text", "template_hint"):
        if name in data:
            fields[name] = data[name]

    source = next((data[k] for k in SOURCE_KEYS if data.get(k)), "")
    template = fields.get("template_hint")
    return NotificationEvent(
        source_identifier=_text(source),
        category=data.get("category"),
        template_hint=None if template is None else _text(template),
        title=_text(fields.get("title")),
        body_text=_text(fields.get("body_text")),
        expanded_text=_text(fields.get("expanded_text")),
        sub_text=_text(fields.get("sub_text")),
    )


def load_events(path: str) -> List[NotificationEvent]:
    """Read a JSON array of events, or one JSON object per line."""
    with open(path, "r", encoding="utf-8") as handle:
        content = handle.read()

    stripped = content.strip()
    if not stripped:
        return []
    if stripped.startswith("["):
        return [event_from_dict(item) for item in json.loads(stripped)]
    return [
        event_from_dict(json.loads(line))
        for line in stripped.splitlines()
        if line.strip()
    ]
