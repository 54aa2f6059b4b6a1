"""Notification feed adapter: classify posted notifications and respond."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from .actuator import AlertActuator
from .classifier import NotificationClassifier
from .logging_utils import mask_number
from .models import ClassificationVerdict, NotificationEvent, TrustedContact
from .override import DeviceStateOverride

logger = logging.getLogger("ringguard")


class NotificationListener:
    """Glue between a notification feed and the alerting core.

    Classification runs on the delivering thread. The override and the alert
    run on one background worker, so back-to-back matches are handled in
    order and never overlap.
    """

    def __init__(
        self,
        classifier: NotificationClassifier,
        contacts: Callable[[], List[TrustedContact]],
        monitoring_enabled: Callable[[], bool],
        override: DeviceStateOverride,
        actuator: AlertActuator,
    ) -> None:
        self.classifier = classifier
        self._contacts = contacts
        self._monitoring_enabled = monitoring_enabled
        self.override = override
        self.actuator = actuator
        self.connected = False
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="ringguard-alert"
        )

    def on_listener_connected(self) -> None:
        self.connected = True
        logger.info("Notification listener connected")

    def on_listener_disconnected(self) -> None:
        self.connected = False
        logger.warning("Notification listener disconnected; no calls will be seen")

    def on_notification_posted(self, event: Optional[NotificationEvent]) -> Optional[Future]:
        """Classify one event; returns the alert job's future on a match."""
        if event is None or not event.source_identifier:
            return None
        try:
            if not self._monitoring_enabled():
                logger.debug("Monitoring paused; ignoring %s", event.source_identifier)
                return None

            if not self.classifier.is_monitored(event.source_identifier):
                if self.classifier.looks_call_related(event.source_identifier):
                    logger.info(
                        "Unmonitored source looks call related (add it?): %s",
                        event.source_identifier,
                    )
                return None

            verdict = self.classifier.classify(event, self._contacts())
        except Exception:
            logger.exception("Classification failed for %s", event.source_identifier)
            return None

        self._log_verdict(event, verdict)
        if verdict.matched_contact is None:
            return None
        return self._executor.submit(self._respond, verdict.matched_contact)

    def _log_verdict(self, event: NotificationEvent, verdict: ClassificationVerdict) -> None:
        if not verdict.is_incoming_call:
            logger.debug("Not a call: %s title=%r", event.source_identifier, event.title)
            return
        if verdict.matched_contact is None:
            logger.info(
                "Incoming call from %s (signals=%s) matched no trusted contact",
                event.source_identifier,
                ",".join(verdict.signals),
            )
            return
        logger.warning(
            "Trusted caller %s (%s) via %s (signals=%s)",
            verdict.matched_contact.display_name,
            mask_number(verdict.matched_contact.phone_number),
            event.source_identifier,
            ",".join(verdict.signals),
        )

    def _respond(self, contact: TrustedContact) -> bool:
        logger.info("Overriding silent mode for %s", contact.display_name)
        try:
            self.override.force_audible()
        except Exception:
            logger.exception("Device override failed")
        return self.actuator.trigger()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
