"""Error types raised by device backends and voices."""

from __future__ import annotations

from typing import Optional


class RingGuardError(Exception):
    """Base exception for all RingGuard errors."""

    code: str = "UNKNOWN_ERROR"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PermissionDenied(RingGuardError):
    """Interruption-policy (DND) access has not been granted."""

    code = "PERMISSION_DENIED"


class ResourceUnavailable(RingGuardError):
    """An audio, vibration or torch service is missing on this host."""

    code = "RESOURCE_UNAVAILABLE"


class VerificationMismatch(RingGuardError):
    """A device-state change did not read back as written."""

    code = "VERIFICATION_MISMATCH"

    def __init__(self, message: str, expected=None, actual=None):
        super().__init__(message, {"expected": expected, "actual": actual})
        self.expected = expected
        self.actual = actual
