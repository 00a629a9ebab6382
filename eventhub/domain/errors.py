# eventhub/domain/errors.py
from __future__ import annotations


class EventHubError(Exception):
    """Base for all workflow errors."""


class StoreError(EventHubError):
    """
    Any failure from a query/mutation/auth/subscription call.
    `code` is one of: not_found, permission_denied, constraint, invalid, unavailable.
    """

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    CONSTRAINT = "constraint"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"

    def __init__(self, message: str, code: str = UNAVAILABLE) -> None:
        super().__init__(message)
        self.code = code

    @classmethod
    def not_found(cls, message: str) -> "StoreError":
        return cls(message, cls.NOT_FOUND)

    @classmethod
    def denied(cls, message: str = "permission denied") -> "StoreError":
        return cls(message, cls.PERMISSION_DENIED)


class ResolutionError(EventHubError):
    """The viewer cannot be mapped to a set of owned venues/suppliers."""


class NotificationDeliveryError(EventHubError):
    """Best-effort side channel failed; never escapes send_notification."""
