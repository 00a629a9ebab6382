from __future__ import annotations
from typing import Protocol


class NotifierPort(Protocol):
    async def deliver(self, address: str, subject: str, body: str) -> None:
        """Raise NotificationDeliveryError on failure."""
        ...
