"""Notifier protocol — user-visible notice channel abstraction."""
from typing import Protocol


class Notifier(Protocol):
    """Abstract interface for showing a notice to the user."""

    async def send_notice(self, message: str, subject: str = "") -> bool: ...
