"""Fan a notice out to every configured channel."""
from __future__ import annotations

import logging

from ..config import NotificationsConfig
from ..interfaces.notifier import Notifier
from .console import ConsoleNotifier
from .telegram import TelegramNotifier

logger = logging.getLogger(__name__)


class NoticeDispatcher:
    """Deliver user-visible notices; a broken channel never breaks the caller."""

    def __init__(self, notifiers: list[Notifier]) -> None:
        self._notifiers = list(notifiers)

    @classmethod
    def from_config(cls, config: NotificationsConfig) -> NoticeDispatcher:
        notifiers: list[Notifier] = []
        if config.console.enabled:
            notifiers.append(ConsoleNotifier())
        if config.telegram.enabled:
            notifiers.append(TelegramNotifier(config.telegram))
        return cls(notifiers)

    async def notify(self, message: str, subject: str = "") -> None:
        logger.info("Notice: %s", message)
        for notifier in self._notifiers:
            try:
                await notifier.send_notice(message, subject=subject)
            except Exception as e:
                logger.error("Notifier send_notice failed: %s", e)
