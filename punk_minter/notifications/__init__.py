"""Notification modules."""
from .console import ConsoleNotifier
from .dispatcher import NoticeDispatcher
from .telegram import TelegramNotifier

__all__ = ["ConsoleNotifier", "NoticeDispatcher", "TelegramNotifier"]
