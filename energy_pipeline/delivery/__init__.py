"""Telegram delivery of briefings and operator notifications."""

from .formatter import format_analysis_message, split_message
from .subscribers import SubscriberDelivery
from .telegram import TelegramClient, TelegramNotifier

__all__ = [
    "SubscriberDelivery",
    "TelegramClient",
    "TelegramNotifier",
    "format_analysis_message",
    "split_message",
]
