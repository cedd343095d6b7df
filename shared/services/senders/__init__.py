"""Отправщики уведомлений."""

from .telegram_sender import TelegramNotificationSender

__all__ = [
    "TelegramNotificationSender",
]
