"""
Clock-in/clock-out notifications (Telegram).
"""
from .service import ClockNotifier, TelegramNotifier, FakeClockNotifier, format_clock_message

__all__ = ['ClockNotifier', 'TelegramNotifier', 'FakeClockNotifier', 'format_clock_message']
