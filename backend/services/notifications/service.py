"""
Telegram notifications for clock events.

Targets and toggles are runtime settings (apps.preferences.Setting):
telegram_bot_token, telegram_groups, notify_clock_in, notify_clock_out.
Delivery is best-effort: every failure is logged and swallowed.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from django.conf import settings

from utils.datetime import to_local

logger = logging.getLogger(__name__)

CLOCK_IN = 'clock_in'
CLOCK_OUT = 'clock_out'

_TITLES = {
    CLOCK_IN: 'Clock-in',
    CLOCK_OUT: 'Clock-out',
}


def format_clock_message(
    kind: str,
    employee_name: str,
    timestamp: datetime,
    tz_name: str,
    note: Optional[str] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    line_name: Optional[str] = None,
    recorded_by_admin: bool = False,
) -> str:
    """Markdown message body sent to every Telegram group."""
    local = to_local(timestamp, tz_name)
    title = _TITLES.get(kind, kind)
    if recorded_by_admin:
        title += ' (recorded by admin)'

    lines = [
        f'⏱ {title}',
        f'👤 Name: *{employee_name}*',
        f'📅 Date: *{local:%A %d %B %Y}*',
        f'🕒 Time: *{local:%H:%M:%S}*',
    ]
    if line_name:
        lines.append(f'💬 LINE name: *{line_name}*')
    if note and kind == CLOCK_IN:
        lines.append(f'📝 Note: *{note}*')
    if lat is not None and lon is not None:
        lines.append(f'📍 Location: *{lat}, {lon}*')
        lines.append(f'🗺 Map: [Open map](https://www.google.com/maps/place/{lat},{lon})')
    else:
        lines.append('📍 Location: *not available*')
    return '\n'.join(lines)


class ClockNotifier(ABC):
    """Notification channel for clock events."""

    @abstractmethod
    def notify_clock(
        self,
        kind: str,
        employee_name: str,
        timestamp: datetime,
        note: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        line_name: Optional[str] = None,
        recorded_by_admin: bool = False,
    ) -> None:
        pass


class TelegramNotifier(ClockNotifier):
    """Posts clock messages to every active group in telegram_groups."""

    def __init__(self, api_url: str = None, timeout: float = 10.0, transport: httpx.BaseTransport = None):
        self._api_url = (api_url or getattr(settings, 'TELEGRAM_API_URL', 'https://api.telegram.org')).rstrip('/')
        self._timeout = timeout
        self._transport = transport

    def notify_clock(
        self,
        kind: str,
        employee_name: str,
        timestamp: datetime,
        note: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        line_name: Optional[str] = None,
        recorded_by_admin: bool = False,
    ) -> None:
        from apps.preferences.models import Setting

        toggle = 'notify_clock_in' if kind == CLOCK_IN else 'notify_clock_out'
        if not Setting.get_flag(toggle):
            return

        token = Setting.get_value('telegram_bot_token')
        if not token:
            logger.warning("Telegram bot token not set, notification skipped")
            return

        groups = self._active_groups(Setting.get_json('telegram_groups', default=[]))
        if not groups:
            logger.warning("No Telegram groups configured, notification skipped")
            return

        text = format_clock_message(
            kind, employee_name, timestamp, settings.TIME_ZONE,
            note=note, lat=lat, lon=lon, line_name=line_name,
            recorded_by_admin=recorded_by_admin,
        )
        self._send_to_groups(token, groups, text)

    def _active_groups(self, groups: Any) -> List[Dict[str, Any]]:
        if not isinstance(groups, list):
            logger.error("telegram_groups setting is not a list")
            return []
        return [g for g in groups if isinstance(g, dict) and g.get('active') and g.get('chat_id')]

    def _send_to_groups(self, token: str, groups: List[Dict[str, Any]], text: str) -> int:
        url = f"{self._api_url}/bot{token}/sendMessage"
        sent = 0
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            for group in groups:
                try:
                    response = client.post(url, json={
                        'chat_id': group['chat_id'],
                        'text': text,
                        'parse_mode': 'Markdown',
                    })
                except httpx.HTTPError as e:
                    logger.error(f"Telegram send to {group.get('name')} failed: {e}")
                    continue
                if response.status_code != 200:
                    logger.error(f"Telegram API error for {group.get('name')}: {response.status_code} - {response.text}")
                    continue
                sent += 1
        logger.info(f"Telegram notification sent to {sent}/{len(groups)} groups")
        return sent


class FakeClockNotifier(ClockNotifier):
    """
    In-memory notifier for testing.
    Records every call; set fail to make calls raise.
    """

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.fail = False

    def notify_clock(self, kind: str, employee_name: str, timestamp: datetime, **details) -> None:
        if self.fail:
            raise RuntimeError('notification channel unavailable')
        self.calls.append({'kind': kind, 'employee_name': employee_name, 'timestamp': timestamp, **details})

    def clear(self) -> None:
        self.calls.clear()
