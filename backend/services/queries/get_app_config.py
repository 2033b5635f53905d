"""
Get App Config Query - client configuration for the mobile shell.

GET /api/mobile/config, /api/getLiffId, /api/getTimeOffset
"""
from typing import Any, Dict
from dataclasses import dataclass

from django.conf import settings

from .base import BaseQuery

DEFAULT_TIME_OFFSET = 420  # minutes east of UTC


@dataclass
class GetAppConfigResult:
    liff_id: str
    time_offset: int
    organization_name: str
    app_version: str
    location_required: bool
    notification_enabled: bool
    offline_mode: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'liff_id': self.liff_id,
            'time_offset': self.time_offset,
            'organization_name': self.organization_name,
            'app_version': self.app_version,
            'features': {
                'location_required': self.location_required,
                'notification_enabled': self.notification_enabled,
                'offline_mode': self.offline_mode,
            },
        }


class GetAppConfigQuery(BaseQuery[GetAppConfigResult]):

    def execute(self) -> GetAppConfigResult:
        from apps.preferences.models import Setting

        try:
            time_offset = int(Setting.get_value('time_offset'))
        except (TypeError, ValueError):
            time_offset = DEFAULT_TIME_OFFSET

        return GetAppConfigResult(
            liff_id=Setting.get_value('liff_id') or getattr(settings, 'DEFAULT_LIFF_ID', ''),
            time_offset=time_offset,
            organization_name=Setting.get_value('organization_name'),
            app_version=Setting.get_value('mobile_app_version'),
            location_required=Setting.get_flag('require_location'),
            notification_enabled=Setting.get_flag('notify_clock_in') or Setting.get_flag('notify_clock_out'),
            offline_mode=Setting.get_flag('enable_offline_mode'),
        )
