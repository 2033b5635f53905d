"""
Get Settings Query - all runtime settings for the admin screen.

GET /api/admin/settings
"""
from typing import Any, Dict, List
from dataclasses import dataclass

from .base import BaseQuery

HIDDEN_SETTINGS = frozenset({'admin_password'})


@dataclass
class GetSettingsResult:
    settings: List[Dict[str, Any]]


class GetSettingsQuery(BaseQuery[GetSettingsResult]):

    def execute(self) -> GetSettingsResult:
        from apps.preferences.models import Setting

        Setting.ensure_defaults()
        rows = []
        for setting in Setting.objects.order_by('setting_name'):
            rows.append({
                'id': setting.id,
                'setting_name': setting.setting_name,
                'setting_value': '' if setting.setting_name in HIDDEN_SETTINGS else setting.setting_value,
                'description': setting.description,
            })
        return GetSettingsResult(settings=rows)
