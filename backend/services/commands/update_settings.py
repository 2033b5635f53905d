"""
Update Settings Command - saves runtime settings from the admin screen.

POST /api/admin/settings
"""
from typing import Any, Dict, List, Optional
from dataclasses import dataclass

from .base import BaseCommand


@dataclass
class UpdateSettingsResult:
    success: bool
    updated: int = 0
    error: Optional[str] = None
    error_code: Optional[str] = None


class UpdateSettingsCommand(BaseCommand[UpdateSettingsResult]):
    """
    Apply [{'name': ..., 'value': ...}, ...].

    Unknown names are ignored. An empty admin_password is skipped, since the
    settings screen always shows it blank.
    """

    def execute(self, settings: List[Dict[str, Any]]) -> UpdateSettingsResult:
        from django.db import transaction
        from apps.preferences.models import DEFAULT_SETTINGS, Setting

        if not settings:
            return UpdateSettingsResult(success=False, error="No settings given", error_code="VALIDATION_ERROR")

        known = set(DEFAULT_SETTINGS) | set(Setting.objects.values_list('setting_name', flat=True))
        updated = 0
        with transaction.atomic():
            for item in settings:
                name = item.get('name')
                value = item.get('value')
                if name not in known or value is None:
                    continue
                if name == 'admin_password' and value == '':
                    continue
                Setting.set_value(name, str(value))
                updated += 1

        self.publish_event('settings.updated', {'count': updated})
        self.log_info("Settings updated", updated=updated)
        return UpdateSettingsResult(success=True, updated=updated)
