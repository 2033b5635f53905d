"""
Preferences Domain Models

- Setting (runtime-editable key/value configuration: organization name,
  Telegram targets, admin credentials, LIFF id, notification toggles)
"""
import json

from django.conf import settings as django_settings
from django.db import models


DEFAULT_SETTINGS = {
    'organization_name': ('Head Office', 'Organization name'),
    'work_start_time': ('08:30', 'Work start time'),
    'work_end_time': ('16:30', 'Work end time'),
    'allowed_ip': ('', 'Allowed IP address'),
    'telegram_bot_token': ('', 'Telegram bot token'),
    'telegram_groups': (
        json.dumps([{'name': 'Main group', 'chat_id': '', 'active': True}]),
        'Telegram groups receiving notifications'
    ),
    'notify_clock_in': ('1', 'Notify on clock-in'),
    'notify_clock_out': ('1', 'Notify on clock-out'),
    'admin_username': ('admin', 'Admin username'),
    'admin_password': ('admin123', 'Admin password'),
    'liff_id': (getattr(django_settings, 'DEFAULT_LIFF_ID', ''), 'LINE LIFF ID'),
    'time_offset': ('420', 'Time offset (minutes)'),
    'mobile_app_version': ('1.0.0', 'Mobile app version'),
    'enable_offline_mode': ('1', 'Enable offline mode'),
    'require_location': ('1', 'Require GPS location'),
}


class Setting(models.Model):
    """One named configuration value."""

    setting_name = models.CharField(max_length=100, unique=True)
    setting_value = models.TextField(blank=True, default='')
    description = models.CharField(max_length=255, blank=True, default='')

    class Meta:
        verbose_name = 'Setting'
        verbose_name_plural = 'Settings'
        ordering = ['setting_name']

    def __str__(self):
        return self.setting_name

    @classmethod
    def get_value(cls, name: str, default: str = None) -> str:
        row = cls.objects.filter(setting_name=name).values_list('setting_value', flat=True).first()
        if row is None:
            if default is not None:
                return default
            return DEFAULT_SETTINGS.get(name, ('', ''))[0]
        return row

    @classmethod
    def get_flag(cls, name: str) -> bool:
        return cls.get_value(name) == '1'

    @classmethod
    def get_json(cls, name: str, default=None):
        raw = cls.get_value(name)
        try:
            return json.loads(raw) if raw else default
        except ValueError:
            return default

    @classmethod
    def set_value(cls, name: str, value: str) -> None:
        description = DEFAULT_SETTINGS.get(name, ('', ''))[1]
        cls.objects.update_or_create(
            setting_name=name,
            defaults={'setting_value': value, 'description': description},
        )

    @classmethod
    def ensure_defaults(cls) -> int:
        """Insert missing default settings. Returns how many were created."""
        created = 0
        for name, (value, description) in DEFAULT_SETTINGS.items():
            _, was_created = cls.objects.get_or_create(
                setting_name=name,
                defaults={'setting_value': value, 'description': description},
            )
            created += int(was_created)
        return created
