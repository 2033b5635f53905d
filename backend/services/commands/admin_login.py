"""
Admin Login Command - checks admin credentials and issues a JWT.

POST /api/admin/login
"""
from typing import Optional
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from django.conf import settings

from .base import BaseCommand

ADMIN_ROLE = 'admin'


@dataclass
class AdminLoginResult:
    success: bool
    token: Optional[str] = None
    expires_in: int = 0
    error: Optional[str] = None
    error_code: Optional[str] = None


def issue_admin_token(username: str, ttl_seconds: int) -> str:
    # Token validity is checked by PyJWT against wall-clock time.
    now = datetime.now(tz=timezone.utc)
    payload = {
        'sub': username,
        'role': ADMIN_ROLE,
        'iat': now,
        'exp': now + timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm='HS256')


class AdminLoginCommand(BaseCommand[AdminLoginResult]):
    """Plain credential check against the admin_username / admin_password settings."""

    def execute(self, username: str, password: str) -> AdminLoginResult:
        from apps.preferences.models import Setting

        if not username or not password:
            return AdminLoginResult(
                success=False,
                error="Username and password are required",
                error_code="VALIDATION_ERROR"
            )

        if username != Setting.get_value('admin_username') or password != Setting.get_value('admin_password'):
            self.log_warning("Admin login failed", username=username)
            return AdminLoginResult(
                success=False,
                error="Invalid username or password",
                error_code="INVALID_CREDENTIALS"
            )

        ttl = getattr(settings, 'ADMIN_TOKEN_TTL', 12 * 3600)
        self.log_info("Admin logged in", username=username)
        return AdminLoginResult(success=True, token=issue_admin_token(username, ttl), expires_in=ttl)
