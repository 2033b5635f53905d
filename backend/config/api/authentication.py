"""
DRF Authentication class for admin JWTs.

Tokens are issued by POST /api/admin/login (AdminLoginCommand).
"""
from dataclasses import dataclass

import jwt
from rest_framework import authentication, exceptions, permissions
from django.conf import settings

from services.commands.admin_login import ADMIN_ROLE


@dataclass(frozen=True)
class AdminPrincipal:
    """The authenticated admin. There are no per-user admin accounts."""
    username: str

    is_authenticated = True
    is_admin = True


class AdminJWTAuthentication(authentication.BaseAuthentication):
    """
    Authorization header format:
    - Bearer <jwt_token>
    """
    
    def authenticate(self, request):
        auth_header = request.META.get('HTTP_AUTHORIZATION', '')
        
        if not auth_header.startswith('Bearer '):
            return None
        
        token = auth_header[7:]  # Remove 'Bearer ' prefix
        
        if not token:
            return None
        
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=['HS256']
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError:
            raise exceptions.AuthenticationFailed('Invalid token')
        
        if payload.get('role') != ADMIN_ROLE or not payload.get('sub'):
            raise exceptions.AuthenticationFailed('Invalid token')
        
        return (AdminPrincipal(username=payload['sub']), token)
    
    def authenticate_header(self, request):
        return 'Bearer'


class IsAdmin(permissions.BasePermission):
    message = 'Admin login required'

    def has_permission(self, request, view):
        return bool(getattr(request.user, 'is_admin', False))
