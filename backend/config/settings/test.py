"""
Test settings: in-memory SQLite and fake infrastructure (USE_FAKES).
"""
import os

os.environ.setdefault('USE_FAKES', 'true')

from .base import *

DEBUG = False

SECRET_KEY = 'test-secret-key-not-for-production-use'

ALLOWED_HOSTS = ['*']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

TIME_ZONE = 'Asia/Bangkok'
DEFAULT_LIFF_ID = 'test-liff-id'
SENTRY_DSN = ''

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'null': {'class': 'logging.NullHandler'},
    },
    'root': {
        'handlers': ['null'],
        'level': 'WARNING',
    },
}
