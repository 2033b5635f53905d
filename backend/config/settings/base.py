"""
Base settings for the time clock backend.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-change-this-in-production')

DEBUG = os.environ.get('DEBUG', 'True').lower() in ('true', '1', 'yes')

ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    
    # Third party apps
    'corsheaders',
    'rest_framework',
    
    # Local apps
    'apps.employees',
    'apps.timelogs',
    'apps.preferences',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'timeclock'),
        'USER': os.environ.get('DB_USER', 'timeclock'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'timeclock'),
        'HOST': os.environ.get('DB_HOST', 'localhost'),
        'PORT': os.environ.get('DB_PORT', '5432'),
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

LANGUAGE_CODE = 'en-us'
# Business days (one clock-in per day) are calendar days in this zone.
TIME_ZONE = os.environ.get('TIME_ZONE', 'Asia/Bangkok')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'config.api.authentication.AdminJWTAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'config.api.authentication.IsAdmin',
    ],
    'UNAUTHENTICATED_USER': None,
}

# CORS settings - allow all origins in development, override in production
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_HEADERS = [
    'accept',
    'accept-encoding',
    'authorization',
    'content-type',
    'dnt',
    'origin',
    'user-agent',
    'x-csrftoken',
    'x-requested-with',
    'x-mobile-client',
]
CORS_ALLOW_METHODS = [
    'DELETE',
    'GET',
    'OPTIONS',
    'PATCH',
    'POST',
    'PUT',
]

# Infrastructure settings
_redis_host = os.environ.get('REDIS_HOST', 'localhost')
_redis_port = os.environ.get('REDIS_PORT', '6379')
_redis_password = os.environ.get('REDIS_PASSWORD', '')
REDIS_URL = os.environ.get('REDIS_URL', f'redis://:{_redis_password}@{_redis_host}:{_redis_port}/0' if _redis_password else f'redis://{_redis_host}:{_redis_port}/0')

_rabbitmq_host = os.environ.get('RABBITMQ_HOST', 'localhost')
_rabbitmq_port = os.environ.get('RABBITMQ_PORT', '5672')
_rabbitmq_user = os.environ.get('RABBITMQ_USER', 'guest')
_rabbitmq_pass = os.environ.get('RABBITMQ_PASS', 'guest')
RABBITMQ_URL = os.environ.get('RABBITMQ_URL', f'amqp://{_rabbitmq_user}:{_rabbitmq_pass}@{_rabbitmq_host}:{_rabbitmq_port}/')
EVENT_EXCHANGE = os.environ.get('EVENT_EXCHANGE', 'timeclock_events')

# Telegram notifications (token and groups are runtime settings)
TELEGRAM_API_URL = os.environ.get('TELEGRAM_API_URL', 'https://api.telegram.org')

# Time clock specific settings
DEFAULT_LIFF_ID = os.environ.get('DEFAULT_LIFF_ID', '')
EMPLOYEE_CACHE_TTL = int(os.environ.get('EMPLOYEE_CACHE_TTL', 300))  # 5 minutes
ADMIN_TOKEN_TTL = int(os.environ.get('ADMIN_TOKEN_TTL', 12 * 3600))

# Sentry configuration
SENTRY_DSN = os.environ.get('SENTRY_DSN', '')
if SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[DjangoIntegration()],
        traces_sample_rate=0.1,
        send_default_pii=False,
        environment=os.environ.get('ENVIRONMENT', 'development'),
    )
