"""
Client-side configuration for the offline sync runtime.

Read from TIMECLOCK_* environment variables, the same way the server
reads its infrastructure settings in config/settings/base.py.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple


DEFAULT_CACHEABLE_API_PREFIXES = (
    '/api/mobile/employees',
    '/api/mobile/dashboard',
    '/api/mobile/config',
    '/api/getLiffId',
    '/api/getTimeOffset',
)

DEFAULT_STATIC_RESOURCES = (
    '/',
    '/index.html',
    '/offline.html',
    '/css/style.css',
    '/css/mobile-optimized.css',
    '/js/main.js',
    '/js/mobile-core.js',
    '/js/mobile-ui.js',
    '/js/mobile-app.js',
    '/manifest.json',
)


def _csv(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(',') if item.strip())


@dataclass
class OfflineSettings:
    """Settings for OfflineRuntime and its components."""

    base_url: str = 'http://localhost:8000'
    api_prefix: str = '/api/'
    cache_version: str = 'v1.2'

    cacheable_api_prefixes: Tuple[str, ...] = DEFAULT_CACHEABLE_API_PREFIXES
    static_resources: Tuple[str, ...] = DEFAULT_STATIC_RESOURCES
    offline_page: str = '/offline.html'
    health_path: str = '/api/mobile/health'

    api_cache_max_age: int = 3600  # seconds
    memory_cache_ttl: float = 30.0  # seconds
    sync_interval: float = 300.0  # seconds

    data_dir: Path = field(default_factory=lambda: Path.home() / '.timeclock')
    default_liff_id: str = ''
    time_zone: str = 'Asia/Bangkok'
    request_timeout: float = 10.0

    @property
    def static_cache_name(self) -> str:
        return f'static-{self.cache_version}'

    @property
    def api_cache_name(self) -> str:
        return f'api-{self.cache_version}'

    @property
    def current_cache_names(self) -> Tuple[str, str]:
        return (self.static_cache_name, self.api_cache_name)

    @property
    def queue_path(self) -> Path:
        return Path(self.data_dir) / 'pending_actions.sqlite3'

    @property
    def cache_path(self) -> Path:
        return Path(self.data_dir) / 'response_cache.sqlite3'

    def is_cacheable_api(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.cacheable_api_prefixes)

    @classmethod
    def from_env(cls) -> 'OfflineSettings':
        env = os.environ
        defaults = cls()
        return cls(
            base_url=env.get('TIMECLOCK_BASE_URL', defaults.base_url).rstrip('/'),
            api_prefix=env.get('TIMECLOCK_API_PREFIX', defaults.api_prefix),
            cache_version=env.get('TIMECLOCK_CACHE_VERSION', defaults.cache_version),
            cacheable_api_prefixes=_csv(env['TIMECLOCK_CACHEABLE_APIS'])
            if env.get('TIMECLOCK_CACHEABLE_APIS') else defaults.cacheable_api_prefixes,
            static_resources=_csv(env['TIMECLOCK_STATIC_RESOURCES'])
            if env.get('TIMECLOCK_STATIC_RESOURCES') else defaults.static_resources,
            api_cache_max_age=int(env.get('TIMECLOCK_API_CACHE_MAX_AGE', defaults.api_cache_max_age)),
            memory_cache_ttl=float(env.get('TIMECLOCK_MEMORY_CACHE_TTL', defaults.memory_cache_ttl)),
            sync_interval=float(env.get('TIMECLOCK_SYNC_INTERVAL', defaults.sync_interval)),
            data_dir=Path(env.get('TIMECLOCK_DATA_DIR', str(defaults.data_dir))),
            default_liff_id=env.get('TIMECLOCK_DEFAULT_LIFF_ID', defaults.default_liff_id),
            time_zone=env.get('TIMECLOCK_TIME_ZONE', defaults.time_zone),
            request_timeout=float(env.get('TIMECLOCK_REQUEST_TIMEOUT', defaults.request_timeout)),
        )
