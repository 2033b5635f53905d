"""
Run Mobile Batch Query - several small kiosk reads in one round trip.

POST /api/mobile/batch {"operations": [{"type": "get_settings"}, {"type": "get_liff_id"}]}

Results come back in request order. An unknown type or a failing read only
marks its own slot as failed.
"""
from typing import Any, Dict, List
from dataclasses import dataclass

from django.conf import settings
from django.db import DatabaseError

from .base import BaseQuery

# Never sent to unauthenticated clients.
PRIVATE_SETTINGS = frozenset({
    'admin_username',
    'admin_password',
    'allowed_ip',
    'telegram_bot_token',
    'telegram_groups',
})


@dataclass
class RunMobileBatchResult:
    results: List[Dict[str, Any]]


class RunMobileBatchQuery(BaseQuery[RunMobileBatchResult]):

    def execute(self, operations: List[str]) -> RunMobileBatchResult:
        handlers = {
            'get_settings': self._public_settings,
            'get_liff_id': self._liff_id,
        }

        results = []
        for operation in operations:
            handler = handlers.get(operation)
            if handler is None:
                results.append({'success': False, 'data': None, 'message': 'Unknown operation type'})
                continue
            try:
                results.append({'success': True, 'data': handler()})
            except DatabaseError as e:
                self.log_warning(f"Batch operation {operation} failed: {e}", operation=operation)
                results.append({'success': False, 'data': None, 'message': 'Operation failed'})
        return RunMobileBatchResult(results=results)

    def _public_settings(self) -> Dict[str, str]:
        from apps.preferences.models import DEFAULT_SETTINGS, Setting

        values = {name: value for name, (value, _) in DEFAULT_SETTINGS.items()}
        values.update(Setting.objects.values_list('setting_name', 'setting_value'))
        return {name: value for name, value in values.items() if name not in PRIVATE_SETTINGS}

    def _liff_id(self) -> Dict[str, str]:
        from apps.preferences.models import Setting

        return {'liff_id': Setting.get_value('liff_id') or getattr(settings, 'DEFAULT_LIFF_ID', '')}
