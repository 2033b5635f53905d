"""
Compatibility reads for older LIFF front-ends.

- GET /api/getLiffId
- GET /api/getTimeOffset
"""
from rest_framework.permissions import AllowAny

from .base import BaseViewSet
from services.queries import GetAppConfigQuery


class CompatViewSet(BaseViewSet):

    authentication_classes = []
    permission_classes = [AllowAny]

    def liff_id(self, request):
        result = self.get_query(GetAppConfigQuery).execute()
        return self.success({'success': True, 'liffId': result.liff_id})

    def time_offset(self, request):
        result = self.get_query(GetAppConfigQuery).execute()
        return self.success({'success': True, 'timeOffset': result.time_offset})
