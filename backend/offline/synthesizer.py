"""
Offline Response Synthesizer.

Last resort for API reads when neither the network nor the API cache can
answer: a well-formed JSON body shaped like the real endpoint, so the UI
renders an empty state instead of an error page.
"""
import logging
from typing import List, Literal, Tuple, Type, Union

import httpx
from pydantic import BaseModel, Field

from infrastructure.clock import Clock

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = 'No internet connection'
SERVED_BY = 'OfflineSynthesizer'


class OfflineTodayStats(BaseModel):
    date: str
    total_employees: int = 0
    checked_in: int = 0
    not_checked_out: int = 0
    checked_out: int = 0


class OfflineRoster(BaseModel):
    variant: Literal['roster'] = Field('roster', exclude=True)
    success: bool = False
    msg: str = OFFLINE_MESSAGE
    offline: bool = True
    employees: List[dict] = Field(default_factory=list)


class OfflineDashboard(BaseModel):
    variant: Literal['dashboard'] = Field('dashboard', exclude=True)
    success: bool = False
    msg: str = OFFLINE_MESSAGE
    offline: bool = True
    today: OfflineTodayStats


class OfflineConfigId(BaseModel):
    variant: Literal['config_id'] = Field('config_id', exclude=True)
    success: bool = True
    liffId: str


class OfflineFailure(BaseModel):
    variant: Literal['failure'] = Field('failure', exclude=True)
    success: bool = False
    msg: str = OFFLINE_MESSAGE


OfflineBody = Union[OfflineRoster, OfflineDashboard, OfflineConfigId, OfflineFailure]

# Path substring -> variant, checked in order.
SYNTHESIS_TABLE: Tuple[Tuple[str, Type[BaseModel]], ...] = (
    ('/employees', OfflineRoster),
    ('/dashboard', OfflineDashboard),
    ('/getLiffId', OfflineConfigId),
)


class OfflineSynthesizer:
    """Builds placeholder bodies for API paths that have no cached answer."""

    def __init__(self, clock: Clock, default_liff_id: str = '', time_zone: str = 'Asia/Bangkok'):
        self._clock = clock
        self._default_liff_id = default_liff_id
        self._time_zone = time_zone

    def body_for(self, path: str) -> OfflineBody:
        for fragment, variant in SYNTHESIS_TABLE:
            if fragment not in path:
                continue
            if variant is OfflineDashboard:
                today = self._clock.local_date(self._time_zone).isoformat()
                return OfflineDashboard(today=OfflineTodayStats(date=today))
            if variant is OfflineConfigId:
                return OfflineConfigId(liffId=self._default_liff_id)
            return variant()
        return OfflineFailure()

    def synthesize(self, path: str, request: httpx.Request = None) -> httpx.Response:
        body = self.body_for(path)
        logger.info("Synthesized offline response", extra={'path': path, 'variant': body.variant})
        return httpx.Response(
            200,
            headers={'X-Served-By': SERVED_BY},
            json=body.model_dump(),
            request=request,
        )
