"""
Queued clock actions.

A QueuedAction is a clock-in or clock-out that could not be sent because the
device was offline. `kind` is the discriminant; `payload` is the exact body
the mobile API expects, so a replay is byte-for-byte the original request.
"""
import enum
import random
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional


class ActionKind(str, enum.Enum):
    CLOCK_IN = 'clockin'
    CLOCK_OUT = 'clockout'

    @property
    def path(self) -> str:
        """Mobile API endpoint the action is replayed against."""
        return f'/api/mobile/{self.value}'


@dataclass(frozen=True)
class ClockPayload:
    """Request body of POST /api/mobile/clockin and /clockout."""
    employee: str
    client_time: str
    userinfo: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    line_name: Optional[str] = None
    line_picture: Optional[str] = None

    def to_body(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}

    @classmethod
    def from_body(cls, body: Dict[str, Any]) -> 'ClockPayload':
        return cls(
            employee=body['employee'],
            client_time=body['client_time'],
            userinfo=body.get('userinfo'),
            lat=body.get('lat'),
            lon=body.get('lon'),
            line_name=body.get('line_name'),
            line_picture=body.get('line_picture'),
        )


def new_action_id(now: float) -> str:
    """Millisecond timestamp plus random suffix; sorts roughly by creation."""
    return f'{int(now * 1000):013d}-{random.getrandbits(32):08x}'


@dataclass(frozen=True)
class QueuedAction:
    id: str
    kind: ActionKind
    payload: ClockPayload
    enqueued_at: float
    seq: Optional[int] = field(default=None, compare=False)

    @classmethod
    def create(cls, kind: ActionKind, payload: ClockPayload, now: float) -> 'QueuedAction':
        return cls(id=new_action_id(now), kind=kind, payload=payload, enqueued_at=now)

    def to_record(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'kind': self.kind.value,
            'payload': self.payload.to_body(),
            'enqueued_at': self.enqueued_at,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any], seq: Optional[int] = None) -> 'QueuedAction':
        return cls(
            id=record['id'],
            kind=ActionKind(record['kind']),
            payload=ClockPayload.from_body(record['payload']),
            enqueued_at=float(record['enqueued_at']),
            seq=seq,
        )

    def age(self, now: float) -> float:
        return max(0.0, now - self.enqueued_at)
