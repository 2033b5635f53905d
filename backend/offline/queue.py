"""
Persistent Action Queue.

Durable store of clock actions waiting to be replayed. Two logical
collections (clockin, clockout) live in one table; the auto-assigned `seq`
key defines insertion order, which is the order the sync engine replays in.

Only SyncEngine (drain) and MobileApiClient (enqueue) touch the queue.
"""
import asyncio
import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from offline.actions import ActionKind, QueuedAction
from offline.errors import QueueError, QueueWriteError

logger = logging.getLogger(__name__)


class ActionQueue(ABC):
    """Abstract persistent queue of QueuedAction records."""

    @abstractmethod
    async def add(self, action: QueuedAction) -> QueuedAction:
        """Persist action. Returns it with its storage key assigned."""
        pass

    @abstractmethod
    async def list_all(self, kind: Optional[ActionKind] = None) -> List[QueuedAction]:
        """All queued actions (optionally of one kind) in insertion order."""
        pass

    @abstractmethod
    async def delete(self, action_id: str) -> None:
        pass

    async def count(self, kind: Optional[ActionKind] = None) -> int:
        return len(await self.list_all(kind))

    async def oldest(self) -> Optional[QueuedAction]:
        actions = await self.list_all()
        return actions[0] if actions else None

    async def close(self) -> None:
        pass


class SQLiteActionQueue(ActionQueue):
    """
    SQLite-backed queue.

    sqlite3 calls run in a worker thread (asyncio.to_thread) so the event
    loop is never blocked on disk I/O; a lock serializes access to the
    shared connection.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
        with self._lock, self._conn:
            self._conn.execute(
                'CREATE TABLE IF NOT EXISTS pending_actions ('
                ' seq INTEGER PRIMARY KEY AUTOINCREMENT,'
                ' id TEXT NOT NULL UNIQUE,'
                ' kind TEXT NOT NULL,'
                ' payload TEXT NOT NULL,'
                ' enqueued_at REAL NOT NULL)'
            )
            self._conn.execute(
                'CREATE INDEX IF NOT EXISTS idx_pending_actions_kind ON pending_actions(kind, seq)'
            )

    def _insert(self, action: QueuedAction) -> int:
        with self._lock, self._conn:
            cursor = self._conn.execute(
                'INSERT INTO pending_actions (id, kind, payload, enqueued_at) VALUES (?, ?, ?, ?)',
                (action.id, action.kind.value, json.dumps(action.payload.to_body()), action.enqueued_at),
            )
            return cursor.lastrowid

    def _select(self, kind: Optional[ActionKind]) -> List[QueuedAction]:
        sql = 'SELECT seq, id, kind, payload, enqueued_at FROM pending_actions'
        params = ()
        if kind is not None:
            sql += ' WHERE kind = ?'
            params = (kind.value,)
        sql += ' ORDER BY seq'
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [
            QueuedAction.from_record(
                {'id': id_, 'kind': kind_, 'payload': json.loads(payload), 'enqueued_at': enqueued_at},
                seq=seq,
            )
            for seq, id_, kind_, payload, enqueued_at in rows
        ]

    def _remove(self, action_id: str) -> None:
        with self._lock, self._conn:
            self._conn.execute('DELETE FROM pending_actions WHERE id = ?', (action_id,))

    async def add(self, action: QueuedAction) -> QueuedAction:
        try:
            seq = await asyncio.to_thread(self._insert, action)
        except sqlite3.Error as e:
            raise QueueWriteError(f'could not persist {action.kind.value} action: {e}') from e
        logger.info("Queued offline action", extra={'action_id': action.id, 'kind': action.kind.value})
        return QueuedAction(action.id, action.kind, action.payload, action.enqueued_at, seq=seq)

    async def list_all(self, kind: Optional[ActionKind] = None) -> List[QueuedAction]:
        try:
            return await asyncio.to_thread(self._select, kind)
        except sqlite3.Error as e:
            raise QueueError(f'could not read pending actions: {e}') from e

    async def delete(self, action_id: str) -> None:
        try:
            await asyncio.to_thread(self._remove, action_id)
        except sqlite3.Error as e:
            raise QueueError(f'could not delete action {action_id}: {e}') from e

    async def close(self) -> None:
        with self._lock:
            self._conn.close()


class FakeActionQueue(ActionQueue):
    """In-memory queue for tests. Set fail_writes to simulate a full disk."""

    def __init__(self):
        self._actions: List[QueuedAction] = []
        self._next_seq = 1
        self.fail_writes = False

    async def add(self, action: QueuedAction) -> QueuedAction:
        if self.fail_writes:
            raise QueueWriteError('storage unavailable')
        stored = QueuedAction(action.id, action.kind, action.payload, action.enqueued_at, seq=self._next_seq)
        self._next_seq += 1
        self._actions.append(stored)
        return stored

    async def list_all(self, kind: Optional[ActionKind] = None) -> List[QueuedAction]:
        return [a for a in self._actions if kind is None or a.kind == kind]

    async def delete(self, action_id: str) -> None:
        self._actions = [a for a in self._actions if a.id != action_id]
