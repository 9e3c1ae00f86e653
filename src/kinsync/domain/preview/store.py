"""In-process preview session store with TTL expiry and LRU eviction."""

from __future__ import annotations

import threading
from collections import OrderedDict
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from kinsync.domain.model import UserId

    from .session import PreviewKey, PreviewSession

log = getLogger(__name__)


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InMemoryPreviewRepository:
    """Sessions grouped per upload, one entry per user.

    An upload's container is dropped with its last user entry. Sessions idle
    for longer than ``ttl_seconds`` read as missing, and once ``max_sessions``
    is reached the least recently used session is evicted to make room.
    Every access holds the instance lock, so one repository may be shared
    across threads of a single process.
    """

    def __init__(
        self,
        *,
        ttl_seconds: int = 3600,
        max_sessions: int = 256,
        clock: Clock = _utcnow,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_sessions <= 0:
            raise ValueError("max_sessions must be positive")
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_sessions = max_sessions
        self._clock = clock
        self._uploads: dict[str, dict[UserId, PreviewSession]] = {}
        self._touched: OrderedDict[PreviewKey, datetime] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: PreviewKey) -> PreviewSession | None:
        with self._lock:
            now = self._clock()
            self._expire(now)
            session = self._uploads.get(key.upload_id, {}).get(key.user_id)
            if session is not None:
                self._touch(key, now)
            return session

    def save(self, session: PreviewSession) -> None:
        key = session.key
        with self._lock:
            now = self._clock()
            self._expire(now)
            if key not in self._touched:
                while len(self._touched) >= self._max_sessions:
                    oldest = next(iter(self._touched))
                    self._remove(oldest)
                    log.debug("Evicted least recently used preview %s", oldest)
            self._uploads.setdefault(key.upload_id, {})[key.user_id] = session
            self._touch(key, now)

    def delete(self, key: PreviewKey) -> None:
        with self._lock:
            self._remove(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._touched)

    def upload_ids(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._uploads)

    def _touch(self, key: PreviewKey, now: datetime) -> None:
        self._touched[key] = now
        self._touched.move_to_end(key)

    def _expire(self, now: datetime) -> None:
        # Touch order is recency order, so expired entries sit at the front.
        while self._touched:
            key, touched_at = next(iter(self._touched.items()))
            if now - touched_at <= self._ttl:
                break
            self._remove(key)
            log.debug("Expired preview %s", key)

    def _remove(self, key: PreviewKey) -> None:
        self._touched.pop(key, None)
        sessions = self._uploads.get(key.upload_id)
        if sessions is None:
            return
        sessions.pop(key.user_id, None)
        if not sessions:
            del self._uploads[key.upload_id]
