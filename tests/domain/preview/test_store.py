from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from kinsync.domain.preview import InMemoryPreviewRepository, PreviewKey, PreviewSession


class _ManualClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def _session(upload_id: str = "upload-1", user_id: str = "user-1") -> PreviewSession:
    return PreviewSession(key=PreviewKey(upload_id=upload_id, user_id=user_id), individuals=())


def test_sessions_are_keyed_by_upload_and_user() -> None:
    repository = InMemoryPreviewRepository()
    mine = _session(user_id="me")
    theirs = _session(user_id="them")

    repository.save(mine)
    repository.save(theirs)

    assert repository.get(PreviewKey("upload-1", "me")) is mine
    assert repository.get(PreviewKey("upload-1", "them")) is theirs
    assert repository.get(PreviewKey("upload-2", "me")) is None
    assert len(repository) == 2


def test_upload_container_is_dropped_with_its_last_session() -> None:
    repository = InMemoryPreviewRepository()
    repository.save(_session(user_id="a"))
    repository.save(_session(user_id="b"))

    repository.delete(PreviewKey("upload-1", "a"))
    assert repository.upload_ids() == frozenset({"upload-1"})

    repository.delete(PreviewKey("upload-1", "b"))
    assert repository.upload_ids() == frozenset()
    assert len(repository) == 0


def test_sessions_expire_after_ttl_of_inactivity() -> None:
    clock = _ManualClock()
    repository = InMemoryPreviewRepository(ttl_seconds=60, clock=clock)
    session = _session()
    repository.save(session)

    clock.advance(45)
    assert repository.get(session.key) is session

    clock.advance(45)
    assert repository.get(session.key) is session

    clock.advance(61)
    assert repository.get(session.key) is None
    assert repository.upload_ids() == frozenset()


def test_least_recently_used_session_is_evicted_at_capacity() -> None:
    clock = _ManualClock()
    repository = InMemoryPreviewRepository(max_sessions=2, clock=clock)
    first, second, third = (_session(upload_id=f"upload-{index}") for index in range(3))

    repository.save(first)
    clock.advance(1)
    repository.save(second)
    clock.advance(1)
    repository.get(first.key)
    clock.advance(1)
    repository.save(third)

    assert repository.get(first.key) is first
    assert repository.get(second.key) is None
    assert repository.get(third.key) is third


def test_resaving_an_existing_key_does_not_evict() -> None:
    repository = InMemoryPreviewRepository(max_sessions=1)
    session = _session()
    repository.save(session)

    replacement = _session()
    repository.save(replacement)

    assert repository.get(session.key) is replacement
    assert len(repository) == 1


@pytest.mark.parametrize(("ttl", "capacity"), [(0, 10), (10, 0), (-1, 10)])
def test_non_positive_limits_are_rejected(ttl: int, capacity: int) -> None:
    with pytest.raises(ValueError, match="must be positive"):
        InMemoryPreviewRepository(ttl_seconds=ttl, max_sessions=capacity)
