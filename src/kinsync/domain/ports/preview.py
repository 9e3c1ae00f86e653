"""Port for the ephemeral reconciliation workspace store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from kinsync.domain.preview.session import PreviewKey, PreviewSession


@runtime_checkable
class PreviewRepository(Protocol):
    """Keyed store of preview sessions.

    Implementations own expiry; an expired or evicted session reads as missing.
    """

    def get(self, key: PreviewKey) -> PreviewSession | None: ...

    def save(self, session: PreviewSession) -> None: ...

    def delete(self, key: PreviewKey) -> None: ...
