"""Domain exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID


class KinsyncError(Exception):
    """Base class for errors raised by the kinsync domain."""


class PreviewNotFoundError(KinsyncError, LookupError):
    """Raised when no preview session exists for an (upload, user) key."""

    def __init__(self, upload_id: str, user_id: str) -> None:
        super().__init__(f"Preview data not found for upload {upload_id}")
        self.upload_id = upload_id
        self.user_id = user_id


class InvalidResolutionError(KinsyncError, ValueError):
    """Raised when a decision batch contains an unusable entry; nothing is stored."""


class PersonNotFoundError(KinsyncError, LookupError):
    def __init__(self, role: str, person_id: UUID) -> None:
        super().__init__(f"{role.capitalize()} person not found: {person_id}")
        self.role = role
        self.person_id = person_id


class MergeBlockedError(KinsyncError):
    """Raised before any write when a merge fails its safety checks."""

    def __init__(self, errors: Sequence[str]) -> None:
        super().__init__("; ".join(errors) or "Merge blocked")
        self.errors = tuple(errors)
