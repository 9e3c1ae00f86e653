"""Domain primitives: scalar aliases + small value objects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kinsync.domain.model.enums import DateModifier

type InterchangeId = str
type UserId = str


@dataclass(frozen=True, slots=True)
class CanonicalDate:
    """Outcome of normalizing one interchange date value.

    ``normalized`` is ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD`` and sorts
    lexicographically in calendar order. It is ``None`` whenever ``valid`` is false.
    """

    original: str | None
    normalized: str | None = None
    valid: bool = False
    partial: bool = False
    modifier: DateModifier | None = None
    error: str | None = None

    @property
    def year(self) -> int | None:
        if self.normalized is None:
            return None
        return int(self.normalized[:4])

    @property
    def granularity(self) -> str | None:
        if self.normalized is None:
            return None
        return {4: "year", 7: "month", 10: "day"}.get(len(self.normalized))
