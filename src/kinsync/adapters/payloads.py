"""Pydantic models for JSON inputs handed to the workspace by outer layers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, cast

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from kinsync.domain.model import DuplicateMatch

if TYPE_CHECKING:
    from kinsync.domain.preview import ResolutionDecision


def _id_to_str(value: object) -> object:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return value


class KinsyncBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class DuplicateMatchPayload(KinsyncBaseModel):
    source_individual_id: str = Field(alias="sourceIndividualId")
    existing_person_id: str = Field(alias="existingPersonId")
    confidence: float = Field(ge=0)
    matching_fields: list[str] = Field(default_factory=list[str], alias="matchingFields")

    @model_validator(mode="before")
    @classmethod
    def _flatten_nested_people(cls, value: object) -> object:
        # Matchers may nest ids as {"gedcomPerson": {"id": ...}, "existingPerson": {"id": ...}}.
        if not isinstance(value, Mapping):
            return value
        data: dict[str, object] = dict(cast(Mapping[str, object], value))
        for nested_key, flat_key in (
            ("gedcomPerson", "sourceIndividualId"),
            ("existingPerson", "existingPersonId"),
        ):
            nested = data.get(nested_key)
            if isinstance(nested, Mapping) and flat_key not in data:
                data[flat_key] = cast(Mapping[str, object], nested).get("id")
        return data

    _normalize_existing_id = field_validator("existing_person_id", mode="before")(_id_to_str)

    def to_domain(self) -> DuplicateMatch:
        return DuplicateMatch(
            source_individual_id=self.source_individual_id,
            existing_person_id=self.existing_person_id,
            confidence=self.confidence,
            matching_fields=tuple(self.matching_fields),
        )


class ResolutionDecisionPayload(KinsyncBaseModel):
    """One operator decision.

    ``resolution`` stays a plain string so the workspace can reject the whole
    batch with its own error when a value is unknown.
    """

    individual_id: str = Field(alias="gedcomId")
    resolution: str
    existing_person_id: str | None = Field(default=None, alias="existingPersonId")

    _normalize_existing_id = field_validator("existing_person_id", mode="before")(_id_to_str)

    def to_mapping(self) -> dict[str, object]:
        return {
            "individual_id": self.individual_id,
            "resolution": self.resolution,
            "existing_person_id": self.existing_person_id,
        }


_MATCHES = TypeAdapter(list[DuplicateMatchPayload])
_DECISIONS = TypeAdapter(list[ResolutionDecisionPayload])


def load_duplicate_matches(data: object) -> tuple[DuplicateMatch, ...]:
    return tuple(payload.to_domain() for payload in _MATCHES.validate_python(data))


def load_resolution_decisions(data: object) -> list[dict[str, object]]:
    return [payload.to_mapping() for payload in _DECISIONS.validate_python(data)]


def dump_decisions(decisions: tuple[ResolutionDecision, ...]) -> list[dict[str, object]]:
    return [
        {
            "gedcomId": decision.individual_id,
            "resolution": decision.resolution.value,
            "existingPersonId": decision.existing_person_id,
        }
        for decision in decisions
    ]
