"""Ephemeral per-user reconciliation workspace."""

from __future__ import annotations

from .session import (
    AnnotatedIndividual,
    IndividualsPage,
    IndividualsQuery,
    Pagination,
    ParentLink,
    PersonView,
    PreviewKey,
    PreviewSession,
    PreviewSummary,
    RelativeView,
    ResolutionDecision,
    SpouseLink,
    TreeView,
)
from .store import InMemoryPreviewRepository
from .workspace import ReconciliationWorkspace

__all__ = [
    "AnnotatedIndividual",
    "InMemoryPreviewRepository",
    "IndividualsPage",
    "IndividualsQuery",
    "Pagination",
    "ParentLink",
    "PersonView",
    "PreviewKey",
    "PreviewSession",
    "PreviewSummary",
    "ReconciliationWorkspace",
    "RelativeView",
    "ResolutionDecision",
    "SpouseLink",
    "TreeView",
]
