"""Pairwise merging of persisted people."""

from __future__ import annotations

from .executor import MergeRequest, MergeResult, PersonMergeExecutor
from .preview import (
    FieldComparison,
    MergePreview,
    build_merge_preview,
    detect_relationship_conflicts,
    preview_merge,
    validate_merge,
)
from .values import select_best_value

__all__ = [
    "FieldComparison",
    "MergePreview",
    "MergeRequest",
    "MergeResult",
    "PersonMergeExecutor",
    "build_merge_preview",
    "detect_relationship_conflicts",
    "preview_merge",
    "select_best_value",
    "validate_merge",
]
