"""Reconciliation workspace defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import positive_int_env

DEFAULT_PREVIEW_TTL_SECONDS = 3600
DEFAULT_PREVIEW_MAX_SESSIONS = 256
DEFAULT_PREVIEW_PAGE_LIMIT = 50


@dataclass(frozen=True, slots=True)
class PreviewConfig:
    ttl_seconds: int = DEFAULT_PREVIEW_TTL_SECONDS
    max_sessions: int = DEFAULT_PREVIEW_MAX_SESSIONS
    page_limit: int = DEFAULT_PREVIEW_PAGE_LIMIT


def get_preview_config() -> PreviewConfig:
    return PreviewConfig(
        ttl_seconds=positive_int_env("KINSYNC_PREVIEW_TTL_SECONDS", DEFAULT_PREVIEW_TTL_SECONDS),
        max_sessions=positive_int_env(
            "KINSYNC_PREVIEW_MAX_SESSIONS", DEFAULT_PREVIEW_MAX_SESSIONS
        ),
        page_limit=positive_int_env("KINSYNC_PREVIEW_PAGE_LIMIT", DEFAULT_PREVIEW_PAGE_LIMIT),
    )
