"""Root logger setup for command-line runs."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _level_from_env() -> int:
    raw = os.getenv("KINSYNC_LOG_LEVEL", "").strip()
    if not raw:
        return logging.INFO
    level = logging.getLevelNamesMapping().get(raw.upper())
    if level is None:
        raise ConfigurationError(f"KINSYNC_LOG_LEVEL must be a logging level name, got {raw!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once.

    ``level`` falls back to ``KINSYNC_LOG_LEVEL`` and then INFO. Alembic's
    per-run migration chatter stays at WARNING unless running at DEBUG. Pass
    ``force=True`` to reconfigure during tests.
    """

    effective = level if level is not None else _level_from_env()
    logging.basicConfig(level=effective, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    if effective > logging.DEBUG:
        logging.getLogger("alembic").setLevel(logging.WARNING)
