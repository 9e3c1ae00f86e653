"""Field-level value selection for person merges."""

from __future__ import annotations


def select_best_value[T](source: T | None, target: T | None) -> T | None:
    """Pick the value the merged person keeps for one field.

    A present value beats an absent one and a longer value beats a shorter
    one. Partial dates (``YYYY``, ``YYYY-MM``, ``YYYY-MM-DD``) grow with
    precision, so the more specific date wins by the same rule. Ties keep the
    target value.
    """

    if not source:
        return target
    if not target:
        return source
    if len(str(source)) > len(str(target)):
        return source
    return target
