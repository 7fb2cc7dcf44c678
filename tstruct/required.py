# tstruct/required.py
"""Required-field presence checks.

A constructor with required fields first asks which of them none of its
steps would set, and refuses to build anything if the answer is non-empty.
Presence means "a setter for the field was called", regardless of the value
it was called with; ``(count 0)`` satisfies a required ``count``.

The set of outstanding names is created per call and discarded afterwards,
so separate constructor invocations never see each other's state.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .dispatch import ApplyStep
from .errors import MissingFieldsError

__all__ = ["check_presence", "require"]


def check_presence(steps: Iterable[ApplyStep], required: Sequence[str]) -> list[str]:
    """Return the names in *required* that no step in *steps* sets, sorted."""
    outstanding = set(required)
    for step in steps:
        outstanding.discard(step.field)
    return sorted(outstanding)


def require(schema_name: str, steps: Sequence[ApplyStep], required: Sequence[str]) -> None:
    """Raise :class:`MissingFieldsError` naming every required field not set by *steps*."""
    missing = check_presence(steps, required)
    if missing:
        raise MissingFieldsError([f"{schema_name}.{name}" for name in missing])
