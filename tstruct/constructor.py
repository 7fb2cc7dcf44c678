# tstruct/constructor.py
"""Record constructors installed under each schema name.

``Order(id_(1), lines(...))`` runs in three phases:

1. every argument must be an :class:`~tstruct.dispatch.ApplyStep`;
2. if the schema has required fields, the steps are checked for presence and
   all missing fields are reported together;
3. a fresh :class:`Draft` is seeded with defaults and zero values, the steps
   are applied in argument order, and the draft is turned into the record.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from .dispatch import ApplyStep
from .errors import CallError
from .required import require
from .schema import Schema

logger = logging.getLogger(__name__)

__all__ = ["Draft", "Constructor", "apply_steps"]


class Draft:
    """The record under construction, owned by one constructor call."""

    def __init__(self, schema: Schema) -> None:
        self.schema = schema
        self.record_type = schema.record_type
        self._values = schema.blank_values()
        self._touched: set[str] = set()

    def get(self, name: str) -> Any:
        return self._values.get(name)

    def set(self, name: str, value: Any) -> None:
        self._values[name] = value
        self._touched.add(name)

    @property
    def touched(self) -> set[str]:
        return set(self._touched)

    def build(self) -> Any:
        """Materialise the record instance."""
        return self.schema.materialize(self._values, self._touched)


def apply_steps(steps: Iterable[ApplyStep], draft: Draft) -> Draft:
    """Apply *steps* to *draft* in order and return the draft."""
    for step in steps:
        step(draft)
    return draft


class Constructor:
    """Registry entry building one record class from setter steps."""

    def __init__(self, schema: Schema) -> None:
        self.schema = schema
        self.name = schema.name
        self.record_type = schema.record_type
        self.required = schema.required

    def __call__(self, *steps: Any) -> Any:
        for position, step in enumerate(steps):
            if not isinstance(step, ApplyStep):
                raise CallError(
                    f"{self.name}: argument {position} is {type(step).__name__}, "
                    f"want a field setter call"
                )
        if self.required:
            require(self.name, steps, self.required)
        draft = apply_steps(steps, Draft(self.schema))
        logger.debug("Built %s from %d steps", self.name, len(steps))
        return draft.build()

    def __repr__(self) -> str:
        return f"<Constructor {self.name}>"
