# tstruct/dispatch.py
"""Field setters shared by several record classes.

Several record classes may each have a field called ``name``.  Only one
registry entry can exist under that name, so the entry is a
:class:`FieldSetter` holding an ordered list of ``(record type, handler)``
pairs, newest registration first.  Applying a step picks the handler whose
record type *is* the draft's record type; registration order never matters
at call time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .errors import CallError
from .setters import Handler

if TYPE_CHECKING:
    from .constructor import Draft

__all__ = ["ApplyStep", "FieldSetter"]


@dataclass(frozen=True)
class ApplyStep:
    """A deferred setter call: the field name plus its call-site arguments."""

    field: str
    args: tuple
    setter: "FieldSetter"

    def __call__(self, draft: Draft) -> None:
        self.setter.apply(draft, self.args)


class FieldSetter:
    """Registry entry for one field name.

    Calling the setter records its arguments in an :class:`ApplyStep`; nothing
    is mutated until a constructor applies the step to its draft.
    """

    def __init__(self, name: str, handlers: tuple[tuple[type, Handler], ...]) -> None:
        self.name = name
        self._handlers = handlers

    def __call__(self, *args: Any) -> ApplyStep:
        return ApplyStep(field=self.name, args=args, setter=self)

    @property
    def record_types(self) -> tuple[type, ...]:
        """Record classes served by this setter, newest first."""
        return tuple(record_type for record_type, _ in self._handlers)

    def chain(self, record_type: type, handler: Handler) -> FieldSetter:
        """Return a new setter that tries *record_type* before this one's handlers."""
        return FieldSetter(self.name, ((record_type, handler),) + self._handlers)

    def apply(self, draft: Draft, args: tuple) -> None:
        for record_type, handler in self._handlers:
            if draft.record_type is record_type:
                handler(draft, args)
                return
        raise CallError(f"{self.name} is not a field of {draft.record_type.__name__}")

    def __repr__(self) -> str:
        types_ = ", ".join(t.__name__ for t in self.record_types)
        return f"<FieldSetter {self.name} for {types_}>"
