# tstruct/setters.py
"""Per-field setter behaviour.

:func:`make_handler` returns the function that applies one setter call to a
draft record.  The behaviour depends on the field's kind:

- **scalar / nested-record**: exactly one argument replaces the value.  A
  ``bool`` field called with no arguments is set to ``True``.
- **sequence**: every call appends.  A list or tuple argument whose items all
  match the element type is spliced in instead of appended as one element.
- **keyed-map**: ``key, value`` pairs (or a single mapping) are merged into
  the map, which is allocated on first use.
- **custom-hook**: a fresh value of the field type is created, its hook
  method is called with the arguments, and the result is stored.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable

from .coercion import coerce, devirt, is_frozen, matches, zero_value
from .config import TstructConfig
from .errors import CallError, HookError
from .schema import FieldKind, SchemaField

if TYPE_CHECKING:
    from .constructor import Draft

logger = logging.getLogger(__name__)

Handler = Callable[["Draft", tuple], None]

__all__ = ["Handler", "make_handler", "validate_hook"]


# ---------------------------------------------------------------------------
# Custom hooks
# ---------------------------------------------------------------------------


def validate_hook(field: SchemaField, hook_name: str) -> None:
    """Check that the hook on *field*'s type can be used as a setter.

    The hook must be a plain instance method, must not declare a return
    value, and must live on a type whose instances can be mutated in place.
    """
    hook_type = field.target
    type_name = hook_type.__name__
    attr = inspect.getattr_static(hook_type, hook_name)

    if isinstance(attr, (staticmethod, classmethod)) or not inspect.isfunction(attr):
        raise HookError(
            f"{type_name}.{hook_name} (for field {field.qualname}) must be a plain instance method"
        )
    if is_frozen(hook_type):
        raise HookError(
            f"{type_name}.{hook_name} (for field {field.qualname}) must be defined on a mutable type"
        )
    returns = inspect.signature(attr).return_annotation
    if returns not in (inspect.Signature.empty, None, type(None), "None"):
        raise HookError(
            f"{type_name}.{hook_name} (for field {field.qualname}) must not return values"
        )


def _hook_handler(field: SchemaField, cfg: TstructConfig) -> Handler:
    hook_type = field.target
    hook_name = cfg.hook_name

    def handle(draft: Draft, args: tuple) -> None:
        target = zero_value(hook_type, cfg)
        if target is None:
            raise CallError(f"cannot create an empty {hook_type.__name__} for field {field.qualname}")
        result = getattr(target, hook_name)(*(devirt(a) for a in args))
        if result is not None:
            raise CallError(f"{hook_type.__name__}.{hook_name} must not return values")
        draft.set(field.name, coerce(target, field.annotation, copy_records=False))

    return handle


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


def _map_handler(field: SchemaField, cfg: TstructConfig) -> Handler:
    key_type, value_type = field.key_value

    def handle(draft: Draft, args: tuple) -> None:
        current = draft.get(field.name)
        if current is None:
            current = {}
        if len(args) == 1 and isinstance(devirt(args[0]), dict):
            pairs = list(devirt(args[0]).items())
        elif len(args) % 2:
            raise CallError(
                f"{field.qualname}: odd number of args ({len(args)}), want key/value pairs"
            )
        else:
            pairs = list(zip(args[::2], args[1::2]))
        for key, value in pairs:
            current[coerce(devirt(key), key_type, copy_records=cfg.copy_records)] = coerce(
                devirt(value), value_type, copy_records=cfg.copy_records
            )
        draft.set(field.name, current)

    return handle


def _splices(arg: Any, element: Any) -> bool:
    # Named tuples are single values, never spliced.
    if isinstance(arg, tuple) and hasattr(arg, "_fields"):
        return False
    return isinstance(arg, (list, tuple)) and all(matches(item, element) for item in arg)


def _sequence_handler(field: SchemaField, cfg: TstructConfig) -> Handler:
    element = field.element

    def handle(draft: Draft, args: tuple) -> None:
        current = draft.get(field.name)
        if current is None:
            current = []
        for arg in args:
            arg = devirt(arg)
            if _splices(arg, element):
                current.extend(coerce(item, element, copy_records=cfg.copy_records) for item in arg)
            else:
                current.append(coerce(arg, element, copy_records=cfg.copy_records))
        draft.set(field.name, current)

    return handle


# ---------------------------------------------------------------------------
# Scalars and nested records
# ---------------------------------------------------------------------------


def _scalar_handler(field: SchemaField, cfg: TstructConfig) -> Handler:
    is_bool = field.target is bool

    def handle(draft: Draft, args: tuple) -> None:
        if not args and is_bool:
            draft.set(field.name, True)
            return
        if len(args) != 1:
            raise CallError(f"{field.qualname}: wrong number of args: got {len(args)}, want 1")
        draft.set(
            field.name,
            coerce(devirt(args[0]), field.annotation, copy_records=cfg.copy_records),
        )

    return handle


_FACTORIES: dict[FieldKind, Callable[[SchemaField, TstructConfig], Handler]] = {
    FieldKind.HOOK: _hook_handler,
    FieldKind.MAP: _map_handler,
    FieldKind.SEQUENCE: _sequence_handler,
    FieldKind.RECORD: _scalar_handler,
    FieldKind.SCALAR: _scalar_handler,
}


def make_handler(field: SchemaField, cfg: TstructConfig) -> Handler:
    """Return the setter behaviour for *field*."""
    logger.debug("Building %s setter for %s", field.kind.value, field.qualname)
    return _FACTORIES[field.kind](field, cfg)
