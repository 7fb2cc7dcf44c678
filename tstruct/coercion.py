# tstruct/coercion.py
"""Value normalisation for field setters.

Expression evaluators hand setters loosely-typed values: tuples where a list
is expected, mapping proxies, ``int`` literals for ``float`` fields, plain
dicts for nested records.  :func:`devirt` first unwraps mapping views into
plain dicts, leaving every other value as it arrived, then :func:`coerce`
converts it to the exact annotation of the field being set.
:func:`zero_value` supplies the value a field holds before any setter
touched it.
"""

from __future__ import annotations

import copy
import dataclasses
import types
from collections.abc import Mapping, MutableMapping, Sequence
from enum import Enum
from typing import Any, Literal, Optional, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError

from .config import TstructConfig
from .errors import CoercionError
from .schema import describe, is_record_type, unwrap_optional

__all__ = ["devirt", "coerce", "matches", "zero_value", "is_frozen"]

# Zero values for primitive annotations.
_PRIMITIVE_ZEROS: dict[Any, Any] = {str: "", int: 0, float: 0.0, bool: False, bytes: b""}

_MAP_ORIGINS = (dict, Mapping, MutableMapping)
_IMMUTABLE_SCALARS = (str, bytes, int, float, complex, bool, type(None))


def _type_name(annotation: Any) -> str:
    return getattr(annotation, "__name__", None) or repr(annotation)


# ---------------------------------------------------------------------------
# Devirtualisation
# ---------------------------------------------------------------------------


def devirt(value: Any) -> Any:
    """Unwrap a dynamically-typed argument into its concrete container type.

    Read-only mapping views (``MappingProxyType`` and other non-dict
    mappings) become ``dict``.  Everything else, tuples included, is
    returned unchanged.
    """
    if isinstance(value, Mapping) and not isinstance(value, dict):
        return dict(value)
    return value


def _items(value: Any) -> Optional[list]:
    """Items of a list-like argument, or None when *value* is not list-like."""
    if isinstance(value, (str, bytes, bytearray)):
        return None
    if isinstance(value, (Sequence, set, frozenset)):
        return list(value)
    return None


# ---------------------------------------------------------------------------
# Shallow type matching
# ---------------------------------------------------------------------------


def matches(value: Any, annotation: Any) -> bool:
    """Return True when *value* already has the shape of *annotation*.

    Only the outermost type is inspected; ``int`` values match ``float``.
    """
    if annotation in (Any, object):
        return True
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        return any(matches(value, option) for option in get_args(annotation))
    if origin is Literal:
        return value in get_args(annotation)
    if annotation is None or annotation is type(None):
        return value is None
    if origin is not None:
        if origin in _MAP_ORIGINS:
            return isinstance(value, Mapping)
        return isinstance(origin, type) and isinstance(value, origin)
    if not isinstance(annotation, type):
        return False
    if annotation is float and isinstance(value, int) and not isinstance(value, bool):
        return True
    if annotation is int and isinstance(value, bool):
        return False
    return isinstance(value, annotation)


# ---------------------------------------------------------------------------
# Zero values
# ---------------------------------------------------------------------------


def zero_value(annotation: Any, config: Optional[TstructConfig] = None) -> Any:
    """Return the value a field of type *annotation* holds when unset."""
    if annotation in (Any, object) or annotation is None:
        return None
    inner, nullable = unwrap_optional(annotation)
    if nullable:
        return None

    origin = get_origin(inner)
    if origin in (Union, types.UnionType):
        return zero_value(get_args(inner)[0], config)
    if origin is Literal:
        return get_args(inner)[0]

    container = origin or inner
    if container is list:
        return []
    if container in _MAP_ORIGINS:
        return {}
    if container is tuple:
        return ()
    if container is set:
        return set()
    if container is frozenset:
        return frozenset()

    if inner in _PRIMITIVE_ZEROS:
        return _PRIMITIVE_ZEROS[inner]
    if is_record_type(inner):
        return describe(inner, config=config).blank()
    if isinstance(inner, type):
        if issubclass(inner, Enum):
            return next(iter(inner), None)
        for base, zero in _PRIMITIVE_ZEROS.items():
            if issubclass(inner, base):
                return inner(zero)
        try:
            return inner()
        except Exception:
            return None
    return None


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def _coerce_record(value: Any, record_type: type, copy_records: bool) -> Any:
    if type(value) is record_type:
        return copy.deepcopy(value) if copy_records else value
    if isinstance(value, Mapping):
        try:
            if issubclass(record_type, BaseModel):
                return record_type.model_validate(dict(value))
            return record_type(**value)
        except (ValidationError, TypeError, ValueError) as exc:
            raise CoercionError(
                f"cannot build {record_type.__name__} from {value!r}: {exc}"
            ) from exc
    raise CoercionError(f"expected {record_type.__name__}, got {type(value).__name__}")


def _coerce_scalar(value: Any, annotation: type) -> Any:
    if issubclass(annotation, Enum):
        if isinstance(value, annotation):
            return value
        try:
            return annotation(value)
        except ValueError as exc:
            raise CoercionError(f"{value!r} is not a valid {annotation.__name__}") from exc

    if annotation is bool:
        if isinstance(value, bool):
            return value
        raise CoercionError(f"expected bool, got {value!r}")

    if issubclass(annotation, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value if type(value) is annotation else annotation(value)
        raise CoercionError(f"expected {annotation.__name__}, got {type(value).__name__}")

    if issubclass(annotation, int) and not issubclass(annotation, bool):
        if isinstance(value, bool):
            raise CoercionError(f"expected {annotation.__name__}, got bool")
        if isinstance(value, int):
            return value if type(value) is annotation else annotation(value)
        if isinstance(value, float) and value.is_integer():
            return annotation(int(value))
        raise CoercionError(f"expected {annotation.__name__}, got {value!r}")

    if issubclass(annotation, str):
        if isinstance(value, str):
            return value if type(value) is annotation else annotation(value)
        raise CoercionError(f"expected {annotation.__name__}, got {type(value).__name__}")

    if isinstance(value, annotation):
        return value
    try:
        return annotation(value)
    except (TypeError, ValueError) as exc:
        raise CoercionError(
            f"cannot convert {type(value).__name__} to {annotation.__name__}: {exc}"
        ) from exc


def coerce(value: Any, annotation: Any, *, copy_records: bool = True) -> Any:
    """Convert *value* to the exact type described by *annotation*.

    Raises
    ------
    CoercionError
        If the value is incompatible with the annotation.
    """
    if annotation in (Any, object) or annotation is None:
        if copy_records and is_record_type(type(value)):
            return copy.deepcopy(value)
        return value

    origin = get_origin(annotation)

    if origin in (Union, types.UnionType):
        options = get_args(annotation)
        if value is None and type(None) in options:
            return None
        options = [a for a in options if a is not type(None)]
        # Prefer an option the value already matches, then try the rest in order.
        ranked = [a for a in options if matches(value, a)] + [
            a for a in options if not matches(value, a)
        ]
        for option in ranked:
            try:
                return coerce(value, option, copy_records=copy_records)
            except CoercionError:
                continue
        raise CoercionError(f"{value!r} does not fit {annotation!r}")

    if origin is Literal:
        for option in get_args(annotation):
            if value == option and isinstance(value, bool) == isinstance(option, bool):
                return option
        raise CoercionError(f"{value!r} is not one of {get_args(annotation)!r}")

    if value is None:
        raise CoercionError(f"None is not a valid {_type_name(annotation)}")

    if is_record_type(annotation):
        return _coerce_record(value, annotation, copy_records)

    value = devirt(value)
    container = origin or annotation
    args = get_args(annotation)

    if container in (list, set, frozenset):
        values = _items(value)
        if values is None:
            raise CoercionError(f"expected {container.__name__}, got {type(value).__name__}")
        item = args[0] if args else Any
        items = [coerce(v, item, copy_records=copy_records) for v in values]
        return items if container is list else container(items)

    if container is tuple:
        values = _items(value)
        if values is None:
            raise CoercionError(f"expected tuple, got {type(value).__name__}")
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            item = args[0] if args else Any
            return tuple(coerce(v, item, copy_records=copy_records) for v in values)
        if len(args) != len(values):
            raise CoercionError(f"expected {len(args)} items, got {len(values)}")
        return tuple(coerce(v, a, copy_records=copy_records) for v, a in zip(values, args))

    if container in _MAP_ORIGINS:
        if not isinstance(value, dict):
            raise CoercionError(f"expected mapping, got {type(value).__name__}")
        key_type, val_type = args if len(args) == 2 else (Any, Any)
        return {
            coerce(k, key_type, copy_records=copy_records): coerce(v, val_type, copy_records=copy_records)
            for k, v in value.items()
        }

    if isinstance(annotation, type):
        return _coerce_scalar(value, annotation)

    return value


def is_frozen(annotation: type) -> bool:
    """Return True when instances of *annotation* cannot be mutated in place."""
    if issubclass(annotation, _IMMUTABLE_SCALARS + (tuple, frozenset)):
        return True
    if dataclasses.is_dataclass(annotation):
        return bool(annotation.__dataclass_params__.frozen)  # type: ignore[attr-defined]
    if issubclass(annotation, BaseModel):
        return bool(annotation.model_config.get("frozen"))
    return False
