# tstruct/schema.py
"""Record-class introspection.

Turns a pydantic model or a dataclass into a :class:`Schema`: the record's
name plus an ordered list of :class:`SchemaField` descriptors carrying each
field's annotation, kind, directives and initial value.  Everything the
registrar and the generated constructors know about a record comes from here.

Field directives live in field metadata under the configured key
(``"tstruct"`` by default)::

    class Order(BaseModel):
        id: int = Field(json_schema_extra={"tstruct": "+"})   # required
        cache: dict = Field(default_factory=dict, json_schema_extra={"tstruct": "-"})  # ignored

    @dataclass
    class Line:
        sku: str = field(default="", metadata={"tstruct": "+"})
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import types
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from .config import TstructConfig, get_config
from .errors import RegistrationError

logger = logging.getLogger(__name__)

__all__ = [
    "FieldKind",
    "SchemaField",
    "Schema",
    "describe",
    "is_record_type",
    "unwrap_optional",
]

_DIRECTIVES = frozenset({"", "+", "-"})
_MAP_ORIGINS = (dict, Mapping, MutableMapping)


class FieldKind(str, Enum):
    """Shape of a field, which decides how its setter behaves."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAP = "keyed-map"
    RECORD = "nested-record"
    HOOK = "custom-hook"


# ---------------------------------------------------------------------------
# Annotation helpers
# ---------------------------------------------------------------------------


def is_record_type(annotation: Any) -> bool:
    """Return True when *annotation* is a pydantic model or dataclass class."""
    if get_origin(annotation) is not None or not isinstance(annotation, type):
        return False
    return issubclass(annotation, BaseModel) or dataclasses.is_dataclass(annotation)


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Strip ``None`` from an ``Optional[X]`` annotation.

    Returns the remaining annotation and whether ``None`` was part of it.
    Unions of several non-``None`` members are returned unchanged.
    """
    if get_origin(annotation) not in (Union, types.UnionType):
        return annotation, False
    options = [a for a in get_args(annotation) if a is not type(None)]
    nullable = len(options) != len(get_args(annotation))
    if len(options) == 1:
        return options[0], nullable
    return annotation, nullable


def _records_in(annotation: Any) -> list[type]:
    """Collect record classes mentioned anywhere in *annotation*."""
    if is_record_type(annotation):
        return [annotation]
    found: list[type] = []
    for arg in get_args(annotation):
        for record in _records_in(arg):
            if record not in found:
                found.append(record)
    return found


def _classify(annotation: Any, hook_name: str) -> FieldKind:
    target, _ = unwrap_optional(annotation)
    if get_origin(target) is None and isinstance(target, type) and hasattr(target, hook_name):
        return FieldKind.HOOK
    origin = get_origin(target) or target
    if origin is list:
        return FieldKind.SEQUENCE
    if origin in _MAP_ORIGINS:
        return FieldKind.MAP
    if is_record_type(target):
        return FieldKind.RECORD
    return FieldKind.SCALAR


def _parse_directive(raw: Any, qualname: str, key: str) -> str:
    if raw is None:
        raw = ""
    if not isinstance(raw, str) or raw not in _DIRECTIVES:
        raise RegistrationError(
            f"unknown {key} directive {raw!r} on field {qualname} "
            f"(expected one of: '+', '-', '')"
        )
    return raw


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SchemaField:
    """One field of a record class."""

    name: str
    schema_name: str
    annotation: Any
    kind: FieldKind
    initial: Callable[[], Any]
    required: bool = False
    ignored: bool = False

    @property
    def qualname(self) -> str:
        return f"{self.schema_name}.{self.name}"

    @property
    def exported(self) -> bool:
        return not self.name.startswith("_")

    @property
    def target(self) -> Any:
        """The annotation with ``Optional`` stripped."""
        return unwrap_optional(self.annotation)[0]

    @property
    def element(self) -> Any:
        """Element annotation of a sequence field."""
        args = get_args(self.target)
        return args[0] if args else Any

    @property
    def key_value(self) -> tuple[Any, Any]:
        """Key and value annotations of a map field."""
        args = get_args(self.target)
        return (args[0], args[1]) if len(args) == 2 else (Any, Any)

    @property
    def records(self) -> list[type]:
        """Record classes that must be registered alongside this field."""
        if self.kind is FieldKind.HOOK:
            return []
        return _records_in(self.annotation)

    def initial_value(self) -> Any:
        return self.initial()


@dataclass(frozen=True)
class Schema:
    """A named record class and its ordered fields."""

    name: str
    record_type: type
    fields: tuple[SchemaField, ...]

    @property
    def registered_fields(self) -> tuple[SchemaField, ...]:
        """Fields that get a setter: exported and not ignored."""
        return tuple(f for f in self.fields if f.exported and not f.ignored)

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.registered_fields if f.required)

    def blank_values(self) -> dict[str, Any]:
        """Fresh initial values for every field."""
        return {f.name: f.initial_value() for f in self.fields}

    def materialize(self, values: dict[str, Any], touched: set[str] | None = None) -> Any:
        """Build the record instance from a complete value mapping."""
        if issubclass(self.record_type, BaseModel):
            return self.record_type.model_construct(_fields_set=set(touched or ()), **values)
        return self.record_type(**values)

    def blank(self) -> Any:
        """An instance holding only defaults and zero values."""
        return self.materialize(self.blank_values())


# ---------------------------------------------------------------------------
# Introspection
# ---------------------------------------------------------------------------


def _zero_factory(annotation: Any, cfg: TstructConfig) -> Callable[[], Any]:
    from .coercion import zero_value

    return lambda: zero_value(annotation, cfg)


def _copy_factory(default: Any) -> Callable[[], Any]:
    return lambda: copy.deepcopy(default)


def _pydantic_fields(record_type: type[BaseModel], name: str, cfg: TstructConfig) -> list[SchemaField]:
    fields: list[SchemaField] = []
    for field_name, info in record_type.model_fields.items():
        qualname = f"{name}.{field_name}"
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        directive = _parse_directive(extra.get(cfg.directive_key), qualname, cfg.directive_key)

        if info.is_required():
            initial = _zero_factory(info.annotation, cfg)
        elif info.default_factory is not None:
            initial = info.default_factory  # type: ignore[assignment]
        else:
            initial = _copy_factory(info.default)

        required = directive == "+" or (
            cfg.infer_required and directive != "-" and info.is_required()
        )
        fields.append(
            SchemaField(
                name=field_name,
                schema_name=name,
                annotation=info.annotation,
                kind=_classify(info.annotation, cfg.hook_name),
                initial=initial,
                required=required,
                ignored=directive == "-",
            )
        )
    return fields


def _dataclass_fields(record_type: type, name: str, cfg: TstructConfig) -> list[SchemaField]:
    try:
        hints = get_type_hints(record_type)
    except (NameError, TypeError) as exc:
        raise RegistrationError(f"cannot resolve annotations of {name}: {exc}") from exc

    fields: list[SchemaField] = []
    for dc_field in dataclasses.fields(record_type):
        if not dc_field.init:
            continue
        qualname = f"{name}.{dc_field.name}"
        directive = _parse_directive(
            dc_field.metadata.get(cfg.directive_key), qualname, cfg.directive_key
        )
        annotation = hints.get(dc_field.name, Any)

        if dc_field.default is not dataclasses.MISSING:
            initial = _copy_factory(dc_field.default)
        elif dc_field.default_factory is not dataclasses.MISSING:
            initial = dc_field.default_factory
        else:
            initial = _zero_factory(annotation, cfg)

        fields.append(
            SchemaField(
                name=dc_field.name,
                schema_name=name,
                annotation=annotation,
                kind=_classify(annotation, cfg.hook_name),
                initial=initial,
                required=directive == "+",
                ignored=directive == "-",
            )
        )
    return fields


def describe(record_type: Any, *, config: Optional[TstructConfig] = None) -> Schema:
    """Describe *record_type* as a :class:`Schema`.

    Raises
    ------
    RegistrationError
        If *record_type* is not a record class, has no usable name, declares
        an unknown directive, or has a field typed with an anonymous record.
    """
    cfg = config or get_config()
    if not is_record_type(record_type):
        raise RegistrationError(
            f"{record_type!r} is not a record type (expected a pydantic model or dataclass)"
        )
    name = getattr(record_type, "__name__", "")
    if not name.isidentifier():
        raise RegistrationError(f"anonymous record type {name!r} is not supported")

    if issubclass(record_type, BaseModel):
        fields = _pydantic_fields(record_type, name, cfg)
    else:
        fields = _dataclass_fields(record_type, name, cfg)

    for f in fields:
        for record in f.records:
            if not record.__name__.isidentifier():
                raise RegistrationError(
                    f"field {f.qualname} uses anonymous record type {record.__name__!r}"
                )

    logger.debug("Described %s: %d fields", name, len(fields))
    return Schema(name=name, record_type=record_type, fields=tuple(fields))
