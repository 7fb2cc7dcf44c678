"""YAML template compiler: converts YAML record descriptors into Pydantic models.

Lets a record schema be written as data instead of Python and registered like
any hand-written model.  No ``exec()`` is used; all dynamic model creation
goes through :func:`pydantic.create_model`.

Example template::

    name: Invoice
    sections:
      - name: number
        type: str
        required: true
      - name: lines
        type: list
        item:
          type: object
          fields:
            - name: sku
              type: str
            - name: qty
              type: int
      - name: tags
        type: map
        key: {type: str}
        value: {type: int}

Public API
----------
- :func:`parse_template`: parse raw YAML into a :class:`TemplateMeta` descriptor.
- :func:`compile_template`: compile a YAML string into a Pydantic ``BaseModel`` subclass.
- :func:`register_template`: compile and register into a registry in one step.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from enum import Enum
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, create_model

from tstruct.coercion import zero_value
from tstruct.config import TstructConfig, get_config
from tstruct.registrar import register

__all__ = [
    "FieldSpec",
    "SectionSpec",
    "TemplateMeta",
    "parse_template",
    "compile_template",
    "register_template",
]

# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class FieldSpec(BaseModel):
    """Descriptor for a single field inside an ``object`` item.

    ``name`` is optional because list ``item`` and map ``key``/``value``
    descriptors describe an element type without being a named field.
    """

    name: Optional[str] = None
    type: str  # str | int | float | bool | enum | list | map | object
    required: bool = False
    ignore: bool = False
    description: Optional[str] = None
    values: Optional[List[str]] = None  # for enum type
    fields: Optional[List["FieldSpec"]] = None  # for nested object type
    item: Optional["FieldSpec"] = None  # for list type
    key: Optional["FieldSpec"] = None  # for map type
    value: Optional["FieldSpec"] = None  # for map type


FieldSpec.model_rebuild()


class SectionSpec(FieldSpec):
    """Descriptor for one top-level section in a template."""

    name: str


class TemplateMeta(BaseModel):
    """Parsed metadata for an entire template."""

    name: str
    description: Optional[str] = None
    sections: List[SectionSpec]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_template(yaml_content: str) -> TemplateMeta:
    """Parse a YAML template string into a :class:`TemplateMeta` descriptor.

    Parameters
    ----------
    yaml_content:
        Raw YAML text conforming to the template schema.

    Returns
    -------
    TemplateMeta
        Validated template metadata with all sections resolved.
    """
    data = yaml.safe_load(yaml_content)
    if not isinstance(data, dict):
        raise ValueError("Template must be a YAML mapping with 'name' and 'sections'.")
    return TemplateMeta(**data)


# ---------------------------------------------------------------------------
# Type compilation helpers
# ---------------------------------------------------------------------------

# Simple scalar type map
_SCALAR_TYPES: dict[str, type] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
}


def _camel(*parts: str) -> str:
    return "".join(p[:1].upper() + p[1:] for part in parts for p in part.split("_") if p)


def _build_enum(name: str, values: list[str]) -> type:
    """Create a string ``Enum`` subclass with the given values."""
    return Enum(name, {v: v for v in values}, type=str)  # type: ignore[misc]


def _field_definition(spec: FieldSpec, py_type: Any, cfg: TstructConfig) -> tuple[Any, Any]:
    directive_key = cfg.directive_key
    directive = "-" if spec.ignore else ("+" if spec.required else "")
    extra = {directive_key: directive} if directive else None
    if spec.required:
        return (
            py_type,
            Field(
                default_factory=lambda: zero_value(py_type, cfg),
                description=spec.description or None,
                json_schema_extra=extra,
            ),
        )
    return (
        Optional[py_type],
        Field(None, description=spec.description or None, json_schema_extra=extra),
    )


def _build_nested_model(
    model_name: str,
    fields: list[FieldSpec],
    cfg: TstructConfig,
) -> type[BaseModel]:
    """Recursively build a Pydantic model from a list of :class:`FieldSpec`."""
    field_definitions: dict[str, Any] = {}

    for fspec in fields:
        if not fspec.name:
            raise ValueError(f"Fields inside object '{model_name}' must have a name.")
        py_type = _resolve_type(fspec, parent_name=model_name, cfg=cfg)
        field_definitions[fspec.name] = _field_definition(fspec, py_type, cfg)

    return create_model(model_name, **field_definitions)  # type: ignore[call-overload]


def _resolve_type(spec: FieldSpec, *, parent_name: str, cfg: TstructConfig) -> Any:
    """Map a spec's ``type`` string to a concrete Python / Pydantic type."""
    type_str = spec.type.strip().lower()
    spec_name = spec.name or "Item"

    if type_str in _SCALAR_TYPES:
        return _SCALAR_TYPES[type_str]

    if type_str == "enum":
        if not spec.values:
            raise ValueError(f"Enum field '{spec_name}' must provide 'values'.")
        return _build_enum(_camel(parent_name, spec_name), spec.values)

    if type_str == "object":
        if not spec.fields:
            raise ValueError(f"Object field '{spec_name}' must provide 'fields'.")
        return _build_nested_model(_camel(parent_name, spec_name), spec.fields, cfg)

    if type_str == "list":
        if spec.item is None:
            # Default to list[str] when no item spec is provided
            return list[str]
        item_spec = spec.item.model_copy(update={"name": spec.item.name or spec_name})
        item_type = _resolve_type(item_spec, parent_name=parent_name, cfg=cfg)
        return list[item_type]  # type: ignore[valid-type]

    if type_str == "map":
        if spec.value is None:
            raise ValueError(f"Map field '{spec_name}' must provide 'value'.")
        key_type: Any = str
        if spec.key is not None:
            key_type = _resolve_type(spec.key, parent_name=parent_name, cfg=cfg)
        value_spec = spec.value.model_copy(update={"name": spec.value.name or spec_name})
        value_type = _resolve_type(value_spec, parent_name=parent_name, cfg=cfg)
        return dict[key_type, value_type]  # type: ignore[valid-type]

    raise ValueError(f"Unsupported type '{spec.type}' in field '{spec_name}'.")


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def compile_template(yaml_content: str, *, config: Optional[TstructConfig] = None) -> type[BaseModel]:
    """Compile a YAML template string into a Pydantic ``BaseModel`` subclass.

    Required sections are marked with the required directive and default to
    their type's zero value; optional sections default to ``None``.

    Returns
    -------
    type[BaseModel]
        A dynamically created Pydantic model class whose ``__name__`` matches
        the template's ``name`` field and whose fields correspond to the
        template's ``sections``.
    """
    cfg = config or get_config()
    meta = parse_template(yaml_content)
    return _build_nested_model(meta.name, list(meta.sections), cfg)


def register_template(
    yaml_content: str,
    registry: MutableMapping[str, Any],
    *,
    config: Optional[TstructConfig] = None,
) -> type[BaseModel]:
    """Compile *yaml_content* and register the resulting model into *registry*."""
    model = compile_template(yaml_content, config=config)
    register(model, registry, config=config)
    return model
