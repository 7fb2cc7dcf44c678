"""
tstruct - record constructors for template engines

Registers pydantic models and dataclasses into a name -> callable registry so
that an expression evaluator can build records with nested calls such as
``Order(id(7), lines(Line(sku("A1"))))``.

Main Components:
    - tstruct.registrar: register(), register_all(), build_registry()
    - tstruct.schema: record-class introspection
    - tstruct.coercion: argument normalisation
    - tstruct.schemas: YAML record descriptors
"""

from .config import TstructConfig, get_config
from .constructor import Constructor
from .dispatch import ApplyStep, FieldSetter
from .errors import (
    CallError,
    CoercionError,
    HookError,
    MissingFieldsError,
    NameConflictError,
    RegistrationError,
    TstructError,
)
from .registrar import build_registry, register, register_all
from .schema import FieldKind, Schema, SchemaField, describe

__version__ = "0.1.0"

__all__ = [
    "ApplyStep",
    "CallError",
    "CoercionError",
    "Constructor",
    "FieldKind",
    "FieldSetter",
    "HookError",
    "MissingFieldsError",
    "NameConflictError",
    "RegistrationError",
    "Schema",
    "SchemaField",
    "TstructConfig",
    "TstructError",
    "build_registry",
    "describe",
    "get_config",
    "register",
    "register_all",
]
