# tstruct/registrar.py
"""Schema registration.

:func:`register` installs, into a caller-owned registry (any mutable mapping
from name to callable, e.g. ``jinja2.Environment.globals``):

- one :class:`~tstruct.constructor.Constructor` named after the record class;
- one :class:`~tstruct.dispatch.FieldSetter` per exported, non-ignored field;
- the same entries for every record class reachable through field types.

Registration is transactional: all work happens on a private copy of the
registry, which is merged back only when every entry was installed.  On any
:class:`~tstruct.errors.RegistrationError` the caller's registry is unchanged.

Collision rules:

- a schema name already bound to a constructor for the *same* class is
  accepted (re-registration is a no-op);
- a field name already bound to a field setter is chained, so records with
  a field of the same name can share one registry;
- any other existing binding is a :class:`~tstruct.errors.NameConflictError`.
"""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping
from typing import Any, Optional

from .config import TstructConfig, get_config
from .constructor import Constructor
from .dispatch import FieldSetter
from .errors import NameConflictError, RegistrationError
from .schema import FieldKind, describe
from .setters import Handler, make_handler, validate_hook
from .utils.logging import get_logger

logger = get_logger(__name__)

__all__ = ["register", "register_all", "build_registry"]


def _entry_kind(entry: Any) -> str:
    if isinstance(entry, Constructor):
        return f"constructor for {entry.record_type.__module__}.{entry.record_type.__qualname__}"
    if isinstance(entry, FieldSetter):
        return "field setter"
    return f"foreign entry {entry!r}"


def _install_setter(
    registry: dict[str, Any],
    name: str,
    record_type: type,
    handler: Handler,
) -> None:
    if name not in registry:
        registry[name] = FieldSetter(name, ((record_type, handler),))
        return
    existing = registry[name]
    if isinstance(existing, FieldSetter):
        registry[name] = existing.chain(record_type, handler)
        logger.debug("Chained field setter %s for %s", name, record_type.__name__)
        return
    raise NameConflictError(
        name, f"field of {record_type.__name__} collides with {_entry_kind(existing)}"
    )


def _add_schema(record_type: Any, registry: dict[str, Any], cfg: TstructConfig) -> None:
    schema = describe(record_type, config=cfg)

    if schema.name in registry:
        existing = registry[schema.name]
        if isinstance(existing, Constructor) and existing.record_type is record_type:
            logger.debug("Schema %s already registered, skipping", schema.name)
            return
        raise NameConflictError(
            schema.name, f"schema {schema.name} collides with {_entry_kind(existing)}"
        )

    # Installed before walking fields so self-referential records terminate.
    registry[schema.name] = Constructor(schema)
    logger.debug("Installed constructor %s", schema.name)

    for field in schema.registered_fields:
        if field.kind is FieldKind.HOOK:
            validate_hook(field, cfg.hook_name)
        else:
            for nested in field.records:
                _add_schema(nested, registry, cfg)
        _install_setter(registry, field.name, record_type, make_handler(field, cfg))


def register_all(
    record_types: Iterable[Any],
    registry: MutableMapping[str, Any],
    *,
    config: Optional[TstructConfig] = None,
) -> None:
    """Register several record classes into *registry* as one transaction.

    Parameters
    ----------
    record_types:
        Pydantic models and/or dataclasses.
    registry:
        Mutable mapping from name to callable.  Must not be ``None``.
    config:
        Overrides the global :class:`~tstruct.config.TstructConfig`.

    Raises
    ------
    RegistrationError
        If any record class is malformed or any name conflicts.  *registry*
        is left unchanged.
    """
    if registry is None:
        raise RegistrationError("registry is None")
    cfg = config or get_config()
    record_types = list(record_types)

    working = dict(registry)
    try:
        for record_type in record_types:
            _add_schema(record_type, working, cfg)
    except RegistrationError as exc:
        logger.warning("Registration rejected: %s", exc)
        raise

    added = {
        name: entry
        for name, entry in working.items()
        if name not in registry or registry[name] is not entry
    }
    registry.update(added)
    logger.info(
        "Registered %s (%d registry entries added or chained)",
        ", ".join(getattr(t, "__name__", repr(t)) for t in record_types),
        len(added),
    )


def register(
    record_type: Any,
    registry: MutableMapping[str, Any],
    *,
    config: Optional[TstructConfig] = None,
) -> None:
    """Register *record_type* and every record class it contains into *registry*.

    Example
    -------
        funcs = {}
        register(Order, funcs)
        order = funcs["Order"](funcs["id"](7), funcs["lines"](funcs["Line"](funcs["sku"]("A1"))))
    """
    register_all([record_type], registry, config=config)


def build_registry(*record_types: Any, config: Optional[TstructConfig] = None) -> dict[str, Any]:
    """Return a new registry holding entries for *record_types*."""
    registry: dict[str, Any] = {}
    register_all(record_types, registry, config=config)
    return registry
