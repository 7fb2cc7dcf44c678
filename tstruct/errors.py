# tstruct/errors.py
"""Exceptions raised while registering schemas and building records.

Registration errors describe a static defect in a record class and are raised
before the caller's registry is touched.  Call errors are raised while an
expression is being evaluated and abort only that expression.
"""

from __future__ import annotations


class TstructError(Exception):
    """Base class for all tstruct errors."""


class RegistrationError(TstructError):
    """Raised when a record class cannot be turned into registry entries."""


class NameConflictError(RegistrationError):
    """Raised when a registry name is already bound to an unchainable entry."""

    def __init__(self, name: str, detail: str) -> None:
        super().__init__(f"registry conflict on name {name!r}: {detail}")
        self.name = name


class HookError(RegistrationError):
    """Raised for a malformed custom setter hook."""


class CallError(TstructError, TypeError):
    """Raised when a constructor or setter is invoked with bad arguments."""


class CoercionError(CallError):
    """Raised when a call-site value cannot be converted to a field type."""


class MissingFieldsError(TstructError):
    """Raised when required fields were not supplied to a constructor.

    All missing fields are reported at once, qualified as
    ``SchemaName.field_name`` and sorted.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = sorted(missing)
        super().__init__(f"{', '.join(self.missing)} required but not provided")
