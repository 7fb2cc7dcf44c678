# tstruct/config.py
"""
tstruct Configuration: single source of truth via Pydantic Settings.

Resolution order: explicit ``config=`` arguments > env vars (TSTRUCT_*) > defaults.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class TstructConfig(BaseSettings):
    """Central configuration for schema registration."""

    model_config = SettingsConfigDict(
        env_prefix="TSTRUCT_",
        extra="ignore",
    )

    # --- Field annotations ---
    # Metadata key holding per-field directives ("+" required, "-" ignored).
    directive_key: str = "tstruct"
    # Method a field type defines to take over its own setter.
    hook_name: str = "tstruct_set"
    # Treat pydantic fields without a default as required.
    infer_required: bool = False

    # --- Construction ---
    # Copy record values when storing them into a field.
    copy_records: bool = True

    # --- Logging ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


@lru_cache(maxsize=1)
def get_config() -> TstructConfig:
    """Return the global config singleton."""
    return TstructConfig()
