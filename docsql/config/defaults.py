# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for column limits and generated objects
# CREATED: 16 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for schema compilation.
These can be overridden via environment variables or per compiler.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass
from typing import Optional


_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class CompilerDefaults:
    """
    Defaults for document schema compilation.

    Controls the per-view column limit, the raw id column width and
    which optional objects are generated.
    """
    # Path-derived columns per projection view, excluding direct columns
    max_columns_view: int = 200

    # Width of the raw ID column
    id_length: int = 250

    # Optional objects
    meta: bool = True
    synonym: bool = False

    @classmethod
    def from_env(cls) -> "CompilerDefaults":
        """Create from environment variables."""
        return cls(
            max_columns_view=int(os.getenv("DOCSQL_MAX_COLUMNS_VIEW", 200)),
            id_length=int(os.getenv("DOCSQL_ID_LENGTH", 250)),
            meta=_env_flag("DOCSQL_META", True),
            synonym=_env_flag("DOCSQL_SYNONYM", False),
        )


_defaults: Optional[CompilerDefaults] = None


def get_defaults() -> CompilerDefaults:
    """Get shared defaults, read from the environment on first use."""
    global _defaults
    if _defaults is None:
        _defaults = CompilerDefaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Forget cached defaults so the next get_defaults() re-reads the environment."""
    global _defaults
    _defaults = None


__all__ = [
    "CompilerDefaults",
    "get_defaults",
    "reset_defaults",
]
