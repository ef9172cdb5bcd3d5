# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 16 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized defaults for the document SQL compiler.
"""

from docsql.config.defaults import (
    CompilerDefaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "CompilerDefaults",
    "get_defaults",
    "reset_defaults",
]
