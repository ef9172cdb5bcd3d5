# ============================================================================
# SCHEMA COMPILATION ERRORS
# ============================================================================
# STATUS: Core - Exception hierarchy for schema compilation
# PURPOSE: Fatal configuration errors raised while compiling a document schema
# CREATED: 16 OCT 2026
# ============================================================================
"""
Schema compilation errors.

Every error raised here is a deterministic function of the input schema:
retrying a compilation without changing its input cannot succeed.
"""

from typing import Optional


class SchemaCompilationError(Exception):
    """Base exception for schema compilation failures."""

    def __init__(self, message: str, document: Optional[str] = None):
        self.document = document
        super().__init__(message)


class NamingCollisionError(SchemaCompilationError):
    """Raised when a resolved view, column or index name is already assigned."""

    def __init__(
        self,
        kind: str,
        name: str,
        owner: Optional[str] = None,
        document: Optional[str] = None,
    ):
        self.kind = kind
        self.name = name
        self.owner = owner
        if owner:
            message = f"{kind.capitalize()} name {name} already assigned for {owner}"
        else:
            message = f"{kind.capitalize()} name already in use: {name}"
        super().__init__(message, document=document)


class UnsupportedDialectFeatureError(SchemaCompilationError):
    """Raised when a schema needs a feature the active dialect cannot express."""
    pass


class NamespaceResolutionError(SchemaCompilationError):
    """Raised when namespaces are resolved for a dialect without namespaces."""

    def __init__(self, namespaces):
        self.namespaces = namespaces
        super().__init__(
            f"Unexpected resolution of namespace {sorted(namespaces)} during JSON processing"
        )


class TypeResolutionError(SchemaCompilationError):
    """Raised when a host type has no SQL type under a strict type resolver."""

    def __init__(self, host_type):
        self.host_type = host_type
        super().__init__(f"No SQL type registered for {host_type!r}")


__all__ = [
    "SchemaCompilationError",
    "NamingCollisionError",
    "UnsupportedDialectFeatureError",
    "NamespaceResolutionError",
    "TypeResolutionError",
]
