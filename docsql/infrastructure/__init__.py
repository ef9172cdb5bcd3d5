# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Support for executing compiled bundles
# PURPOSE: Vendor error classification for idempotent provisioning
# CREATED: 16 OCT 2026
# ============================================================================

from docsql.infrastructure.error_codes import (
    OBJECT_EXISTS,
    OBJECT_NOT_EXISTS,
    check_error,
    is_expected_error,
)

__all__ = [
    "OBJECT_EXISTS",
    "OBJECT_NOT_EXISTS",
    "check_error",
    "is_expected_error",
]
