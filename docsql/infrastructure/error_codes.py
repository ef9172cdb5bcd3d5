# ============================================================================
# VENDOR ERROR CLASSIFICATION
# ============================================================================
# STATUS: Infrastructure - Idempotent provisioning support
# PURPOSE: Classify "already exists" / "does not exist" database errors
# CREATED: 16 OCT 2026
# EXPORTS: OBJECT_EXISTS, OBJECT_NOT_EXISTS, check_error, is_expected_error
# DEPENDENCIES: psycopg
# ============================================================================
"""
Vendor error classification.

The dispatcher executing a SchemaBundle ignores "already exists" while
creating and "does not exist" while dropping, which makes provisioning
repeatable. Every other code is a real failure and must propagate.

Codes are PostgreSQL SQLSTATEs, taken from the psycopg error classes.
"""

from typing import Optional

import psycopg
from psycopg import errors

OBJECT_EXISTS = frozenset({
    errors.DuplicateTable.sqlstate,       # 42P07 relation already exists
    errors.DuplicateObject.sqlstate,      # 42710 index, role or synonym exists
    errors.DuplicateSchema.sqlstate,      # 42P06
    errors.DuplicateFunction.sqlstate,    # 42723
})

OBJECT_NOT_EXISTS = frozenset({
    errors.UndefinedTable.sqlstate,       # 42P01 relation does not exist
    errors.UndefinedObject.sqlstate,      # 42704
    errors.InvalidSchemaName.sqlstate,    # 3F000
    errors.UndefinedFunction.sqlstate,    # 42883
})


def check_error(exists: bool, code: Optional[str]) -> bool:
    """
    Check whether an error code is the expected outcome of a statement.

    Args:
        exists: True when creating (an existing object is expected),
                False when dropping (a missing object is expected)
        code: SQLSTATE of the failed statement

    Returns:
        True if the error can be ignored
    """
    if exists:
        return code in OBJECT_EXISTS
    return code in OBJECT_NOT_EXISTS


def is_expected_error(exists: bool, error: psycopg.Error) -> bool:
    """check_error() for a raised psycopg error."""
    return check_error(exists, error.sqlstate)


__all__ = [
    "OBJECT_EXISTS",
    "OBJECT_NOT_EXISTS",
    "check_error",
    "is_expected_error",
]
