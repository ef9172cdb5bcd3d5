# ============================================================================
# DDL UTILITIES
# ============================================================================
# STATUS: Core - Shared SQL generation patterns
# PURPOSE: Type mapping plus index, drop, grant and synonym builders
# CREATED: 16 OCT 2026
# EXPORTS: TYPE_MAP, PostgresTypeResolver, IndexBuilder, ObjectBuilder
# DEPENDENCIES: psycopg
# ============================================================================
"""
DDL Utilities - Shared SQL Generation Patterns.

All builders return psycopg.sql objects for safe execution.
Identifiers are always sql.Identifier, literals always sql.Literal.

Usage:
    from docsql.schema.ddl_utils import IndexBuilder, ObjectBuilder

    idx = IndexBuilder.btree('DOC_CREATED_IDX', 'DOC_RAW', 'CREATED')
    cursor.execute(idx)

    cursor.execute(ObjectBuilder.drop(ObjectKind.VIEW, 'DOC_NOW'))
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from psycopg import sql

from docsql.contracts import ObjectKind
from docsql.schema.errors import TypeResolutionError


# ============================================================================
# TYPE MAPPING
# ============================================================================

TYPE_MAP = {
    # Python native types
    str: "TEXT",
    bool: "BOOLEAN",
    int: "BIGINT",
    float: "DOUBLE PRECISION",
    Decimal: "NUMERIC",
    datetime: "TIMESTAMP",
    date: "DATE",
    time: "TIME",
    bytes: "BYTEA",

    # String representations
    'str': 'TEXT',
    'string': 'TEXT',
    'int': 'BIGINT',
    'integer': 'BIGINT',
    'long': 'BIGINT',
    'float': 'DOUBLE PRECISION',
    'double': 'DOUBLE PRECISION',
    'decimal': 'NUMERIC',
    'bool': 'BOOLEAN',
    'boolean': 'BOOLEAN',
    'date': 'DATE',
    'datetime': 'TIMESTAMP',
    'time': 'TIME',
    'bytes': 'BYTEA',
}


class PostgresTypeResolver:
    """
    Map a host scalar type to a PostgreSQL type name.

    Types are matched exactly first, then by their MRO so subclasses (a
    str-based Enum, for instance) map like their base. String type names
    are matched case-insensitively.
    """

    def __init__(self, lenient: bool = True):
        """
        Args:
            lenient: If True, unknown types map to TEXT.
                     If False, unknown types raise TypeResolutionError.
        """
        self.lenient = lenient

    def __call__(self, host_type: Any) -> str:
        if isinstance(host_type, str):
            sql_type = TYPE_MAP.get(host_type.lower())
            if sql_type:
                return sql_type
        elif host_type in TYPE_MAP:
            return TYPE_MAP[host_type]
        else:
            for base in getattr(host_type, "__mro__", ()):
                if base in TYPE_MAP:
                    return TYPE_MAP[base]

        if self.lenient:
            return "TEXT"
        raise TypeResolutionError(host_type)


# ============================================================================
# INDEX BUILDER
# ============================================================================

class IndexBuilder:
    """
    Builder for index DDL statements.
    """

    @staticmethod
    def btree(name: str, table: str, column: str) -> sql.Composed:
        """
        Create a single-column B-tree index.

        Args:
            name: Index name
            table: Table name
            column: Column to index

        Returns:
            sql.Composed CREATE INDEX statement
        """
        return sql.SQL("CREATE INDEX {name} ON {table} ({column})").format(
            name=sql.Identifier(name),
            table=sql.Identifier(table),
            column=sql.Identifier(column),
        )


# ============================================================================
# OBJECT BUILDER
# ============================================================================

def _escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


class ObjectBuilder:
    """
    Builder for statements addressing one registered object by name.
    """

    @staticmethod
    def drop(kind: ObjectKind, name: str) -> sql.Composed:
        """DROP TABLE / DROP VIEW by recorded kind."""
        return sql.SQL("DROP {kind} {name}").format(
            kind=sql.SQL(ObjectKind(kind).value),
            name=sql.Identifier(name),
        )

    @staticmethod
    def grant_select_template(name: str) -> sql.SQL:
        """
        Grant template with a single ``{grantee}`` placeholder.

        The object identifier is rendered up front so the template
        can be formatted later with the grantee alone.
        """
        identifier = sql.Identifier(name).as_string(None)
        return sql.SQL(
            "GRANT SELECT ON " + _escape_braces(identifier) + " TO {grantee}"
        )

    @staticmethod
    def create_synonym(name: str) -> sql.Composed:
        """Public synonym named like the object it aliases."""
        return sql.SQL("CREATE PUBLIC SYNONYM {name} FOR {name}").format(
            name=sql.Identifier(name),
        )

    @staticmethod
    def drop_synonym(name: str) -> sql.Composed:
        return sql.SQL("DROP PUBLIC SYNONYM {name}").format(
            name=sql.Identifier(name),
        )

    @staticmethod
    def truncate(table: str) -> sql.Composed:
        return sql.SQL("TRUNCATE TABLE {table}").format(
            table=sql.Identifier(table),
        )


__all__ = [
    'TYPE_MAP',
    'PostgresTypeResolver',
    'IndexBuilder',
    'ObjectBuilder',
]
