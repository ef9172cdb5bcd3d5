"""
docsql - compile path-typed document schemas into PostgreSQL objects.

Usage:
    from docsql import DocumentSchemaCompiler, NoAdditionalColumns, PathElement, SimpleNameResolver

    bundle = DocumentSchemaCompiler.of_json().compile(
        "ORDER",
        {(PathElement.parse("lines"),): {PathElement.parse("sku"): str}},
        SimpleNameResolver(),
        NoAdditionalColumns(),
    )
"""

from docsql.__version__ import __version__
from docsql.contracts import ObjectKind, PathElement, SchemaBundle
from docsql.infrastructure import check_error, is_expected_error
from docsql.schema import (
    ColumnTableResolver,
    DocumentSchemaCompiler,
    NameResolver,
    NamingCollisionError,
    NoAdditionalColumns,
    SchemaCompilationError,
    SimpleNameResolver,
    SqlEmitter,
    SyntheticNamespacePrefixResolver,
    TableResolver,
)

__all__ = [
    "__version__",
    "DocumentSchemaCompiler",
    "SqlEmitter",
    "PathElement",
    "ObjectKind",
    "SchemaBundle",
    "NameResolver",
    "SimpleNameResolver",
    "SyntheticNamespacePrefixResolver",
    "TableResolver",
    "NoAdditionalColumns",
    "ColumnTableResolver",
    "SchemaCompilationError",
    "NamingCollisionError",
    "check_error",
    "is_expected_error",
]
