# ============================================================================
# SCHEMA MODULE
# ============================================================================
# STATUS: Core - Schema compilation for versioned documents
# PURPOSE: Generate PostgreSQL DDL/DML from path-typed document schemas
# CREATED: 16 OCT 2026
# ============================================================================

from docsql.schema.ddl_utils import (
    IndexBuilder,
    ObjectBuilder,
    PostgresTypeResolver,
    TYPE_MAP,
)
from docsql.schema.emitter import Compilation, SqlEmitter
from docsql.schema.errors import (
    NamespaceResolutionError,
    NamingCollisionError,
    SchemaCompilationError,
    TypeResolutionError,
    UnsupportedDialectFeatureError,
)
from docsql.schema.resolvers import (
    ColumnTableResolver,
    NameResolver,
    NoAdditionalColumns,
    SimpleNameResolver,
    SyntheticNamespacePrefixResolver,
    TableResolver,
)
from docsql.schema.compiler import DocumentSchemaCompiler

__all__ = [
    # Compiler
    "DocumentSchemaCompiler",
    "SqlEmitter",
    "Compilation",
    # Policies
    "NameResolver",
    "SimpleNameResolver",
    "SyntheticNamespacePrefixResolver",
    "TableResolver",
    "NoAdditionalColumns",
    "ColumnTableResolver",
    "PostgresTypeResolver",
    # Utilities
    "IndexBuilder",
    "ObjectBuilder",
    "TYPE_MAP",
    # Errors
    "SchemaCompilationError",
    "NamingCollisionError",
    "UnsupportedDialectFeatureError",
    "NamespaceResolutionError",
    "TypeResolutionError",
]
