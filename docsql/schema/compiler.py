# ============================================================================
# DOCUMENT SCHEMA COMPILER
# ============================================================================
# STATUS: Core - DDL/DML generation for versioned documents
# PURPOSE: Compile a path-typed document schema into tables, views and grants
# CREATED: 16 OCT 2026
# EXPORTS: DocumentSchemaCompiler
# DEPENDENCIES: psycopg
# ============================================================================
"""
Document Schema Compiler.

Compiles one document type, described as groups of root paths each mapped
to a property set (path -> host type), into:

- a revisioned raw table ``<base>_RAW`` with one index per additional column
- temporal views ``<base>_MIN``, ``<base>_MAX`` and ``<base>_NOW``
- one projection view per root path group, partitioned into ``_0``, ``_1``...
  when the group has more properties than the column limit
- the metadata view ``<base>_MTA`` listing (path, object, column)
- optional public synonyms and caller supplied creation hooks

plus the matching drop statements, grant templates, the parameterized
insert and the truncate statement.

Usage:
    compiler = DocumentSchemaCompiler.of_xml().with_synonym(True)
    bundle = compiler.compile(
        "TAX_RETURN",
        {(PathElement.parse("return/income"),): {PathElement.parse("amount"): Decimal}},
        SimpleNameResolver(),
        NoAdditionalColumns(),
    )
    for stmt in bundle.creation:
        cursor.execute(stmt)
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from psycopg import sql

from docsql.config import CompilerDefaults, get_defaults
from docsql.contracts import (
    DELETED,
    FIXED_COLUMNS,
    ID,
    INDEX_SUFFIX,
    MAX_SUFFIX,
    META_SUFFIX,
    MIN_SUFFIX,
    NOW_SUFFIX,
    PAYLOAD,
    PRIMARY_KEY_SUFFIX,
    REVISION,
    ObjectKind,
    Path,
    PathElement,
    RootGroup,
    SchemaBundle,
)
from docsql.logging import ComponentType, get_logger, log_checkpoint, log_context
from docsql.schema.ddl_utils import IndexBuilder, ObjectBuilder, PostgresTypeResolver
from docsql.schema.emitter import Compilation, SqlEmitter
from docsql.schema.errors import NamespaceResolutionError, NamingCollisionError, SchemaCompilationError
from docsql.schema.resolvers import NameResolver, SyntheticNamespacePrefixResolver, TableResolver

logger = get_logger(__name__, ComponentType.COMPILER)

NamespacePrefixResolver = Callable[[Iterable[str]], Mapping[str, str]]
TypeResolver = Callable[[type], str]
StatementHook = Callable[[str], Sequence[sql.Composable]]


def _reject_namespaces(namespaces: Iterable[str]) -> Dict[str, str]:
    raise NamespaceResolutionError(set(namespaces))


@dataclass(frozen=True)
class DocumentSchemaCompiler:
    """
    Immutable compiler configuration.

    Every ``with_*`` method returns a modified copy. Creation and drop
    hooks accumulate: each call appends to the hooks already registered.
    """
    emitter: SqlEmitter
    namespace_prefix_resolver: NamespacePrefixResolver
    type_resolver: TypeResolver = field(default_factory=PostgresTypeResolver)
    meta: bool = True
    synonym: bool = False
    on_creation: Tuple[StatementHook, ...] = ()
    on_drop: Tuple[StatementHook, ...] = ()
    max_columns_view: int = 200
    id_length: int = 250

    # =========================================================================
    # PRESETS
    # =========================================================================

    @classmethod
    def _of(
        cls,
        emitter: SqlEmitter,
        namespace_prefix_resolver: NamespacePrefixResolver,
        defaults: Optional[CompilerDefaults],
    ) -> "DocumentSchemaCompiler":
        defaults = defaults or get_defaults()
        return cls(
            emitter=emitter,
            namespace_prefix_resolver=namespace_prefix_resolver,
            type_resolver=PostgresTypeResolver(lenient=True),
            meta=defaults.meta,
            synonym=defaults.synonym,
            max_columns_view=defaults.max_columns_view,
            id_length=defaults.id_length,
        )

    @classmethod
    def of_xml(
        cls,
        namespace_prefix_resolver: Optional[NamespacePrefixResolver] = None,
        defaults: Optional[CompilerDefaults] = None,
    ) -> "DocumentSchemaCompiler":
        """Compiler for XML payloads, with synthetic namespace prefixes by default."""
        return cls._of(
            SqlEmitter.XML,
            namespace_prefix_resolver or SyntheticNamespacePrefixResolver(default_namespace=False),
            defaults,
        )

    @classmethod
    def of_json(cls, defaults: Optional[CompilerDefaults] = None) -> "DocumentSchemaCompiler":
        """Compiler for JSONB payloads; JSON paths never carry namespaces."""
        return cls._of(SqlEmitter.JSON, _reject_namespaces, defaults)

    # =========================================================================
    # BUILDER
    # =========================================================================

    def with_type_resolver(self, type_resolver: TypeResolver) -> "DocumentSchemaCompiler":
        return replace(self, type_resolver=type_resolver)

    def with_meta(self, meta: bool) -> "DocumentSchemaCompiler":
        return replace(self, meta=meta)

    def with_synonym(self, synonym: bool) -> "DocumentSchemaCompiler":
        return replace(self, synonym=synonym)

    def with_on_creation(self, hook: StatementHook) -> "DocumentSchemaCompiler":
        """Append a hook producing statements run after all objects are created."""
        return replace(self, on_creation=self.on_creation + (hook,))

    def with_on_drop(self, hook: StatementHook) -> "DocumentSchemaCompiler":
        """Append a hook producing statements run after all objects are dropped."""
        return replace(self, on_drop=self.on_drop + (hook,))

    # =========================================================================
    # COMPILATION
    # =========================================================================

    def compile(
        self,
        name: str,
        views: Mapping[RootGroup, Mapping[Path, type]],
        name_resolver: NameResolver,
        table_resolver: TableResolver,
    ) -> SchemaBundle:
        """
        Compile one document type.

        Args:
            name: Document type name
            views: Root path groups, in order, each with its property set
            name_resolver: Identifier policy
            table_resolver: Additional raw columns and their row values

        Returns:
            SchemaBundle with creation, drop, grant, insert and truncate statements

        Raises:
            NamingCollisionError: A view, column or index name is assigned twice
            SchemaCompilationError: The schema cannot be expressed in the dialect
        """
        with log_context(document=name, dialect=self.emitter.dialect, operation="compile"):
            try:
                bundle = self._compile(name, views, name_resolver, table_resolver)
            except SchemaCompilationError as e:
                if e.document is None:
                    e.document = name
                logger.error(f"Compilation of {name} failed: {e}")
                raise

            log_checkpoint("schema_compiled", {
                "objects": len(bundle.objects),
                "creation": len(bundle.creation),
                "drop": len(bundle.drop),
            })
            logger.info(
                f"Compiled {len(bundle.creation)} creation statements for {name}",
                extra={"objects": len(bundle.objects)},
            )
            return bundle

    def _compile(
        self,
        name: str,
        views: Mapping[RootGroup, Mapping[Path, type]],
        name_resolver: NameResolver,
        table_resolver: TableResolver,
    ) -> SchemaBundle:
        base = name_resolver.resolve([name])
        additional = dict(table_resolver.additional_columns)
        compilation = Compilation(
            base=base,
            direct_columns=[*FIXED_COLUMNS, *additional],
            namespace_prefix_resolver=self.namespace_prefix_resolver,
            type_resolver=self.type_resolver,
        )

        self._raw_table(compilation, additional)
        self._indexes(compilation, additional, name_resolver)
        self._temporal_views(compilation)
        if self.meta:
            compilation.reserved.add(compilation.base + META_SUFFIX)

        for paths, properties in views.items():
            self._projection_views(compilation, tuple(paths), properties, name_resolver)

        if self.meta:
            self._meta_view(compilation)

        registered = list(compilation.objects.items())
        if self.synonym:
            for object_name, _ in registered:
                compilation.ddl.append(ObjectBuilder.create_synonym(object_name))
        for hook in self.on_creation:
            compilation.ddl.extend(hook(compilation.raw_table))

        drop: List[sql.Composable] = [
            ObjectBuilder.drop(kind, object_name) for object_name, kind in registered
        ]
        if self.synonym:
            drop.extend(ObjectBuilder.drop_synonym(object_name) for object_name, _ in registered)
        for hook in self.on_drop:
            drop.extend(hook(compilation.raw_table))

        return SchemaBundle(
            document=name,
            creation=tuple(compilation.ddl),
            drop=tuple(drop),
            grant_templates=tuple(
                ObjectBuilder.grant_select_template(object_name) for object_name, _ in registered
            ),
            insert=self._insert(compilation, additional),
            truncate=ObjectBuilder.truncate(compilation.raw_table),
            table_resolver=table_resolver,
            objects=dict(registered),
            view_metadata=compilation.view_meta,
        )

    # =========================================================================
    # RAW TABLE
    # =========================================================================

    def _raw_table(self, compilation: Compilation, additional: Mapping[str, str]) -> None:
        columns = [
            sql.SQL("{} VARCHAR({}) NOT NULL").format(sql.Identifier(ID), sql.SQL(str(int(self.id_length)))),
            sql.SQL("{} BIGINT NOT NULL").format(sql.Identifier(REVISION)),
            sql.SQL("{} BOOLEAN NOT NULL").format(sql.Identifier(DELETED)),
            sql.SQL("{} {}").format(sql.Identifier(PAYLOAD), sql.SQL(self.emitter.payload_type)),
        ]
        columns.extend(
            sql.SQL("{} {}").format(sql.Identifier(column), sql.SQL(sql_type))
            for column, sql_type in additional.items()
        )
        primary_key = compilation.base + PRIMARY_KEY_SUFFIX
        columns.append(sql.SQL("CONSTRAINT {} PRIMARY KEY ({}, {})").format(
            sql.Identifier(primary_key),
            sql.Identifier(ID),
            sql.Identifier(REVISION),
        ))
        # the constraint's index takes the constraint name
        compilation.reserved.add(primary_key)
        compilation.register(
            compilation.raw_table,
            ObjectKind.TABLE,
            sql.SQL("CREATE TABLE {} ({})").format(
                sql.Identifier(compilation.raw_table),
                sql.SQL(", ").join(columns),
            ),
        )

    def _indexes(
        self,
        compilation: Compilation,
        additional: Mapping[str, str],
        name_resolver: NameResolver,
    ) -> None:
        compilation.reserved.add(compilation.base + INDEX_SUFFIX)
        for column in additional:
            resolved = name_resolver.resolve(
                [compilation.base, column],
                lambda candidate: compilation.is_taken(candidate + INDEX_SUFFIX),
            )
            index = resolved + INDEX_SUFFIX
            if compilation.is_taken(index):
                raise NamingCollisionError("index", index)
            compilation.reserved.add(index)
            compilation.ddl.append(IndexBuilder.btree(index, compilation.raw_table, column))

    # =========================================================================
    # TEMPORAL VIEWS
    # =========================================================================

    def _temporal_views(self, compilation: Compilation) -> None:
        raw = sql.Identifier(compilation.raw_table)
        for suffix, aggregate in ((MIN_SUFFIX, "MIN"), (MAX_SUFFIX, "MAX")):
            view = compilation.base + suffix
            compilation.register(view, ObjectKind.VIEW, sql.SQL(
                "CREATE VIEW {view} AS SELECT {id}, {aggregate}({revision}) {revision} "
                "FROM {raw} GROUP BY {id}"
            ).format(
                view=sql.Identifier(view),
                id=sql.Identifier(ID),
                aggregate=sql.SQL(aggregate),
                revision=sql.Identifier(REVISION),
                raw=raw,
            ))

        # latest revision per id, unless that revision is a tombstone
        view = compilation.base + NOW_SUFFIX
        compilation.register(view, ObjectKind.VIEW, sql.SQL(
            "CREATE VIEW {view} AS "
            "SELECT {id}, MAX({revision}) {revision} FROM {raw} GROUP BY {id} "
            "INTERSECT "
            "SELECT {id}, {revision} FROM {raw} WHERE {deleted} = false"
        ).format(
            view=sql.Identifier(view),
            id=sql.Identifier(ID),
            revision=sql.Identifier(REVISION),
            deleted=sql.Identifier(DELETED),
            raw=raw,
        ))

    # =========================================================================
    # PROJECTION VIEWS
    # =========================================================================

    def _projection_views(
        self,
        compilation: Compilation,
        paths: RootGroup,
        properties: Mapping[Path, type],
        name_resolver: NameResolver,
    ) -> None:
        segments = [
            segment
            for path in paths
            for segment in PathElement.dense(path)
        ][self.emitter.roots:]
        view = name_resolver.resolve([compilation.base, *segments], compilation.is_taken)
        if compilation.is_taken(view):
            raise NamingCollisionError("view", view)

        reserved = set(compilation.direct_columns)
        columns: Dict[Path, str] = {}
        for path in properties:
            column = name_resolver.resolve(PathElement.dense(path), reserved.__contains__)
            if column in reserved:
                raise NamingCollisionError("column", column, owner=view)
            reserved.add(column)
            columns[path] = column

        with log_context(view=view):
            if len(columns) <= self.max_columns_view:
                self.emitter.make_view(compilation, view, paths, properties, columns)
                return

            ordered = sorted(properties.items(), key=lambda entry: columns[entry[0]])
            partition = 0
            for start in range(0, len(ordered), self.max_columns_view):
                alias = f"{view}_{partition}"
                partition += 1
                while compilation.is_taken(alias):
                    alias = f"{view}_{partition}"
                    partition += 1
                chunk = dict(ordered[start:start + self.max_columns_view])
                self.emitter.make_view(compilation, alias, paths, chunk, columns)
            logger.debug(f"Partitioned {view} into {partition} views", extra={"columns": len(columns)})

    # =========================================================================
    # METADATA VIEW
    # =========================================================================

    def _meta_view(self, compilation: Compilation) -> None:
        # never-matching seed keeps the union valid without projection views
        rows = [sql.SQL("SELECT NULL AS PATH, NULL AS OBJECT, NULL AS NAME WHERE 0 = 1")]
        for view, locations in compilation.view_meta.items():
            rows.extend(
                sql.SQL("SELECT {} AS PATH, {} AS OBJECT, {} AS NAME").format(
                    sql.Literal(path), sql.Literal(view), sql.Literal(column),
                )
                for path, column in locations.items()
            )
        view = compilation.base + META_SUFFIX
        compilation.reserved.discard(view)
        compilation.register(view, ObjectKind.VIEW, sql.SQL("CREATE VIEW {} AS {}").format(
            sql.Identifier(view),
            sql.SQL(" UNION ALL ").join(rows),
        ))

    # =========================================================================
    # DML
    # =========================================================================

    def _insert(self, compilation: Compilation, additional: Mapping[str, str]) -> sql.Composed:
        values = [
            sql.Placeholder(),
            sql.Placeholder(),
            sql.Placeholder(),
            self.emitter.value_variable,
            *(sql.Placeholder() for _ in additional),
        ]
        return sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
            sql.Identifier(compilation.raw_table),
            sql.SQL(", ").join(sql.Identifier(column) for column in compilation.direct_columns),
            sql.SQL(", ").join(values),
        )


__all__ = ["DocumentSchemaCompiler"]
