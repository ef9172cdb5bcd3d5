# ============================================================================
# DIALECT EMITTERS
# ============================================================================
# STATUS: Core - Projection view generation per payload dialect
# PURPOSE: Translate document paths into XMLTABLE / JSONB_PATH_QUERY views
# CREATED: 16 OCT 2026
# EXPORTS: SqlEmitter, Compilation
# DEPENDENCIES: psycopg
# ============================================================================
"""
Dialect emitters.

A document type stores its payload either as XML or as JSONB. The emitter
chosen for the document type knows the payload column type, the expression
binding a payload value on insert, how many leading root segments are left
out of view names, and how one projection view is written:

- XML: absolute XPath root over ``XMLTABLE``, namespace declarations
  through ``XMLNAMESPACES`` and one typed column per property path.
- JSON: a JSON path root with a wildcard per root path over
  ``JSONB_PATH_QUERY``, each property extracted as text and cast.

Views are appended to a ``Compilation``, the accumulator owned by a single
compiler invocation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from psycopg import sql

from docsql.contracts import PAYLOAD, RAW_SUFFIX, ObjectKind, Path, PathElement, RootGroup
from docsql.logging import ComponentType, get_logger
from docsql.schema.errors import NamingCollisionError, UnsupportedDialectFeatureError

logger = get_logger(__name__, ComponentType.EMITTER)

# XMLTABLE needs at least one column; never selected by the view
ORDINALITY_COLUMN = "ORDINALITY"


# ============================================================================
# ACCUMULATOR
# ============================================================================

@dataclass
class Compilation:
    """
    Mutable state of one compilation.

    Created per compiler call and discarded once the bundle is built.
    """
    base: str
    direct_columns: List[str]
    namespace_prefix_resolver: Callable[[Iterable[str]], Mapping[str, str]]
    type_resolver: Callable[[type], str]
    ddl: List[sql.Composable] = field(default_factory=list)
    objects: Dict[str, ObjectKind] = field(default_factory=dict)
    reserved: Set[str] = field(default_factory=set)
    view_meta: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @property
    def raw_table(self) -> str:
        return self.base + RAW_SUFFIX

    def is_taken(self, name: str) -> bool:
        """
        Whether a relation name is in use.

        Tables, views and indexes share one name space; ``reserved`` holds
        the names of indexes, the primary key constraint and objects not
        yet registered.
        """
        return name in self.objects or name in self.reserved

    def register(self, name: str, kind: ObjectKind, statement: sql.Composable) -> None:
        """Append a creation statement and record the object it creates."""
        if self.is_taken(name):
            raise NamingCollisionError(kind.value.lower(), name)
        self.ddl.append(statement)
        self.objects[name] = kind


# ============================================================================
# PATH RENDERING
# ============================================================================

def _identity(text: str) -> str:
    return text


def _no_prefix(namespace: str) -> Optional[str]:
    return None


def _quote_literal(text: str) -> str:
    return sql.Literal(text).as_string(None)


def _flatten(paths: RootGroup) -> List[PathElement]:
    return [element for path in paths for element in path]


def _select_list(compilation: Compilation, columns: Iterable[str]) -> sql.Composed:
    return sql.SQL(", ").join(
        sql.Identifier(column)
        for column in [*compilation.direct_columns, *columns]
    )


def _metadata(view: str, entries: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    metadata: Dict[str, str] = {}
    for path, column in entries:
        if path in metadata:
            raise NamingCollisionError("path", path, owner=view)
        metadata[path] = column
    return metadata


# ============================================================================
# XML
# ============================================================================

def _namespace_clause(namespaces: Mapping[str, str]) -> sql.Composable:
    if not namespaces:
        return sql.SQL("")
    for namespace, prefix in namespaces.items():
        if not prefix:
            raise UnsupportedDialectFeatureError(
                f"PostgreSQL does not support a default namespace for {namespace}"
            )
    declarations = [
        sql.SQL("{} AS {}").format(sql.Literal(namespace), sql.Identifier(prefix))
        for namespace, prefix in sorted(namespaces.items(), key=lambda item: item[1])
    ]
    return sql.SQL("XMLNAMESPACES({}), ").format(sql.SQL(", ").join(declarations))


def _make_xml_view(
    compilation: Compilation,
    name: str,
    paths: RootGroup,
    properties: Mapping[Path, type],
    columns: Mapping[Path, str],
) -> None:
    roots = _flatten(paths)
    used = dict.fromkeys(
        element.namespace
        for element in [*roots, *(element for path in properties for element in path)]
        if element.namespace
    )
    namespaces = dict(compilation.namespace_prefix_resolver(used.keys()))
    missing = [namespace for namespace in used if namespace not in namespaces]
    if missing:
        raise UnsupportedDialectFeatureError(
            f"No namespace prefix resolved for {missing}"
        )
    namespace_clause = _namespace_clause({namespace: namespaces[namespace] for namespace in used})

    root = "/" + PathElement.full("/", _identity, roots, namespaces.get)
    xml_columns = [
        sql.SQL("{} {} PATH {}").format(
            sql.Identifier(columns[path]),
            sql.SQL(compilation.type_resolver(host_type)),
            sql.Literal(PathElement.full("/", _identity, path, namespaces.get, root=".")),
        )
        for path, host_type in properties.items()
    ]
    if not xml_columns:
        ordinality = ORDINALITY_COLUMN
        while ordinality in compilation.direct_columns:
            ordinality += "_"
        xml_columns.append(
            sql.SQL("{} FOR ORDINALITY").format(sql.Identifier(ordinality))
        )
    metadata = _metadata(name, (
        (PathElement.full("/", _identity, [*roots, *path], namespaces.get, root=""), columns[path])
        for path in properties
    ))

    compilation.register(name, ObjectKind.VIEW, sql.SQL(
        "CREATE VIEW {name} AS SELECT {columns} FROM {raw}, "
        "XMLTABLE({namespaces}{root} PASSING {payload} COLUMNS {xml_columns})"
    ).format(
        name=sql.Identifier(name),
        columns=_select_list(compilation, (columns[path] for path in properties)),
        raw=sql.Identifier(compilation.raw_table),
        namespaces=namespace_clause,
        root=sql.Literal(root),
        payload=sql.Identifier(PAYLOAD),
        xml_columns=sql.SQL(", ").join(xml_columns),
    ))
    compilation.view_meta[name] = metadata


# ============================================================================
# JSON
# ============================================================================

def _make_json_view(
    compilation: Compilation,
    name: str,
    paths: RootGroup,
    properties: Mapping[Path, type],
    columns: Mapping[Path, str],
) -> None:
    # every root path denotes a repeating subtree
    root = "$"
    if paths:
        root += "." + ".".join(
            PathElement.full(".", _identity, path, _no_prefix) + "[*]"
            for path in paths
        )
    json_columns = [
        sql.SQL("CAST({value}->>0 AS {type}) AS {column}").format(
            value=sql.SQL(PathElement.full("->", _quote_literal, path, _no_prefix, root="EXPLODED.VALUE")),
            type=sql.SQL(compilation.type_resolver(host_type)),
            column=sql.Identifier(columns[path]),
        )
        for path, host_type in properties.items()
    ]
    select_list = sql.SQL(", ").join([
        *(sql.Identifier(column) for column in compilation.direct_columns),
        *json_columns,
    ])
    roots = _flatten(paths)
    # paths differing only by namespace render alike
    metadata = _metadata(name, (
        (PathElement.full(".", _identity, [*roots, *path], _no_prefix, root="$"), columns[path])
        for path in properties
    ))

    compilation.register(name, ObjectKind.VIEW, sql.SQL(
        "CREATE VIEW {name} AS SELECT {columns} FROM {raw}, "
        "JSONB_PATH_QUERY({payload}, {root}) AS EXPLODED(VALUE)"
    ).format(
        name=sql.Identifier(name),
        columns=select_list,
        raw=sql.Identifier(compilation.raw_table),
        payload=sql.Identifier(PAYLOAD),
        root=sql.Literal(root),
    ))
    compilation.view_meta[name] = metadata


# ============================================================================
# EMITTERS
# ============================================================================

class SqlEmitter(Enum):
    """
    Payload dialect of a document type.

    Values: (dialect, payload column type, payload bind expression, roots).
    ``roots`` is the number of leading root segments skipped when naming
    views: XML paths start at the document element, JSON paths do not.
    """
    XML = ("xml", "XML NOT NULL", "XMLPARSE(CONTENT {})", 1)
    JSON = ("json", "JSONB", "CAST({} AS JSONB)", 0)

    def __init__(self, dialect: str, payload_type: str, value_variable: str, roots: int):
        self.dialect = dialect
        self.payload_type = payload_type
        self._value_variable = value_variable
        self.roots = roots

    @property
    def value_variable(self) -> sql.Composed:
        """Insert expression binding the payload parameter."""
        return sql.SQL(self._value_variable).format(sql.Placeholder())

    def make_view(
        self,
        compilation: Compilation,
        name: str,
        paths: RootGroup,
        properties: Mapping[Path, type],
        columns: Mapping[Path, str],
    ) -> None:
        """
        Emit one projection view into the compilation.

        Args:
            compilation: Accumulator receiving DDL, registry entry and metadata
            name: View name
            paths: Root path group of the view
            properties: Property paths and host types for this view
            columns: Resolved column name per property path (may hold more
                     paths than ``properties`` when a view is partitioned)
        """
        if self is SqlEmitter.XML:
            _make_xml_view(compilation, name, paths, properties, columns)
        else:
            _make_json_view(compilation, name, paths, properties, columns)
        logger.debug(
            f"Emitted {self.dialect} view {name}",
            extra={"view": name, "columns": len(properties)},
        )


__all__ = [
    "SqlEmitter",
    "Compilation",
    "ORDINALITY_COLUMN",
]
