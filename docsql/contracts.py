# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Path elements, object kinds and the compiled bundle
# PURPOSE: Data contracts shared by the compiler, the emitters and callers
# CREATED: 16 OCT 2026
# EXPORTS: PathElement, ObjectKind, SchemaBundle, column and suffix constants
# DEPENDENCIES: enum, pydantic, psycopg
# ============================================================================
"""
Base contracts for the document SQL compiler.

These define what crosses the boundary between a document description
and the statements handed to the executing dispatcher:
- Paths (ordered PathElement tuples, optionally namespaced)
- Object registry kinds (TABLE / VIEW)
- The compiled SchemaBundle

Raw table column names and view suffixes are read by downstream consumers
of the metadata view and must stay stable.
"""

import re
from functools import lru_cache
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from psycopg import sql
from pydantic import BaseModel, ConfigDict


# ============================================================================
# RAW TABLE CONTRACT
# ============================================================================

ID = "ID"
REVISION = "REVISION"
DELETED = "DELETED"
PAYLOAD = "PAYLOAD"

FIXED_COLUMNS: Tuple[str, ...] = (ID, REVISION, DELETED, PAYLOAD)

RAW_SUFFIX = "_RAW"
PRIMARY_KEY_SUFFIX = "_PK"
INDEX_SUFFIX = "_IDX"
MIN_SUFFIX = "_MIN"
MAX_SUFFIX = "_MAX"
NOW_SUFFIX = "_NOW"
META_SUFFIX = "_MTA"


class ObjectKind(str, Enum):
    """Kinds of database objects recorded in the object registry."""
    TABLE = "TABLE"
    VIEW = "VIEW"


# ============================================================================
# PATHS
# ============================================================================

@lru_cache(maxsize=None)
def _segment_pattern(separator: str) -> "re.Pattern":
    # Clark notation: {namespace}name; namespaces may contain the separator
    name = "(?:(?!" + re.escape(separator) + r")[^{])+"
    return re.compile(r"\{(?P<namespace>[^}]*)\}(?P<name>" + name + ")|(?P<plain>" + name + ")")


class PathElement(BaseModel):
    """
    One named segment of a document path.

    Paths are tuples of elements; frozen elements hash by value so paths
    can be used as mapping keys in property sets.
    """
    name: str
    namespace: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if self.namespace:
            return f"{{{self.namespace}}}{self.name}"
        return self.name

    @classmethod
    def of(cls, *names: str, namespace: Optional[str] = None) -> Tuple["PathElement", ...]:
        """Build a path from plain names sharing one (optional) namespace."""
        return tuple(cls(name=name, namespace=namespace) for name in names)

    @classmethod
    def parse(cls, text: str, separator: str = "/") -> Tuple["PathElement", ...]:
        """
        Parse a separated path such as ``a/{urn:x}b/c``.

        Leading and trailing separators are ignored.
        """
        if not separator:
            raise ValueError("separator must not be empty")
        elements = []
        for match in _segment_pattern(separator).finditer(text):
            if match.group("plain") is not None:
                elements.append(cls(name=match.group("plain")))
            else:
                elements.append(cls(
                    name=match.group("name"),
                    namespace=match.group("namespace") or None,
                ))
        return tuple(elements)

    @staticmethod
    def dense(path: Sequence["PathElement"]) -> List[str]:
        """Segment names without namespaces, the input to name resolution."""
        return [element.name for element in path]

    @staticmethod
    def full(
        separator: str,
        quote: Callable[[str], str],
        path: Sequence["PathElement"],
        prefixes: Callable[[str], Optional[str]],
        root: Optional[str] = None,
    ) -> str:
        """
        Render a path as one string.

        Args:
            separator: Placed between segments (and after ``root``)
            quote: Applied to every rendered segment
            path: Elements to render
            prefixes: Maps a namespace to its prefix; empty or None renders
                      the bare name
            root: Optional leading text

        Returns:
            The joined path
        """
        rendered = []
        for element in path:
            prefix = prefixes(element.namespace) if element.namespace else None
            if prefix:
                rendered.append(quote(f"{prefix}:{element.name}"))
            else:
                rendered.append(quote(element.name))
        joined = separator.join(rendered)
        if root is None:
            return joined
        if not rendered:
            return root
        return root + separator + joined


Path = Tuple[PathElement, ...]
RootGroup = Tuple[Path, ...]
PropertySet = Mapping[Path, type]


# ============================================================================
# COMPILED BUNDLE
# ============================================================================

class SchemaBundle(BaseModel):
    """
    Statements compiled for one document type.

    Handed to the executing dispatcher as is: creation statements in
    emission order, drop statements, grant templates with one ``{grantee}``
    placeholder each, the parameterized insert and the truncate statement.
    """
    document: str
    creation: Tuple[sql.Composable, ...]
    drop: Tuple[sql.Composable, ...]
    grant_templates: Tuple[sql.SQL, ...]
    insert: sql.Composable
    truncate: sql.Composable
    table_resolver: Any
    objects: Dict[str, ObjectKind]
    view_metadata: Dict[str, Dict[str, str]]

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def grants(self, grantee: str) -> List[sql.Composed]:
        """Grant statements for one grantee, one per registered object."""
        return [
            template.format(grantee=sql.Identifier(grantee))
            for template in self.grant_templates
        ]

    def insert_parameters(
        self,
        id: str,
        revision: int,
        deleted: bool,
        payload: Any,
        row: Any = None,
    ) -> List[Any]:
        """Bind parameters for the insert statement, in column order."""
        return [id, revision, deleted, payload, *self.table_resolver.values(row)]


__all__ = [
    "ID",
    "REVISION",
    "DELETED",
    "PAYLOAD",
    "FIXED_COLUMNS",
    "RAW_SUFFIX",
    "PRIMARY_KEY_SUFFIX",
    "INDEX_SUFFIX",
    "MIN_SUFFIX",
    "MAX_SUFFIX",
    "NOW_SUFFIX",
    "META_SUFFIX",
    "ObjectKind",
    "PathElement",
    "Path",
    "RootGroup",
    "PropertySet",
    "SchemaBundle",
]
