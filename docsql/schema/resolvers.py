# ============================================================================
# NAMING, NAMESPACE AND TABLE POLICIES
# ============================================================================
# STATUS: Core - Pluggable policies consumed by the schema compiler
# PURPOSE: Resolve identifiers, namespace prefixes and additional raw columns
# CREATED: 16 OCT 2026
# EXPORTS: NameResolver, SimpleNameResolver, SyntheticNamespacePrefixResolver,
#          TableResolver, NoAdditionalColumns, ColumnTableResolver
# ============================================================================
"""
Policies supplied to the schema compiler.

All policies must be pure functions of their input: the compiler may be
called from several threads at once for different document types.
"""

import hashlib
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

_INVALID_CHARACTERS = re.compile(r"[^A-Z0-9_]")


# ============================================================================
# NAME RESOLUTION
# ============================================================================

class NameResolver(ABC):
    """
    Resolve an ordered list of name segments to one identifier.

    Resolution is deterministic but does not guarantee uniqueness: callers
    re-check the result against their own reserved names.
    """

    @abstractmethod
    def resolve(
        self,
        segments: Sequence[str],
        is_reserved: Optional[Callable[[str], bool]] = None,
    ) -> str:
        """
        Args:
            segments: Name parts, most significant first
            is_reserved: Predicate over candidates the resolver should avoid

        Returns:
            Identifier
        """


class SimpleNameResolver(NameResolver):
    """
    Upper-case, underscore-joined identifiers.

    Names longer than ``max_length`` are truncated and suffixed with a
    short digest of the full name; reserved candidates get ``_2``, ``_3``...
    """

    def __init__(self, max_length: int = 63, separator: str = "_"):
        if max_length < 16:
            raise ValueError(f"max_length must be at least 16, got {max_length}")
        self.max_length = max_length
        self.separator = separator

    def _normalize(self, segment: str) -> str:
        return _INVALID_CHARACTERS.sub("_", segment.upper())

    def _shorten(self, name: str) -> str:
        if len(name) <= self.max_length:
            return name
        digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8].upper()
        return name[:self.max_length - len(digest) - 1] + "_" + digest

    def resolve(
        self,
        segments: Sequence[str],
        is_reserved: Optional[Callable[[str], bool]] = None,
    ) -> str:
        base = self.separator.join(
            self._normalize(segment) for segment in segments if segment
        )
        candidate = self._shorten(base)
        if is_reserved is None:
            return candidate

        counter = 2
        while is_reserved(candidate):
            candidate = self._shorten(f"{base}{self.separator}{counter}")
            counter += 1
        return candidate


# ============================================================================
# NAMESPACE PREFIXES
# ============================================================================

class SyntheticNamespacePrefixResolver:
    """
    Assign synthetic prefixes ``ns1``, ``ns2``... to namespaces in sorted order.

    With ``default_namespace`` a lone namespace maps to the empty (default)
    prefix instead; dialects without default-namespace syntax reject that.
    """

    def __init__(self, default_namespace: bool = False, prefix: str = "ns"):
        self.default_namespace = default_namespace
        self.prefix = prefix

    def __call__(self, namespaces: Iterable[str]) -> Dict[str, str]:
        ordered = sorted(set(namespaces))
        if self.default_namespace and len(ordered) == 1:
            return {ordered[0]: ""}
        return {
            namespace: f"{self.prefix}{index}"
            for index, namespace in enumerate(ordered, start=1)
        }


# ============================================================================
# TABLE POLICIES
# ============================================================================

class TableResolver(ABC):
    """
    Additional raw table columns and their per-row values.

    Each additional column is stored after the fixed columns and indexed
    individually.
    """

    @property
    @abstractmethod
    def additional_columns(self) -> Mapping[str, str]:
        """Ordered mapping of column name to SQL type."""

    @abstractmethod
    def values(self, row: Any) -> List[Any]:
        """Values for the additional columns of one row, in column order."""


class NoAdditionalColumns(TableResolver):
    """Raw table with the fixed columns only."""

    @property
    def additional_columns(self) -> Mapping[str, str]:
        return {}

    def values(self, row: Any) -> List[Any]:
        return []


class ColumnTableResolver(TableResolver):
    """
    Additional columns with one extractor callable per column.

    Usage:
        resolver = ColumnTableResolver(
            {"YEAR": "INTEGER"},
            {"YEAR": lambda row: row["year"]},
        )
    """

    def __init__(
        self,
        columns: Mapping[str, str],
        extractors: Mapping[str, Callable[[Any], Any]],
    ):
        missing = [column for column in columns if column not in extractors]
        if missing:
            raise ValueError(f"No extractor for additional columns: {missing}")
        unknown = [column for column in extractors if column not in columns]
        if unknown:
            raise ValueError(f"Extractors for unknown columns: {unknown}")
        self._columns = dict(columns)
        self._extractors = dict(extractors)

    @property
    def additional_columns(self) -> Mapping[str, str]:
        return dict(self._columns)

    def values(self, row: Any) -> List[Any]:
        return [self._extractors[column](row) for column in self._columns]


__all__ = [
    "NameResolver",
    "SimpleNameResolver",
    "SyntheticNamespacePrefixResolver",
    "TableResolver",
    "NoAdditionalColumns",
    "ColumnTableResolver",
]
