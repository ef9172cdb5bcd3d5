# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# STATUS: Tests - Fixtures shared across compiler tests
# PURPOSE: Naming policies, compilers and statement rendering
# CREATED: 16 OCT 2026
# ============================================================================

from typing import Callable, Optional, Sequence

import pytest

from docsql.config import CompilerDefaults
from docsql.schema import DocumentSchemaCompiler, NameResolver, NoAdditionalColumns, SimpleNameResolver


class LastSegmentResolver(NameResolver):
    """Resolves to the upper-cased last segment and ignores reserved names."""

    def resolve(
        self,
        segments: Sequence[str],
        is_reserved: Optional[Callable[[str], bool]] = None,
    ) -> str:
        return segments[-1].upper()


@pytest.fixture
def render():
    """Render a psycopg.sql statement to text."""
    def _render(statement) -> str:
        return statement.as_string(None)
    return _render


@pytest.fixture
def names():
    return SimpleNameResolver()


@pytest.fixture
def no_columns():
    return NoAdditionalColumns()


@pytest.fixture
def defaults():
    return CompilerDefaults()


@pytest.fixture
def xml_compiler(defaults):
    return DocumentSchemaCompiler.of_xml(defaults=defaults)


@pytest.fixture
def json_compiler(defaults):
    return DocumentSchemaCompiler.of_json(defaults=defaults)
