# ============================================================================
# DIALECT EMITTER TESTS
# ============================================================================
# STATUS: Tests - XML and JSON projection views
# PURPOSE: Verify extraction roots, namespaces, columns and view metadata
# CREATED: 16 OCT 2026
# ============================================================================
"""
Dialect Emitter Tests

Run with:
    pytest tests/test_emitter.py -v
"""

from decimal import Decimal

import pytest

from docsql.contracts import FIXED_COLUMNS, ObjectKind, PathElement
from docsql.schema import (
    Compilation,
    NamingCollisionError,
    PostgresTypeResolver,
    SqlEmitter,
    SyntheticNamespacePrefixResolver,
    UnsupportedDialectFeatureError,
)

TAX = "urn:tax"


# ============================================================================
# FIXTURES
# ============================================================================

def _compilation(namespace_prefix_resolver=None) -> Compilation:
    return Compilation(
        base="TAX",
        direct_columns=list(FIXED_COLUMNS),
        namespace_prefix_resolver=namespace_prefix_resolver or SyntheticNamespacePrefixResolver(),
        type_resolver=PostgresTypeResolver(),
    )


@pytest.fixture
def income():
    roots = (PathElement.of("return", "income"),)
    properties = {
        PathElement.of("amount"): Decimal,
        PathElement.of("source", "name"): str,
    }
    columns = {
        PathElement.of("amount"): "AMOUNT",
        PathElement.of("source", "name"): "SOURCE_NAME",
    }
    return roots, properties, columns


# ============================================================================
# CONSTANTS
# ============================================================================


class TestEmitterConstants:
    def test_exactly_two_dialects(self):
        assert [emitter.dialect for emitter in SqlEmitter] == ["xml", "json"]

    def test_payload_types(self):
        assert SqlEmitter.XML.payload_type == "XML NOT NULL"
        assert SqlEmitter.JSON.payload_type == "JSONB"

    def test_roots_skipped(self):
        assert SqlEmitter.XML.roots == 1
        assert SqlEmitter.JSON.roots == 0

    def test_value_variables(self, render):
        assert render(SqlEmitter.XML.value_variable) == "XMLPARSE(CONTENT %s)"
        assert render(SqlEmitter.JSON.value_variable) == "CAST(%s AS JSONB)"


# ============================================================================
# XML
# ============================================================================


class TestXmlView:
    def test_view_ddl(self, income, render):
        compilation = _compilation()
        SqlEmitter.XML.make_view(compilation, "TAX_INCOME", *income)

        assert render(compilation.ddl[0]) == (
            'CREATE VIEW "TAX_INCOME" AS SELECT "ID", "REVISION", "DELETED", "PAYLOAD", '
            '"AMOUNT", "SOURCE_NAME" FROM "TAX_RAW", '
            "XMLTABLE('/return/income' PASSING \"PAYLOAD\" COLUMNS "
            "\"AMOUNT\" NUMERIC PATH './amount', \"SOURCE_NAME\" TEXT PATH './source/name')"
        )
        assert compilation.objects == {"TAX_INCOME": ObjectKind.VIEW}

    def test_metadata_is_absolute(self, income):
        compilation = _compilation()
        SqlEmitter.XML.make_view(compilation, "TAX_INCOME", *income)
        assert compilation.view_meta["TAX_INCOME"] == {
            "/return/income/amount": "AMOUNT",
            "/return/income/source/name": "SOURCE_NAME",
        }

    def test_namespaces_declared_and_prefixed(self, render):
        roots = (PathElement.of("return", "income", namespace=TAX),)
        properties = {
            PathElement.of("amount", namespace=TAX): int,
            PathElement.parse("{urn:common}code"): str,
        }
        columns = {path: path[-1].name.upper() for path in properties}
        compilation = _compilation()

        SqlEmitter.XML.make_view(compilation, "TAX_INCOME", roots, properties, columns)

        ddl = render(compilation.ddl[0])
        assert "XMLTABLE(XMLNAMESPACES('urn:common' AS \"ns1\", 'urn:tax' AS \"ns2\"), " in ddl
        assert "'/ns2:return/ns2:income'" in ddl
        assert "\"AMOUNT\" BIGINT PATH './ns2:amount'" in ddl
        assert "\"CODE\" TEXT PATH './ns1:code'" in ddl
        assert compilation.view_meta["TAX_INCOME"]["/ns2:return/ns2:income/ns2:amount"] == "AMOUNT"

    def test_default_namespace_rejected(self):
        roots = (PathElement.of("return", namespace=TAX),)
        compilation = _compilation(SyntheticNamespacePrefixResolver(default_namespace=True))
        with pytest.raises(UnsupportedDialectFeatureError, match="default namespace"):
            SqlEmitter.XML.make_view(compilation, "TAX", roots, {}, {})
        assert compilation.ddl == []

    def test_unresolved_namespace_rejected(self):
        roots = (PathElement.of("return", namespace=TAX),)
        compilation = _compilation(lambda namespaces: {})
        with pytest.raises(UnsupportedDialectFeatureError):
            SqlEmitter.XML.make_view(compilation, "TAX", roots, {}, {})

    def test_empty_properties_keep_direct_columns(self, render):
        compilation = _compilation()
        SqlEmitter.XML.make_view(compilation, "TAX_INCOME", (PathElement.of("return"),), {}, {})

        ddl = render(compilation.ddl[0])
        assert ddl.startswith(
            'CREATE VIEW "TAX_INCOME" AS SELECT "ID", "REVISION", "DELETED", "PAYLOAD" FROM "TAX_RAW", '
        )
        assert 'COLUMNS "ORDINALITY" FOR ORDINALITY)' in ddl
        assert compilation.view_meta["TAX_INCOME"] == {}

    def test_ordinality_avoids_direct_columns(self, render):
        compilation = _compilation()
        compilation.direct_columns.append("ORDINALITY")
        SqlEmitter.XML.make_view(compilation, "TAX_INCOME", (PathElement.of("return"),), {}, {})

        ddl = render(compilation.ddl[0])
        assert '"PAYLOAD", "ORDINALITY" FROM "TAX_RAW"' in ddl
        assert 'COLUMNS "ORDINALITY_" FOR ORDINALITY)' in ddl

    def test_only_listed_properties_emitted(self, income, render):
        roots, properties, columns = income
        chunk = {PathElement.of("amount"): Decimal}
        compilation = _compilation()

        SqlEmitter.XML.make_view(compilation, "TAX_INCOME_0", roots, chunk, columns)

        assert "SOURCE_NAME" not in render(compilation.ddl[0])
        assert compilation.view_meta["TAX_INCOME_0"] == {"/return/income/amount": "AMOUNT"}


# ============================================================================
# JSON
# ============================================================================


class TestJsonView:
    def test_view_ddl(self, income, render):
        compilation = _compilation()
        SqlEmitter.JSON.make_view(compilation, "TAX_INCOME", *income)

        assert render(compilation.ddl[0]) == (
            'CREATE VIEW "TAX_INCOME" AS SELECT "ID", "REVISION", "DELETED", "PAYLOAD", '
            "CAST(EXPLODED.VALUE->'amount'->>0 AS NUMERIC) AS \"AMOUNT\", "
            "CAST(EXPLODED.VALUE->'source'->'name'->>0 AS TEXT) AS \"SOURCE_NAME\" "
            "FROM \"TAX_RAW\", JSONB_PATH_QUERY(\"PAYLOAD\", '$.return.income[*]') AS EXPLODED(VALUE)"
        )
        assert compilation.objects == {"TAX_INCOME": ObjectKind.VIEW}

    def test_wildcard_per_root_path(self, render):
        roots = (PathElement.of("return"), PathElement.of("income", "items"))
        compilation = _compilation()
        SqlEmitter.JSON.make_view(compilation, "TAX_ITEMS", roots, {}, {})
        assert "'$.return[*].income.items[*]'" in render(compilation.ddl[0])

    def test_no_roots(self, render):
        compilation = _compilation()
        SqlEmitter.JSON.make_view(compilation, "TAX", (), {PathElement.of("a"): int}, {PathElement.of("a"): "A"})
        assert "JSONB_PATH_QUERY(\"PAYLOAD\", '$')" in render(compilation.ddl[0])
        assert compilation.view_meta["TAX"] == {"$.a": "A"}

    def test_metadata_paths(self, income):
        compilation = _compilation()
        SqlEmitter.JSON.make_view(compilation, "TAX_INCOME", *income)
        assert compilation.view_meta["TAX_INCOME"] == {
            "$.return.income.amount": "AMOUNT",
            "$.return.income.source.name": "SOURCE_NAME",
        }

    def test_namespaces_never_resolved(self, render):
        def fail(namespaces):
            raise AssertionError("namespace resolution attempted")

        compilation = _compilation(fail)
        path = PathElement.parse("{urn:x}amount")
        SqlEmitter.JSON.make_view(compilation, "TAX", (), {path: int}, {path: "AMOUNT"})
        assert "EXPLODED.VALUE->'amount'->>0" in render(compilation.ddl[0])

    def test_empty_properties_keep_direct_columns(self, render):
        compilation = _compilation()
        SqlEmitter.JSON.make_view(compilation, "TAX_INCOME", (PathElement.of("income"),), {}, {})
        assert render(compilation.ddl[0]).startswith(
            'CREATE VIEW "TAX_INCOME" AS SELECT "ID", "REVISION", "DELETED", "PAYLOAD" FROM "TAX_RAW", '
        )

    def test_literals_escaped(self, render):
        path = PathElement.of("it's")
        compilation = _compilation()
        SqlEmitter.JSON.make_view(compilation, "TAX", (), {path: str}, {path: "ITS"})
        assert "EXPLODED.VALUE->'it''s'->>0" in render(compilation.ddl[0])

    def test_paths_differing_by_namespace_rejected(self):
        first = PathElement.parse("{urn:a}amount")
        second = PathElement.parse("{urn:b}amount")
        compilation = _compilation()
        with pytest.raises(NamingCollisionError) as info:
            SqlEmitter.JSON.make_view(
                compilation, "TAX", (), {first: int, second: int}, {first: "AMOUNT", second: "AMOUNT_2"},
            )
        assert info.value.name == "$.amount"
        assert info.value.owner == "TAX"
        assert compilation.ddl == []


# ============================================================================
# ACCUMULATOR
# ============================================================================


class TestCompilation:
    def test_register_rejects_taken_name(self, income):
        compilation = _compilation()
        SqlEmitter.JSON.make_view(compilation, "TAX_INCOME", *income)
        with pytest.raises(NamingCollisionError, match="View name already in use: TAX_INCOME"):
            SqlEmitter.JSON.make_view(compilation, "TAX_INCOME", *income)
        assert len(compilation.ddl) == 1

    def test_register_rejects_reserved_name(self):
        compilation = _compilation()
        compilation.reserved.add("TAX_PK")
        with pytest.raises(NamingCollisionError):
            SqlEmitter.JSON.make_view(compilation, "TAX_PK", (), {}, {})
        assert not compilation.is_taken("TAX")
        assert compilation.is_taken("TAX_PK")
