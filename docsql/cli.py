#!/usr/bin/env python
# ============================================================================
# SCHEMA COMPILATION COMMAND
# ============================================================================
# PURPOSE: Compile a JSON document description and print the statements
# USAGE:
#   docsql order.json               # Creation statements
#   docsql order.json --drop        # Drop statements
#   docsql order.json --grant app   # Grants for role "app"
# ============================================================================
"""
Command line entry point.

The description file looks like:

    {
        "name": "ORDER",
        "dialect": "json",
        "views": [
            {"roots": ["lines"], "properties": {"sku": "str", "quantity": "int"}}
        ],
        "additional_columns": {"CREATED": "TIMESTAMP"}
    }

Paths are slash separated, namespaces in Clark notation (``{urn:x}name``).
Property types are type names understood by PostgresTypeResolver.
"""

import argparse
import json
import operator
import sys
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from docsql.contracts import PathElement, SchemaBundle
from docsql.logging import ComponentType, configure_logging, get_logger
from docsql.schema import (
    ColumnTableResolver,
    DocumentSchemaCompiler,
    SchemaCompilationError,
    SimpleNameResolver,
)

logger = get_logger("docsql.cli", ComponentType.CLI)


class ViewDescription(BaseModel):
    """One root path group and its property set."""
    roots: List[str] = Field(default_factory=list)
    properties: Dict[str, str] = Field(default_factory=dict)


class DocumentDescription(BaseModel):
    """A document type as read from a description file."""
    name: str = Field(..., min_length=1)
    dialect: Literal["xml", "json"] = "xml"
    views: List[ViewDescription] = Field(default_factory=list)
    additional_columns: Dict[str, str] = Field(default_factory=dict)
    meta: Optional[bool] = None
    synonym: Optional[bool] = None

    def compiler(self) -> DocumentSchemaCompiler:
        if self.dialect == "json":
            compiler = DocumentSchemaCompiler.of_json()
        else:
            compiler = DocumentSchemaCompiler.of_xml()
        if self.meta is not None:
            compiler = compiler.with_meta(self.meta)
        if self.synonym is not None:
            compiler = compiler.with_synonym(self.synonym)
        return compiler

    def view_groups(self) -> Dict[tuple, Dict[tuple, str]]:
        groups: Dict[tuple, Dict[tuple, str]] = {}
        for view in self.views:
            roots = tuple(PathElement.parse(root) for root in view.roots)
            # repeated root groups extend one property set
            properties = groups.setdefault(roots, {})
            for path, type_name in view.properties.items():
                properties[PathElement.parse(path)] = type_name
        return groups

    def table_resolver(self) -> ColumnTableResolver:
        return ColumnTableResolver(
            self.additional_columns,
            {column: operator.itemgetter(column) for column in self.additional_columns},
        )


def compile_description(description: DocumentDescription, max_name_length: int = 63) -> SchemaBundle:
    """Compile a parsed description with the default naming policy."""
    return description.compiler().compile(
        description.name,
        description.view_groups(),
        SimpleNameResolver(max_length=max_name_length),
        description.table_resolver(),
    )


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsql",
        description="Compile a document description into PostgreSQL statements",
    )
    parser.add_argument(
        "description",
        help="Description file (JSON), or - for stdin"
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--drop",
        action="store_true",
        help="Print drop statements instead of creation statements"
    )
    output.add_argument(
        "--grant",
        metavar="GRANTEE",
        help="Print grant statements for GRANTEE"
    )
    output.add_argument(
        "--dml",
        action="store_true",
        help="Print the insert and truncate statements"
    )
    parser.add_argument(
        "--max-name-length",
        type=int,
        default=63,
        help="Maximum identifier length (default: 63)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Log as JSON"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _parser()
    args = parser.parse_args(argv)
    if args.max_name_length < 16:
        parser.error("--max-name-length must be at least 16")

    configure_logging(
        level="DEBUG" if args.verbose else "WARNING",
        json_output=args.json_logs,
    )

    try:
        if args.description == "-":
            raw = json.load(sys.stdin)
        else:
            with open(args.description, encoding="utf-8") as handle:
                raw = json.load(handle)
        description = DocumentDescription.model_validate(raw)
        bundle = compile_description(description, args.max_name_length)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        print(f"Invalid description: {e}", file=sys.stderr)
        return 2
    except SchemaCompilationError as e:
        print(f"Compilation failed: {e}", file=sys.stderr)
        return 1

    if args.drop:
        statements = list(bundle.drop)
    elif args.grant:
        statements = bundle.grants(args.grant)
    elif args.dml:
        statements = [bundle.insert, bundle.truncate]
    else:
        statements = list(bundle.creation)

    for statement in statements:
        print(statement.as_string(None) + ";")
    return 0


if __name__ == "__main__":
    sys.exit(main())
