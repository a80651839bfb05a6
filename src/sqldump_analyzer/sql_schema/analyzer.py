"""Fold a sequence of parsed statements into an AnalysisResult.

Statements are plain records (see ``parser.statement_to_record``). Dispatch is
on ``type``:

- ``use``: the last target wins
- ``create`` with ``keyword == "table"``: declares (or re-declares) a table
- ``insert``: adds the number of value rows to an already declared table

Everything else is skipped. Nothing in here raises for record-shaped input.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .models import AnalysisResult, ColumnSummary, TableSummary
from .references import (
    classify_database_ref,
    classify_table_ref,
    column_name,
    data_type,
    ref_name,
)

logger = logging.getLogger(__name__)


def analyze(statements: Any) -> AnalysisResult:
    """Build the structural summary of a dump from its parsed statements.

    Args:
        statements: Statement records (any iterable other than str/bytes),
            or a single record

    Returns:
        AnalysisResult; empty when the input is neither records nor a record
    """
    if isinstance(statements, Mapping):
        statements = [statements]
    elif isinstance(statements, (str, bytes, bytearray)) or not isinstance(statements, Iterable):
        logger.debug(f"Nothing to analyze in {type(statements).__name__} input")
        return AnalysisResult()

    builder = _SchemaBuilder()
    for index, statement in enumerate(statements):
        if not isinstance(statement, Mapping):
            logger.debug(f"Skipping statement #{index}: not a record")
            continue
        builder.apply(statement)

    return builder.build()


def extract_columns(definitions: Any) -> tuple[ColumnSummary, ...]:
    """Extract column summaries from a CREATE TABLE definition list.

    Entries not tagged ``resource: "column"`` (table-level PRIMARY KEY,
    FOREIGN KEY, ... clauses) are left out.
    """
    if not isinstance(definitions, (list, tuple)):
        return ()

    return tuple(
        ColumnSummary(
            column_name=column_name(entry),
            data_type=data_type(entry.get("definition")),
        )
        for entry in definitions
        if isinstance(entry, Mapping) and entry.get("resource") == "column"
    )


def count_rows(values: Any) -> int:
    """Number of rows an INSERT contributes: the length of a value list, else 1."""
    if isinstance(values, (list, tuple)):
        return len(values)
    return 1


class _SchemaBuilder:
    """Accumulator for a single ``analyze`` call."""

    def __init__(self) -> None:
        self.database_name: str | None = None
        # dicts keep first-insertion order, which re-declaration does not move
        self.columns: dict[str, tuple[ColumnSummary, ...]] = {}
        self.row_counts: dict[str, int] = {}

    def apply(self, statement: Mapping) -> None:
        kind = statement.get("type")
        if kind == "use":
            self._use(statement)
        elif kind == "create":
            self._create(statement)
        elif kind == "insert":
            self._insert(statement)
        else:
            logger.debug(f"Ignoring statement of type {kind!r}")

    def _use(self, statement: Mapping) -> None:
        target = statement.get("db")
        if not target:
            return
        name = ref_name(classify_database_ref(target))
        if name is None:
            logger.debug(f"USE target not recognized: {target!r}")
            return
        self.database_name = name

    def _create(self, statement: Mapping) -> None:
        if statement.get("keyword") != "table" or not statement.get("table"):
            return

        name = ref_name(classify_table_ref(statement["table"]))
        if name is None:
            logger.debug("CREATE TABLE without a recognizable table name")
            return

        if name in self.columns:
            logger.debug(f"Table {name} re-declared; discarding previous definition")
        self.columns[name] = extract_columns(statement.get("create_definitions"))
        self.row_counts[name] = 0

    def _insert(self, statement: Mapping) -> None:
        if not statement.get("table"):
            return

        name = ref_name(classify_table_ref(statement["table"]))
        if name is None or name not in self.row_counts:
            logger.debug(f"INSERT into undeclared table {name!r} ignored")
            return

        self.row_counts[name] += count_rows(statement.get("values"))

    def build(self) -> AnalysisResult:
        return AnalysisResult(
            database_name=self.database_name,
            tables=tuple(
                TableSummary(
                    table_name=name,
                    columns=columns,
                    row_count=self.row_counts[name],
                )
                for name, columns in self.columns.items()
            ),
        )
