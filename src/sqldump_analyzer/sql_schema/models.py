"""Structural summary types produced by the dump analyzer.

The result tree is immutable once built and serializes to plain
strings/numbers/lists/dicts so it can be handed to any presentation layer.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ColumnSummary:
    """A single column declared by CREATE TABLE."""
    column_name: str
    data_type: str

    def to_dict(self) -> dict[str, Any]:
        return {"columnName": self.column_name, "dataType": self.data_type}


@dataclass(frozen=True)
class TableSummary:
    """A declared table with its columns and inferred row count."""
    table_name: str
    columns: tuple[ColumnSummary, ...] = ()
    row_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tableName": self.table_name,
            "columns": [column.to_dict() for column in self.columns],
            "rowCount": self.row_count,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Root of the analysis: database name plus tables in first-CREATE order."""
    database_name: str | None = None
    tables: tuple[TableSummary, ...] = field(default_factory=tuple)

    @property
    def total_tables(self) -> int:
        return len(self.tables)

    @property
    def total_columns(self) -> int:
        return sum(len(table.columns) for table in self.tables)

    @property
    def total_records(self) -> int:
        return sum(table.row_count for table in self.tables)

    def table(self, name: str) -> TableSummary | None:
        """Look up a table by its exact (case-sensitive) name."""
        for table in self.tables:
            if table.table_name == name:
                return table
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "databaseName": self.database_name,
            "totalTables": self.total_tables,
            "tables": [table.to_dict() for table in self.tables],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent or None)
