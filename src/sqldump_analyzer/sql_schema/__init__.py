"""SQL dump schema summary.

Provides:
- Parse dump text into plain statement records (sqlglot)
- Fold statement records into database name, tables, columns and row counts
- Render the summary as JSON or markdown
"""
from __future__ import annotations

from .models import (
    AnalysisResult,
    ColumnSummary,
    TableSummary,
)

from .analyzer import (
    analyze,
    extract_columns,
    count_rows,
)

from .references import (
    NamedRef,
    UnrecognizedRef,
    DeclaredType,
    UnrecognizedType,
    classify_table_ref,
    classify_database_ref,
    classify_column_ref,
    classify_type_ref,
    render_type,
)

from .parser import (
    SqlDumpParseError,
    detect_sql_dialect,
    split_sql_statements,
    parse_dump,
    statement_to_record,
)

from .report import render_markdown

from .service import (
    analyze_sql,
    analyze_sql_file,
)

__all__ = [
    # Result types
    "AnalysisResult",
    "ColumnSummary",
    "TableSummary",
    # Analyzer
    "analyze",
    "extract_columns",
    "count_rows",
    # Reference shapes
    "NamedRef",
    "UnrecognizedRef",
    "DeclaredType",
    "UnrecognizedType",
    "classify_table_ref",
    "classify_database_ref",
    "classify_column_ref",
    "classify_type_ref",
    "render_type",
    # Parser
    "SqlDumpParseError",
    "detect_sql_dialect",
    "split_sql_statements",
    "parse_dump",
    "statement_to_record",
    # Rendering
    "render_markdown",
    # File-level entry points
    "analyze_sql",
    "analyze_sql_file",
]
