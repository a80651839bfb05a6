"""Markdown rendering of an AnalysisResult.

Read-only: the result is never modified here.
"""
from __future__ import annotations

from .models import AnalysisResult, TableSummary


def render_markdown(result: AnalysisResult) -> str:
    """Convert an analysis result to a markdown report."""
    lines = []

    database_name = result.database_name or "Unknown Database"
    lines.append(f"# Database Analysis Report for: {database_name}\n")

    lines.append("## Summary Statistics\n")
    lines.append(f"- **Total Tables:** {result.total_tables}")
    lines.append(f"- **Total Columns:** {result.total_columns}")
    lines.append(f"- **Total Records:** {result.total_records}")
    lines.append("")

    if result.tables:
        lines.append("## Table Details\n")
        for table in result.tables:
            lines.extend(_table_section(table))

    return "\n".join(lines).rstrip() + "\n"


def _table_section(table: TableSummary) -> list[str]:
    lines = [f"### {table.table_name} ({table.row_count} rows)\n"]

    if not table.columns:
        lines.append("_No columns declared._\n")
        return lines

    lines.append("| Column Name | Data Type |")
    lines.append("|---|---|")
    for column in table.columns:
        lines.append(f"| {_escape(column.column_name)} | {_escape(column.data_type)} |")
    lines.append("")
    return lines


def _escape(text: str) -> str:
    return text.replace("|", "\\|")
