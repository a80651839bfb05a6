"""Entry points that go from dump text or a dump file to an AnalysisResult."""
from __future__ import annotations

import logging
from pathlib import Path

from .analyzer import analyze
from .models import AnalysisResult
from .parser import parse_dump

logger = logging.getLogger(__name__)


def analyze_sql(
    content: str,
    dialect: str = "auto",
    strict: bool = False
) -> AnalysisResult:
    """Parse dump text and summarize it.

    Raises:
        SqlDumpParseError: If strict and a statement cannot be parsed
    """
    statements = parse_dump(content, dialect=dialect, strict=strict)
    return analyze(statements)


def analyze_sql_file(
    path: str | Path,
    dialect: str = "auto",
    strict: bool = False,
    encoding: str = "utf-8"
) -> AnalysisResult:
    """Read a dump file and summarize it.

    Args:
        path: Path to the .sql dump
        dialect: sqlglot dialect name or "auto"
        strict: Fail on unparseable statements instead of skipping them
        encoding: File encoding

    Returns:
        AnalysisResult for the file

    Raises:
        FileNotFoundError: If the file doesn't exist
        SqlDumpParseError: If strict and a statement cannot be parsed
    """
    dump_path = Path(path)

    if not dump_path.exists():
        raise FileNotFoundError(f"SQL file not found: {dump_path}")

    content = dump_path.read_text(encoding=encoding)
    result = analyze_sql(content, dialect=dialect, strict=strict)

    logger.info(
        f"Analyzed {dump_path.name}: {result.total_tables} tables, "
        f"{result.total_columns} columns, {result.total_records} records"
    )
    return result
