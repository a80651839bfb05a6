"""Tests for the text and file level entry points."""
import logging

import pytest

from sqldump_analyzer.sql_schema import SqlDumpParseError, analyze_sql, analyze_sql_file


class TestAnalyzeSql:

    def test_text(self):
        result = analyze_sql("USE a; USE b;")

        assert result.database_name == "b"
        assert result.total_tables == 0

    def test_strict_propagates(self):
        with pytest.raises(SqlDumpParseError):
            analyze_sql("SELECT (1;", dialect="postgres", strict=True)

    def test_lenient_keeps_going(self):
        result = analyze_sql("SELECT (1;\nCREATE TABLE t (id INT);\nINSERT INTO t VALUES (1);")

        assert result.table("t").row_count == 1


class TestAnalyzeSqlFile:

    def test_sample_file(self, sample_dump_path, caplog):
        with caplog.at_level(logging.INFO, logger="sqldump_analyzer"):
            result = analyze_sql_file(sample_dump_path)

        assert result.database_name == "ecommerce_db"
        assert result.total_tables == 5
        assert "5 tables" in caplog.text

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="SQL file not found"):
            analyze_sql_file(tmp_path / "missing.sql")
