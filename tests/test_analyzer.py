"""Tests for folding statement records into an AnalysisResult.

Records are written by hand in the shape the parser emits, so these tests do
not depend on sqlglot.
"""
from collections import deque
from dataclasses import FrozenInstanceError

import pytest

from sqldump_analyzer.sql_schema.analyzer import analyze, count_rows, extract_columns
from sqldump_analyzer.sql_schema.models import AnalysisResult, ColumnSummary


def use(db):
    return {"type": "use", "db": db}


def create(table, *columns, keyword="table"):
    return {
        "type": "create",
        "keyword": keyword,
        "table": [{"db": None, "table": table}],
        "create_definitions": [
            {"resource": "column", "column": {"column": name}, "definition": definition}
            for name, definition in columns
        ],
    }


def insert(table, rows=1):
    return {
        "type": "insert",
        "table": [{"db": None, "table": table}],
        "values": [[str(i)] for i in range(rows)],
    }


INT = {"dataType": "INT"}


# =============================================================================
# End-to-end Scenario
# =============================================================================

class TestEndToEnd:
    """USE shop; CREATE TABLE users(...); two INSERTs."""

    def test_shop_scenario(self):
        """Should summarize database, columns and row counts."""
        statements = [
            use("shop"),
            create(
                "users",
                ("id", {"dataType": "INT"}),
                ("name", {"dataType": "VARCHAR", "length": 50}),
            ),
            {"type": "insert", "table": [{"db": None, "table": "users"}],
             "values": [["1", "'a'"], ["2", "'b'"]]},
            {"type": "insert", "table": [{"db": None, "table": "users"}],
             "values": [["3", "'c'"]]},
        ]

        result = analyze(statements)

        assert result.to_dict() == {
            "databaseName": "shop",
            "totalTables": 1,
            "tables": [
                {
                    "tableName": "users",
                    "columns": [
                        {"columnName": "id", "dataType": "INT"},
                        {"columnName": "name", "dataType": "VARCHAR(50)"},
                    ],
                    "rowCount": 3,
                }
            ],
        }

    def test_idempotent(self):
        """Two calls on the same input should give equal results."""
        statements = [use("shop"), create("t", ("id", INT)), insert("t", 2)]

        assert analyze(statements) == analyze(statements)
        assert analyze(statements).to_dict() == analyze(statements).to_dict()

    def test_input_not_mutated(self):
        """The analyzer should not write into the records it reads."""
        statements = [create("t", ("id", INT)), insert("t", 2)]
        snapshot = repr(statements)

        analyze(statements)

        assert repr(statements) == snapshot

    def test_result_is_frozen(self):
        """The returned summary should be immutable."""
        result = analyze([create("t", ("id", INT))])

        with pytest.raises(FrozenInstanceError):
            result.database_name = "other"
        assert isinstance(result.tables, tuple)
        assert isinstance(result.tables[0].columns, tuple)


# =============================================================================
# Top-level Input Handling
# =============================================================================

class TestTopLevelInput:
    """Malformed top-level input produces an empty result."""

    @pytest.mark.parametrize("bad_input", [None, "garbage", 42, b"bytes", bytearray(b"x"), 3.5])
    def test_non_sequence_input(self, bad_input):
        """Should return an empty result without raising."""
        result = analyze(bad_input)

        assert result == AnalysisResult()
        assert result.to_dict() == {"databaseName": None, "totalTables": 0, "tables": []}

    def test_single_record_is_wrapped(self):
        """A lone statement record should be treated as a one-element list."""
        result = analyze(use("solo"))

        assert result.database_name == "solo"

    def test_non_record_elements_skipped(self):
        """Non-mapping elements should be skipped silently."""
        result = analyze([None, "USE x", 7, create("t", ("id", INT)), ["nested"]])

        assert result.total_tables == 1

    def test_unknown_statement_kinds_ignored(self):
        """Statements other than use/create/insert should not change the result."""
        result = analyze([
            {"type": "drop"},
            {"type": "set"},
            {"type": "unparsed", "text": "GARBAGE"},
            {"no_type": True},
            create("t", ("id", INT)),
        ])

        assert [t.table_name for t in result.tables] == ["t"]

    def test_empty_list(self):
        """An empty statement list should give an empty result."""
        assert analyze([]) == AnalysisResult()

    def test_other_iterables_accepted(self):
        """Generators, deques and tuples should be read like a list."""
        statements = [use("shop"), create("t", ("id", INT)), insert("t", 2)]
        expected = analyze(statements)

        assert analyze(s for s in statements) == expected
        assert analyze(deque(statements)) == expected
        assert analyze(tuple(statements)) == expected
        assert expected.table("t").row_count == 2


# =============================================================================
# USE Statements
# =============================================================================

class TestUse:
    """Database name comes from the last USE."""

    def test_last_use_wins(self):
        """use a; use b; should leave databaseName = b."""
        result = analyze([use("a"), use("b")])

        assert result.database_name == "b"
        assert result.total_tables == 0

    def test_db_object_shape(self):
        """Should accept a target object exposing a db field."""
        result = analyze([{"type": "use", "db": {"db": "nested_db"}}])

        assert result.database_name == "nested_db"

    def test_no_use(self):
        """Without USE the database name should be absent."""
        result = analyze([create("t", ("id", INT))])

        assert result.database_name is None

    def test_unrecognized_target_keeps_previous(self):
        """A USE whose target has no name should not clear an earlier one."""
        result = analyze([use("a"), {"type": "use", "db": {"weird": 1}}, {"type": "use"}])

        assert result.database_name == "a"


# =============================================================================
# CREATE TABLE Statements
# =============================================================================

class TestCreate:
    """Table declarations."""

    def test_tables_in_first_create_order(self):
        """Tables should be listed in the order first declared."""
        result = analyze([create("b", ("id", INT)), create("a", ("id", INT)), create("c")])

        assert [t.table_name for t in result.tables] == ["b", "a", "c"]
        assert result.total_tables == 3

    def test_non_table_create_ignored(self):
        """CREATE DATABASE / CREATE INDEX should not declare tables."""
        result = analyze([
            create("shop", keyword="database"),
            create("idx_users", keyword="index"),
        ])

        assert result.total_tables == 0

    def test_table_name_case_sensitive(self):
        """Names differing only in case should be distinct tables."""
        result = analyze([create("Users", ("id", INT)), create("users", ("id", INT))])

        assert [t.table_name for t in result.tables] == ["Users", "users"]

    def test_redeclaration_resets(self):
        """A second CREATE for the same name should replace columns and reset rows."""
        result = analyze([
            create("t", ("old_col", INT)),
            insert("t", 5),
            create("other"),
            create("t", ("new_a", INT), ("new_b", {"dataType": "text"})),
        ])

        table = result.table("t")
        assert table.row_count == 0
        assert [c.column_name for c in table.columns] == ["new_a", "new_b"]
        assert table.columns[1].data_type == "TEXT"
        # Re-declaration keeps the first position
        assert [t.table_name for t in result.tables] == ["t", "other"]

    def test_redeclaration_then_insert(self):
        """Inserts after a re-declaration should count from zero."""
        result = analyze([create("t"), insert("t", 4), create("t"), insert("t", 2)])

        assert result.table("t").row_count == 2

    def test_unrecognized_table_name(self):
        """A CREATE without a recognizable name should be skipped."""
        result = analyze([
            {"type": "create", "keyword": "table", "table": [{"schema": "x"}]},
            {"type": "create", "keyword": "table"},
            {"type": "create", "keyword": "table", "table": ""},
        ])

        assert result.total_tables == 0

    def test_bare_string_table_reference(self):
        """A plain string table reference should be accepted."""
        result = analyze([{"type": "create", "keyword": "table", "table": "plain"}])

        assert result.tables[0].table_name == "plain"
        assert result.tables[0].columns == ()

    def test_nested_table_reference(self):
        """A table reference nested under table.table should be accepted."""
        result = analyze([
            {"type": "create", "keyword": "table", "table": {"table": {"table": "deep"}}},
        ])

        assert result.tables[0].table_name == "deep"


# =============================================================================
# Column Extraction
# =============================================================================

class TestExtractColumns:
    """Column definitions from CREATE TABLE."""

    def test_constraints_skipped(self):
        """Entries not tagged as columns should be left out."""
        columns = extract_columns([
            {"resource": "column", "column": {"column": "id"}, "definition": INT},
            {"resource": "constraint", "constraint_type": "primary key"},
            {"constraint_type": "foreign key"},
            "not a record",
        ])

        assert columns == (ColumnSummary("id", "INT"),)

    def test_declaration_order(self):
        """Columns should keep declaration order."""
        columns = extract_columns([
            {"resource": "column", "column": name, "definition": INT}
            for name in ["z", "a", "m"]
        ])

        assert [c.column_name for c in columns] == ["z", "a", "m"]

    def test_unknown_name(self):
        """A column without a name in a known shape should be 'unknown'."""
        columns = extract_columns([
            {"resource": "column", "definition": INT},
            {"resource": "column", "column": {"expr": {"value": "x"}}, "definition": INT},
        ])

        assert [c.column_name for c in columns] == ["unknown", "unknown"]

    def test_unknown_type(self):
        """A column without a type tag should have dataType 'unknown'."""
        columns = extract_columns([
            {"resource": "column", "column": "a"},
            {"resource": "column", "column": "b", "definition": {}},
            {"resource": "column", "column": "c", "definition": {"nullable": True}},
        ])

        assert [c.data_type for c in columns] == ["unknown", "unknown", "unknown"]

    def test_not_a_list(self):
        """A missing or scalar definition list should give no columns."""
        assert extract_columns(None) == ()
        assert extract_columns({"resource": "column"}) == ()


# =============================================================================
# INSERT Statements
# =============================================================================

class TestInsert:
    """Row counting."""

    def test_rows_summed_across_inserts(self):
        """Row counts should add up over every insert."""
        result = analyze([create("t"), insert("t", 2), insert("t", 3), insert("t", 1)])

        assert result.table("t").row_count == 6

    def test_insert_before_create_ignored(self):
        """Inserts preceding the CREATE should contribute nothing."""
        result = analyze([insert("t", 9), create("t"), insert("t", 1)])

        assert result.table("t").row_count == 1

    def test_insert_into_undeclared_table(self):
        """Inserts into unknown tables should not create entries."""
        result = analyze([create("t"), insert("ghost", 3)])

        assert result.total_tables == 1
        assert result.table("ghost") is None

    def test_scalar_values_count_as_one(self):
        """A missing or non-list values field should count as one row."""
        result = analyze([
            create("t"),
            {"type": "insert", "table": "t"},
            {"type": "insert", "table": "t", "values": {"type": "select"}},
        ])

        assert result.table("t").row_count == 2

    def test_empty_values_list(self):
        """An empty values list should add zero rows."""
        result = analyze([create("t"), {"type": "insert", "table": "t", "values": []}])

        assert result.table("t").row_count == 0

    def test_insert_without_table(self):
        """An insert with no table reference should be skipped."""
        result = analyze([create("t"), {"type": "insert", "values": [[1]]}])

        assert result.table("t").row_count == 0

    def test_count_rows(self):
        assert count_rows([[1], [2]]) == 2
        assert count_rows(([1],)) == 1
        assert count_rows(None) == 1
        assert count_rows("x") == 1


# =============================================================================
# Derived Statistics
# =============================================================================

class TestDerivedStatistics:
    """Totals derived from the table list."""

    def test_totals(self):
        result = analyze([
            create("a", ("id", INT), ("x", INT)),
            create("b", ("id", INT)),
            insert("a", 2),
            insert("b", 5),
        ])

        assert result.total_tables == 2
        assert result.total_columns == 3
        assert result.total_records == 7

    def test_to_json(self):
        """JSON output should use the camelCase contract keys."""
        result = analyze([use("db"), create("t", ("id", INT))])

        text = result.to_json(indent=0)
        assert '"databaseName": "db"' in text
        assert '"rowCount": 0' in text
        assert "\n" not in text
