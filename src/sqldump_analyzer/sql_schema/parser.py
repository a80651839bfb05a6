"""SQL dump parser using sqlglot.

Turns dump text into plain statement records (dicts/lists/strings/ints) that
the analyzer consumes. Record shapes:

    {"type": "use", "db": "shop"}
    {"type": "create", "keyword": "table",
     "table": [{"db": None, "table": "users"}],
     "create_definitions": [
         {"resource": "column", "column": {"column": "id"},
          "definition": {"dataType": "INT"}},
         {"resource": "constraint", "constraint_type": "primary key", ...},
     ]}
    {"type": "insert", "table": [{"db": None, "table": "users"}],
     "values": [["1", "'a'"], ["2", "'b'"]]}
    {"type": "drop"}, {"type": "set"}, ...

Every record also carries ``loc`` with the statement's 1-based line range.
"""
from __future__ import annotations

import logging
import re
from typing import Any

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

logger = logging.getLogger(__name__)

_DOLLAR_TAG = re.compile(r"\$(\w*)\$")
_TYPE_PARAMS = re.compile(r"\([^()]*\)")
_TYPE_MODIFIERS = re.compile(r"\s+(?:UNSIGNED|SIGNED|ZEROFILL)\b", re.IGNORECASE)


class SqlDumpParseError(ValueError):
    """A statement in the dump could not be parsed."""

    def __init__(self, message: str, start_line: int = 0, end_line: int = 0):
        super().__init__(f"lines {start_line}-{end_line}: {message}")
        self.start_line = start_line
        self.end_line = end_line


def detect_sql_dialect(content: str) -> str:
    """Auto-detect SQL dialect from content.

    Looks for dialect-specific patterns to determine the source database.

    Args:
        content: SQL dump content

    Returns:
        sqlglot dialect name: "mysql", "tsql", "oracle", or "postgres" (default)
    """
    oracle_patterns = [
        r'\bVARCHAR2\b',
        r'\bNUMBER\s*\(',
        r'\bSYSDATE\b',
        r'\bFROM\s+DUAL\b',
        r'\bNVL\s*\(',
        r'\w+\.NEXTVAL\b',
        r'\bPLS_INTEGER\b',
        r'^\s*/\s*$',
    ]
    oracle_score = sum(1 for p in oracle_patterns if re.search(p, content, re.IGNORECASE | re.MULTILINE))

    sqlserver_patterns = [
        r'\bIDENTITY\s*\(',
        r'^\s*GO\s*$',
        r'\[\w+\]',
        r'\bNVARCHAR\b',
        r'\bDATETIME2\b',
        r'\bSET\s+IDENTITY_INSERT\b',
    ]
    sqlserver_score = sum(1 for p in sqlserver_patterns if re.search(p, content, re.IGNORECASE | re.MULTILINE))

    mysql_patterns = [
        r'\bAUTO_INCREMENT\b',
        r'`\w+`',
        r'\bENGINE\s*=',
        r'\bTINYINT\b',
        r'\bMEDIUMINT\b',
        r'^\s*USE\s+[`\w]',
        r'\bLOCK\s+TABLES\b',
        r'\bCHARSET\s*=',
    ]
    mysql_score = sum(1 for p in mysql_patterns if re.search(p, content, re.IGNORECASE | re.MULTILINE))

    # Backtick-quoted identifiers are MySQL-only
    if re.search(r'`[^`\n]+`', content) and max(sqlserver_score, oracle_score) < 2:
        return "mysql"

    scores = {
        'mysql': mysql_score,
        'tsql': sqlserver_score,
        'oracle': oracle_score,
    }

    max_score = max(scores.values())
    if max_score >= 2:  # Need at least 2 patterns to be confident
        for dialect, score in scores.items():
            if score == max_score:
                return dialect

    return "postgres"


def split_sql_statements(content: str, dialect: str = "postgres") -> list[tuple[str, int, int]]:
    """Split dump content into statements with line numbers.

    Semicolons end statements unless they sit inside a string literal, a quoted
    identifier, a comment or (PostgreSQL) a dollar-quoted body. Comments are
    dropped from the statement text, so comment-only fragments vanish.

    Args:
        content: SQL dump content
        dialect: SQL dialect (affects comment and quoting rules)

    Returns:
        List of (statement, start_line, end_line)
    """
    statements = []
    current: list[str] = []
    started = False
    start_line = 1
    line = 1
    quote = None
    i = 0
    n = len(content)

    while i < n:
        ch = content[i]

        if quote:
            # MySQL backslash escapes inside string literals
            if ch == "\\" and quote == "'" and dialect == "mysql" and i + 1 < n:
                pair = content[i:i + 2]
                current.append(pair)
                line += pair.count("\n")
                i += 2
                continue
            if ch == quote:
                quote = None

        elif content.startswith("--", i) or (ch == "#" and dialect == "mysql"):
            end = content.find("\n", i)
            i = n if end == -1 else end
            continue

        elif content.startswith("/*", i):
            end = content.find("*/", i + 2)
            end = n if end == -1 else end + 2
            line += content.count("\n", i, end)
            if started:
                current.append(" ")
            i = end
            continue

        elif ch == "$" and dialect == "postgres" and _DOLLAR_TAG.match(content, i):
            tag = _DOLLAR_TAG.match(content, i).group(0)
            closing = content.find(tag, i + len(tag))
            end = n if closing == -1 else closing + len(tag)
            if not started:
                started, start_line = True, line
            current.append(content[i:end])
            line += content.count("\n", i, end)
            i = end
            continue

        elif ch in ("'", '"', "`"):
            quote = ch

        elif ch == ";":
            text = "".join(current).strip()
            if text:
                statements.append((text, start_line, line))
            current = []
            started = False
            i += 1
            continue

        if not started and not ch.isspace():
            started, start_line = True, line
        current.append(ch)
        if ch == "\n":
            line += 1
        i += 1

    text = "".join(current).strip()
    if text:
        statements.append((text, start_line, line))

    return statements


def parse_dump(
    content: str,
    dialect: str = "auto",
    strict: bool = False
) -> list[dict[str, Any]]:
    """Parse a SQL dump into statement records.

    Args:
        content: SQL dump content
        dialect: sqlglot dialect name, or "auto" to detect it from content
        strict: Raise on the first statement sqlglot rejects instead of
                recording it as ``{"type": "unparsed"}``

    Returns:
        Statement records in source order

    Raises:
        SqlDumpParseError: If strict and a statement cannot be parsed
    """
    if dialect == "auto":
        dialect = detect_sql_dialect(content)
        logger.debug(f"Detected dialect: {dialect}")

    records = []

    for stmt_text, start_line, end_line in split_sql_statements(content, dialect):
        loc = {"start_line": start_line, "end_line": end_line}

        try:
            expressions = sqlglot.parse(stmt_text, dialect=dialect)
        except SqlglotError as e:
            if strict:
                raise SqlDumpParseError(str(e), start_line, end_line) from e
            logger.warning(f"Skipping unparseable statement at lines {start_line}-{end_line}: {e}")
            records.append({"type": "unparsed", "text": stmt_text, "loc": loc})
            continue

        for expression in expressions:
            if expression is None:
                continue
            record = statement_to_record(expression, dialect)
            record["loc"] = dict(loc)
            records.append(record)

    return records


def statement_to_record(expression: exp.Expression, dialect: str | None = None) -> dict[str, Any]:
    """Convert one sqlglot expression into a plain statement record."""
    if isinstance(expression, exp.Use):
        target = expression.this
        return {"type": "use", "db": target.name if target is not None else None}

    if isinstance(expression, exp.Create):
        return _create_to_record(expression, dialect)

    if isinstance(expression, exp.Insert):
        return _insert_to_record(expression, dialect)

    if isinstance(expression, exp.Command):
        return {"type": str(expression.this).lower()}

    return {"type": expression.key}


# ============================================================================
# Helper Functions
# ============================================================================

def _table_ref(table: exp.Table) -> dict[str, Any]:
    return {"db": table.db or None, "table": table.name}


def _target_table(target: exp.Expression | None) -> exp.Table | None:
    # CREATE TABLE t (...) and INSERT INTO t (cols) wrap the table in a Schema
    if isinstance(target, exp.Schema):
        target = target.this
    return target if isinstance(target, exp.Table) else None


def _create_to_record(create: exp.Create, dialect: str | None) -> dict[str, Any]:
    kind = str(create.args.get("kind") or "").lower()
    record: dict[str, Any] = {"type": "create", "keyword": kind}

    table = _target_table(create.this)
    if kind != "table":
        if table is not None:
            record["name"] = table.name
        return record

    if table is not None:
        record["table"] = [_table_ref(table)]

    definitions = []
    schema = create.this
    if isinstance(schema, exp.Schema):
        for item in schema.expressions:
            if isinstance(item, exp.ColumnDef):
                definitions.append(_column_definition(item, dialect))
            else:
                definitions.append({
                    "resource": "constraint",
                    "constraint_type": _constraint_type(item),
                    "definition": item.sql(dialect=dialect),
                })

    record["create_definitions"] = definitions
    return record


def _column_definition(column: exp.ColumnDef, dialect: str | None = None) -> dict[str, Any]:
    definition: dict[str, Any] = {}

    kind = column.args.get("kind")
    if isinstance(kind, exp.DataType):
        definition["dataType"] = _type_tag(kind, dialect)
        params = _numeric_params(kind)
        if params:
            definition["length"] = params[0]
        if len(params) > 1:
            definition["scale"] = params[1]

    return {
        "resource": "column",
        "column": {"column": column.name},
        "definition": definition,
    }


def _type_tag(data_type: exp.DataType, dialect: str | None = None) -> str:
    """Declared type name without parameters, e.g. VARCHAR for VARCHAR(50).

    The type is rendered back through the dialect's generator so internal
    aliases come out as written (MySQL TIMESTAMP rather than TIMESTAMPTZ).
    Parameters and UNSIGNED are stripped from the rendered text, not the
    expression: a bare VARCHAR renders as TEXT in MySQL.
    """
    rendered = data_type.sql(dialect=dialect)
    stripped = _TYPE_PARAMS.sub("", rendered)
    while stripped != rendered:
        rendered, stripped = stripped, _TYPE_PARAMS.sub("", stripped)
    tag = " ".join(_TYPE_MODIFIERS.sub("", rendered).split())
    if tag:
        return tag
    if isinstance(data_type.this, exp.DataType.Type):
        return data_type.this.value
    return str(data_type.this)


def _numeric_params(data_type: exp.DataType) -> list[Any]:
    """Numeric type parameters: [length] or [precision, scale].

    String parameters (ENUM/SET members) and keywords (VARCHAR(MAX)) are skipped.
    """
    params = []
    for param in data_type.expressions:
        value = param.this if isinstance(param, exp.DataTypeParam) else param
        if isinstance(value, exp.Literal) and not value.is_string:
            text = value.this
            params.append(int(text) if text.isdigit() else text)
    return params


_CONSTRAINT_TYPES = [
    (exp.PrimaryKey, "primary key"),
    (exp.ForeignKey, "foreign key"),
    (exp.UniqueColumnConstraint, "unique"),
    (exp.CheckColumnConstraint, "check"),
    (exp.Constraint, "constraint"),
]


def _constraint_type(item: exp.Expression) -> str:
    for expr_type, name in _CONSTRAINT_TYPES:
        if isinstance(item, expr_type):
            return name
    return item.key


def _insert_to_record(insert: exp.Insert, dialect: str | None) -> dict[str, Any]:
    record: dict[str, Any] = {"type": "insert"}

    table = _target_table(insert.this)
    if table is not None:
        record["table"] = [_table_ref(table)]

    # INSERT ... SELECT has no row list and counts as a single insert
    source = insert.expression
    if isinstance(source, exp.Values):
        record["values"] = [_row_values(row, dialect) for row in source.expressions]

    return record


def _row_values(row: exp.Expression, dialect: str | None) -> list[str]:
    items = row.expressions if isinstance(row, exp.Tuple) else [row]
    return [item.sql(dialect=dialect) for item in items]
