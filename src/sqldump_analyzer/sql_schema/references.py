"""Explicit shapes for table, column and type references in statement records.

Parsers disagree on how deeply they nest identifiers. Every shape the analyzer
understands is listed here as a union case, and each classifier is total:
anything it does not recognize becomes the ``Unrecognized*`` case instead of
raising.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

UNKNOWN = "unknown"


# ============================================================================
# Table / database references
# ============================================================================

@dataclass(frozen=True)
class NamedRef:
    """A reference whose name was located."""
    name: str


@dataclass(frozen=True)
class UnrecognizedRef:
    """A reference in a shape the extractor does not know."""


TableRef = Union[NamedRef, UnrecognizedRef]


def _named(value: Any) -> TableRef | None:
    # Empty strings carry no name.
    if isinstance(value, str):
        return NamedRef(value) if value else UnrecognizedRef()
    return None


def _classify_table_object(raw: Any) -> TableRef:
    if not isinstance(raw, Mapping):
        return UnrecognizedRef()

    table = raw.get("table")
    ref = _named(table)
    if ref is not None:
        return ref

    if isinstance(table, Mapping):
        ref = _named(table.get("table"))
        if ref is not None:
            return ref

    return UnrecognizedRef()


def classify_table_ref(raw: Any) -> TableRef:
    """Classify a table reference.

    Tried in order:
        - a bare string
        - a non-empty list whose first element is a string or a table object
        - an object whose ``table`` field is a string
        - an object whose ``table.table`` field is a string
    """
    ref = _named(raw)
    if ref is not None:
        return ref

    if isinstance(raw, (list, tuple)):
        if not raw:
            return UnrecognizedRef()
        first = raw[0]
        ref = _named(first)
        if ref is not None:
            return ref
        return _classify_table_object(first)

    return _classify_table_object(raw)


def classify_database_ref(raw: Any) -> TableRef:
    """Classify the target of a USE statement.

    Accepts a bare string or an object with a string ``db`` field, then falls
    back to the table reference shapes.
    """
    ref = _named(raw)
    if ref is not None:
        return ref

    if isinstance(raw, Mapping):
        ref = _named(raw.get("db"))
        if ref is not None:
            return ref

    return classify_table_ref(raw)


def ref_name(ref: TableRef) -> str | None:
    """Return the located name, or None for an unrecognized reference."""
    if isinstance(ref, NamedRef):
        return ref.name
    return None


# ============================================================================
# Column names
# ============================================================================

def classify_column_ref(definition: Any) -> TableRef:
    """Locate a column name under ``column``, nested up to two levels deep."""
    if not isinstance(definition, Mapping):
        return UnrecognizedRef()

    node = definition.get("column")
    for _ in range(3):
        if isinstance(node, str):
            return NamedRef(node)
        if not isinstance(node, Mapping):
            break
        node = node.get("column")

    return UnrecognizedRef()


def column_name(definition: Any) -> str:
    name = ref_name(classify_column_ref(definition))
    return UNKNOWN if name is None else name


# ============================================================================
# Data types
# ============================================================================

@dataclass(frozen=True)
class DeclaredType:
    """A type sub-structure. ``base`` is None when no type tag was found."""
    base: str | None = None
    length: Any = None
    scale: Any = None


@dataclass(frozen=True)
class UnrecognizedType:
    """No type sub-structure at all."""


TypeRef = Union[DeclaredType, UnrecognizedType]


def _outer_or_nested(definition: Mapping, nested: Any, key: str) -> Any:
    value = definition.get(key)
    if value is None and isinstance(nested, Mapping):
        value = nested.get(key)
    return value


def classify_type_ref(definition: Any) -> TypeRef:
    """Locate the type tag, length and scale of a column definition.

    The tag may be ``dataType`` or ``dataType.dataType``. Length and scale are
    looked up on the definition first and on ``dataType`` second.
    """
    if not isinstance(definition, Mapping):
        return UnrecognizedType()

    tag = definition.get("dataType")
    nested = tag if isinstance(tag, Mapping) else None

    base = None
    if isinstance(tag, str):
        base = tag.upper()
    elif nested is not None and isinstance(nested.get("dataType"), str):
        base = nested["dataType"].upper()

    return DeclaredType(
        base=base,
        length=_outer_or_nested(definition, nested, "length"),
        scale=_outer_or_nested(definition, nested, "scale"),
    )


def _format_param(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def render_type(ref: TypeRef) -> str:
    """Compose ``BASE``, ``BASE(length)`` or ``BASE(length,scale)``.

    A scale without a length has no place in this grammar and is dropped.
    """
    if not isinstance(ref, DeclaredType):
        return UNKNOWN

    rendered = ref.base or UNKNOWN
    if ref.length is not None:
        if ref.scale is not None:
            rendered += f"({_format_param(ref.length)},{_format_param(ref.scale)})"
        else:
            rendered += f"({_format_param(ref.length)})"
    return rendered


def data_type(definition: Any) -> str:
    return render_type(classify_type_ref(definition))
