"""Type mapping between warehouse column types and relational types.

Inbound, the mapping decodes result-set schemas into ``ColumnDescriptor``s.
Outbound, ``coerce`` prepares entity values for UPDATE and INSERT so they
match the declared column type before any statement is built.
"""
import datetime
from typing import Any, Union

from dateutil import parser as date_parser
from sqlalchemy import types as sa_types

from bigquery_orm.common.errors import TypeCoercionError
from bigquery_orm.models import BindingType, ColumnDescriptor, RelationalType


WAREHOUSE_TO_RELATIONAL = {
    "STRING": RelationalType.STRING,
    "INT64": RelationalType.INTEGER,
    "FLOAT64": RelationalType.FLOAT,
    "BOOL": RelationalType.BOOLEAN,
    "DATE": RelationalType.DATE,
    "DATETIME": RelationalType.DATETIME,
    "TIMESTAMP": RelationalType.TIMESTAMP,
}

# Legacy names reported by the client library's SchemaField.field_type
LEGACY_ALIASES = {
    "INTEGER": "INT64",
    "FLOAT": "FLOAT64",
    "BOOLEAN": "BOOL",
}

RELATIONAL_TO_WAREHOUSE = {
    RelationalType.STRING: "STRING",
    RelationalType.TEXT: "STRING",
    RelationalType.INTEGER: "INT64",
    RelationalType.FLOAT: "FLOAT64",
    RelationalType.BOOLEAN: "BOOL",
    RelationalType.DATE: "DATE",
    RelationalType.DATETIME: "DATETIME",
    RelationalType.TIMESTAMP: "TIMESTAMP",
}

RELATIONAL_TO_BINDING = {
    RelationalType.STRING: BindingType.STRING,
    RelationalType.TEXT: BindingType.STRING,
    RelationalType.INTEGER: BindingType.INTEGER,
    RelationalType.FLOAT: BindingType.FLOAT,
    RelationalType.BOOLEAN: BindingType.BOOLEAN,
}

RELATIONAL_TO_SQLALCHEMY = {
    RelationalType.STRING: sa_types.String,
    RelationalType.TEXT: sa_types.Text,
    RelationalType.INTEGER: sa_types.BigInteger,
    RelationalType.FLOAT: sa_types.Float,
    RelationalType.BOOLEAN: sa_types.Boolean,
    RelationalType.DATE: sa_types.Date,
    RelationalType.DATETIME: sa_types.DateTime,
    RelationalType.TIMESTAMP: sa_types.TIMESTAMP,
}

ISO_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
ISO_DATE_FORMAT = "%Y-%m-%d"

_FALSE_STRINGS = {"", "0", "false", "f", "no", "n", "off"}


def _as_relational(value: Union[RelationalType, str]) -> RelationalType:
    if isinstance(value, RelationalType):
        return value
    try:
        return RelationalType(str(value).lower())
    except ValueError:
        return RelationalType.TEXT


def to_relational_type(warehouse_type: str) -> RelationalType:
    """Maps a warehouse column type to its relational type.

    Unknown types fall back to ``text``; this never raises.
    """
    key = (warehouse_type or "").upper()
    key = LEGACY_ALIASES.get(key, key)
    return WAREHOUSE_TO_RELATIONAL.get(key, RelationalType.TEXT)


def to_warehouse_type(relational_type: Union[RelationalType, str]) -> str:
    return RELATIONAL_TO_WAREHOUSE[_as_relational(relational_type)]


def binding_type(relational_type: Union[RelationalType, str]) -> BindingType:
    return RELATIONAL_TO_BINDING.get(_as_relational(relational_type), BindingType.OTHER)


def to_sqlalchemy_type(relational_type: Union[RelationalType, str]):
    return RELATIONAL_TO_SQLALCHEMY[_as_relational(relational_type)]


def describe_field(field: Any) -> ColumnDescriptor:
    """Decodes a result schema field into a ColumnDescriptor.

    ``field`` is anything shaped like the client's SchemaField
    (``name``, ``field_type``, ``mode``).
    """
    warehouse_type = LEGACY_ALIASES.get(field.field_type.upper(), field.field_type.upper())
    mode = (getattr(field, "mode", None) or "NULLABLE").upper()
    return ColumnDescriptor(
        name=field.name,
        warehouse_type=warehouse_type,
        relational_type=to_relational_type(warehouse_type),
        is_nullable=mode != "REQUIRED",
    )


def _parse_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    try:
        return date_parser.parse(str(value))
    except (ValueError, OverflowError) as exc:
        raise TypeCoercionError(
            f"Cannot interpret {value!r} as a date/time value",
            cause=exc,
            details={"value": str(value)},
        ) from exc


def format_datetime(value: Any) -> str:
    """Normalizes a datetime-like value to ``YYYY-MM-DDTHH:MM:SS``."""
    return _parse_datetime(value).strftime(ISO_DATETIME_FORMAT)


def format_date(value: Any) -> str:
    return _parse_datetime(value).strftime(ISO_DATE_FORMAT)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def coerce(value: Any, relational_type: Union[RelationalType, str]) -> Any:
    """Coerces an outbound value to the Python type its column expects.

    Args:
        value: The entity value.
        relational_type: The column's relational type.

    Returns:
        The coerced value; ``None`` passes through untouched.

    Raises:
        TypeCoercionError: If a numeric or date/time value cannot be interpreted.
    """
    if value is None:
        return None

    relational_type = _as_relational(relational_type)
    try:
        if relational_type == RelationalType.INTEGER:
            return int(value)
        if relational_type == RelationalType.FLOAT:
            return float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise TypeCoercionError(
            f"Cannot coerce {value!r} to {relational_type.value}",
            cause=exc,
            details={"value": str(value), "type": relational_type.value},
        ) from exc

    if relational_type == RelationalType.BOOLEAN:
        return _to_bool(value)
    if relational_type == RelationalType.DATE:
        return format_date(value)
    if relational_type in (RelationalType.DATETIME, RelationalType.TIMESTAMP):
        return format_datetime(value)
    return str(value)


class SchemaMapper:
    """Bundles the mapping functions for callers that take a mapper instance."""

    to_relational_type = staticmethod(to_relational_type)
    to_warehouse_type = staticmethod(to_warehouse_type)
    binding_type = staticmethod(binding_type)
    to_sqlalchemy_type = staticmethod(to_sqlalchemy_type)
    describe_field = staticmethod(describe_field)
    coerce = staticmethod(coerce)
