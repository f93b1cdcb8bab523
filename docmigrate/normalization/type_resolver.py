# ==============================================
# Type Resolver
# ==============================================
#
# PURPOSE:
#   Decide what kind of value a document field holds, which
#   PostgreSQL column type stores it, and what gets bound as the
#   statement parameter.
#
# WHY THIS MODULE EXISTS:
#   pymongo hands back plain Python values plus a few BSON types
#   (Int64, ObjectId, Decimal128, DatetimeMS ...). Both passes walk
#   the same tree, so they need one shared classification.
#
# ENUM: ValueKind
# ---------------
#   NULL | INT32 | INT64 | DOUBLE | BOOLEAN | TIMESTAMP |
#   DOCUMENT | ARRAY | TEXT
#
# FUNCTIONS:
# ----------
#   - classify(value) -> ValueKind
#   - is_nested(value) -> bool          (DOCUMENT or ARRAY)
#   - sql_type_for_kind(kind) -> str
#   - sql_type_for(value) -> str
#       INT32 → INTEGER, INT64 → BIGINT, DOUBLE → DOUBLE PRECISION,
#       BOOLEAN → BOOLEAN, TIMESTAMP → TIMESTAMP, else TEXT
#   - to_bind_value(value) -> Any
#       None stays None, timestamps become naive UTC, numbers and
#       booleans pass through, everything else becomes str.
#   - to_text(value) -> str | None
#       Text form used for members of scalar arrays.
#   - fits_column(kind, column_type) -> bool
#       Whether a value of this kind may be bound into a column that
#       was created with column_type.
#
# ==============================================

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from bson import json_util
from bson.datetime_ms import DatetimeMS
from bson.int64 import Int64

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class ValueKind(Enum):
    """Tagged kind of a document value."""
    NULL = "null"
    INT32 = "int32"
    INT64 = "int64"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    DOCUMENT = "document"
    ARRAY = "array"
    TEXT = "text"


SQL_TYPES = {
    ValueKind.INT32: "INTEGER",
    ValueKind.INT64: "BIGINT",
    ValueKind.DOUBLE: "DOUBLE PRECISION",
    ValueKind.BOOLEAN: "BOOLEAN",
    ValueKind.TIMESTAMP: "TIMESTAMP",
}
DEFAULT_SQL_TYPE = "TEXT"

# Column type → kinds it accepts. TEXT is handled separately (accepts all).
_COMPATIBLE_KINDS = {
    "INTEGER": {ValueKind.INT32},
    "BIGINT": {ValueKind.INT32, ValueKind.INT64},
    "DOUBLE PRECISION": {ValueKind.INT32, ValueKind.INT64, ValueKind.DOUBLE},
    "BOOLEAN": {ValueKind.BOOLEAN},
    "TIMESTAMP": {ValueKind.TIMESTAMP},
}


def classify(value: Any) -> ValueKind:
    """
    Classify a document value.

    Args:
        value: Any value read from a document

    Returns:
        The ValueKind tag for the value
    """
    if value is None:
        return ValueKind.NULL

    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN

    if isinstance(value, Int64):
        return ValueKind.INT64

    if isinstance(value, int):
        if INT32_MIN <= value <= INT32_MAX:
            return ValueKind.INT32
        if INT64_MIN <= value <= INT64_MAX:
            return ValueKind.INT64
        return ValueKind.TEXT

    if isinstance(value, float):
        return ValueKind.DOUBLE

    if isinstance(value, (datetime, DatetimeMS)):
        return ValueKind.TIMESTAMP

    if isinstance(value, Mapping):
        return ValueKind.DOCUMENT

    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY

    return ValueKind.TEXT


def is_nested(value: Any) -> bool:
    """True for values that are normalized into child tables."""
    return classify(value) in (ValueKind.DOCUMENT, ValueKind.ARRAY)


def sql_type_for_kind(kind: ValueKind) -> str:
    return SQL_TYPES.get(kind, DEFAULT_SQL_TYPE)


def sql_type_for(value: Any) -> str:
    """
    Map a scalar value to the PostgreSQL column type that stores it.

    Null maps to TEXT: a field first seen as null gets a text column.
    """
    return sql_type_for_kind(classify(value))


def _to_utc_naive(value: Any) -> datetime:
    if isinstance(value, DatetimeMS):
        value = value.as_datetime()
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    # Naive datetimes from pymongo are already UTC
    return value


def to_bind_value(value: Any) -> Any:
    """
    Convert a scalar value into the parameter bound to the statement.

    Args:
        value: Scalar document value

    Returns:
        None, int, float, bool, naive UTC datetime, or str
    """
    kind = classify(value)

    if kind == ValueKind.NULL:
        return None
    if kind == ValueKind.BOOLEAN:
        return bool(value)
    if kind in (ValueKind.INT32, ValueKind.INT64):
        return int(value)
    if kind == ValueKind.DOUBLE:
        return float(value)
    if kind == ValueKind.TIMESTAMP:
        return _to_utc_naive(value)
    if kind in (ValueKind.DOCUMENT, ValueKind.ARRAY):
        return json_util.dumps(value)
    return str(value)


def to_text(value: Any) -> Optional[str]:
    """
    Text representation of a value, used for scalar-array members and
    for values stored into TEXT columns.
    """
    kind = classify(value)

    if kind == ValueKind.NULL:
        return None
    if kind == ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind in (ValueKind.INT32, ValueKind.INT64):
        return str(int(value))
    if kind == ValueKind.TIMESTAMP:
        return _to_utc_naive(value).isoformat()
    if kind in (ValueKind.DOCUMENT, ValueKind.ARRAY):
        return json_util.dumps(value)
    return str(value)


def fits_column(kind: ValueKind, column_type: str) -> bool:
    """
    Check a value kind against a committed column type.

    Args:
        kind: Kind of the incoming value
        column_type: Type the column was created with (e.g. "BIGINT")

    Returns:
        True if the value can be bound into the column
    """
    if kind == ValueKind.NULL:
        return True
    if column_type == DEFAULT_SQL_TYPE:
        return True
    compatible = _COMPATIBLE_KINDS.get(column_type)
    if compatible is None:
        # Type we never create (pre-existing column); the store decides
        return True
    return kind in compatible
