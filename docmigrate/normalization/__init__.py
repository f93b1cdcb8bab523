# ==============================================
# TOPIC 1: NORMALIZATION (Name / Type Resolver)
# ==============================================
#
# Pure functions shared by the discovery and materialization passes.
# Nothing here talks to a database.
#
# Modules:
# --------
# - name_resolver.py  → Field names → column / table identifiers
# - type_resolver.py  → Value kinds, PostgreSQL column types, bind values
#
# ==============================================

from .name_resolver import (
    sanitize_name,
    derive_child_table_name,
    quote_identifier,
    ID_COLUMN,
    PARENT_ID_COLUMN,
    VALUE_COLUMN,
)
from .type_resolver import (
    ValueKind,
    classify,
    sql_type_for,
    sql_type_for_kind,
    to_bind_value,
    to_text,
    is_nested,
)

__all__ = [
    "sanitize_name",
    "derive_child_table_name",
    "quote_identifier",
    "ID_COLUMN",
    "PARENT_ID_COLUMN",
    "VALUE_COLUMN",
    "ValueKind",
    "classify",
    "sql_type_for",
    "sql_type_for_kind",
    "to_bind_value",
    "to_text",
    "is_nested",
]
