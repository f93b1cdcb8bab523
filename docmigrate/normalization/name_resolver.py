# ==============================================
# Name Resolver
# ==============================================
#
# PURPOSE:
#   Turn raw document field names into PostgreSQL identifiers and
#   derive the table name used for a nested field.
#
# WHY THIS MODULE EXISTS:
#   MongoDB field names can contain characters that are awkward in
#   SQL ("address.city", "first name", "$price"). Both passes must
#   map a field to exactly the same column, so the mapping lives in
#   one place and is deterministic.
#
# FUNCTIONS:
# ----------
#   - sanitize_name(name: str) -> str
#       "." → "_", " " → "_", "$" → "dollar".
#       Empty name → "_". Names equal to the synthetic "Id",
#       "ParentId" or "Value" columns get a trailing "_".
#       Names over 63 bytes are shortened (see fit_identifier).
#
#   - derive_child_table_name(parent_table: str, field_name: str) -> str
#       "<parent>_<field>", namespaced by the full parent path so the
#       same field name under two parents maps to two tables.
#
#   - fit_identifier(name: str) -> str
#       PostgreSQL silently truncates identifiers to 63 bytes, which
#       would merge long names that share a prefix. Long names become
#       <prefix>_<8 hex chars of sha1(name)>.
#
#   - quote_identifier(name: str) -> str
#       Double-quote an identifier, doubling embedded quotes.
#
# RULES:
# ------
#   1. address.city  → address_city
#   2. first name    → first_name
#   3. $price        → dollarprice
#   4. Id            → Id_   (also ParentId, Value)
#   5. orders + lines → orders_lines
#
# KNOWN LIMITATION:
#   Sanitizing is not injective: "a.b" and "a_b" map to the same
#   column, and table "a_b" + field "c" collides with "a" + "b_c".
#
# ==============================================

import hashlib

ID_COLUMN = "Id"
PARENT_ID_COLUMN = "ParentId"
VALUE_COLUMN = "Value"

MAX_IDENTIFIER_BYTES = 63
_HASH_LENGTH = 8

_RESERVED_COLUMNS = {ID_COLUMN, PARENT_ID_COLUMN, VALUE_COLUMN}

_REPLACEMENTS = (
    (".", "_"),
    (" ", "_"),
    ("$", "dollar"),
)


def sanitize_name(name: str) -> str:
    """
    Convert a raw field (or collection) name into a safe identifier.

    Args:
        name: Raw name from the document, e.g. "address.city"

    Returns:
        Identifier to use as a column or table name, e.g. "address_city"
    """
    if not name:
        return "_"

    sanitized = str(name)
    for old, new in _REPLACEMENTS:
        sanitized = sanitized.replace(old, new)

    if sanitized in _RESERVED_COLUMNS:
        sanitized = f"{sanitized}_"

    return fit_identifier(sanitized)


def derive_child_table_name(parent_table: str, field_name: str) -> str:
    """
    Name the table that holds a nested field's rows.

    Args:
        parent_table: Name of the table owning the field
        field_name: Already sanitized field name

    Returns:
        Child table name, e.g. "orders_lines"
    """
    return fit_identifier(f"{parent_table}_{field_name}")


def fit_identifier(name: str) -> str:
    """Shorten names PostgreSQL would otherwise truncate."""
    if len(name.encode("utf-8")) <= MAX_IDENTIFIER_BYTES:
        return name

    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:_HASH_LENGTH]
    budget = MAX_IDENTIFIER_BYTES - _HASH_LENGTH - 1
    prefix = name
    while len(prefix.encode("utf-8")) > budget:
        prefix = prefix[:-1]
    return f"{prefix}_{digest}"


def quote_identifier(name: str) -> str:
    """Return name as a double-quoted SQL identifier."""
    return '"' + name.replace('"', '""') + '"'
