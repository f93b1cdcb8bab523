# ==============================================
# RowMaterializer
# ==============================================
#
# PURPOSE:
#   Take a document and write it as rows into the tables the
#   discovery pass created, linking every child row to its parent
#   row through ParentId.
#
# WHY THIS CLASS EXISTS:
#   A single document spreads over several tables: its scalar
#   fields become one row in the collection's table, every nested
#   document becomes a row in a child table, and every scalar
#   array member becomes a (ParentId, Value) row. Child rows need
#   the parent's generated Id, so the parent is always inserted
#   first and its Id is threaded down the recursion.
#
# CLASS: RowMaterializer
# ----------------------
#   Stateful — holds the destination client, the frozen SchemaModel
#   from discovery (for the column type policy) and row counters.
#
#   Constructor:
#   ------------
#   - __init__(client, schema: SchemaModel | None = None)
#       client must provide insert_row(table, row) -> int.
#
#   Methods:
#   --------
#   - materialize(table_name, document, parent_id=None) -> int
#       1. One INSERT for the scalar fields, in document order,
#          ParentId first when parent_id is given
#       2. For each nested field, in document order:
#            document → materialize(child, value, new_id)
#            array    → per element: document → materialize(...)
#                                    scalar   → insert (ParentId, Value)
#       Returns the new row's Id.
#
#   - materialize_all(table_name, documents) -> list[int]
#
#   Attributes:
#   -----------
#   - rows_by_table: Counter[str]   → rows inserted per table
#
# COLUMN TYPE POLICY:
#   A column's type is whatever discovery committed first.
#     - NULL fits everything
#     - TEXT takes anything, stored as its text form
#     - BIGINT takes int32/int64, DOUBLE PRECISION takes any number
#     - INTEGER, BOOLEAN, TIMESTAMP take only their own kind
#   Anything else raises SchemaConflictError.
#
# ==============================================

from collections import Counter
from typing import Any, Iterable, Mapping, Optional

from docmigrate.errors import SchemaConflictError
from docmigrate.normalization.name_resolver import (
    PARENT_ID_COLUMN,
    VALUE_COLUMN,
    derive_child_table_name,
    sanitize_name,
)
from docmigrate.normalization.type_resolver import (
    DEFAULT_SQL_TYPE,
    ValueKind,
    classify,
    fits_column,
    is_nested,
    to_bind_value,
    to_text,
)
from docmigrate.schema.table import SchemaModel


class RowMaterializer:
    def __init__(self, client, schema: Optional[SchemaModel] = None):
        self.client = client
        self.schema = schema
        self.rows_by_table: Counter = Counter()

    @property
    def rows_inserted(self) -> int:
        return sum(self.rows_by_table.values())

    def materialize(
        self,
        table_name: str,
        document: Mapping[str, Any],
        parent_id: Optional[int] = None
    ) -> int:
        """
        Insert a document (and everything nested in it).

        Args:
            table_name: Table for this level of the document
            document: The (sub)document to insert
            parent_id: Id of the owning row, None for the collection root

        Returns:
            Id generated for the inserted row
        """
        row: dict[str, Any] = {}
        if parent_id is not None:
            row[PARENT_ID_COLUMN] = parent_id

        for field_name, value in document.items():
            if is_nested(value):
                continue
            column_name = sanitize_name(field_name)
            # Two fields that sanitize alike share a column; last value wins
            row[column_name] = self._bind(table_name, column_name, value, classify(value))

        row_id = self.client.insert_row(table_name, row)
        self.rows_by_table[table_name] += 1

        for field_name, value in document.items():
            if not is_nested(value):
                continue
            child_table = derive_child_table_name(table_name, sanitize_name(field_name))

            if classify(value) == ValueKind.DOCUMENT:
                self.materialize(child_table, value, row_id)
                continue

            for item in value:
                if classify(item) == ValueKind.DOCUMENT:
                    self.materialize(child_table, item, row_id)
                else:
                    self._insert_scalar_member(child_table, item, row_id)

        return row_id

    def materialize_all(self, table_name: str, documents: Iterable[Mapping[str, Any]]) -> list[int]:
        return [self.materialize(table_name, document) for document in documents]

    def _insert_scalar_member(self, table_name: str, item: Any, parent_id: int) -> None:
        column_type = self._column_type(table_name, VALUE_COLUMN)
        if column_type is not None and not fits_column(ValueKind.TEXT, column_type):
            raise SchemaConflictError(table_name, VALUE_COLUMN, column_type, ValueKind.TEXT.value)

        self.client.insert_row(table_name, {
            PARENT_ID_COLUMN: parent_id,
            VALUE_COLUMN: to_text(item),
        })
        self.rows_by_table[table_name] += 1

    def _bind(self, table_name: str, column_name: str, value: Any, kind: ValueKind) -> Any:
        column_type = self._column_type(table_name, column_name)
        if column_type is None:
            return to_bind_value(value)

        if not fits_column(kind, column_type):
            raise SchemaConflictError(table_name, column_name, column_type, kind.value)

        if column_type == DEFAULT_SQL_TYPE:
            return to_text(value)
        if column_type == "DOUBLE PRECISION" and kind != ValueKind.NULL:
            return float(value)
        return to_bind_value(value)

    def _column_type(self, table_name: str, column_name: str) -> Optional[str]:
        if self.schema is None:
            return None
        return self.schema.column_type(table_name, column_name)
