# ==============================================
# SchemaDiscoverer
# ==============================================
#
# PURPOSE:
#   Walk a document's shape and make sure every table and column it
#   needs exists in PostgreSQL. Run over every document of a
#   collection before any row is inserted.
#
# WHY THIS CLASS EXISTS:
#   There is no predefined schema. A table per nesting level is
#   created the first time a document needs it, and columns are
#   added as new fields appear. DDL must finish before DML starts,
#   otherwise a row could be inserted before a column it needs.
#
# CLASS: SchemaDiscoverer
# -----------------------
#   Stateful — holds the destination client, the SchemaModel it
#   builds, and the RelationshipLedger it appends to.
#
#   Constructor:
#   ------------
#   - __init__(client, schema=None, ledger=None)
#       client must provide create_table, add_parent_column,
#       add_column and get_current_columns (see PostgresClient).
#
#   Methods:
#   --------
#   - discover(table_name, document, parent_table=None) -> None
#       1. Ensure table (Id SERIAL PRIMARY KEY)
#       2. Ensure ParentId → parent.Id if parent_table is given
#       3. For each field, in document order:
#            array     → record edge once (if non-empty), then per element:
#                          document → discover(child, element, table)
#                          scalar   → ensure scalar-array table (ParentId, Value)
#            document  → record edge, discover(child, value, table)
#            scalar    → ensure column with inferred type
#
#   - discover_all(table_name, documents) -> SchemaModel
#
#   Attributes:
#   -----------
#   - ddl_statements: int   → DDL statements sent (reported per collection)
#
#   DDL is only sent for tables/columns the model doesn't hold yet,
#   and every statement is IF NOT EXISTS, so repeated discovery is a
#   no-op. The first time a table is touched its existing columns
#   are read back from the catalog, so types from earlier runs win.
#
# ==============================================

from typing import Any, Iterable, Mapping, Optional

from docmigrate.normalization.name_resolver import (
    ID_COLUMN,
    PARENT_ID_COLUMN,
    VALUE_COLUMN,
    derive_child_table_name,
    sanitize_name,
)
from docmigrate.normalization.type_resolver import (
    DEFAULT_SQL_TYPE,
    ValueKind,
    classify,
    sql_type_for_kind,
)
from docmigrate.schema.relationship_ledger import RelationshipLedger
from docmigrate.schema.table import SchemaModel, TableDefinition

_SYNTHETIC_COLUMNS = {ID_COLUMN, PARENT_ID_COLUMN}


class SchemaDiscoverer:
    def __init__(
        self,
        client,
        schema: Optional[SchemaModel] = None,
        ledger: Optional[RelationshipLedger] = None
    ):
        self.client = client
        self.schema = schema if schema is not None else SchemaModel()
        self.ledger = ledger if ledger is not None else RelationshipLedger()
        self.ddl_statements = 0

    def discover(
        self,
        table_name: str,
        document: Mapping[str, Any],
        parent_table: Optional[str] = None
    ) -> None:
        """
        Evolve the schema so that `document` fits into `table_name`.

        Args:
            table_name: Table holding this level of the document
            document: The (sub)document to inspect; never modified
            parent_table: Table one level up, None for the collection root
        """
        table = self._ensure_table(table_name, parent_table)

        for field_name, value in document.items():
            column_name = sanitize_name(field_name)
            kind = classify(value)

            if kind == ValueKind.ARRAY:
                if len(value) == 0:
                    continue
                child_table = derive_child_table_name(table_name, column_name)
                self.ledger.record(table_name, child_table)
                for item in value:
                    if classify(item) == ValueKind.DOCUMENT:
                        self.discover(child_table, item, table_name)
                    else:
                        self._ensure_scalar_array_table(child_table, table_name)

            elif kind == ValueKind.DOCUMENT:
                child_table = derive_child_table_name(table_name, column_name)
                self.ledger.record(table_name, child_table)
                self.discover(child_table, value, table_name)

            else:
                self._ensure_column(table, column_name, sql_type_for_kind(kind))

    def discover_all(self, table_name: str, documents: Iterable[Mapping[str, Any]]) -> SchemaModel:
        for document in documents:
            self.discover(table_name, document)
        return self.schema

    def _ensure_table(self, table_name: str, parent_table: Optional[str]) -> TableDefinition:
        table = self.schema.get(table_name)
        if table is None:
            self.client.create_table(table_name)
            self.ddl_statements += 1
            table = self.schema.ensure_table(table_name)
            self._load_existing_columns(table)

        if parent_table is not None and table.parent is None:
            self.client.add_parent_column(table_name, parent_table)
            self.ddl_statements += 1
            table.parent = parent_table

        return table

    def _ensure_scalar_array_table(self, table_name: str, parent_table: str) -> None:
        table = self._ensure_table(table_name, parent_table)
        table.is_scalar_array = True
        self._ensure_column(table, VALUE_COLUMN, DEFAULT_SQL_TYPE)

    def _ensure_column(self, table: TableDefinition, column_name: str, sql_type: str) -> None:
        # First sight commits the type
        if table.has_column(column_name):
            return
        self.client.add_column(table.name, column_name, sql_type)
        self.ddl_statements += 1
        table.add_column(column_name, sql_type)

    def _load_existing_columns(self, table: TableDefinition) -> None:
        existing = self.client.get_current_columns(table.name)
        for column_name, sql_type in existing.items():
            if column_name not in _SYNTHETIC_COLUMNS:
                table.add_column(column_name, sql_type)
