# ==============================================
# Table Definitions (Data Classes)
# ==============================================
#
# PURPOSE:
#   In-memory model of the relational schema the discovery pass
#   builds. Every CREATE TABLE / ADD COLUMN the discoverer issues
#   is mirrored here as a one-time commit.
#
# WHY THIS FILE EXISTS:
#   The materializer needs to know which type each column was
#   committed with (to enforce the conflict policy), the snapshot
#   store needs something to serialize, and tests need to inspect
#   the schema without a live database.
#
# CLASSES:
# --------
# - ColumnDefinition (dataclass)
#     - name: str              → Sanitized column name
#     - sql_type: str          → PostgreSQL type, fixed at first sight
#
# - TableDefinition (dataclass)
#     - name: str              → Generated table name
#     - parent: str | None     → Parent table name (None for a root table)
#     - columns: dict[str, ColumnDefinition]  → Scalar columns, in commit order
#     - is_scalar_array: bool  → True once a scalar array was normalized here
#
#     Methods:
#     --------
#     - has_column(name) -> bool
#     - column_type(name) -> str | None
#     - add_column(name, sql_type) -> bool   (False if it already existed)
#     - to_dict() / from_dict()
#
# - SchemaModel
#     Ordered mapping table name → TableDefinition.
#
#     Methods:
#     --------
#     - has_table / get / ensure_table / column_type
#     - table_names() -> list[str]
#     - column_names() -> dict[str, set[str]]
#     - merge(other) -> None
#     - to_dict() / from_dict()
#
# ==============================================

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional


@dataclass
class ColumnDefinition:
    """A scalar column and the type it was created with."""
    name: str
    sql_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "sql_type": self.sql_type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColumnDefinition":
        return cls(name=data["name"], sql_type=data["sql_type"])


@dataclass
class TableDefinition:
    """
    One generated table.

    The synthetic "Id" primary key and the "ParentId" link are implied
    by the table itself (parent is not None) and are not listed in columns.
    """

    name: str
    parent: Optional[str] = None
    columns: Dict[str, ColumnDefinition] = field(default_factory=dict)
    is_scalar_array: bool = False

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def column_type(self, name: str) -> Optional[str]:
        column = self.columns.get(name)
        return column.sql_type if column else None

    def add_column(self, name: str, sql_type: str) -> bool:
        """
        Commit a column. The first commit wins; later calls are no-ops.

        Returns:
            True if the column is new
        """
        if name in self.columns:
            return False
        self.columns[name] = ColumnDefinition(name, sql_type)
        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the table for persistence.

        Returns:
            A JSON-serializable dictionary representation
        """
        return {
            "name": self.name,
            "parent": self.parent,
            "is_scalar_array": self.is_scalar_array,
            "columns": [column.to_dict() for column in self.columns.values()],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableDefinition":
        table = cls(
            name=data["name"],
            parent=data.get("parent"),
            is_scalar_array=data.get("is_scalar_array", False),
        )
        for column_data in data.get("columns", []):
            column = ColumnDefinition.from_dict(column_data)
            table.columns[column.name] = column
        return table


class SchemaModel:
    """Ordered set of table definitions built up during discovery."""

    def __init__(self):
        self._tables: Dict[str, TableDefinition] = {}

    def __contains__(self, table_name: str) -> bool:
        return table_name in self._tables

    def __iter__(self) -> Iterator[TableDefinition]:
        return iter(self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)

    def has_table(self, table_name: str) -> bool:
        return table_name in self._tables

    def get(self, table_name: str) -> Optional[TableDefinition]:
        return self._tables.get(table_name)

    def ensure_table(self, table_name: str, parent: Optional[str] = None) -> TableDefinition:
        """Return the table definition, creating it on first use."""
        table = self._tables.get(table_name)
        if table is None:
            table = TableDefinition(name=table_name, parent=parent)
            self._tables[table_name] = table
        elif table.parent is None and parent is not None:
            table.parent = parent
        return table

    def column_type(self, table_name: str, column_name: str) -> Optional[str]:
        table = self._tables.get(table_name)
        if table is None:
            return None
        return table.column_type(column_name)

    def table_names(self) -> list[str]:
        return list(self._tables)

    def column_names(self) -> Dict[str, set[str]]:
        """Table name → set of scalar column names (order-free view)."""
        return {
            name: set(table.columns)
            for name, table in self._tables.items()
        }

    def merge(self, other: "SchemaModel") -> None:
        """Fold another model into this one; existing commits win."""
        for other_table in other:
            table = self.ensure_table(other_table.name, other_table.parent)
            table.is_scalar_array = table.is_scalar_array or other_table.is_scalar_array
            for column in other_table.columns.values():
                table.add_column(column.name, column.sql_type)

    def to_dict(self) -> Dict[str, Any]:
        return {"tables": [table.to_dict() for table in self._tables.values()]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchemaModel":
        model = cls()
        for table_data in data.get("tables", []):
            table = TableDefinition.from_dict(table_data)
            model._tables[table.name] = table
        return model
