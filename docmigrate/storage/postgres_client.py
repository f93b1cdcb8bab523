# ==============================================
# PostgresClient
# ==============================================
#
# PURPOSE:
#   Manages the PostgreSQL connection and all SQL operations.
#   Creates tables on the fly, adds columns when new fields appear,
#   and inserts rows returning their generated Id.
#
# WHY THIS CLASS EXISTS:
#   The migrator creates SQL tables ON THE FLY from document
#   shapes. There is no predefined schema. When discovery says
#   "orders needs a qty INTEGER column", this class issues the
#   ALTER TABLE; when materialization needs a row, this class
#   issues the INSERT ... RETURNING "Id".
#
# CLASS: PostgresClient
# ---------------------
#   Stateful — holds one psycopg connection.
#
#   Constructor:
#   ------------
#   - __init__(host, port, user, password, database)
#       Keeps the parameters; the connection opens in connect().
#   - from_config(config: PostgresConfig) (classmethod)
#
#   Methods:
#   --------
#   - connect() -> None
#       Open the connection. Raises ConnectivityError if unreachable.
#
#   - disconnect() -> None
#       Safe to call twice.
#
#   - create_table(table_name) -> None
#       CREATE TABLE IF NOT EXISTS "t" ("Id" SERIAL PRIMARY KEY)
#
#   - add_parent_column(table_name, parent_table) -> None
#       ALTER TABLE "t" ADD COLUMN IF NOT EXISTS "ParentId" INTEGER
#       REFERENCES "parent"("Id")
#
#   - add_column(table_name, column_name, sql_type) -> None
#       ALTER TABLE "t" ADD COLUMN IF NOT EXISTS "c" <type>
#
#   - insert_row(table_name, row: dict) -> int
#       INSERT ... VALUES (%s, ...) RETURNING "Id"
#       (DEFAULT VALUES when the row has no columns)
#
#   - get_current_columns(table_name) -> dict[str, str]
#       Query information_schema for current column names and types.
#
#   - execute(query, params=None) -> None
#   - fetch_all(query, params=None) -> list[dict]
#
#   Every statement is committed on success. On failure the
#   transaction is rolled back (so the connection stays usable)
#   and the error is re-raised.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with PostgresClient(...) as db:` usage.
#     The connection is released on every exit path.
#
# ==============================================

from typing import Any, Optional, Sequence

import psycopg
from psycopg.rows import dict_row

from docmigrate.config import PostgresConfig
from docmigrate.errors import ConnectivityError, NotConnectedError
from docmigrate.normalization.name_resolver import (
    ID_COLUMN,
    PARENT_ID_COLUMN,
    quote_identifier,
)

# information_schema.columns.data_type → the type names we create
_CATALOG_TYPES = {
    "integer": "INTEGER",
    "bigint": "BIGINT",
    "double precision": "DOUBLE PRECISION",
    "boolean": "BOOLEAN",
    "timestamp without time zone": "TIMESTAMP",
    "text": "TEXT",
}


def normalize_catalog_type(data_type: str) -> str:
    return _CATALOG_TYPES.get(data_type.lower(), data_type.upper())


def _param_identifier(name: str) -> str:
    # Statements with bound params treat "%" as a placeholder marker
    return quote_identifier(name).replace("%", "%%")


class PostgresClient:
    def __init__(self, host, port, user, password, database):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.connection: Optional[psycopg.Connection] = None

    @classmethod
    def from_config(cls, config: PostgresConfig) -> "PostgresClient":
        return cls(
            host=config.host,
            port=config.port,
            user=config.user,
            password=config.password,
            database=config.database
        )

    def connect(self) -> None:
        # Establish connection to PostgreSQL
        try:
            self.connection = psycopg.connect(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                dbname=self.database,
            )
        except psycopg.OperationalError as e:
            print(f"✗ Could not connect to PostgreSQL: {e}")
            raise ConnectivityError(
                f"PostgreSQL unreachable at {self.host}:{self.port}/{self.database}"
            ) from e

    def disconnect(self) -> None:
        if self.connection:
            self.connection.close()
            self.connection = None

    def create_table(self, table_name: str) -> None:
        self.execute(
            f"CREATE TABLE IF NOT EXISTS {quote_identifier(table_name)} "
            f"({quote_identifier(ID_COLUMN)} SERIAL PRIMARY KEY)"
        )

    def add_parent_column(self, table_name: str, parent_table: str) -> None:
        self.execute(
            f"ALTER TABLE {quote_identifier(table_name)} "
            f"ADD COLUMN IF NOT EXISTS {quote_identifier(PARENT_ID_COLUMN)} INTEGER "
            f"REFERENCES {quote_identifier(parent_table)}({quote_identifier(ID_COLUMN)})"
        )

    def add_column(self, table_name: str, column_name: str, sql_type: str) -> None:
        self.execute(
            f"ALTER TABLE {quote_identifier(table_name)} "
            f"ADD COLUMN IF NOT EXISTS {quote_identifier(column_name)} {sql_type}"
        )

    def insert_row(self, table_name: str, row: dict[str, Any]) -> int:
        """
        Insert one row and return its generated Id.

        Args:
            table_name: Target table
            row: Column name → bound value, in column order

        Returns:
            The "Id" assigned by PostgreSQL
        """
        if row:
            table = _param_identifier(table_name)
            returning = _param_identifier(ID_COLUMN)
            column_names = ", ".join(_param_identifier(column) for column in row)
            placeholders = ", ".join(["%s"] * len(row))
            query = (
                f"INSERT INTO {table} ({column_names}) "
                f"VALUES ({placeholders}) RETURNING {returning}"
            )
            params: Optional[tuple] = tuple(row.values())
        else:
            # Sent without params, so a "%" in the name stays unescaped
            query = (
                f"INSERT INTO {quote_identifier(table_name)} DEFAULT VALUES "
                f"RETURNING {quote_identifier(ID_COLUMN)}"
            )
            params = None

        result = self._run(query, params, fetch_one=True)
        if result is None:
            raise RuntimeError(f"INSERT into {table_name} returned no Id")
        return int(result[0])

    def get_current_columns(self, table_name: str) -> dict[str, str]:
        # Query information_schema to get current column names and types
        rows = self.fetch_all(
            "SELECT column_name, data_type FROM information_schema.columns "
            "WHERE table_schema = current_schema() AND table_name = %s "
            "ORDER BY ordinal_position",
            (table_name,)
        )
        return {
            str(row["column_name"]): normalize_catalog_type(str(row["data_type"]))
            for row in rows
        }

    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> None:
        # Execute a raw SQL statement
        self._run(query, params)

    def fetch_all(self, query: str, params: Optional[Sequence[Any]] = None) -> list[dict]:
        # Execute SELECT and return rows as dicts
        connection = self._require_connection()
        try:
            with connection.cursor(row_factory=dict_row) as cursor:
                cursor.execute(query, params)
                results = cursor.fetchall()
            connection.commit()
            return results
        except psycopg.Error:
            connection.rollback()
            raise

    def _run(self, query: str, params: Optional[Sequence[Any]] = None, fetch_one: bool = False):
        connection = self._require_connection()
        try:
            with connection.cursor() as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone() if fetch_one else None
            connection.commit()
            return row
        except psycopg.Error:
            connection.rollback()
            raise

    def _require_connection(self) -> psycopg.Connection:
        if self.connection is None:
            raise NotConnectedError("Not connected to PostgreSQL")
        return self.connection

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
