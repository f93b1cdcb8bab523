# ==============================================
# Tests for PostgresClient (psycopg mocked)
# ==============================================

from unittest.mock import MagicMock, patch

import psycopg
import pytest

from docmigrate.config import PostgresConfig
from docmigrate.errors import ConnectivityError, NotConnectedError
from docmigrate.storage.postgres_client import PostgresClient, normalize_catalog_type


@pytest.fixture
def connection():
    return MagicMock()


@pytest.fixture
def cursor(connection):
    cursor = connection.cursor.return_value.__enter__.return_value
    cursor.fetchone.return_value = (7,)
    return cursor


@pytest.fixture
def pg(connection, cursor):
    with patch("docmigrate.storage.postgres_client.psycopg.connect", return_value=connection):
        client = PostgresClient.from_config(PostgresConfig())
        client.connect()
        yield client


def executed(cursor):
    return [call.args for call in cursor.execute.call_args_list]


class TestConnection:
    def test_connect_uses_config(self, connection):
        with patch("docmigrate.storage.postgres_client.psycopg.connect", return_value=connection) as connect:
            client = PostgresClient("db", 6543, "u", "p", "warehouse")
            client.connect()
        connect.assert_called_once_with(
            host="db", port=6543, user="u", password="p", dbname="warehouse"
        )
        assert client.connection is connection

    def test_unreachable_raises_connectivity_error(self, capsys):
        with patch(
            "docmigrate.storage.postgres_client.psycopg.connect",
            side_effect=psycopg.OperationalError("connection refused")
        ):
            client = PostgresClient.from_config(PostgresConfig())
            with pytest.raises(ConnectivityError):
                client.connect()
        assert "✗ Could not connect to PostgreSQL" in capsys.readouterr().out

    def test_use_before_connect(self):
        client = PostgresClient.from_config(PostgresConfig())
        with pytest.raises(NotConnectedError):
            client.create_table("t")

    def test_context_manager_always_disconnects(self, connection):
        with patch("docmigrate.storage.postgres_client.psycopg.connect", return_value=connection):
            with pytest.raises(ValueError):
                with PostgresClient.from_config(PostgresConfig()) as client:
                    raise ValueError("boom")
        connection.close.assert_called_once()
        assert client.connection is None


class TestDdl:
    def test_create_table(self, pg, cursor, connection):
        pg.create_table("orders")
        assert executed(cursor) == [
            ('CREATE TABLE IF NOT EXISTS "orders" ("Id" SERIAL PRIMARY KEY)', None)
        ]
        connection.commit.assert_called_once()

    def test_add_parent_column(self, pg, cursor):
        pg.add_parent_column("orders_lines", "orders")
        assert executed(cursor) == [(
            'ALTER TABLE "orders_lines" ADD COLUMN IF NOT EXISTS "ParentId" INTEGER '
            'REFERENCES "orders"("Id")',
            None,
        )]

    def test_add_column(self, pg, cursor):
        pg.add_column("orders", "total", "DOUBLE PRECISION")
        assert executed(cursor) == [
            ('ALTER TABLE "orders" ADD COLUMN IF NOT EXISTS "total" DOUBLE PRECISION', None)
        ]

    def test_identifiers_are_quoted(self, pg, cursor):
        pg.add_column('we"ird', "Value", "TEXT")
        query = executed(cursor)[0][0]
        assert '"we""ird"' in query


class TestInsert:
    def test_insert_returns_generated_id(self, pg, cursor):
        row_id = pg.insert_row("orders_lines", {"ParentId": 1, "sku": "X1", "qty": 2})
        assert row_id == 7
        assert executed(cursor) == [(
            'INSERT INTO "orders_lines" ("ParentId", "sku", "qty") '
            'VALUES (%s, %s, %s) RETURNING "Id"',
            (1, "X1", 2),
        )]

    def test_empty_row_uses_default_values(self, pg, cursor):
        assert pg.insert_row("orders", {}) == 7
        assert executed(cursor) == [('INSERT INTO "orders" DEFAULT VALUES RETURNING "Id"', None)]

    def test_percent_in_identifier_is_escaped(self, pg, cursor):
        pg.insert_row("t", {"50%off": True})
        query = executed(cursor)[0][0]
        assert '"50%%off"' in query

    def test_percent_in_table_name_without_params_is_not_escaped(self, pg, cursor):
        pg.insert_row("100%", {})
        assert executed(cursor) == [('INSERT INTO "100%" DEFAULT VALUES RETURNING "Id"', None)]

    def test_missing_id_raises(self, pg, cursor):
        cursor.fetchone.return_value = None
        with pytest.raises(RuntimeError):
            pg.insert_row("orders", {"cust": "Ann"})

    def test_failed_statement_rolls_back_and_reraises(self, pg, cursor, connection):
        cursor.execute.side_effect = psycopg.Error("violates foreign key constraint")
        with pytest.raises(psycopg.Error):
            pg.insert_row("orders_lines", {"ParentId": 99})
        connection.rollback.assert_called_once()
        connection.commit.assert_not_called()


class TestIntrospection:
    def test_get_current_columns(self, pg, cursor):
        cursor.fetchall.return_value = [
            {"column_name": "Id", "data_type": "integer"},
            {"column_name": "total", "data_type": "double precision"},
            {"column_name": "at", "data_type": "timestamp without time zone"},
        ]
        assert pg.get_current_columns("orders") == {
            "Id": "INTEGER",
            "total": "DOUBLE PRECISION",
            "at": "TIMESTAMP",
        }
        query, params = executed(cursor)[0]
        assert "information_schema.columns" in query
        assert params == ("orders",)

    @pytest.mark.parametrize("data_type, expected", [
        ("integer", "INTEGER"),
        ("bigint", "BIGINT"),
        ("boolean", "BOOLEAN"),
        ("text", "TEXT"),
        ("jsonb", "JSONB"),
    ])
    def test_normalize_catalog_type(self, data_type, expected):
        assert normalize_catalog_type(data_type) == expected
