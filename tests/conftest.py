# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fakes so the migrator can be tested without live databases.
#
# FIXTURES:
# ---------
#   - database          → FakeDatabase (tables, rows, statement log)
#   - client            → connected FakePostgresClient on `database`
#   - destination_factory → zero-arg callable, one client per collection
#   - app_config        → AppConfig with defaults (no .env read)
#   - orders_document   → the "orders" end-to-end document
#
# FakePostgresClient implements the same methods as PostgresClient:
#   create_table, add_parent_column, add_column, insert_row,
#   get_current_columns, connect/disconnect, context manager.
# Inserts into missing tables/columns, or with a ParentId that has
# no parent row, raise FakeStorageError like the real store would.
# ==============================================

import pytest

from docmigrate.config import AppConfig, MigrationConfig, MongoConfig, PostgresConfig


class FakeStorageError(Exception):
    pass


class FakeDatabase:
    def __init__(self):
        self.columns: dict[str, dict[str, str]] = {}
        self.parents: dict[str, str] = {}
        self.rows: dict[str, list[dict]] = {}
        self.statements: list[tuple] = []
        self.connections = 0
        self.disconnections = 0
        self.fail_inserts_into: set[str] = set()
        self.fail_ddl_on: set[str] = set()

    def ddl(self) -> list[tuple]:
        return [s for s in self.statements if s[0] != "insert"]

    def column_names(self) -> dict[str, set[str]]:
        return {
            table: {c for c in columns if c not in ("Id", "ParentId")}
            for table, columns in self.columns.items()
        }


class FakePostgresClient:
    def __init__(self, database: FakeDatabase):
        self.database = database
        self.connected = False

    def connect(self):
        self.connected = True
        self.database.connections += 1

    def disconnect(self):
        if self.connected:
            self.connected = False
            self.database.disconnections += 1

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def create_table(self, table_name):
        self._check_ddl(table_name)
        self.database.statements.append(("create_table", table_name))
        self.database.columns.setdefault(table_name, {"Id": "SERIAL"})
        self.database.rows.setdefault(table_name, [])

    def add_parent_column(self, table_name, parent_table):
        self._check_ddl(table_name)
        self.database.statements.append(("add_parent_column", table_name, parent_table))
        if parent_table not in self.database.columns:
            raise FakeStorageError(f'relation "{parent_table}" does not exist')
        self.database.columns[table_name].setdefault("ParentId", "INTEGER")
        self.database.parents.setdefault(table_name, parent_table)

    def add_column(self, table_name, column_name, sql_type):
        self._check_ddl(table_name)
        self.database.statements.append(("add_column", table_name, column_name, sql_type))
        self.database.columns[table_name].setdefault(column_name, sql_type)

    def get_current_columns(self, table_name):
        return dict(self.database.columns.get(table_name, {}))

    def insert_row(self, table_name, row):
        self.database.statements.append(("insert", table_name, tuple(row)))
        if table_name in self.database.fail_inserts_into:
            raise FakeStorageError(f"insert into {table_name} failed")
        if table_name not in self.database.columns:
            raise FakeStorageError(f'relation "{table_name}" does not exist')
        for column in row:
            if column not in self.database.columns[table_name]:
                raise FakeStorageError(f'column "{column}" of "{table_name}" does not exist')
        if "ParentId" in row:
            parent = self.database.parents[table_name]
            parent_ids = {r["Id"] for r in self.database.rows[parent]}
            if row["ParentId"] not in parent_ids:
                raise FakeStorageError("foreign key violation")

        table_rows = self.database.rows[table_name]
        row_id = len(table_rows) + 1
        table_rows.append({"Id": row_id, **row})
        return row_id

    def _check_ddl(self, table_name):
        if table_name in self.database.fail_ddl_on:
            raise FakeStorageError(f"DDL on {table_name} failed")


class FakeSource:
    def __init__(self, collections: dict[str, list[dict]]):
        self.collections = collections
        self.disconnected = False

    def list_collection_names(self):
        return list(self.collections)

    def find_all(self, collection_name):
        return list(self.collections.get(collection_name, []))

    def disconnect(self):
        self.disconnected = True


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def client(database):
    fake = FakePostgresClient(database)
    fake.connect()
    return fake


@pytest.fixture
def destination_factory(database):
    return lambda: FakePostgresClient(database)


@pytest.fixture
def app_config():
    return AppConfig(
        postgres=PostgresConfig(),
        mongo=MongoConfig(),
        migration=MigrationConfig()
    )


@pytest.fixture
def orders_document():
    return {
        "cust": "Ann",
        "lines": [{"sku": "X1", "qty": 2}],
        "total": 19.99,
    }
