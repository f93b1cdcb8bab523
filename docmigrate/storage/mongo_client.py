# ==============================================
# MongoClient
# ==============================================
#
# PURPOSE:
#   Manages the MongoDB connection and reads the collections that
#   get migrated.
#
# WHY THIS CLASS EXISTS:
#   MongoDB is the source of the schema-less documents. The
#   migrator only needs two things from it: the collection names,
#   and every document of a collection (no filter, full scan).
#
# CLASS: MongoClient
# ------------------
#   Stateful — wraps one pymongo client for the source database.
#
#   Constructor:
#   ------------
#   - __init__(host, port, database, user=None, password=None)
#   - from_config(config: MongoConfig) (classmethod)
#
#   Methods:
#   --------
#   - connect() -> None
#       Establish connection, ping the server. Raises
#       ConnectivityError if unreachable or auth fails.
#
#   - disconnect() -> None
#
#   - list_collection_names() -> list[str]
#       User collections only (system.* excluded).
#
#   - iter_documents(collection_name) -> Iterator[dict]
#       Lazy cursor over every document.
#
#   - find_all(collection_name) -> list[dict]
#       Every document, loaded once. Discovery and insertion both
#       walk this list, so they see exactly the same documents.
#
#   - insert_batch(collection_name, documents) -> int
#       Insert documents (used to seed sample data).
#
#   Context Manager:
#   ----------------
#   - `with MongoClient.from_config(cfg) as source:` connects on entry
#     and closes on exit.
#
# ==============================================

from typing import Iterator

from pymongo import MongoClient as PyMongoClient
from pymongo.errors import ConnectionFailure, OperationFailure

from docmigrate.config import MongoConfig
from docmigrate.errors import ConnectivityError, NotConnectedError

SYSTEM_COLLECTION_FILTER = {"name": {"$regex": r"^(?!system\.)"}}


class MongoClient:
    def __init__(self, host, port, database, user=None, password=None):
        # Nothing is opened until connect()
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.client = None

    @classmethod
    def from_config(cls, config: MongoConfig) -> "MongoClient":
        return cls(
            host=config.host,
            port=config.port,
            database=config.database,
            user=config.user,
            password=config.password
        )

    @property
    def is_connected(self) -> bool:
        return self.client is not None

    def connect(self):
        # Reuse MongoConfig so the URI escaping lives in one place
        config = MongoConfig(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.database
        )
        try:
            self.client = PyMongoClient(config.uri())
            # The driver connects lazily; ping forces a round trip
            self.client.admin.command('ping')
            print("✓ Connected to MongoDB")
        except ConnectionFailure as e:
            print(f"✗ Could not connect to MongoDB: {e}")
            self.disconnect()
            raise ConnectivityError(f"MongoDB unreachable at {self.host}:{self.port}") from e
        except OperationFailure as e:
            print(f"✗ MongoDB authentication failed: {e}")
            self.disconnect()
            raise ConnectivityError(f"MongoDB rejected credentials for {self.database}") from e

    def disconnect(self):
        if self.client:
            self.client.close()
            self.client = None

    def list_collection_names(self) -> list[str]:
        db = self._database()
        return db.list_collection_names(filter=SYSTEM_COLLECTION_FILTER)

    def iter_documents(self, collection_name: str) -> Iterator[dict]:
        collection = self._database()[collection_name]
        return collection.find({})

    def find_all(self, collection_name: str) -> list[dict]:
        return list(self.iter_documents(collection_name))

    def insert_batch(self, collection_name: str, documents: list[dict]) -> int:
        if not documents:
            return 0
        collection = self._database()[collection_name]
        result = collection.insert_many(documents)
        inserted = len(result.inserted_ids)
        print(f"✓ Inserted {inserted} documents into '{collection_name}'")
        return inserted

    def _database(self):
        if not self.client:
            raise NotConnectedError("Not connected to MongoDB.")
        return self.client[self.database]

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
