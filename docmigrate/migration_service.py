# ==============================================
# MigrationService — Final Orchestrator
# ==============================================
#
# PURPOSE:
#   This is the MAIN CLASS that ties the topics together into a
#   collection-by-collection migration. Users interact with this
#   class only. Everything else is internal.
#
# HOW IT CONNECTS THE TOPICS (per collection):
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                   MigrationService                       │
#   │                                                          │
#   │   MongoClient.find_all(collection) → documents           │
#   │                 │                                        │
#   │                 ▼                                        │
#   │   with PostgresClient(...)   (one connection)            │
#   │   ┌──────────────────────────────────────────────┐       │
#   │   │ PASS 1: SchemaDiscoverer.discover(doc)       │       │
#   │   │   for every document → DDL + ledger edges    │       │
#   │   └──────────────┬───────────────────────────────┘       │
#   │                  │ frozen SchemaModel                    │
#   │                  ▼                                       │
#   │   ┌──────────────────────────────────────────────┐       │
#   │   │ PASS 2: RowMaterializer.materialize(doc)     │       │
#   │   │   for every document → INSERT ... RETURNING  │       │
#   │   └──────────────────────────────────────────────┘       │
#   │   connection released (success or failure)               │
#   └──────────────────────────────────────────────────────────┘
#
# CLASS: MigrationService
# -----------------------
#
#   Constructor:
#   ------------
#   - __init__(config=None, source=None, destination_factory=None, ledger=None)
#       source: anything with list_collection_names() and find_all(name).
#               Defaults to a MongoClient built from config.
#       destination_factory: zero-arg callable returning a context
#               manager that yields a connected destination client.
#               Defaults to PostgresClient.from_config(config.postgres).
#       ledger: RelationshipLedger to append to (one per run).
#
#   Public Methods:
#   ---------------
#   - list_collections() -> list[str]
#   - migrate_collection(name) -> CollectionResult
#   - migrate_all(collections=None, continue_on_error=False) -> list[CollectionResult]
#   - get_schema() -> SchemaModel
#   - config, ledger (properties)
#   - close()
#
# ERROR POLICY:
#   Nothing is retried. A failure in either pass aborts that
#   collection; rows and tables already written stay. migrate_all
#   re-raises unless continue_on_error=True, in which case the
#   collection is reported as "failed" and the run moves on.
#
# ==============================================

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional

from docmigrate.config import AppConfig, get_config
from docmigrate.normalization.name_resolver import sanitize_name
from docmigrate.schema.discoverer import SchemaDiscoverer
from docmigrate.schema.relationship_ledger import RelationshipLedger
from docmigrate.schema.table import SchemaModel
from docmigrate.storage.materializer import RowMaterializer
from docmigrate.storage.mongo_client import MongoClient
from docmigrate.storage.postgres_client import PostgresClient


@dataclass
class CollectionResult:
    """Outcome of migrating one collection."""
    collection: str
    status: str = "success"  # success | empty | failed
    documents: int = 0
    tables: list[str] = field(default_factory=list)
    rows_by_table: Dict[str, int] = field(default_factory=dict)
    ddl_statements: int = 0
    elapsed_seconds: float = 0.0
    error: Optional[str] = None

    @property
    def rows_inserted(self) -> int:
        return sum(self.rows_by_table.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collection": self.collection,
            "status": self.status,
            "documents": self.documents,
            "tables": list(self.tables),
            "rows_by_table": dict(self.rows_by_table),
            "rows_inserted": self.rows_inserted,
            "ddl_statements": self.ddl_statements,
            "elapsed_seconds": self.elapsed_seconds,
            "error": self.error,
        }


class MigrationService:
    """
    Migrates MongoDB collections into normalized PostgreSQL tables,
    one collection at a time, discovery before insertion.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        source=None,
        destination_factory: Optional[Callable[[], Any]] = None,
        ledger: Optional[RelationshipLedger] = None
    ):
        """
        Initialize the service.

        Args:
            config: Application configuration. If None, loads from environment.
            source: Document source. If None, a MongoClient is created
                    and connected on first use (and closed by close()).
            destination_factory: Builds one destination client per collection.
            ledger: Relationship ledger shared by every collection of the run.
        """
        self._config = config or get_config()

        self._owns_source = source is None
        self._source = source or MongoClient.from_config(self._config.mongo)
        self._destination_factory = destination_factory or self._default_destination

        self._ledger = ledger if ledger is not None else RelationshipLedger()
        self._schema = SchemaModel()
        self._results: list[CollectionResult] = []

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def ledger(self) -> RelationshipLedger:
        return self._ledger

    @property
    def results(self) -> list[CollectionResult]:
        return list(self._results)

    def get_schema(self) -> SchemaModel:
        """Combined schema of every collection migrated so far."""
        return self._schema

    def list_collections(self) -> list[str]:
        """
        Source collections to migrate, in source order.

        If the config names collections, only those are returned.
        """
        self._ensure_source()
        names = list(self._source.list_collection_names())
        wanted = self._config.migration.collections
        if wanted:
            names = [name for name in names if name in wanted]
        return names

    def migrate_collection(self, collection_name: str) -> CollectionResult:
        """
        Migrate a single collection: discover all, then insert all.

        Args:
            collection_name: Source collection name

        Returns:
            CollectionResult with counts; status "empty" if there
            were no documents.
        """
        self._ensure_source()
        start_time = time.time()

        documents = self._source.find_all(collection_name)
        if not documents:
            print(f"⚠ No documents found in {collection_name}")
            result = CollectionResult(collection=collection_name, status="empty")
            self._results.append(result)
            return result

        root_table = sanitize_name(collection_name)
        collection_schema = SchemaModel()

        try:
            with self._destination_factory() as client:
                # PASS 1: schema discovery over every document
                discoverer = SchemaDiscoverer(client, collection_schema, self._ledger)
                discoverer.discover_all(root_table, documents)

                # PASS 2: insert rows against the finished schema
                materializer = RowMaterializer(client, collection_schema)
                materializer.materialize_all(root_table, documents)
        finally:
            # Tables created before a failure exist in the store too
            self._schema.merge(collection_schema)

        elapsed = time.time() - start_time
        result = CollectionResult(
            collection=collection_name,
            documents=len(documents),
            tables=collection_schema.table_names(),
            rows_by_table=dict(materializer.rows_by_table),
            ddl_statements=discoverer.ddl_statements,
            elapsed_seconds=round(elapsed, 3)
        )
        self._results.append(result)

        print(f"✓ Migrated {collection_name}: {result.documents} documents → "
              f"{result.rows_inserted} rows in {len(result.tables)} tables ({elapsed:.2f}s)")
        return result

    def migrate_all(
        self,
        collections: Optional[Iterable[str]] = None,
        continue_on_error: bool = False
    ) -> list[CollectionResult]:
        """
        Migrate collections one at a time.

        Args:
            collections: Names to migrate. Defaults to list_collections().
            continue_on_error: Record a failed collection and keep going
                               instead of re-raising.

        Returns:
            One CollectionResult per collection attempted
        """
        names = list(collections) if collections is not None else self.list_collections()
        results: list[CollectionResult] = []

        for name in names:
            print(f"📂 Migrating collection: {name}")
            try:
                results.append(self.migrate_collection(name))
            except Exception as e:
                print(f"✗ Migration of {name} failed: {e}")
                if not continue_on_error:
                    raise
                failed = CollectionResult(collection=name, status="failed", error=str(e))
                self._results.append(failed)
                results.append(failed)

        print(f"✓ Migration finished at {datetime.now(timezone.utc).isoformat()}")
        return results

    def close(self) -> None:
        """Close the source connection if this service opened it."""
        if self._owns_source:
            self._source.disconnect()

    def _ensure_source(self) -> None:
        if self._owns_source and not self._source.is_connected:
            self._source.connect()

    def _default_destination(self) -> PostgresClient:
        return PostgresClient.from_config(self._config.postgres)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False  # Don't suppress exceptions
