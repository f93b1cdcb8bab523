import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List


from docmigrate.schema.relationship_ledger import RelationshipEdge, RelationshipLedger
from docmigrate.schema.table import SchemaModel


# ==============================================
# SnapshotStore
# ==============================================
#
# PURPOSE:
#   Persist what a migration run produced so it can be looked at
#   after the process exits: the generated schema, the relationship
#   edges (for ERD tooling) and the per-collection results.
#
# WHAT IS PERSISTED:
#   1. SchemaModel          → tables, parents, columns and their types
#   2. RelationshipLedger   → ordered (parent, child) edges
#   3. Run results          → CollectionResult.to_dict() per collection
#
# This is a report, not a schema version: nothing reads it back
# into a later migration run.
#
# CLASS: SnapshotStore
# --------------------
#   Stateful — holds a reference to the storage directory.
#
#   Constructor:
#   ------------
#   - __init__(storage_dir: str = "metadata/")
#       The directory (and parents) is created up front.
#
class SnapshotStore:
    """
    Handles persistence of run snapshots to disk.

    Files created:
    - metadata/schema.json         → Generated tables and columns
    - metadata/relationships.json  → Parent/child table edges
    - metadata/run.json            → Per-collection results
    """

    def __init__(self, storage_dir: str = "metadata/"):
        """
        Initialize the snapshot store.

        Args:
            storage_dir: Directory to store snapshot files
        """
        self.storage_dir = Path(storage_dir)

        # Snapshots go into one flat directory
        self.storage_dir.mkdir(parents=True, exist_ok=True)

        # One file per concern, overwritten on every save
        self.schema_file = self.storage_dir / "schema.json"
        self.relationships_file = self.storage_dir / "relationships.json"
        self.run_file = self.storage_dir / "run.json"

#   SAVING:
#   - save_schema(schema) / save_relationships(ledger) / save_run(results)
#   - save_all(schema, ledger, results)
#
    def save_schema(self, schema: SchemaModel) -> None:
        with open(self.schema_file, 'w') as f:
            json.dump(schema.to_dict(), f, indent=2)

        print(f"Saved {len(schema)} tables to {self.schema_file}")

    def save_relationships(self, ledger: RelationshipLedger) -> None:
        with open(self.relationships_file, 'w') as f:
            json.dump(ledger.to_dict(), f, indent=2)

        print(f"Saved {len(ledger)} relationships to {self.relationships_file}")

    def save_run(self, results: List[Any]) -> None:
        """
        Save per-collection results of the run.

        Args:
            results: CollectionResult objects (anything with to_dict())
        """
        run = {
            "finished_at": datetime.now(timezone.utc).isoformat(),
            "collections": [result.to_dict() for result in results],
        }

        with open(self.run_file, 'w') as f:
            json.dump(run, f, indent=2)

        print(f"Saved results for {len(results)} collections to {self.run_file}")

    def save_all(self, schema: SchemaModel, ledger: RelationshipLedger, results: List[Any]) -> None:
        self.save_schema(schema)
        self.save_relationships(ledger)
        self.save_run(results)

#   LOADING:
#   - load_schema() -> SchemaModel          (empty model if no file)
#   - load_relationships() -> list[RelationshipEdge]
#   - load_run() -> dict
#
    def load_schema(self) -> SchemaModel:
        if not self.schema_file.exists():
            return SchemaModel()

        with open(self.schema_file, 'r') as f:
            return SchemaModel.from_dict(json.load(f))

    def load_relationships(self) -> List[RelationshipEdge]:
        if not self.relationships_file.exists():
            return []

        with open(self.relationships_file, 'r') as f:
            data = json.load(f)

        return [
            RelationshipEdge(parent=edge["parent"], child=edge["child"])
            for edge in data.get("edges", [])
        ]

    def load_run(self) -> Dict[str, Any]:
        if not self.run_file.exists():
            return {"finished_at": None, "collections": []}

        with open(self.run_file, 'r') as f:
            return json.load(f)

#   UTILITY:
#   - exists() -> bool
#   - clear() -> None
#
    def exists(self) -> bool:
        return (
            self.schema_file.exists() or
            self.relationships_file.exists() or
            self.run_file.exists()
        )

    def clear(self) -> None:
        """
        Delete all snapshot files.
        """
        for file in (self.schema_file, self.relationships_file, self.run_file):
            if file.exists():
                file.unlink()
                print(f"🗑️  Deleted {file}")
# FILE STRUCTURE:
# ---------------
#   metadata/
#   ├── schema.json          → {tables: [{name, parent, columns: [...]}]}
#   ├── relationships.json   → {edges: [{parent, child}, ...]}
#   └── run.json             → {finished_at, collections: [...]}
#
# =============================================
