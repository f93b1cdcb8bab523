# ==============================================
# TOPIC 4: PERSISTENCE (Run snapshots)
# ==============================================
#
# This package writes what a migration run produced (schema,
# relationships, per-collection results) to disk so it can be
# inspected or diffed after the run.
#
# Modules:
# --------
# - snapshot_store.py  → Save/load schema, relationships and run results
#
# ==============================================

from .snapshot_store import SnapshotStore

__all__ = ["SnapshotStore"]
