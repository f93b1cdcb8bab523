# ==============================================
# TOPIC 2: SCHEMA DISCOVERY
# ==============================================
#
# This package builds the relational schema from document shapes
# and records how the generated tables nest.
#
# Modules:
# --------
# - table.py                → TableDefinition / SchemaModel data classes
# - relationship_ledger.py  → Ordered (parent, child) table pairs
# - discoverer.py           → Walks documents, issues additive DDL
#
# ==============================================

from .table import ColumnDefinition, TableDefinition, SchemaModel
from .relationship_ledger import RelationshipEdge, RelationshipLedger
from .discoverer import SchemaDiscoverer

__all__ = [
    "ColumnDefinition",
    "TableDefinition",
    "SchemaModel",
    "RelationshipEdge",
    "RelationshipLedger",
    "SchemaDiscoverer",
]
