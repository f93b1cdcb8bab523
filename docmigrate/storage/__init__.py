# ==============================================
# TOPIC 3: STORAGE (MongoDB → PostgreSQL)
# ==============================================
#
# This package handles all database operations:
# reading source documents, creating relational tables on the fly,
# and inserting rows.
#
# Modules:
# --------
# - mongo_client.py     → MongoDB connection, collection scans
# - postgres_client.py  → PostgreSQL connection, DDL and INSERT ... RETURNING
# - materializer.py     → Writes one document as rows across child tables
#
# ==============================================

from .mongo_client import MongoClient
from .postgres_client import PostgresClient
from .materializer import RowMaterializer

__all__ = [
    "MongoClient",
    "PostgresClient",
    "RowMaterializer",
]
