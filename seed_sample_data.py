#!/usr/bin/env python3
"""
Seed the source MongoDB with sample documents, then run a migration.

Usage:
    python seed_sample_data.py                 # built-in sample documents
    python seed_sample_data.py url <endpoint>  # documents from a JSON API
    python seed_sample_data.py seed            # seed only, don't migrate
"""

import sys
from datetime import datetime, timezone

import requests

from docmigrate.config import get_config
from docmigrate.migration_service import MigrationService
from docmigrate.reporting.erd import print_relationship_tree
from docmigrate.storage.mongo_client import MongoClient

SAMPLE_DOCUMENTS = {
    "orders": [
        {
            "cust": "Ann",
            "lines": [{"sku": "X1", "qty": 2}],
            "total": 19.99,
        },
        {
            "cust": "Bob",
            "lines": [{"sku": "X1", "qty": 1}, {"sku": "Y7", "qty": 3, "gift": True}],
            "total": 42.5,
            "tags": ["priority", "gift"],
            "shipping": {"city": "Lisbon", "zip": "1000-001", "geo": {"lat": 38.7, "lng": -9.1}},
            "placed_at": datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        },
    ],
    "users": [
        {"name": "Ann", "email": "ann@example.com", "age": 34},
        {"name": "Bob", "nick name": "bobby", "$score": 7, "last_login": None},
    ],
}


def fetch_documents(api_url: str) -> list[dict]:
    """
    Fetch a JSON array of documents from an API endpoint.

    Args:
        api_url: Endpoint returning a JSON list of objects
    """
    response = requests.get(api_url, timeout=10)
    response.raise_for_status()
    payload = response.json()
    if isinstance(payload, dict):
        payload = [payload]
    return [document for document in payload if isinstance(document, dict)]


def seed(documents_by_collection: dict[str, list[dict]]) -> int:
    config = get_config()
    inserted = 0
    with MongoClient.from_config(config.mongo) as mongo:
        for collection_name, documents in documents_by_collection.items():
            # insert_many adds _id to the dicts it is given
            inserted += mongo.insert_batch(collection_name, [dict(d) for d in documents])
    return inserted


def migrate() -> None:
    with MigrationService() as service:
        results = service.migrate_all()
        print("\n📊 Summary:")
        for result in results:
            print(f"   → {result.collection}: {result.status}, {result.rows_inserted} rows")
        print_relationship_tree(service.ledger)


if __name__ == "__main__":
    mode = sys.argv[1] if len(sys.argv) > 1 else "sample"

    print("=" * 60)
    print("Seeding MongoDB with sample documents")
    print("=" * 60)

    try:
        if mode == "url":
            url = sys.argv[2] if len(sys.argv) > 2 else "http://127.0.0.1:8000/records"
            count = seed({"records": fetch_documents(url)})
        else:
            count = seed(SAMPLE_DOCUMENTS)
        print(f"✓ Seeded {count} documents")

        if mode != "seed":
            migrate()
    except Exception as e:
        print(f"\n✗ Error: {e}")
        sys.exit(1)
