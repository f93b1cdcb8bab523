# ==============================================
# CLI — Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Provides command-line interface to run a migration.
#   This is how users interact with the system.
#
# COMMANDS:
# ---------
# 1. List source collections:
#    python -m docmigrate.cli collections
#
# 2. Migrate every collection (or only some):
#    python -m docmigrate.cli migrate
#    python -m docmigrate.cli migrate --collection orders --collection users
#
# 3. Keep going after a failed collection, write a snapshot:
#    python -m docmigrate.cli migrate --keep-going --snapshot
#
# EXIT STATUS:
# ------------
#   0 → every collection migrated (or was empty)
#   1 → at least one collection failed
#
# ==============================================

import argparse
import sys
from typing import Optional

from docmigrate.errors import MigrationError
from docmigrate.migration_service import MigrationService
from docmigrate.persistence.snapshot_store import SnapshotStore
from docmigrate.reporting.erd import print_relationship_tree


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmigrate",
        description="Migrate MongoDB collections into normalized PostgreSQL tables."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("collections", help="List source collections")

    migrate = subparsers.add_parser("migrate", help="Migrate collections")
    migrate.add_argument(
        "--collection", "-c",
        action="append",
        dest="collections",
        help="Collection to migrate (repeatable). Default: all."
    )
    migrate.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue with the next collection when one fails"
    )
    migrate.add_argument(
        "--snapshot",
        action="store_true",
        help="Write schema/relationships/run JSON to the snapshot directory"
    )
    migrate.add_argument(
        "--no-erd",
        action="store_true",
        help="Don't print the relationship tree"
    )
    return parser


def cmd_collections(service: MigrationService) -> int:
    names = service.list_collections()
    if not names:
        print("No collections found.")
    for name in names:
        print(name)
    return 0


def cmd_migrate(service: MigrationService, args: argparse.Namespace) -> int:
    try:
        results = service.migrate_all(
            collections=args.collections,
            continue_on_error=args.keep_going
        )
    except Exception as e:
        print(f"✗ Migration aborted: {e}")
        return 1

    print("\n📊 Summary:")
    for result in results:
        line = f"   → {result.collection}: {result.status}"
        if result.status == "success":
            line += f" ({result.documents} documents, {result.rows_inserted} rows)"
        elif result.error:
            line += f" ({result.error})"
        print(line)

    if not args.no_erd:
        print_relationship_tree(service.ledger)

    if args.snapshot:
        store = SnapshotStore(service.config.migration.snapshot_dir)
        store.save_all(service.get_schema(), service.ledger, results)

    return 1 if any(result.status == "failed" for result in results) else 0


def main(argv: Optional[list[str]] = None, service: Optional[MigrationService] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    service = service or MigrationService()
    try:
        if args.command == "collections":
            return cmd_collections(service)
        return cmd_migrate(service, args)
    except MigrationError as e:
        print(f"✗ {e}")
        return 1
    finally:
        service.close()


if __name__ == "__main__":
    sys.exit(main())
