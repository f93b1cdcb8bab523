# ==============================================
# Document-to-Relational Migrator
# ==============================================
#
# Package Structure (4 Topics + Orchestrator):
#
# docmigrate/
# ├── normalization/    # Topic 1: Name and type resolution for fields/values
# ├── schema/           # Topic 2: Schema discovery + relationship ledger
# ├── storage/          # Topic 3: MongoDB source, PostgreSQL destination, row inserts
# ├── persistence/      # Topic 4: Schema / relationship snapshots on disk
# ├── reporting/        # Relationship tree printing
# ├── config.py         # Configuration management
# ├── errors.py         # Exception hierarchy
# ├── migration_service.py  # Final orchestrator class
# └── cli.py            # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
