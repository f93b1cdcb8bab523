# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Typed settings for the source (MongoDB), the destination
#   (PostgreSQL) and the migration run, read from the process
#   environment with an optional .env file underneath.
#
# CLASSES:
# --------
# - PostgresConfig (dataclass)
#     host: str          (default "localhost")
#     port: int          (default 5432)
#     user: str          (default "postgres")
#     password: str      (default "postgres")
#     database: str      (default "docmigrate")
#
# - MongoConfig (dataclass)
#     host: str          (default "localhost")
#     port: int          (default 27017)
#     user: str | None   (default None)
#     password: str | None (default None)
#     database: str      (default "docmigrate")
#
# - MigrationConfig (dataclass)
#     collections: list[str]     (default [] → every collection)
#     snapshot_dir: str          (default "metadata/")
#
# - AppConfig (dataclass)
#     postgres: PostgresConfig
#     mongo: MongoConfig
#     migration: MigrationConfig
#
# FUNCTION:
# ---------
# - get_config() -> AppConfig
#     Read .env (python-dotenv) once, then build AppConfig from os.environ.
#     Later calls return the cached instance.
#
# - reset_config() -> None
#     Forget the singleton so the next get_config() re-reads the env.
#
# USAGE:
# ------
#   from docmigrate.config import get_config
#   config = get_config()
#   print(config.postgres.host)
#   print(config.migration.collections)
#
# ==============================================

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path
from urllib.parse import quote_plus

from dotenv import load_dotenv


@dataclass
class PostgresConfig:
    """PostgreSQL (destination) configuration."""
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = "postgres"
    database: str = "docmigrate"


@dataclass
class MongoConfig:
    """MongoDB (source) configuration."""
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "docmigrate"

    def uri(self) -> str:
        if self.user and self.password:
            return (
                f"mongodb://{quote_plus(self.user)}:{quote_plus(self.password)}"
                f"@{self.host}:{self.port}/{self.database}"
            )
        return f"mongodb://{self.host}:{self.port}/{self.database}"


@dataclass
class MigrationConfig:
    """What to migrate and where to put run snapshots."""
    collections: list[str] = field(default_factory=list)
    snapshot_dir: str = "metadata/"


@dataclass
class AppConfig:
    """Main application configuration."""
    postgres: PostgresConfig
    mongo: MongoConfig
    migration: MigrationConfig


# Singleton instance
_config_instance: Optional[AppConfig] = None


def _split_list(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Real environment variables take precedence over .env
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    # Build PostgreSQL configuration
    postgres_config = PostgresConfig(
        host=os.getenv("POSTGRES_HOST", "localhost"),
        port=int(os.getenv("POSTGRES_PORT", "5432")),
        user=os.getenv("POSTGRES_USER", "postgres"),
        password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        database=os.getenv("POSTGRES_DATABASE", "docmigrate")
    )

    # Build MongoDB configuration
    mongo_config = MongoConfig(
        host=os.getenv("MONGO_HOST", "localhost"),
        port=int(os.getenv("MONGO_PORT", "27017")),
        user=os.getenv("MONGO_USER") or None,
        password=os.getenv("MONGO_PASSWORD") or None,
        database=os.getenv("MONGO_DATABASE", "docmigrate")
    )

    # Build migration configuration
    migration_config = MigrationConfig(
        collections=_split_list(os.getenv("MIGRATION_COLLECTIONS")),
        snapshot_dir=os.getenv("SNAPSHOT_DIR", "metadata/")
    )

    _config_instance = AppConfig(
        postgres=postgres_config,
        mongo=mongo_config,
        migration=migration_config
    )

    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration (used by tests)."""
    global _config_instance
    _config_instance = None
