"""Engine configuration loaded from environment variables."""
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables.

    Attributes:
        database_path: SQLite database holding source tables and documents.
        bootstrap_source_schema: Create the source tables on startup.
        unknown_entity_policy: What refresh does for an unregistered
            entity type ("delete" the document at that key, or "raise").
        resync_prune_orphans: Delete documents not touched by a full resync.
        host: Bind address for the admin API server.
        port: Port number for the admin API server.
        debug: Enable debug logging and API documentation.
        key: API key for the admin and document endpoints.
    """

    model_config = SettingsConfigDict(
        env_prefix="SEARCHSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_path: str = "searchsync.db"
    bootstrap_source_schema: bool = False
    unknown_entity_policy: Literal["delete", "raise"] = "delete"
    resync_prune_orphans: bool = False

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    key: str = ""
