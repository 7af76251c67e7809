from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "plantbnb"
    db_username: str = "plantbnb"
    db_password: str = "secret"

    uploads_root: Path = Path("uploads")

    # Rejected documents stay on disk unless this is enabled.
    delete_rejected_documents: bool = False
    # Remove a freshly stored file when its reference could not be saved.
    cleanup_orphaned_uploads: bool = True
