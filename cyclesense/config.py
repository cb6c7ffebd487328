"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "CycleSense"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Database ---
    # direct postgres connection string for asyncpg; analysis-by-user is
    # unavailable (503) when unset
    database_url: str | None = None

    # --- CORS ---
    cors_origins: list[str] = ["http://localhost:3000"]

    # --- Imports ---
    allowed_import_extensions: list[str] = [".csv"]
    max_import_size_bytes: int = 5 * 1024 * 1024  # 5 MB

    # --- Analysis ---
    analysis_window_days: int = 90
    thresholds_path: str | None = None  # override for the bundled thresholds.yaml

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
