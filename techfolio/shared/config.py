from pydantic_settings import BaseSettings, SettingsConfigDict
from enum import Enum
from typing import Optional

class AppEnv(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"

class StorageBackend(str, Enum):
    MEMORY = "memory"
    SQL = "sql"

class Settings(BaseSettings):
    """
    Central Configuration Registry.
    Strictly typed and validated via Pydantic.
    """

    # --- Application Meta ---
    APP_NAME: str = "techfolio"
    APP_ENV: AppEnv = AppEnv.DEVELOPMENT
    DEBUG: bool = False

    # --- Logging & Observability ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    OTEL_SERVICE_NAME: str = "techfolio-backend"
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = None

    # --- Persistence ---
    STORAGE_BACKEND: StorageBackend = StorageBackend.MEMORY
    DATABASE_URL: str = "sqlite:///./techfolio.db"

    # --- Category Tree Policy ---
    # Depth of a root category is 1.
    CATEGORY_MAX_DEPTH: int = 8
    # One of: block_if_has_children, reassign_children_to_parent, cascade_delete
    CATEGORY_DELETE_POLICY: str = "block_if_has_children"

    # --- Concurrency ---
    TREE_COMMIT_MAX_ATTEMPTS: int = 5
    TAG_RESOLVE_MAX_ATTEMPTS: int = 5

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
