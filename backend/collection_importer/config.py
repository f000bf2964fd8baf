import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Collection Importer"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    CORS_ORIGINS: str = "http://localhost:5173"

    # Uploads larger than this are rejected before parsing
    MAX_IMPORT_BYTES: int = 20 * 1024 * 1024
    # Deepest folder/environment nesting accepted from an export
    MAX_NESTING_DEPTH: int = 64

    ALLOWED_IMPORT_EXTENSIONS: str = ".json,.yaml,.yml"
    ALLOWED_IMPORT_MIME_TYPES: str = "application/json,application/yaml,application/x-yaml"

    LOG_LEVEL: str = "INFO"
    # Also log to this file when set
    LOG_FILE: str | None = None

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def import_extensions(self) -> tuple[str, ...]:
        return tuple(e.strip().lower() for e in self.ALLOWED_IMPORT_EXTENSIONS.split(",") if e.strip())

    @property
    def import_mime_types(self) -> tuple[str, ...]:
        return tuple(m.strip().lower() for m in self.ALLOWED_IMPORT_MIME_TYPES.split(",") if m.strip())


settings = Settings()

_environment = os.getenv("COLLECTION_IMPORTER_ENV")
if _environment:
    settings.ENVIRONMENT = _environment

_log_file = os.getenv("COLLECTION_IMPORTER_LOG_FILE")
if _log_file:
    settings.LOG_FILE = _log_file
