"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    StorageSchema      → storage.yaml
    RemoteSchema       → remote.yaml
    LoggingSchema      → logging.yaml
"""

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str


# =============================================================================
# storage.yaml
# =============================================================================


class StorageKeysSchema(_StrictBase):
    notes: str = "webnotes_notes_v1"
    folders: str = "webnotes_folders_v1"
    settings: str = "webnotes_settings_v1"
    migrated: str = "webnotes_migrated"


class MigrationSchema(_StrictBase):
    match_existing: bool = False


class StorageSchema(_StrictBase):
    data_dir: str
    keys: StorageKeysSchema = Field(default_factory=StorageKeysSchema)
    migration: MigrationSchema = Field(default_factory=MigrationSchema)


# =============================================================================
# remote.yaml
# =============================================================================


class RetrySchema(_StrictBase):
    max_attempts: int = Field(default=1, ge=1)
    backoff_multiplier: float = Field(default=0.5, ge=0)
    backoff_min: float = Field(default=0.0, ge=0)
    backoff_max: float = Field(default=5.0, ge=0)


class RemoteSchema(_StrictBase):
    enabled: bool
    base_url: str
    api_prefix: str
    session_path: str
    timeout_seconds: float
    retry: RetrySchema = Field(default_factory=RetrySchema)


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema
