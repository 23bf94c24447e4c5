"""Haulpay settings: one pydantic-settings group per concern, each with its own env prefix."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class StorageConfig(BaseSettings):
    """SQLite payroll database configuration."""

    model_config = {"env_prefix": "HAULPAY_STORAGE_"}

    db_path: str = "payroll.db"
    timeout: float = 30.0  # busy timeout, seconds


class FieldMapConfig(BaseSettings):
    """Where the fuel import column mapping is persisted."""

    model_config = {"env_prefix": "HAULPAY_FIELD_MAP_"}

    backend: Literal["file", "redis"] = "file"
    path: str = "fuel_import_config.json"
    redis_key: str = "haulpay:fuel-import:field-map"


class RedisConfig(BaseSettings):
    """Redis key-value configuration."""

    model_config = {"env_prefix": "HAULPAY_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    socket_timeout: float = 2.0  # seconds


class ImportConfig(BaseSettings):
    """Fuel-card file import behaviour."""

    model_config = {"env_prefix": "HAULPAY_IMPORT_"}

    delimiter: str = ","
    encoding: str = "utf-8-sig"
    min_columns: int = 21
    max_error_display: int = 5
    progress_buffer: int = 1000  # events kept per job; oldest dropped first
    job_history: int = 50  # finished jobs kept for lookup


class ApiConfig(BaseSettings):
    """HTTP surface configuration."""

    model_config = {"env_prefix": "HAULPAY_API_"}

    upload_dir: str = "uploads"


class AppSettings(BaseSettings):
    """Root settings read once by the API lifespan and the scripts."""

    model_config = {"env_prefix": "HAULPAY_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = False

    storage: StorageConfig = StorageConfig()
    field_map: FieldMapConfig = FieldMapConfig()
    redis: RedisConfig = RedisConfig()
    imports: ImportConfig = ImportConfig()
    api: ApiConfig = ApiConfig()
