"""Configuration management for the storage provisioning service."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from storage_provisioner.utils.http import normalize_base_url, split_csv

_config_logger = logging.getLogger(__name__)

DEFAULT_POOL_NAME = "tank"


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class ApplianceSettings(BaseModel):
    """Connection details for the storage appliance REST API.

    ``base_url`` and ``api_token`` are optional at load time so the process can
    start (and answer health checks) without them; the provisioning endpoint
    refuses requests until both are set.
    """

    base_url: str | None = Field(default=None)
    api_token: str | None = Field(default=None, repr=False)
    default_pool: str = Field(
        default=DEFAULT_POOL_NAME,
        min_length=1,
        description="Pool used for home paths of accounts without their own dataset",
    )
    verify_tls: bool = Field(default=True)
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout; unset keeps the HTTP client default.",
    )

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return normalize_base_url(value, label="APPLIANCE_URL")

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_token)


class StorageSettings(BaseModel):
    sqlite_path: str = Field(default="./data/provisioner.sqlite")
    sqlite_wal: bool = Field(default=True)


class ServerSettings(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1024, le=65535)
    http_enable_cors: bool = Field(default=False)
    http_allowed_origins: tuple[str, ...] = Field(default=())


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    appliance: ApplianceSettings = Field(default_factory=ApplianceSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


ENV_KEYS = {
    "appliance_url": "APPLIANCE_URL",
    "appliance_token": "APPLIANCE_API_TOKEN",
    "default_pool": "DEFAULT_POOL_NAME",
    "verify_tls": "APPLIANCE_VERIFY_TLS",
    "timeout": "APPLIANCE_TIMEOUT_SECONDS",
    "host": "PROVISIONER_HOST",
    "port": "PROVISIONER_PORT",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
    "sqlite_path": "SQLITE_PATH",
    "sqlite_wal": "SQLITE_WAL",
}

_TRUE_VALUES = frozenset({"1", "true", "yes"})


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_path(path: str) -> str:
    candidate = Path(path)
    if candidate.is_absolute():
        return str(candidate.resolve())
    return str((_project_root() / candidate).resolve())


def _env_str(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def _env_optional_float(key: str) -> float | None:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return None
    try:
        return float(value)
    except ValueError:
        _config_logger.warning("Invalid float value for %s: %r, ignoring", key, value)
        return None


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv(dotenv_path=_project_root() / ".env")
    log_file_env = _env_str(ENV_KEYS["log_file"])

    settings_data: dict[str, object] = {
        "server": {
            "host": os.getenv(ENV_KEYS["host"], ServerSettings().host),
            "port": _env_int(ENV_KEYS["port"], ServerSettings().port),
            "http_enable_cors": _env_bool("HTTP_ENABLE_CORS", ServerSettings().http_enable_cors),
            "http_allowed_origins": tuple(split_csv(os.getenv("HTTP_ALLOWED_ORIGINS"))),
        },
        "logging": {
            "level": os.getenv(ENV_KEYS["log_level"], LoggingSettings().level),
            "file": _resolve_path(log_file_env) if log_file_env else None,
        },
        "appliance": {
            "base_url": _env_str(ENV_KEYS["appliance_url"]),
            "api_token": _env_str(ENV_KEYS["appliance_token"]),
            "default_pool": _env_str(ENV_KEYS["default_pool"]) or DEFAULT_POOL_NAME,
            "verify_tls": _env_bool(ENV_KEYS["verify_tls"], ApplianceSettings().verify_tls),
            "timeout_seconds": _env_optional_float(ENV_KEYS["timeout"]),
        },
        "storage": {
            "sqlite_path": _resolve_path(
                os.getenv(ENV_KEYS["sqlite_path"], StorageSettings().sqlite_path)
            ),
            "sqlite_wal": _env_bool(ENV_KEYS["sqlite_wal"], StorageSettings().sqlite_wal),
        },
    }

    try:
        settings = Settings.model_validate(settings_data)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    if not settings.appliance.is_configured:
        _config_logger.warning(
            "%s or %s is not set; provisioning requests will be refused",
            ENV_KEYS["appliance_url"],
            ENV_KEYS["appliance_token"],
        )

    return settings
