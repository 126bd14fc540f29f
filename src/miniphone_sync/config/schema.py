"""Pydantic models for configuration schema."""

import time
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

DEFAULT_ACTIVITY_INTERVAL = 300


class StorageConfig(BaseModel):
    """Local persistence configuration."""

    data_dir: Path = Path("~/.miniphone")
    database_file: str = "miniphone.db"
    settings_file: str = "settings.json"
    rehydrate: bool = True

    @property
    def database_path(self) -> Path:
        """Full path of the SQLite message database."""
        return self.data_dir.expanduser() / self.database_file

    @property
    def settings_path(self) -> Path:
        """Full path of the key-value settings file."""
        return self.data_dir.expanduser() / self.settings_file


class ConnectivityConfig(BaseModel):
    """Connectivity probe configuration."""

    mode: Literal["http", "online", "offline"] = "http"
    check_url: str = "https://api.openai.com/v1/models"
    timeout: float = Field(3.0, gt=0.0, le=60.0)

    @field_validator("check_url")
    @classmethod
    def validate_check_url(cls, v: str) -> str:
        """Only http(s) URLs can be probed."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Connectivity check URL must be http(s): {v}")
        return v


class ActivityConfig(BaseModel):
    """Background activity monitor configuration."""

    poll_period: float = Field(10.0, gt=0.0, le=3600.0, description="Check period in seconds")
    notice_title: str = "Special attention"
    notice_text: str = "Char seems to want to chat with you..."


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("~/.miniphone/miniphone.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "console"
    file: FileLoggingConfig = FileLoggingConfig()


class ActivitySettings(BaseModel):
    """User-editable activity settings kept in the configuration store.

    Persisted under the ``bg-activity`` key. ``interval`` is in seconds and
    ``last_active_time`` in epoch milliseconds.
    """

    enabled: bool = False
    interval: int = DEFAULT_ACTIVITY_INTERVAL
    last_active_time: int = Field(default_factory=lambda: int(time.time() * 1000))

    @field_validator("interval", mode="before")
    @classmethod
    def coerce_interval(cls, v: object) -> object:
        """Fall back to the default interval for empty or non-positive values."""
        if v in (None, "", 0, "0"):
            return DEFAULT_ACTIVITY_INTERVAL
        if isinstance(v, (int, float)) and v < 0:
            return DEFAULT_ACTIVITY_INTERVAL
        return v

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, v: int) -> int:
        """Reject intervals that would coerce to a non-positive value."""
        if v <= 0:
            return DEFAULT_ACTIVITY_INTERVAL
        return v


class ClientConfig(BaseSettings):
    """Root configuration for the MiniPhone sync client.

    Environment variables take precedence over values passed in (the YAML
    file), and nested sections are merged key by key.
    """

    storage: StorageConfig = StorageConfig()
    connectivity: ConnectivityConfig = ConnectivityConfig()
    activity: ActivityConfig = ActivityConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="MINIPHONE_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings
