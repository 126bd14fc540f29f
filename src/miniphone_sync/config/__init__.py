"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    ActivityConfig,
    ActivitySettings,
    ClientConfig,
    ConnectivityConfig,
    LoggingConfig,
    StorageConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "ClientConfig",
    # Sections
    "ActivityConfig",
    "ConnectivityConfig",
    "LoggingConfig",
    "StorageConfig",
    # Stored user settings
    "ActivitySettings",
]
