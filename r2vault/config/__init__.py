"""Configuration for r2vault."""

from r2vault.config.loader import (
    DEFAULT_DATA_DIR,
    DEFAULT_SYSTEM_NAME,
    StorageCredentials,
    VaultConfig,
    load_config,
    normalize_namespace,
)

__all__ = [
    "DEFAULT_DATA_DIR",
    "DEFAULT_SYSTEM_NAME",
    "StorageCredentials",
    "VaultConfig",
    "load_config",
    "normalize_namespace",
]
