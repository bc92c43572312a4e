"""
r2vault Configuration Loader

Builds one immutable VaultConfig from the process environment (and an
optional .env file). Components receive the config object explicitly and
never read os.environ themselves.

The fallback source directory is FALLBACK_DIR, else the working directory
of the process. An installed package never looks inside site-packages.

Usage:
    from r2vault.config import load_config

    config = load_config()
    if config.storage.is_complete:
        ...
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Type, TypeVar, Union

from dotenv import load_dotenv

from r2vault.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_NAME = "beluga"
DEFAULT_DATA_DIR = "/var/data/cobranza/beluga"
AUDIT_FILE_NAME = "audit.jsonl"

T = TypeVar("T")


def _get_env(env: Mapping[str, str], key: str, default: T = None, cast: Type[T] = str) -> T:
    """Get environment variable with type casting."""
    value = env.get(key)

    if value is None or value.strip() == "":
        return default

    value = value.strip()

    if cast == int:
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Invalid integer for {key}: {value!r}, using {default}")
            return default

    return value


def normalize_namespace(system_name: str) -> str:
    """Return the bucket prefix for a system identity."""
    namespace = (system_name or "").strip().lower()
    if not namespace:
        raise ConfigurationError("SYSTEM_NAME resolves to an empty namespace")
    if "/" in namespace:
        raise ConfigurationError(f"SYSTEM_NAME must not contain '/': {system_name!r}")
    if any(ch.isspace() for ch in namespace):
        raise ConfigurationError(f"SYSTEM_NAME must not contain whitespace: {system_name!r}")
    if set(namespace) == {"."}:
        raise ConfigurationError(f"SYSTEM_NAME must not be a dot segment: {system_name!r}")
    return namespace


@dataclass(frozen=True)
class StorageCredentials:
    """S3-compatible object storage connection settings."""
    endpoint: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    bucket: str = ""

    ENV_NAMES = {
        "endpoint": "R2_ENDPOINT",
        "access_key_id": "R2_ACCESS_KEY_ID",
        "secret_access_key": "R2_SECRET_ACCESS_KEY",
        "bucket": "R2_BUCKET",
    }

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "StorageCredentials":
        return cls(**{attr: _get_env(env, name, "") for attr, name in cls.ENV_NAMES.items()})

    def missing(self) -> List[str]:
        """Names of the environment variables that are not set."""
        return [name for attr, name in self.ENV_NAMES.items() if not getattr(self, attr)]

    @property
    def is_complete(self) -> bool:
        return not self.missing()

    def __repr__(self) -> str:
        masked = "***" if self.access_key_id else ""
        return (
            f"StorageCredentials(endpoint={self.endpoint!r}, bucket={self.bucket!r}, "
            f"access_key_id={masked!r})"
        )


@dataclass(frozen=True)
class VaultConfig:
    """Process-wide configuration, constructed once at start-up."""
    system_name: str = DEFAULT_SYSTEM_NAME
    system_name_configured: bool = False
    storage: StorageCredentials = field(default_factory=StorageCredentials)
    data_dir: Path = Path(DEFAULT_DATA_DIR)
    data_dir_configured: bool = False
    fallback_dir: Path = field(default_factory=Path.cwd)
    temp_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    backup_hour: int = 9
    backup_minute: int = 0
    backup_timezone: str = "UTC"
    log_level: str = "INFO"
    log_format: str = "console"

    def __post_init__(self):
        object.__setattr__(self, "system_name", normalize_namespace(self.system_name))
        if not 0 <= self.backup_hour <= 23 or not 0 <= self.backup_minute <= 59:
            raise ConfigurationError(
                f"Invalid backup time {self.backup_hour}:{self.backup_minute}"
            )

    @property
    def namespace(self) -> str:
        """Bucket prefix for every object of this system instance."""
        return self.system_name

    @property
    def audit_file(self) -> Path:
        return self.data_dir / AUDIT_FILE_NAME

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "VaultConfig":
        raw_system_name = _get_env(env, "SYSTEM_NAME")
        raw_data_dir = _get_env(env, "DATA_DIR")

        return cls(
            system_name=raw_system_name or DEFAULT_SYSTEM_NAME,
            system_name_configured=raw_system_name is not None,
            storage=StorageCredentials.from_env(env),
            data_dir=Path(raw_data_dir or DEFAULT_DATA_DIR),
            data_dir_configured=raw_data_dir is not None,
            fallback_dir=Path(_get_env(env, "FALLBACK_DIR") or Path.cwd()),
            temp_dir=Path(_get_env(env, "BACKUP_TMP_DIR", tempfile.gettempdir())),
            backup_hour=_get_env(env, "BACKUP_HOUR", 9, int),
            backup_minute=_get_env(env, "BACKUP_MINUTE", 0, int),
            backup_timezone=_get_env(env, "BACKUP_TIMEZONE", "UTC"),
            log_level=_get_env(env, "LOG_LEVEL", "INFO").upper(),
            log_format=_get_env(env, "LOG_FORMAT", "console").lower(),
        )


def load_config(
    env: Optional[Mapping[str, str]] = None,
    env_file: Optional[Union[str, Path]] = None,
) -> VaultConfig:
    """
    Build the configuration for this process.

    Args:
        env: Mapping to read instead of os.environ (tests pass a dict)
        env_file: .env file to load first; defaults to ./.env when present.
            Existing environment variables are never overridden.

    Returns:
        VaultConfig
    """
    if env is None:
        dotenv_path = Path(env_file) if env_file else Path.cwd() / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=False)
            logger.debug(f"Loaded environment from {dotenv_path}")
        env = os.environ

    return VaultConfig.from_env(env)
