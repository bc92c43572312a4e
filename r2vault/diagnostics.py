"""
Storage identity check.

Confirms the configuration a deployment will back up with, locates the live
data file and writes one small object to the bucket to prove the endpoint,
credentials and namespace work end to end. Meant to be run by a human, so
missing credentials are fatal here (unlike the backup job).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from r2vault.backup.storage import ObjectStorage
from r2vault.config import VaultConfig
from r2vault.errors import ConfigurationError

logger = logging.getLogger(__name__)

DATA_FILE_NAME = "notas.json"
SHARED_DATA_FILE = Path("/var/data/cobranza/data") / DATA_FILE_NAME
IDENTITY_FILE_NAME = "identity_check.txt"


@dataclass
class DiagnosticReport:
    system_name: str
    namespace: str
    system_name_configured: bool
    key: str
    etag: Optional[str] = None
    data_file: Optional[Path] = None
    data_file_size: Optional[int] = None

    @property
    def data_file_size_kb(self) -> Optional[str]:
        if self.data_file_size is None:
            return None
        return f"{self.data_file_size / 1024:.2f} KB"

    def summary(self) -> str:
        lines = [
            "==========================================",
            "IDENTITY CHECK",
            f"   System:      [{self.system_name}]",
            f"   Namespace:   [{self.namespace}/]",
        ]
        if not self.system_name_configured:
            lines.append("   WARNING:     SYSTEM_NAME is not set, default identity in use")
        lines += [
            f"   Data file:   {self.data_file_size_kb or 'not found'} "
            f"({self.data_file or 'no candidate path exists'})",
            f"   Object key:  {self.key}",
            f"   ETag:        {self.etag}",
            "==========================================",
        ]
        return "\n".join(lines)


def candidate_data_paths(config: VaultConfig) -> List[Path]:
    """Where the live data file may be, most specific first."""
    paths = []
    if config.data_dir_configured:
        paths.append(config.data_dir / DATA_FILE_NAME)
    paths.append(SHARED_DATA_FILE)
    paths.append(config.fallback_dir / "data" / DATA_FILE_NAME)
    return paths


def find_data_file(paths: List[Path]) -> Tuple[Optional[Path], Optional[int]]:
    for path in paths:
        if path.is_file():
            return path, path.stat().st_size
    return None, None


def identity_payload(config: VaultConfig, now: datetime) -> str:
    return (
        "Identity Check\n"
        f"System: {config.system_name}\n"
        f"Namespace: {config.namespace}\n"
        f"Date: {now.isoformat()}"
    )


def run_identity_check(
    config: VaultConfig,
    storage: Optional[ObjectStorage] = None,
    now: Optional[datetime] = None,
) -> DiagnosticReport:
    """
    Validate configuration and prove bucket connectivity with one upload.

    Raises:
        ConfigurationError: any object storage setting is missing
        UploadError: the test upload failed
    """
    now = now or datetime.now(timezone.utc)

    if not config.system_name_configured:
        logger.warning(
            f"SYSTEM_NAME is not set: backups go to the default namespace "
            f"'{config.namespace}/' and may overwrite another instance's data"
        )

    missing = config.storage.missing()
    if missing:
        raise ConfigurationError(
            f"Missing critical environment variables: {', '.join(missing)}",
            missing=missing,
        )
    logger.info("Object storage credentials detected")

    data_file, size = find_data_file(candidate_data_paths(config))
    if data_file:
        logger.info(f"Data file: {data_file} ({size / 1024:.2f} KB)")
    else:
        logger.warning(f"{DATA_FILE_NAME} not found in any candidate path")

    storage = storage or ObjectStorage.from_credentials(config.storage)
    key = f"{config.namespace}/diagnostics/{IDENTITY_FILE_NAME}"
    logger.info(f"Uploading identity check to {key}")
    etag = storage.put_object(key, identity_payload(config, now).encode("utf-8"), "text/plain")

    return DiagnosticReport(
        system_name=config.system_name,
        namespace=config.namespace,
        system_name_configured=config.system_name_configured,
        key=key,
        etag=etag,
        data_file=data_file,
        data_file_size=size,
    )
