"""
Archive Uploader - packs the data directories and pushes them to the bucket.

Provides:
- Source directory resolution (persistent disk first, repository fallback)
- gzip tar of the ``data`` and ``uploads`` subdirectories that exist
- Upload under ``{system}/backup-{system}-{YYYY-MM-DD}.tar.gz``
- Guaranteed removal of the local temporary archive

The archive is read fully into memory before the upload. ObjectStorage also
accepts a file object, so switching to a streamed body keeps the same
key and filename contract.
"""

import logging
import tarfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from r2vault.backup.storage import ObjectStorage
from r2vault.config import VaultConfig
from r2vault.errors import ArchiveError, NoDataError
from r2vault.logging_utils import log_event

logger = logging.getLogger(__name__)

BACKUP_TARGETS: Tuple[str, ...] = ("data", "uploads")
ARCHIVE_CONTENT_TYPE = "application/gzip"

STATUS_UPLOADED = "uploaded"
STATUS_SKIPPED_MISSING_CONFIG = "skipped_missing_config"
STATUS_SKIPPED_NO_DATA = "skipped_no_data"


@dataclass
class ArchiveJob:
    """One backup invocation."""
    system_name: str
    source_dir: Path
    targets: List[str]
    archive_path: Path

    @property
    def filename(self) -> str:
        return self.archive_path.name

    @property
    def destination_key(self) -> str:
        return f"{self.system_name}/{self.filename}"


@dataclass
class BackupResult:
    """Outcome of a backup run that did not raise."""
    status: str
    key: Optional[str] = None
    archive_name: Optional[str] = None
    targets: List[str] = field(default_factory=list)
    size_bytes: int = 0
    etag: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def success(self) -> bool:
        return self.status == STATUS_UPLOADED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "key": self.key,
            "archive_name": self.archive_name,
            "targets": list(self.targets),
            "size_bytes": self.size_bytes,
            "etag": self.etag,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
        }


def archive_filename(system_name: str, when: datetime) -> str:
    """``backup-{system}-{YYYY-MM-DD}.tar.gz`` using the UTC calendar date."""
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return f"backup-{system_name}-{when.date().isoformat()}.tar.gz"


def resolve_source_dir(config: VaultConfig) -> Path:
    """Persistent data directory if it exists on disk, else the repository fallback."""
    if config.data_dir.exists():
        return config.data_dir
    logger.info(f"Data dir {config.data_dir} not found, using {config.fallback_dir}")
    return config.fallback_dir


def detect_targets(source_dir: Path) -> List[str]:
    """Known subdirectories present under ``source_dir``, in fixed order."""
    return [name for name in BACKUP_TARGETS if (source_dir / name).exists()]


class ArchiveUploader:
    """
    Runs one backup: archive, upload, clean up.

    Usage:
        uploader = ArchiveUploader(config)
        result = uploader.run_backup()
    """

    def __init__(self, config: VaultConfig, storage: Optional[ObjectStorage] = None):
        self.config = config
        self._storage = storage

    def _get_storage(self) -> ObjectStorage:
        if self._storage is None:
            self._storage = ObjectStorage.from_credentials(self.config.storage)
        return self._storage

    def prepare_job(self, now: Optional[datetime] = None) -> ArchiveJob:
        """
        Resolve what would be archived for this run.

        Raises:
            NoDataError: neither ``data`` nor ``uploads`` exists
        """
        now = now or datetime.now(timezone.utc)
        source_dir = resolve_source_dir(self.config)
        targets = detect_targets(source_dir)
        if not targets:
            raise NoDataError(
                f"No {' or '.join(repr(t) for t in BACKUP_TARGETS)} folders in {source_dir}",
                source_dir=str(source_dir),
            )

        filename = archive_filename(self.config.system_name, now)
        return ArchiveJob(
            system_name=self.config.system_name,
            source_dir=source_dir,
            targets=targets,
            archive_path=self.config.temp_dir / filename,
        )

    def create_archive(self, job: ArchiveJob) -> int:
        """Write the gzip tar for ``job``; entries are relative to the source dir."""
        try:
            job.archive_path.parent.mkdir(parents=True, exist_ok=True)
            with tarfile.open(job.archive_path, "w:gz") as tar:
                for target in job.targets:
                    tar.add(job.source_dir / target, arcname=target)
            return job.archive_path.stat().st_size
        except (OSError, tarfile.TarError) as e:
            raise ArchiveError(f"Could not create {job.filename}: {e}") from e

    def upload_archive(self, job: ArchiveJob) -> Optional[str]:
        try:
            body = job.archive_path.read_bytes()
        except OSError as e:
            raise ArchiveError(f"Could not read {job.archive_path}: {e}") from e

        return self._get_storage().put_object(job.destination_key, body, ARCHIVE_CONTENT_TYPE)

    def run_backup(self, now: Optional[datetime] = None) -> BackupResult:
        """
        Archive and upload the data directories.

        Returns:
            BackupResult; status is a skip when credentials or data are missing

        Raises:
            ArchiveError: archive creation failed
            UploadError: the upload failed
        """
        missing = self.config.storage.missing()
        if missing:
            logger.error(f"Missing object storage settings ({', '.join(missing)}), backup aborted")
            return BackupResult(
                status=STATUS_SKIPPED_MISSING_CONFIG,
                error=f"missing: {', '.join(missing)}",
            )

        try:
            job = self.prepare_job(now)
        except NoDataError as e:
            logger.warning(e.message)
            return BackupResult(status=STATUS_SKIPPED_NO_DATA, error=e.message)

        logger.info(f"Starting backup for {job.system_name} ({', '.join(job.targets)})")
        try:
            size = self.create_archive(job)
            logger.info(f"Uploading {job.filename} ({size / 1024:.1f} KB)")
            etag = self.upload_archive(job)
        except Exception as e:
            logger.error(f"Backup failed: {e}")
            raise
        finally:
            self._cleanup(job.archive_path)

        log_event(
            logger, logging.INFO, f"Backup uploaded: {job.destination_key}",
            key=job.destination_key, size_bytes=size, etag=etag,
        )
        return BackupResult(
            status=STATUS_UPLOADED,
            key=job.destination_key,
            archive_name=job.filename,
            targets=list(job.targets),
            size_bytes=size,
            etag=etag,
        )

    def _cleanup(self, archive_path: Path) -> None:
        try:
            if archive_path.exists():
                archive_path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove temporary archive {archive_path}: {e}")
