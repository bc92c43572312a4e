"""
Backup to object storage for r2vault.

Usage:
    from r2vault.backup import ArchiveUploader, BackupScheduler

    result = ArchiveUploader(config).run_backup()
"""

from r2vault.backup.archive_uploader import ArchiveJob, ArchiveUploader, BackupResult
from r2vault.backup.scheduler import BackupScheduler, init_scheduler
from r2vault.backup.storage import ObjectStorage

__all__ = [
    "ArchiveJob",
    "ArchiveUploader",
    "BackupResult",
    "BackupScheduler",
    "ObjectStorage",
    "init_scheduler",
]
