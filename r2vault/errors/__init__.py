"""
Error classes for r2vault.

ConfigurationError, NoDataError and AuditLogError are soft conditions for the
backup job; ArchiveError, PersistenceError and UploadError always propagate.
"""

from r2vault.errors.exceptions import (
    VaultError, ConfigurationError, NoDataError, ArchiveError,
    PersistenceError, UploadError, AuditLogError
)

__all__ = [
    "VaultError", "ConfigurationError", "NoDataError", "ArchiveError",
    "PersistenceError", "UploadError", "AuditLogError"
]
