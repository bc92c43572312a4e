"""Custom exception hierarchy."""
from typing import Optional, Dict, Any


class VaultError(Exception):
    """Base exception for all r2vault errors."""
    code: str = "SYS_001"

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class ConfigurationError(VaultError):
    """Required configuration is missing or invalid."""
    code = "CFG_001"

    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__(message, {"missing": list(missing or [])})
        self.missing = list(missing or [])


class NoDataError(VaultError):
    """None of the expected subdirectories exist under the source directory."""
    code = "DATA_001"

    def __init__(self, message: str, source_dir: str = None):
        super().__init__(message, {"source_dir": source_dir})
        self.source_dir = source_dir


class ArchiveError(VaultError):
    """Creating the local archive failed."""
    code = "IO_001"


class PersistenceError(VaultError):
    """Atomic write or its integrity check failed."""
    code = "IO_002"

    def __init__(self, message: str, path: str = None):
        super().__init__(message, {"path": path})
        self.path = path


class UploadError(VaultError):
    """Object storage rejected or failed the upload."""
    code = "UPL_001"

    def __init__(self, message: str, bucket: str = None, key: str = None):
        super().__init__(message, {"bucket": bucket, "key": key})
        self.bucket = bucket
        self.key = key


class AuditLogError(VaultError):
    """Appending to the audit log failed. Never escapes the audit log."""
    code = "AUD_001"
