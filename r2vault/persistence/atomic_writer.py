"""
Atomic file writes with an audit trail.

Writes go to ``<target>.tmp`` first, are checked for a non-empty result and
then renamed onto the target with ``os.replace`` so readers never observe a
partially written file. Every attempt, successful or not, is recorded in the
audit log.

Known limitation: there is no locking. Two processes saving the same path at
once share the same ``.tmp`` sibling and may interleave.
"""

import logging
import os
from pathlib import Path
from typing import Union

from r2vault.errors import PersistenceError
from r2vault.persistence.audit import AuditAction, AuditLog

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class AtomicWriter:
    """
    Safe writer for local durable state.

    Usage:
        writer = AtomicWriter(AuditLog(config.audit_file))
        writer.save(config.data_dir / "data" / "notas.json", payload)
    """

    def __init__(self, audit_log: AuditLog):
        self.audit_log = audit_log

    @staticmethod
    def temp_path_for(path: Union[str, Path]) -> Path:
        path = Path(path)
        return path.with_name(path.name + TEMP_SUFFIX)

    def _write_temp(self, temp_path: Path, data: bytes) -> None:
        with open(temp_path, "wb") as f:
            f.write(data)

    def save(self, path: Union[str, Path], data: Union[bytes, str]) -> int:
        """
        Atomically replace ``path`` with ``data``.

        Args:
            path: Target file
            data: Content; str is encoded as UTF-8

        Returns:
            Number of bytes written

        Raises:
            PersistenceError: if the write, the size check or the rename fails.
                The previous content of ``path`` is left untouched.
        """
        path = Path(path)
        temp_path = self.temp_path_for(path)
        name = path.name

        if isinstance(data, str):
            data = data.encode("utf-8")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            self._write_temp(temp_path, data)

            size = temp_path.stat().st_size
            if size == 0:
                raise PersistenceError("File write resulted in 0 bytes", path=str(path))

            os.replace(temp_path, path)
        except Exception as e:
            message = e.message if isinstance(e, PersistenceError) else str(e)
            logger.error(f"Failed to save {name}: {message}")
            self.audit_log.record(AuditAction.WRITE_ERROR, name, error=message)
            self._discard_temp(temp_path)
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"Failed to save {name}: {message}", path=str(path)) from e

        self.audit_log.record(AuditAction.WRITE, name, size=size, success=True)
        return size

    def delete(self, path: Union[str, Path]) -> bool:
        """
        Remove ``path`` and record the deletion.

        Returns:
            False if the file did not exist (nothing is recorded), True otherwise.

        Raises:
            PersistenceError: if the file exists but cannot be removed.
        """
        path = Path(path)
        if not path.exists():
            return False

        try:
            path.unlink()
        except OSError as e:
            logger.error(f"Failed to delete {path.name}: {e}")
            self.audit_log.record(AuditAction.DELETE_ERROR, path.name, error=str(e))
            raise PersistenceError(f"Failed to delete {path.name}: {e}", path=str(path)) from e

        self.audit_log.record(AuditAction.DELETE, path.name, success=True)
        return True

    def _discard_temp(self, temp_path: Path) -> None:
        try:
            if temp_path.exists():
                temp_path.unlink()
        except OSError as e:
            logger.debug(f"Could not remove temp file {temp_path}: {e}")
