"""
Local persistence: atomic file writes and the write-audit log.

Usage:
    from r2vault.persistence import AtomicWriter, AuditLog

    writer = AtomicWriter(AuditLog(config.audit_file))
    writer.save(path, data)
"""

from r2vault.persistence.audit import AuditAction, AuditEntry, AuditLog
from r2vault.persistence.atomic_writer import AtomicWriter

__all__ = ["AtomicWriter", "AuditAction", "AuditEntry", "AuditLog"]
