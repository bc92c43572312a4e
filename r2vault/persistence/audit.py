"""
Audit Log - append-only trail of persistence operations.

Each entry is one JSON object on its own line in ``{DATA_DIR}/audit.jsonl``.
Entries are never rewritten, compacted or deleted here. A failing append is
logged and reported through the return value only; it never interrupts the
operation being recorded.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from r2vault.errors import AuditLogError

logger = logging.getLogger(__name__)

# Keys owned by the entry itself; details may not shadow them on disk.
_RESERVED_KEYS = ("timestamp", "action", "file")


class AuditAction(str, Enum):
    """Auditable persistence actions."""
    WRITE = "WRITE"
    WRITE_ERROR = "WRITE_ERROR"
    DELETE = "DELETE"
    DELETE_ERROR = "DELETE_ERROR"


@dataclass
class AuditEntry:
    """Single audit log entry."""
    action: str
    file: str
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Flat on-disk shape: details are spread next to the entry fields."""
        extra = {k: v for k, v in self.details.items() if k not in _RESERVED_KEYS}
        return {
            "timestamp": self.timestamp,
            "action": self.action.value if isinstance(self.action, AuditAction) else self.action,
            "file": self.file,
            **extra,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEntry":
        details = {k: v for k, v in data.items() if k not in _RESERVED_KEYS}
        return cls(
            action=data["action"],
            file=data["file"],
            details=details,
            timestamp=data["timestamp"],
        )


class AuditLog:
    """Newline-delimited JSON audit trail."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def append(self, entry: AuditEntry) -> None:
        """Append one entry. Raises AuditLogError on failure."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            line = json.dumps(entry.to_dict(), default=str)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except (OSError, TypeError, ValueError) as e:
            raise AuditLogError(f"Could not append to {self.path}: {e}") from e

    def record(self, action: Union[AuditAction, str], filename: str, **details) -> bool:
        """
        Record an action against a file.

        Returns:
            True if the entry was written. Failures are logged, never raised.
        """
        entry = AuditEntry(action=action, file=filename, details=details)
        try:
            self.append(entry)
            return True
        except AuditLogError as e:
            logger.error(f"Audit log failed: {e.message}")
            return False

    def read_entries(self, limit: Optional[int] = None) -> List[AuditEntry]:
        """Read entries in file order; malformed lines are skipped."""
        if not self.path.exists():
            return []

        entries = []
        with open(self.path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(AuditEntry.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, TypeError) as e:
                    logger.warning(f"Skipping malformed audit line {line_no}: {e}")

        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries
