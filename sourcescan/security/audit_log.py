"""Audit logging for registry mutations.

Provides file-based JSON audit logging with filtering and query
capabilities. Events are stored in ``~/.sourcescan/audit_logs/`` unless
``SOURCESCAN_AUDIT_DIR`` or an explicit directory says otherwise.
"""

from __future__ import annotations

import json
import os
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


def default_audit_dir() -> Path:
    env_dir = os.environ.get("SOURCESCAN_AUDIT_DIR")
    if env_dir:
        return Path(env_dir)
    return Path.home() / ".sourcescan" / "audit_logs"


@dataclass
class AuditEntry:
    """A single audit log entry."""

    id: str
    timestamp: str
    actor: str
    action: str
    resource_type: str
    resource_id: str
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)


class AuditLogger:
    """File-based JSON audit logger.

    Events are persisted as newline-delimited JSON in daily log files.
    """

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else default_audit_dir()
        self._base_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _log_file_for_date(self, dt: datetime) -> Path:
        """Return the log file path for a given date."""
        return self._base_dir / f"{dt.strftime('%Y-%m-%d')}.jsonl"

    def _read_all_entries(self) -> list[AuditEntry]:
        """Read every entry from all log files, oldest file first."""
        entries: list[AuditEntry] = []
        for path in sorted(self._base_dir.glob("*.jsonl")):
            for line in path.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(AuditEntry(**json.loads(line)))
                except (json.JSONDecodeError, TypeError):
                    continue
        return entries

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def log_event(
        self,
        actor: str,
        action: str,
        resource_type: str,
        resource_id: str,
        message: str = "",
        details: Optional[dict[str, Any]] = None,
    ) -> AuditEntry:
        """Record an audit event and return the created entry."""
        now = datetime.now(timezone.utc)
        entry = AuditEntry(
            id=uuid.uuid4().hex[:16],
            timestamp=now.isoformat(),
            actor=actor,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            message=message,
            details=details or {},
        )
        with self._log_file_for_date(now).open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(asdict(entry)) + "\n")
        return entry

    def get_events(
        self,
        *,
        actor: Optional[str] = None,
        action: Optional[str] = None,
        resource_type: Optional[str] = None,
        limit: int = 200,
    ) -> list[AuditEntry]:
        """Return filtered audit events, newest first."""
        entries = self._read_all_entries()

        if actor:
            entries = [e for e in entries if e.actor == actor]
        if action:
            entries = [e for e in entries if e.action == action]
        if resource_type:
            entries = [e for e in entries if e.resource_type == resource_type]

        # Reverse first so entries with equal timestamps stay newest first
        entries.reverse()
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[:limit]

    def get_events_for_resource(
        self, resource_type: str, resource_id: str
    ) -> list[AuditEntry]:
        """Return all events for a specific resource, newest first."""
        return [
            e
            for e in self.get_events(resource_type=resource_type, limit=10000)
            if e.resource_id == resource_id
        ]
