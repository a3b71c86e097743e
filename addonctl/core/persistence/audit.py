"""
Audit ledger — one NDJSON line per ``addonctl install`` run.

Lives at ``<config dir>/.state/audit.ndjson``.  Lines are only ever
appended; ``addonctl history`` reads them back.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

AUDIT_RELPATH = Path(".state") / "audit.ndjson"


class AuditEntry(BaseModel):
    """Summary of one add-on run."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    operation_id: str = ""
    mode: str = ""                 # remote | local
    dry_run: bool = False
    packages: list[str] = Field(default_factory=list)
    installed: list[str] = Field(default_factory=list)
    status: str = ""               # ok | partial | failed
    duration_ms: int = 0
    errors: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)


def default_audit_path(root: Path) -> Path:
    return root / AUDIT_RELPATH


class AuditWriter:
    """Append and read back AuditEntry lines."""

    def __init__(self, path: Path | None = None, root: Path | None = None):
        if path is None:
            path = default_audit_path(root if root is not None else Path.cwd())
        self.path = path

    def write(self, entry: AuditEntry) -> None:
        """Append ``entry``.  An unwritable ledger is logged, not raised:
        the install itself has already happened."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(entry.model_dump_json() + "\n")
        except OSError as e:
            logger.error("Could not append to audit ledger %s: %s", self.path, e)

    def read_all(self) -> list[AuditEntry]:
        return list(self._entries())

    def read_recent(self, n: int = 20) -> list[AuditEntry]:
        return self.read_all()[-n:]

    def _entries(self) -> Iterator[AuditEntry]:
        if not self.path.is_file():
            return
        with self.path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    yield AuditEntry.model_validate(json.loads(line))
                except (ValueError, ValidationError) as e:
                    logger.warning("%s:%d: skipping unreadable entry (%s)", self.path, line_num, e)
