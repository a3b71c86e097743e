"""
Install action and receipt — what goes into a backend and what comes out.

PackageInstaller builds one InstallAction per located package file.
The backend answers with a Receipt; a failed install is a receipt with
``status="failed"``, never an exception.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class InstallAction(BaseModel):
    """Install one package file with one backend."""

    id: str                         # "<operation>:<package>:install"
    backend: str                    # dpkg, rpm
    package: str                    # add-on name, e.g. chef-manage
    source: str                     # package file on local disk
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """What a backend reports back for one InstallAction."""

    backend: str
    action_id: str
    status: ReceiptStatus = "ok"
    finished_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    duration_ms: int = 0
    output: str = ""
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, backend: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(backend=backend, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, backend: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(backend=backend, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, backend: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Backend validated the package but was told not to install it."""
        return cls(backend=backend, action_id=action_id, status="skipped", output=reason, **kwargs)
