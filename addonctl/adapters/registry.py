"""
Backend registry — the one door between PackageInstaller and dpkg/rpm.

``execute_action`` picks a backend for the action, validates the
package file, and then either installs it or (dry run) stops after
validation.  Mock mode swaps the whole package-manager layer out.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from addonctl.adapters.base import Adapter, ExecutionContext
from addonctl.core.models.action import InstallAction, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Install backends by name, plus the mock switch.

    With mock mode on and no mock backend given, installs succeed
    without touching anything and dry runs are skipped as usual.
    """

    def __init__(self, mock_mode: bool = False):
        self._backends: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock: Adapter | None = None

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        self._mock_mode = enabled
        self._mock = mock_adapter

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._backends:
            logger.warning("Backend %s registered twice; keeping the newer one", adapter.name)
        self._backends[adapter.name] = adapter

    def unregister(self, name: str) -> None:
        self._backends.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._backends.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._backends)

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Whether each backend's package tool can be found on this host."""
        return {
            name: {"available": _probe(backend), "type": type(backend).__name__}
            for name, backend in self._backends.items()
        }

    def execute_action(self, action: InstallAction, dry_run: bool = False) -> Receipt:
        """Install ``action.source`` with ``action.backend``.

        Never raises; lookup, validation and backend errors all come
        back as failed receipts.
        """
        started = time.monotonic()

        if self._mock_mode and self._mock is None:
            return self._mock_receipt(action, dry_run)

        backend = self._mock if self._mock_mode else self._backends.get(action.backend)
        if backend is None:
            return Receipt.failure(
                backend=action.backend,
                action_id=action.id,
                error=f"No backend registered for '{action.backend}'",
            )

        context = ExecutionContext(action=action, dry_run=dry_run)
        problem = _validate(backend, context)
        if problem:
            return Receipt.failure(backend=action.backend, action_id=action.id, error=problem)

        if dry_run:
            return Receipt.skip(
                backend=action.backend,
                action_id=action.id,
                reason=f"[dry-run] Would install {action.source} with {action.backend}",
                metadata={"dry_run": True},
            )

        try:
            receipt = backend.execute(context)
        except Exception as e:
            logger.error("Backend %s raised while installing %s: %s", backend.name, action.package, e)
            receipt = Receipt.failure(
                backend=action.backend,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - started) * 1000)
        return receipt

    @staticmethod
    def _mock_receipt(action: InstallAction, dry_run: bool) -> Receipt:
        if dry_run:
            return Receipt.skip(
                backend=action.backend,
                action_id=action.id,
                reason=f"[dry-run] [mock] Would install {action.source} with {action.backend}",
                metadata={"mock": True, "dry_run": True},
            )
        return Receipt.success(
            backend=action.backend,
            action_id=action.id,
            output=f"[mock] {action.backend} install {action.source}",
            metadata={"mock": True},
        )


def _probe(backend: Adapter) -> bool:
    try:
        return backend.is_available()
    except OSError:
        return False


def _validate(backend: Adapter, context: ExecutionContext) -> str:
    """Empty string when the backend accepts the action, else the reason."""
    try:
        valid, message = backend.validate(context)
    except Exception as e:
        return f"Validation error: {e}"
    return "" if valid else f"Validation failed: {message}"
