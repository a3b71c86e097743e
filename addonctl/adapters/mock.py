"""
Mock backend for tests: remembers what it was asked to install.
"""

from __future__ import annotations

from addonctl.adapters.base import Adapter, ExecutionContext
from addonctl.core.models.action import Receipt


class MockAdapter(Adapter):
    """Pretend package manager.

    Every package installs fine unless ``set_failure`` said otherwise.
    Register it under ``dpkg`` or ``rpm`` to stand in for that backend.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] installed",
    ):
        self._name = adapter_name
        self._available = available
        self.default_output = default_output
        self.failures: dict[str, str] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def installed(self) -> list[str]:
        """Package names in request order, failed ones included."""
        return [ctx.action.package for ctx in self.call_log]

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, package: str, error: str = "Mock failure") -> None:
        self.failures[package] = error

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        action = context.action
        error = self.failures.get(action.package)
        if error is not None:
            return Receipt.failure(backend=self._name, action_id=action.id, error=error)
        return Receipt.success(
            backend=self._name,
            action_id=action.id,
            output=self.default_output,
            metadata={"mock": True, "source": action.source},
        )

    def reset(self) -> None:
        self.call_log.clear()
        self.failures.clear()
