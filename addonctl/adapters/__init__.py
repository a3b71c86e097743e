"""Adapters — install backends behind one interface.

Public re-exports for convenient access.
"""

from addonctl.adapters.base import Adapter, ExecutionContext
from addonctl.adapters.mock import MockAdapter
from addonctl.adapters.registry import AdapterRegistry


def default_registry(mock_mode: bool = False) -> AdapterRegistry:
    """Registry with every real package backend registered."""
    from addonctl.adapters.packages import DpkgAdapter, RpmAdapter

    registry = AdapterRegistry(mock_mode=mock_mode)
    registry.register(DpkgAdapter())
    registry.register(RpmAdapter())
    return registry


__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
]
