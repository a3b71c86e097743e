"""
Domain models — pydantic types for add-on runs.

    from addonctl.core.models import AddonConfig, PackageSpec, ArtifactInfo, Receipt
"""

from addonctl.core.models.action import InstallAction, Receipt
from addonctl.core.models.addon import (
    ArtifactInfo,
    FetchResult,
    Mode,
    PackageSpec,
    PackageState,
    PlatformFamily,
    PlatformInfo,
    derive_product_name,
)
from addonctl.core.models.config import AddonConfig, PlatformOverride

__all__ = [
    # config.py
    "AddonConfig",
    # addon.py
    "ArtifactInfo",
    "FetchResult",
    # action.py
    "InstallAction",
    "Mode",
    "PackageSpec",
    "PackageState",
    "PlatformFamily",
    "PlatformInfo",
    "PlatformOverride",
    "Receipt",
    "derive_product_name",
]
