"""Package-manager backends, keyed by platform family."""

from __future__ import annotations

from addonctl.adapters.packages.base import PackageFileAdapter
from addonctl.adapters.packages.dpkg import DpkgAdapter
from addonctl.adapters.packages.rpm import RpmAdapter
from addonctl.core.models.addon import PlatformFamily

# RHEL and SUSE share the rpm backend
BACKEND_FOR_FAMILY: dict[PlatformFamily, str] = {
    PlatformFamily.DEBIAN: "dpkg",
    PlatformFamily.RHEL: "rpm",
    PlatformFamily.SUSE: "rpm",
}


def backend_for_family(family: PlatformFamily) -> str | None:
    return BACKEND_FOR_FAMILY.get(family)


__all__ = [
    "BACKEND_FOR_FAMILY",
    "DpkgAdapter",
    "PackageFileAdapter",
    "RpmAdapter",
    "backend_for_family",
]
