"""
Platform detection — what the host is, in release-channel terms.

Maps the distro reported by ``distro`` onto two things:
  - the platform id the release channel publishes builds under
    (``ubuntu``, ``debian``, ``el``, ``sles``, ...)
  - the package family that picks the install backend
"""

from __future__ import annotations

import logging
import platform as _platform

import distro

from addonctl.core.models.addon import PlatformFamily, PlatformInfo
from addonctl.core.models.config import PlatformOverride

logger = logging.getLogger(__name__)

# distro id → release-channel platform id
_CHANNEL_PLATFORM = {
    "rhel": "el",
    "centos": "el",
    "rocky": "el",
    "almalinux": "el",
    "ol": "el",
    "amzn": "amazon",
    "sles": "sles",
    "sled": "sles",
    "opensuse-leap": "sles",
}

_DEBIAN_IDS = {"debian", "ubuntu", "linuxmint", "raspbian"}
_RHEL_IDS = {"rhel", "centos", "fedora", "rocky", "almalinux", "ol", "amzn"}

# Normalise `uname -m` spellings to what the channel expects
_MACHINE = {"amd64": "x86_64", "arm64": "aarch64"}


def family_for(distro_id: str, like: str = "") -> PlatformFamily:
    """Classify a distro id (plus its ID_LIKE list) into a package family."""
    ids = {distro_id.lower(), *like.lower().split()}
    if ids & _DEBIAN_IDS:
        return PlatformFamily.DEBIAN
    if any("suse" in i or i in ("sles", "sled") for i in ids):
        return PlatformFamily.SUSE
    if ids & _RHEL_IDS:
        return PlatformFamily.RHEL
    return PlatformFamily.UNKNOWN


def channel_platform_name(distro_id: str) -> str:
    return _CHANNEL_PLATFORM.get(distro_id.lower(), distro_id.lower())


def detect_platform() -> PlatformInfo:
    """Probe the running host."""
    distro_id = distro.id()
    machine = _platform.machine().lower()
    info = PlatformInfo(
        name=channel_platform_name(distro_id),
        version=distro.version(best=True),
        machine=_MACHINE.get(machine, machine),
        family=family_for(distro_id, distro.like()),
    )
    logger.debug(
        "Detected platform %s %s (%s, %s family)",
        info.name, info.version, info.machine, info.family.value,
    )
    return info


def platform_for(override: PlatformOverride | None) -> PlatformInfo:
    """Pinned platform from config, else the detected one."""
    if override is not None:
        return override.to_platform()
    return detect_platform()
