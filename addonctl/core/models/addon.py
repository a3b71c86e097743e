"""
Add-on domain models — packages, artifacts, platforms.

These are the values that flow through one run:

    PackageSpec ──locate──▶ ArtifactInfo ──fetch──▶ FetchResult ──▶ package file

ArtifactInfo and FetchResult live for the duration of a run only.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

# Vendor prefixes stripped to get the release-channel product name.
_VENDOR_PREFIX_RE = re.compile(r"(chef-|opscode-)(.*)")


def derive_product_name(name: str) -> str:
    """Strip the vendor prefix from an add-on package name.

    ``chef-manage`` → ``manage``, ``opscode-analytics`` → ``analytics``.
    Names without a recognised prefix come back unchanged.
    """
    m = _VENDOR_PREFIX_RE.search(name)
    if m and m.group(2):
        return m.group(2)
    return name


class Mode(str, Enum):
    """Where package files come from for this run."""

    REMOTE = "remote"   # resolve + download from the release channel
    LOCAL = "local"     # already on disk at the configured path


class PlatformFamily(str, Enum):
    DEBIAN = "debian"
    RHEL = "rhel"
    SUSE = "suse"
    UNKNOWN = "unknown"


_PACKAGE_SUFFIX = {
    PlatformFamily.DEBIAN: "deb",
    PlatformFamily.RHEL: "rpm",
    PlatformFamily.SUSE: "rpm",
}


class PlatformInfo(BaseModel):
    """The host as the release channel and package backends see it."""

    model_config = ConfigDict(frozen=True)

    name: str                 # release-channel platform id: ubuntu, el, sles, ...
    version: str = ""
    machine: str = "x86_64"
    family: PlatformFamily = PlatformFamily.UNKNOWN

    @property
    def package_suffix(self) -> str | None:
        """Native package file extension, or None on unsupported families."""
        return _PACKAGE_SUFFIX.get(self.family)


class PackageSpec(BaseModel):
    """One configured add-on package."""

    model_config = ConfigDict(frozen=True)

    name: str
    product_name: str
    source: Path              # cache dir (remote) or package dir/file (local)

    @classmethod
    def for_package(cls, name: str, source: Path) -> PackageSpec:
        return cls(name=name, product_name=derive_product_name(name), source=source)


class ArtifactInfo(BaseModel):
    """A resolved build on the release channel."""

    url: str
    checksum: str             # sha256 hex, or "algo:hex"
    platform: str
    version: str = ""

    @property
    def filename(self) -> str:
        """Basename of the download URL (query string ignored)."""
        return self.url.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]


class FetchResult(BaseModel):
    """A verified artifact sitting in the cache."""

    path: Path
    artifact: ArtifactInfo
    reused: bool = False      # cached copy already matched the checksum


class PackageState(str, Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    LOCATED = "located"
    INSTALLING = "installing"
    INSTALLED = "installed"
    FAILED = "failed"
