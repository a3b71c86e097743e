"""
AddonConfig — the explicit run configuration.

Loaded from addons.yml and handed to the orchestrator at construction.
Nothing downstream reads configuration from anywhere else.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

from addonctl.core.models.addon import Mode, PackageSpec, PlatformFamily, PlatformInfo

DEFAULT_CHANNEL = "stable"
DEFAULT_OMNITRUCK_URL = "https://omnitruck.chef.io"
_DEFAULT_CACHE_DIR = Path.home() / ".cache" / "addonctl"


def default_cache_dir() -> Path:
    """Staging directory for downloads when none is configured."""
    return Path(os.environ.get("ADDONCTL_CACHE_DIR", str(_DEFAULT_CACHE_DIR)))


class PlatformOverride(BaseModel):
    """Pin the platform instead of detecting it."""

    name: str
    version: str = ""
    machine: str = "x86_64"
    family: PlatformFamily = PlatformFamily.UNKNOWN

    def to_platform(self) -> PlatformInfo:
        return PlatformInfo(
            name=self.name,
            version=self.version,
            machine=self.machine,
            family=self.family,
        )


class AddonConfig(BaseModel):
    """Everything one add-on run needs to know."""

    packages: list[str] = Field(default_factory=list)
    remote_install: bool = False
    path: str | None = None           # local package dir or file
    cache_path: str | None = None     # download staging dir

    channel: str = DEFAULT_CHANNEL
    version: str = "latest"
    compatibility_mode: bool = True
    omnitruck_url: str = DEFAULT_OMNITRUCK_URL
    timeout: int = 60

    keep_going: bool = False
    platform: PlatformOverride | None = None

    @property
    def mode(self) -> Mode:
        """Remote only when asked for and no local path is configured."""
        if self.remote_install and not self.path:
            return Mode.REMOTE
        return Mode.LOCAL

    @property
    def source(self) -> Path | None:
        """Where package files are looked up for this run's mode."""
        if self.mode is Mode.REMOTE:
            return Path(self.cache_path) if self.cache_path else default_cache_dir()
        return Path(self.path) if self.path else None

    def package_specs(self) -> list[PackageSpec]:
        source = self.source
        if source is None:
            raise ValueError("Local mode needs 'path' to be set")
        return [PackageSpec.for_package(name, source) for name in self.packages]
