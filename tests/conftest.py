"""
Shared test fixtures and configuration.
"""

import hashlib
import textwrap
from pathlib import Path

import pytest

from addonctl.core.models.addon import ArtifactInfo, PackageSpec, PlatformFamily, PlatformInfo


@pytest.fixture
def debian_platform() -> PlatformInfo:
    return PlatformInfo(name="ubuntu", version="22.04", machine="x86_64", family=PlatformFamily.DEBIAN)


@pytest.fixture
def rhel_platform() -> PlatformInfo:
    return PlatformInfo(name="el", version="8", machine="x86_64", family=PlatformFamily.RHEL)


class Mirror:
    """A directory of published artifacts reachable through file:// URLs."""

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def publish(self, filename: str, content: bytes = b"package-bytes") -> ArtifactInfo:
        path = self.root / filename
        path.write_bytes(content)
        return ArtifactInfo(
            url=path.as_uri(),
            checksum=hashlib.sha256(content).hexdigest(),
            platform="ubuntu-22.04",
            version="1.0.0",
        )


@pytest.fixture
def mirror(tmp_path: Path) -> Mirror:
    return Mirror(tmp_path / "mirror")


class FakeLocator:
    """Locator double that serves artifacts from a Mirror."""

    def __init__(self, artifacts: dict[str, ArtifactInfo], events: list | None = None):
        self.artifacts = artifacts
        self.calls: list[str] = []
        self.events = events if events is not None else []

    def locate(self, spec: PackageSpec, platform: PlatformInfo) -> ArtifactInfo:
        from addonctl.core.errors import ResolutionError

        self.calls.append(spec.name)
        self.events.append(("locate", spec.name))
        if spec.name not in self.artifacts:
            raise ResolutionError(f"No build for {spec.product_name}", package=spec.name)
        return self.artifacts[spec.name]


@pytest.fixture
def write_config(tmp_path: Path):
    """Write an addons.yml into tmp_path and return its path."""

    def _write(content: str) -> Path:
        path = tmp_path / "addons.yml"
        path.write_text(textwrap.dedent(content))
        return path

    return _write


@pytest.fixture
def fake_locator():
    """Factory: ``fake_locator({name: ArtifactInfo}, events=[])``."""
    return FakeLocator
