"""
Resolve use case — show what remote mode would download, without downloading.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from addonctl.core.config.loader import ConfigError, find_config_file, load_config
from addonctl.core.errors import ResolutionError
from addonctl.core.models.addon import ArtifactInfo, PackageSpec, PlatformInfo
from addonctl.core.services.locator import ArtifactLocator
from addonctl.core.services.platform import platform_for
from addonctl.core.use_cases.install import build_locator


@dataclass
class ResolveResult:
    """Artifact per package, or the reason it couldn't be resolved."""

    platform: PlatformInfo | None = None
    artifacts: dict[str, ArtifactInfo] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failures

    def to_dict(self) -> dict:
        if self.error:
            return {"ok": False, "error": self.error}
        return {
            "ok": self.ok,
            "platform": self.platform.model_dump(mode="json") if self.platform else None,
            "artifacts": {k: v.model_dump(mode="json") for k, v in self.artifacts.items()},
            "failures": self.failures,
        }


def resolve_artifacts(
    config_path: Path | None = None,
    locator: ArtifactLocator | None = None,
) -> ResolveResult:
    """Ask the release channel about every configured package.

    Works in either mode; a local-mode config is resolved as if it were
    remote.  One package failing doesn't stop the others.
    """
    result = ResolveResult()
    try:
        config = load_config(config_path or find_config_file())
    except ConfigError as e:
        result.error = str(e)
        return result

    platform = platform_for(config.platform)
    result.platform = platform
    locator = locator or build_locator(config)

    for name in config.packages:
        spec = PackageSpec.for_package(name, Path("."))
        try:
            result.artifacts[name] = locator.locate(spec, platform)
        except ResolutionError as e:
            result.failures[name] = str(e)

    return result
