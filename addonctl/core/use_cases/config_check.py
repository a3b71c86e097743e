"""
Config check use case — validate addons.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from addonctl.core.config.loader import ConfigError, find_config_file, load_config
from addonctl.core.models.addon import Mode
from addonctl.core.models.config import AddonConfig


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: AddonConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        cfg = self.config
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "mode": cfg.mode.value if cfg else None,
            "packages": list(cfg.packages) if cfg else [],
            "source": str(cfg.source) if cfg and cfg.source else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate add-on configuration and report issues."""
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    if config_path is None:
        result.errors.append("No addons.yml found.")
        return result
    result.config_path = config_path

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.config = config

    if config.mode is Mode.LOCAL and config.path and not Path(config.path).exists():
        result.warnings.append(f"Package path does not exist yet: {config.path}")

    if config.remote_install and config.path:
        result.warnings.append("remote_install is ignored because 'path' is set (local mode).")

    if config.mode is Mode.LOCAL and config.cache_path:
        result.warnings.append("cache_path is only used in remote mode.")

    if config.platform is None:
        result.warnings.append("No platform pinned; it will be detected at run time.")

    result.valid = True
    return result
