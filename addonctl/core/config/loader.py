"""
Configuration loader — reads addons.yml into an AddonConfig.

Reads YAML, validates it against the pydantic schema, and checks the
few cross-field rules the schema cannot express (local mode needs a
path, packages must be listed).
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from addonctl.core.models.addon import Mode
from addonctl.core.models.config import AddonConfig

logger = logging.getLogger(__name__)

ADDONS_CONFIG_FILE = "addons.yml"
_MAX_SEARCH_DEPTH = 20


class ConfigError(Exception):
    """addons.yml is missing, unreadable, or describes an impossible run."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Nearest addons.yml in ``start_dir`` (default cwd) or its parents."""
    start = (start_dir or Path.cwd()).resolve()
    for directory in [start, *start.parents][:_MAX_SEARCH_DEPTH]:
        candidate = directory / ADDONS_CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def _read_mapping(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def load_config(path: Path | None = None) -> AddonConfig:
    """Load and validate add-on configuration.

    The add-on settings live under an ``addons:`` key (with
    ``platform:`` beside it) or flat at the top level.

    Raises:
        ConfigError: The file is missing or invalid.
    """
    path = path or find_config_file()
    if path is None:
        raise ConfigError(f"No {ADDONS_CONFIG_FILE} found. Create one or specify --config.")
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading add-on config from %s", path)
    data = _read_mapping(path)

    addon_data = data.get("addons", data)
    if not isinstance(addon_data, dict):
        raise ConfigError(f"'addons' in {path} must be a mapping")
    addon_data = dict(addon_data)
    if "platform" in data and "platform" not in addon_data:
        addon_data["platform"] = data["platform"]

    try:
        config = AddonConfig.model_validate(addon_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid add-on configuration: {e}") from e

    validate_config(config)

    logger.info(
        "Loaded %d add-on package(s) (%s mode)", len(config.packages), config.mode.value
    )
    return config


def validate_config(config: AddonConfig) -> None:
    """Cross-field checks; raises ConfigError on the first problem."""
    if not config.packages:
        raise ConfigError("No add-on packages configured")

    dupes = sorted({p for p in config.packages if config.packages.count(p) > 1})
    if dupes:
        raise ConfigError(f"Duplicate add-on packages: {', '.join(dupes)}")

    if config.mode is Mode.LOCAL and not config.path:
        raise ConfigError("Local install needs 'path' (set remote_install: true to download)")

    if config.timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {config.timeout}")


def config_root(config_path: Path) -> Path:
    """Directory holding the config file (home of the .state ledger)."""
    return config_path.parent.resolve()
