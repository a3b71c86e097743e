"""
Install use case — the full vertical slice for one add-on run.

Loads addons.yml, settles the platform, wires locator/fetcher/installer
into an orchestrator, runs it, and writes the audit entry.  Failures end
up in ``InstallResult.error``; the install report has already been
printed by then.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import IO

from addonctl.adapters import default_registry
from addonctl.adapters.registry import AdapterRegistry
from addonctl.core.config.loader import ConfigError, config_root, find_config_file, load_config
from addonctl.core.engine.orchestrator import AddonOrchestrator, RunReport
from addonctl.core.engine.recorder import InstallRecorder, RunHandlers
from addonctl.core.errors import AddonError, AddonRunError
from addonctl.core.models.addon import Mode, PlatformInfo
from addonctl.core.models.config import AddonConfig
from addonctl.core.persistence.audit import AuditEntry, AuditWriter, default_audit_path
from addonctl.core.services.fetcher import ArtifactFetcher
from addonctl.core.services.installer import PackageInstaller
from addonctl.core.services.locator import ArtifactLocator, ReleaseChannelClient
from addonctl.core.services.platform import platform_for

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Result of an install run."""

    report: RunReport | None = None
    config: AddonConfig | None = None
    config_path: Path | None = None
    platform: PlatformInfo | None = None
    error: str | None = None
    error_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok}
        if self.error:
            result["error"] = self.error
            result["error_type"] = self.error_type
        if self.config_path:
            result["config_path"] = str(self.config_path)
        if self.platform:
            result["platform"] = self.platform.model_dump(mode="json")
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def generate_operation_id() -> str:
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    return f"addons-{now}-{uuid.uuid4().hex[:6]}"


def build_locator(config: AddonConfig) -> ArtifactLocator:
    return ArtifactLocator(
        ReleaseChannelClient(config.omnitruck_url, timeout=config.timeout),
        channel=config.channel,
        version=config.version,
        compatibility_mode=config.compatibility_mode,
    )


def install_addons(
    config_path: Path | None = None,
    *,
    dry_run: bool = False,
    mock_mode: bool = False,
    keep_going: bool | None = None,
    registry: AdapterRegistry | None = None,
    locator: ArtifactLocator | None = None,
    fetcher: ArtifactFetcher | None = None,
    handlers: RunHandlers | None = None,
    report_stream: IO[str] | None = None,
    audit: bool = True,
) -> InstallResult:
    """Fetch (if remote) and install every configured add-on package.

    Args:
        config_path: Explicit addons.yml; searched upward from cwd if None.
        dry_run: Resolve and fetch, but only validate the install.
        mock_mode: Route installs to the mock backend.
        keep_going: Override the config's keep_going setting.
        registry, locator, fetcher: Pre-built collaborators (tests).
        handlers: The process's run handlers; a fresh set if None.
        report_stream: Where the recorder prints (stdout if None).
        audit: Append the run to the .state audit ledger.
    """
    result = InstallResult()

    try:
        if config_path is None:
            config_path = find_config_file()
        config = load_config(config_path)
        result.config = config
        result.config_path = config_path
    except ConfigError as e:
        result.error = str(e)
        result.error_type = "ConfigError"
        return result

    if keep_going is not None:
        config = config.model_copy(update={"keep_going": keep_going})
        result.config = config

    platform = platform_for(config.platform)
    result.platform = platform

    if registry is None:
        registry = default_registry(mock_mode=mock_mode)

    if config.mode is Mode.REMOTE:
        locator = locator or build_locator(config)
        fetcher = fetcher or ArtifactFetcher(timeout=config.timeout)

    operation_id = generate_operation_id()
    installer = PackageInstaller(
        registry,
        InstallRecorder(stream=report_stream),
        operation_id=operation_id,
        dry_run=dry_run,
    )
    orchestrator = AddonOrchestrator(
        config,
        platform,
        installer=installer,
        locator=locator,
        fetcher=fetcher,
        handlers=handlers,
    )

    logger.info(
        "Run %s: %d package(s), %s mode, %s %s",
        operation_id, len(config.packages), config.mode.value, platform.name, platform.version,
    )
    start = time.monotonic()
    errors: list[str] = []
    try:
        orchestrator.run()
    except AddonRunError as e:
        result.error = str(e)
        result.error_type = type(e).__name__
        errors = [str(f) for f in e.failures]
    except AddonError as e:
        result.error = str(e)
        result.error_type = type(e).__name__
        errors = [str(e)]
    except OSError as e:
        logger.error("Run %s aborted: %s", operation_id, e)
        result.error = str(e)
        result.error_type = type(e).__name__
        errors = [str(e)]

    report = orchestrator.report
    result.report = report

    if audit and config_path is not None:
        AuditWriter(default_audit_path(config_root(config_path))).write(
            AuditEntry(
                operation_id=operation_id,
                mode=config.mode.value,
                dry_run=dry_run,
                packages=list(config.packages),
                installed=report.installed,
                status=report.status,
                duration_ms=int((time.monotonic() - start) * 1000),
                errors=errors,
                context={"platform": platform.model_dump(mode="json"), "mock": mock_mode},
            )
        )

    return result
