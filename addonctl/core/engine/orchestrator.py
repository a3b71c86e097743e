"""
Add-on orchestrator — the per-package fetch → locate → install loop.

Flow for each configured package, strictly in order:

    Pending → (Fetching →)? Located → Installing → Installed
                     └──────────── any step ────────────▶ Failed

Fetching only happens in remote mode.  The orchestrator owns the run's
InstallRecorder and installs it into the run handlers once, so the
installed packages are reported on success and on failure alike.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from addonctl.core.engine.recorder import InstallRecorder, RunHandlers
from addonctl.core.errors import AddonError, AddonRunError
from addonctl.core.models.addon import (
    FetchResult,
    Mode,
    PackageSpec,
    PackageState,
    PlatformInfo,
)
from addonctl.core.models.config import AddonConfig
from addonctl.core.services.fetcher import ArtifactFetcher
from addonctl.core.services.installer import PackageInstaller, locate_package_file
from addonctl.core.services.locator import ArtifactLocator

logger = logging.getLogger(__name__)


@dataclass
class PackageOutcome:
    """Where one package ended up."""

    name: str
    state: PackageState = PackageState.PENDING
    path: Path | None = None
    url: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "state": self.state.value,
            "path": str(self.path) if self.path else None,
            "url": self.url,
            "error": self.error,
        }


@dataclass
class RunReport:
    """Result of one orchestration run."""

    operation_id: str = ""
    mode: Mode = Mode.LOCAL
    dry_run: bool = False
    outcomes: list[PackageOutcome] = field(default_factory=list)
    installed: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> list[PackageOutcome]:
        return [o for o in self.outcomes if o.state is PackageState.FAILED]

    @property
    def status(self) -> str:
        if not self.failed:
            return "ok"
        if self.installed:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "mode": self.mode.value,
            "dry_run": self.dry_run,
            "status": self.status,
            "total": self.total,
            "installed": self.installed,
            "packages": [o.to_dict() for o in self.outcomes],
        }


class AddonOrchestrator:
    """Drive one add-on run over an explicit AddonConfig."""

    def __init__(
        self,
        config: AddonConfig,
        platform: PlatformInfo,
        *,
        installer: PackageInstaller,
        locator: ArtifactLocator | None = None,
        fetcher: ArtifactFetcher | None = None,
        handlers: RunHandlers | None = None,
    ):
        if config.mode is Mode.REMOTE and (locator is None or fetcher is None):
            raise ValueError("Remote mode needs both a locator and a fetcher")

        self.config = config
        self.platform = platform
        self.installer = installer
        self.locator = locator
        self.fetcher = fetcher
        self.handlers = handlers if handlers is not None else RunHandlers()
        self.report = RunReport(
            operation_id=installer.operation_id,
            mode=config.mode,
            dry_run=installer.dry_run,
        )

    @property
    def recorder(self) -> InstallRecorder:
        return self.installer.recorder

    def run(self) -> RunReport:
        """Process every package, then fire the run handlers.

        Raises:
            AddonError: The first failure, or AddonRunError collecting
                all failures when ``keep_going`` is set.  Any exception,
                domain or not, fires the exception handlers (and so the
                recorder) before it propagates.
        """
        self.handlers.install_recorder(self.recorder)
        failures: list[AddonError] = []

        try:
            for spec in self.config.package_specs():
                try:
                    self._process(spec)
                except AddonError as e:
                    if not self.config.keep_going:
                        raise
                    logger.error("%s", e)
                    failures.append(e)
            if failures:
                raise AddonRunError(failures)
        except Exception:
            self.report.installed = self.recorder.packages
            self.handlers.run_failed()
            raise

        self.report.installed = self.recorder.packages
        self.handlers.run_completed()
        return self.report

    def _process(self, spec: PackageSpec) -> None:
        outcome = PackageOutcome(name=spec.name)
        self.report.outcomes.append(outcome)

        try:
            fetched: FetchResult | None = None
            if self.config.mode is Mode.REMOTE:
                assert self.locator is not None and self.fetcher is not None
                outcome.state = PackageState.FETCHING
                artifact = self.locator.locate(spec, self.platform)
                outcome.url = artifact.url
                fetched = self.fetcher.fetch(artifact, spec.source)

            outcome.path = locate_package_file(spec, self.platform.package_suffix, fetched)
            outcome.state = PackageState.LOCATED

            outcome.state = PackageState.INSTALLING
            receipt = self.installer.install(spec, outcome.path, self.platform)
            outcome.state = PackageState.INSTALLED if receipt.ok else PackageState.LOCATED
        except AddonError as e:
            if e.package is None:
                e.package = spec.name
            outcome.state = PackageState.FAILED
            outcome.error = str(e)
            raise
        except Exception as e:
            outcome.state = PackageState.FAILED
            outcome.error = f"{type(e).__name__}: {e}"
            raise
