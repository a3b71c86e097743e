"""
Package installer — find the package file, then hand it to a backend.

Locating takes the fetch result as an argument, so a package file is
only looked up after its download (if any) has finished:

    fetch ──FetchResult──▶ locate_package_file ──Path──▶ PackageInstaller.install

A successful install is recorded on the run's InstallRecorder before
``install`` returns.
"""

from __future__ import annotations

import logging
from pathlib import Path

from addonctl.adapters.packages import backend_for_family
from addonctl.adapters.registry import AdapterRegistry
from addonctl.core.engine.recorder import InstallRecorder
from addonctl.core.errors import InstallBackendError, LocateError
from addonctl.core.models.action import InstallAction, Receipt
from addonctl.core.models.addon import FetchResult, PackageSpec, PlatformInfo

logger = logging.getLogger(__name__)


def newest_match(directory: Path, name: str, suffix: str) -> Path | None:
    """Most recently modified ``name*.suffix`` file in ``directory``."""
    matches = [p for p in directory.glob(f"{name}*.{suffix}") if p.is_file()]
    if not matches:
        return None
    return max(matches, key=lambda p: p.stat().st_mtime)


def locate_package_file(
    spec: PackageSpec,
    suffix: str | None,
    fetched: FetchResult | None,
) -> Path:
    """Decide which local file installs ``spec``.

    Args:
        spec: The package; ``spec.source`` is a directory or a file.
        suffix: Native package extension for the platform (``deb``/``rpm``).
        fetched: Result of this package's fetch step, or None when no
            fetch ran (local mode).

    Raises:
        LocateError: Nothing suitable exists on disk.
    """
    if fetched is not None:
        if not fetched.path.is_file():
            raise LocateError(
                f"Fetched artifact for {spec.name} vanished: {fetched.path}", package=spec.name
            )
        return fetched.path

    source = spec.source
    if source.is_dir():
        if not suffix:
            raise LocateError(
                f"No native package suffix for this platform; cannot scan {source}",
                package=spec.name,
            )
        try:
            found = newest_match(source, spec.name, suffix)
        except OSError as e:
            raise LocateError(f"Cannot scan {source} for {spec.name}: {e}", package=spec.name) from e
        if found is None:
            raise LocateError(
                f"Missing artifact: no {spec.name}*.{suffix} in {source}", package=spec.name
            )
        logger.debug("%s: newest match in %s is %s", spec.name, source, found.name)
        return found

    # A direct path to the package file; the backend checks it exists
    return source


class PackageInstaller:
    """Install located package files with the platform family's backend."""

    def __init__(
        self,
        registry: AdapterRegistry,
        recorder: InstallRecorder,
        operation_id: str = "",
        dry_run: bool = False,
    ):
        self.registry = registry
        self.recorder = recorder
        self.operation_id = operation_id
        self.dry_run = dry_run

    def backend_for(self, platform: PlatformInfo) -> str:
        """Backend name for the platform.

        Raises:
            InstallBackendError: The platform family has no backend.
        """
        backend = backend_for_family(platform.family)
        if backend is None:
            raise InstallBackendError(
                f"No package backend for platform family '{platform.family.value}'"
            )
        return backend

    def install(self, spec: PackageSpec, path: Path, platform: PlatformInfo) -> Receipt:
        """Install ``path`` as ``spec`` and record it.

        Dry runs return the skip receipt without recording anything.

        Raises:
            InstallBackendError: The backend rejected the package.
        """
        backend = self.backend_for(platform)
        action = InstallAction(
            id=f"{self.operation_id}:{spec.name}:install",
            backend=backend,
            package=spec.name,
            source=str(path),
        )

        receipt = self.registry.execute_action(action, dry_run=self.dry_run)

        if receipt.failed:
            raise InstallBackendError(
                f"{backend} failed to install {spec.name} from {path}: {receipt.error}",
                package=spec.name,
            )

        if receipt.ok:
            self.recorder.add(spec.name)
            logger.info("Installed %s (%s, %dms)", spec.name, backend, receipt.duration_ms)
        else:
            logger.info("%s: %s", spec.name, receipt.output)

        return receipt
