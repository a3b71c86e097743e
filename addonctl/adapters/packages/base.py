"""
Package-file backend — install a local .deb/.rpm with the system tool.

Subclasses only say which tool to run and with what arguments; running
it, timing it and turning the exit status into a Receipt happens here.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import time
from abc import abstractmethod
from pathlib import Path

from addonctl.adapters.base import Adapter, ExecutionContext
from addonctl.core.models.action import Receipt

logger = logging.getLogger(__name__)


class PackageFileAdapter(Adapter):
    """Install a package file with a package-manager CLI.

    Action params:
        timeout (int): Seconds before the install is abandoned (default: 600).
    """

    tool: str = ""

    @abstractmethod
    def install_command(self, source: str) -> list[str]:
        """argv that installs the package file at ``source``."""

    @property
    def name(self) -> str:
        return self.tool

    def is_available(self) -> bool:
        return shutil.which(self.tool) is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.source:
            return False, "Missing package source path"
        if not Path(context.source).is_file():
            return False, f"Package file does not exist: {context.source}"
        if not context.dry_run and not self.is_available():
            return False, f"'{self.tool}' not found on PATH"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action
        argv = self.install_command(context.source)
        timeout = action.params.get("timeout", 600)
        command = shlex.join(argv)

        logger.info("Installing %s: %s", action.package, command)
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                backend=self.name,
                action_id=action.id,
                error=f"{self.tool} timed out after {timeout}s",
                metadata={"command": command, "timeout": timeout},
            )
        except OSError as e:
            return Receipt.failure(
                backend=self.name,
                action_id=action.id,
                error=f"Could not run {self.tool}: {e}",
                metadata={"command": command},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode == 0:
            return Receipt.success(
                backend=self.name,
                action_id=action.id,
                output=output,
                duration_ms=elapsed_ms,
                metadata={"command": command, "return_code": 0, "stderr": stderr},
            )
        return Receipt.failure(
            backend=self.name,
            action_id=action.id,
            error=stderr or f"{self.tool} exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            metadata={"command": command, "return_code": result.returncode, "stdout": output},
        )
