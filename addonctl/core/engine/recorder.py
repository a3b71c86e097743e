"""
Install event recorder and run handlers.

The recorder collects the names of add-on packages whose install step
actually ran and prints them when the run ends, whether it succeeded
or failed.  RunHandlers holds the two handler sets a run fires at the
end: report handlers on success, exception handlers on failure.
"""

from __future__ import annotations

import logging
from typing import IO, Protocol

import click

logger = logging.getLogger(__name__)

REPORT_PREFIX = "-- Installed Add-On Package: "


class RunHandler(Protocol):
    """Anything a run can notify when it finishes."""

    def report(self) -> None:
        ...


class InstallRecorder:
    """Append-only record of installed add-on packages.

    ``add`` only records; nothing is written until ``report``.
    Duplicate adds produce duplicate report lines.
    """

    def __init__(self, stream: IO[str] | None = None):
        self._packages: list[str] = []
        self._stream = stream

    @property
    def packages(self) -> list[str]:
        return list(self._packages)

    def add(self, name: str) -> None:
        self._packages.append(name)

    def lines(self) -> list[str]:
        return [f"{REPORT_PREFIX}{name}" for name in self._packages]

    def report(self) -> None:
        for line in self.lines():
            click.echo(line, file=self._stream)

    def __len__(self) -> int:
        return len(self._packages)


class RunHandlers:
    """Success-path and failure-path handler sets for one process."""

    def __init__(self) -> None:
        self.report_handlers: list[RunHandler] = []
        self.exception_handlers: list[RunHandler] = []

    def install_recorder(self, recorder: InstallRecorder) -> None:
        """Make ``recorder`` the only active InstallRecorder on both paths."""
        for handlers in (self.report_handlers, self.exception_handlers):
            stale = [h for h in handlers if isinstance(h, InstallRecorder)]
            for h in stale:
                handlers.remove(h)
            if stale:
                logger.debug("Replaced %d stale install recorder(s)", len(stale))
            handlers.append(recorder)

    def run_completed(self) -> None:
        """Fire the success-path handlers."""
        for handler in self.report_handlers:
            handler.report()

    def run_failed(self) -> None:
        """Fire the failure-path handlers.

        A handler that blows up is logged and skipped so the remaining
        handlers still get to report.
        """
        for handler in self.exception_handlers:
            try:
                handler.report()
            except Exception as e:
                logger.error("Exception handler %r failed: %s", handler, e)
