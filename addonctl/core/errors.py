"""
Error taxonomy for add-on runs.

Every failure in the fetch → locate → install flow surfaces as one of
these.  None of them is retried: the run halts (or, in keep-going mode,
marks the package failed) and the operator sees the message.
"""

from __future__ import annotations


class AddonError(Exception):
    """Base class for all add-on run failures."""

    def __init__(self, message: str, package: str | None = None):
        super().__init__(message)
        self.package = package


class ResolutionError(AddonError):
    """No artifact exists on the release channel for this platform."""


class DownloadError(AddonError):
    """The artifact could not be transferred to the cache."""


class IntegrityError(AddonError):
    """Downloaded bytes do not match the published checksum."""


class LocateError(AddonError):
    """No local package file matches the expected name pattern."""


class InstallBackendError(AddonError):
    """The package manager rejected the package (or none fits the platform)."""


class AddonRunError(AddonError):
    """One or more packages failed in a keep-going run."""

    def __init__(self, failures: list[AddonError]):
        names = ", ".join(f.package or "?" for f in failures)
        super().__init__(f"{len(failures)} add-on package(s) failed: {names}")
        self.failures = failures
