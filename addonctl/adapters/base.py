"""
Install backend contract.

PackageInstaller never shells out itself.  It builds an InstallAction,
the registry wraps it in an ExecutionContext, and a backend turns that
into a Receipt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from addonctl.core.models.action import InstallAction, Receipt


class ExecutionContext(BaseModel):
    """One install request as a backend sees it."""

    action: InstallAction
    dry_run: bool = False

    @property
    def source(self) -> str:
        """Local path of the package file to install."""
        return self.action.source


class Adapter(ABC):
    """A package manager that can install a package file.

    Failures are reported in the returned Receipt; ``execute`` must not
    raise.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key, e.g. ``dpkg``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Is the package tool installed on this host?"""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """``(True, "")`` if the package file can be handed to the tool,
        else ``(False, reason)``.  Runs for dry runs too."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
