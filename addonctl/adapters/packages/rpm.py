"""RHEL/SUSE-family backend."""

from __future__ import annotations

from addonctl.adapters.packages.base import PackageFileAdapter


class RpmAdapter(PackageFileAdapter):
    """``rpm -U --replacepkgs <file>``.

    Upgrade mode installs fresh packages too; --replacepkgs keeps a
    rerun against the same file from failing as "already installed".
    """

    tool = "rpm"

    def install_command(self, source: str) -> list[str]:
        return ["rpm", "-U", "--replacepkgs", source]
