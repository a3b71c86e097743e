"""Debian-family backend."""

from __future__ import annotations

from addonctl.adapters.packages.base import PackageFileAdapter


class DpkgAdapter(PackageFileAdapter):
    """``dpkg -i <file>``."""

    tool = "dpkg"

    def install_command(self, source: str) -> list[str]:
        return ["dpkg", "-i", source]
