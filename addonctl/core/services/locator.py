"""
Artifact locator — resolve an add-on to a downloadable build.

Asks the release channel's metadata endpoint for the best build of a
product on the current platform:

    GET {base}/{channel}/{product}/metadata?v=latest&p=ubuntu&pv=22.04&m=x86_64

and returns its URL and checksum.  With platform compatibility mode
on, a miss on the exact platform version falls back to the closest
lower platform versions before giving up.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from addonctl import __version__
from addonctl.core.errors import ResolutionError
from addonctl.core.models.addon import ArtifactInfo, PackageSpec, PlatformInfo
from addonctl.core.models.config import DEFAULT_CHANNEL, DEFAULT_OMNITRUCK_URL

logger = logging.getLogger(__name__)

# How many major platform versions below the host compatibility mode walks
_COMPAT_SPAN = 4


def platform_version_candidates(version: str, compatibility_mode: bool) -> list[str]:
    """Platform versions to try, most specific first.

    ``"22.04"`` → ``["22.04"]``, or with compatibility mode each lower
    major is tried in the host's dotted form and then bare:
    ``["22.04", "22", "21.04", "21", "20.04", "20", "19.04", "19", "18.04", "18"]``.
    """
    if not version:
        return [""]
    candidates = [version]
    if not compatibility_mode:
        return candidates

    major, dot, minor = version.partition(".")
    if dot:
        candidates.append(major)
    if major.isdigit():
        n = int(major)
        for lower in range(n - 1, max(n - 1 - _COMPAT_SPAN, 0), -1):
            if dot:
                candidates.append(f"{lower}.{minor}")
            candidates.append(str(lower))
    return candidates


class ReleaseChannelClient:
    """Thin HTTP client for the release-channel metadata endpoint."""

    def __init__(self, base_url: str = DEFAULT_OMNITRUCK_URL, timeout: int = 60):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def metadata_url(
        self,
        channel: str,
        product: str,
        version: str,
        platform: PlatformInfo,
        platform_version: str,
    ) -> str:
        query = {"v": version, "p": platform.name, "m": platform.machine}
        if platform_version:
            query["pv"] = platform_version
        return (
            f"{self.base_url}/{urllib.parse.quote(channel)}/"
            f"{urllib.parse.quote(product)}/metadata?{urllib.parse.urlencode(query)}"
        )

    def fetch_metadata(self, url: str) -> dict[str, Any] | None:
        """GET one metadata document; None when the channel has no match.

        Raises:
            ResolutionError: On transport errors or an unusable response.
        """
        req = urllib.request.Request(
            url,
            headers={
                "Accept": "application/json",
                "User-Agent": f"addonctl/{__version__}",
            },
        )
        logger.debug("GET %s", url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                data = json.loads(resp.read())
        except urllib.error.HTTPError as e:
            if e.code == 404:
                return None
            raise ResolutionError(f"Release channel returned HTTP {e.code} for {url}") from e
        except (urllib.error.URLError, OSError) as e:
            raise ResolutionError(f"Release channel unreachable: {e}") from e
        except json.JSONDecodeError as e:
            raise ResolutionError(f"Release channel sent invalid JSON for {url}") from e

        if not isinstance(data, dict) or not data.get("url"):
            return None
        return data


class ArtifactLocator:
    """Resolve PackageSpecs to ArtifactInfo on one channel."""

    def __init__(
        self,
        client: ReleaseChannelClient,
        channel: str = DEFAULT_CHANNEL,
        version: str = "latest",
        compatibility_mode: bool = True,
    ):
        self.client = client
        self.channel = channel
        self.version = version
        self.compatibility_mode = compatibility_mode

    def locate(self, spec: PackageSpec, platform: PlatformInfo) -> ArtifactInfo:
        """Find the best build of ``spec`` for ``platform``.

        Raises:
            ResolutionError: No build matches; there is no silent fallback.
        """
        tried: list[str] = []
        for pv in platform_version_candidates(platform.version, self.compatibility_mode):
            url = self.client.metadata_url(
                self.channel, spec.product_name, self.version, platform, pv
            )
            tried.append(pv or "<any>")
            data = self.client.fetch_metadata(url)
            if data is None:
                continue

            checksum = data.get("sha256") or ""
            if not checksum:
                raise ResolutionError(
                    f"Release channel listed {spec.product_name} without a sha256 checksum",
                    package=spec.name,
                )
            if pv != platform.version:
                logger.info(
                    "%s: no build for %s %s, using %s %s build",
                    spec.name, platform.name, platform.version, platform.name, pv,
                )
            info = ArtifactInfo(
                url=data["url"],
                checksum=checksum,
                platform=f"{platform.name}-{pv}" if pv else platform.name,
                version=str(data.get("version", "")),
            )
            logger.info("%s: resolved %s %s → %s", spec.name, spec.product_name, info.version, info.url)
            return info

        raise ResolutionError(
            f"No {self.channel} build of '{spec.product_name}' ({self.version}) for "
            f"{platform.name} {platform.machine} (platform versions tried: {', '.join(tried)})",
            package=spec.name,
        )
