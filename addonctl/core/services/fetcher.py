"""
Artifact fetcher — download a resolved build into the cache.

The artifact lands at ``cache_dir/basename(url)``.  Bytes are streamed
into a ``.part`` file, checked against the published checksum, and
only then renamed into place, so a file under the final name has
always been verified.
"""

from __future__ import annotations

import hashlib
import logging
import shutil
import urllib.error
import urllib.request
from pathlib import Path

from addonctl import __version__
from addonctl.core.errors import DownloadError, IntegrityError
from addonctl.core.models.addon import ArtifactInfo, FetchResult

logger = logging.getLogger(__name__)

_CHUNK = 64 * 1024


def split_checksum(checksum: str) -> tuple[str, str]:
    """``"sha256:ab12"`` or bare ``"ab12"`` → ``("sha256", "ab12")``."""
    if ":" in checksum:
        algo, digest = checksum.split(":", 1)
        return algo.lower(), digest.lower()
    return "sha256", checksum.lower()


def file_digest(path: Path, algo: str = "sha256") -> str:
    h = hashlib.new(algo)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


class ArtifactFetcher:
    """Download-and-verify for ArtifactInfo."""

    def __init__(self, timeout: int = 60):
        self.timeout = timeout

    def target_path(self, artifact: ArtifactInfo, cache_dir: Path) -> Path:
        return cache_dir / artifact.filename

    def fetch(self, artifact: ArtifactInfo, cache_dir: Path) -> FetchResult:
        """Make sure a verified copy of ``artifact`` sits in ``cache_dir``.

        An existing file whose checksum already matches is reused.

        Raises:
            DownloadError: The transfer failed.
            IntegrityError: The downloaded bytes don't match the checksum.
        """
        dest = self.target_path(artifact, cache_dir)
        algo, expected = split_checksum(artifact.checksum)
        if algo not in hashlib.algorithms_available:
            raise IntegrityError(f"Unsupported checksum algorithm '{algo}'")

        if dest.is_file() and self._cached_digest(dest, algo) == expected:
            logger.info("Using cached %s", dest)
            return FetchResult(path=dest, artifact=artifact, reused=True)

        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DownloadError(f"Cannot create cache directory {cache_dir}: {e}") from e

        part = dest.with_name(dest.name + ".part")
        logger.info("Downloading %s → %s", artifact.url, dest)
        try:
            self._download(artifact.url, part)
        except (urllib.error.URLError, OSError, ValueError) as e:
            part.unlink(missing_ok=True)
            raise DownloadError(f"Download of {artifact.url} failed: {e}") from e

        try:
            actual = file_digest(part, algo)
            if actual != expected:
                raise IntegrityError(
                    f"Checksum mismatch for {artifact.filename}: expected {expected}, got {actual}"
                )
            part.replace(dest)
        except OSError as e:
            raise DownloadError(f"Cannot store {artifact.filename} as {dest}: {e}") from e
        finally:
            part.unlink(missing_ok=True)

        logger.debug("Verified %s (%s %s)", dest, algo, actual)
        return FetchResult(path=dest, artifact=artifact)

    def _cached_digest(self, path: Path, algo: str) -> str | None:
        """Digest of an existing cache file, or None if it can't be read."""
        try:
            return file_digest(path, algo)
        except OSError as e:
            logger.warning("Ignoring unreadable cached %s: %s", path, e)
            return None

    def _download(self, url: str, dest: Path) -> None:
        req = urllib.request.Request(url, headers={"User-Agent": f"addonctl/{__version__}"})
        with urllib.request.urlopen(req, timeout=self.timeout) as resp, open(dest, "wb") as out:
            shutil.copyfileobj(resp, out, _CHUNK)
