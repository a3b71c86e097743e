"""
Tests for the artifact fetcher — download, verify, cache reuse.
"""

import hashlib
from pathlib import Path

import pytest

from addonctl.core.errors import DownloadError, IntegrityError
from addonctl.core.models.addon import ArtifactInfo
from addonctl.core.services.fetcher import ArtifactFetcher, file_digest, split_checksum


class TestSplitChecksum:
    def test_bare_hex_is_sha256(self):
        assert split_checksum("ABC") == ("sha256", "abc")

    def test_prefixed(self):
        assert split_checksum("sha1:ff00") == ("sha1", "ff00")


class TestArtifactFetcher:
    def test_downloads_to_cache_basename(self, mirror, tmp_path: Path):
        info = mirror.publish("chef-manage_2.5.4-1_amd64.deb", b"deb-bytes")
        cache = tmp_path / "cache"

        result = ArtifactFetcher().fetch(info, cache)

        assert result.path == cache / "chef-manage_2.5.4-1_amd64.deb"
        assert result.path.read_bytes() == b"deb-bytes"
        assert result.reused is False
        assert sorted(p.name for p in cache.iterdir()) == ["chef-manage_2.5.4-1_amd64.deb"]

    def test_checksum_mismatch(self, mirror, tmp_path: Path):
        info = mirror.publish("chef-manage.deb", b"real")
        bad = info.model_copy(update={"checksum": hashlib.sha256(b"other").hexdigest()})
        cache = tmp_path / "cache"

        with pytest.raises(IntegrityError, match="Checksum mismatch"):
            ArtifactFetcher().fetch(bad, cache)

        assert list(cache.iterdir()) == []

    def test_prefixed_checksum(self, mirror, tmp_path: Path):
        info = mirror.publish("pkg.rpm", b"rpm")
        info = info.model_copy(update={"checksum": f"sha1:{hashlib.sha1(b'rpm').hexdigest()}"})
        result = ArtifactFetcher().fetch(info, tmp_path / "cache")
        assert result.path.is_file()

    def test_unsupported_algorithm(self, mirror, tmp_path: Path):
        info = mirror.publish("pkg.rpm").model_copy(update={"checksum": "crc99:00"})
        with pytest.raises(IntegrityError, match="Unsupported"):
            ArtifactFetcher().fetch(info, tmp_path / "cache")

    def test_reuses_verified_cache(self, mirror, tmp_path: Path):
        info = mirror.publish("chef-manage.deb", b"deb")
        cache = tmp_path / "cache"
        ArtifactFetcher().fetch(info, cache)
        (mirror.root / "chef-manage.deb").unlink()  # a second download would fail

        result = ArtifactFetcher().fetch(info, cache)
        assert result.reused is True

    def test_replaces_stale_cache(self, mirror, tmp_path: Path):
        info = mirror.publish("chef-manage.deb", b"new")
        cache = tmp_path / "cache"
        cache.mkdir()
        (cache / "chef-manage.deb").write_bytes(b"old")

        result = ArtifactFetcher().fetch(info, cache)
        assert result.reused is False
        assert file_digest(result.path) == info.checksum

    def test_download_failure(self, tmp_path: Path):
        info = ArtifactInfo(
            url=(tmp_path / "missing.deb").as_uri(),
            checksum="0" * 64,
            platform="ubuntu",
        )
        with pytest.raises(DownloadError):
            ArtifactFetcher().fetch(info, tmp_path / "cache")
        assert not (tmp_path / "cache" / "missing.deb.part").exists()

    def test_unwritable_destination(self, mirror, tmp_path: Path):
        info = mirror.publish("chef-manage.deb")
        cache = tmp_path / "cache"
        (cache / "chef-manage.deb").mkdir(parents=True)

        with pytest.raises(DownloadError, match="Cannot store chef-manage.deb"):
            ArtifactFetcher().fetch(info, cache)

        assert sorted(p.name for p in cache.iterdir()) == ["chef-manage.deb"]
        assert (cache / "chef-manage.deb").is_dir()
