"""
Tests for the backend protocol, registry, mock, and package-file backends.
"""

from pathlib import Path

from addonctl.adapters import default_registry
from addonctl.adapters.base import ExecutionContext
from addonctl.adapters.mock import MockAdapter
from addonctl.adapters.packages import (
    BACKEND_FOR_FAMILY,
    DpkgAdapter,
    PackageFileAdapter,
    RpmAdapter,
    backend_for_family,
)
from addonctl.adapters.registry import AdapterRegistry
from addonctl.core.models.action import InstallAction
from addonctl.core.models.addon import PlatformFamily


def _action(source: str = "/tmp/x.deb", backend: str = "dpkg", package: str = "chef-manage"):
    return InstallAction(id=f"op:{package}:install", backend=backend, package=package, source=source)


class _ShellBackend(PackageFileAdapter):
    """Backend whose 'install' is an arbitrary shell snippet."""

    tool = "sh"

    def __init__(self, script: str):
        self.script = script

    def install_command(self, source: str) -> list[str]:
        return ["sh", "-c", self.script, "install", source]


# ── Mock Backend Tests ──────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter()
        receipt = mock.execute(ExecutionContext(action=_action()))
        assert receipt.ok
        assert mock.installed == ["chef-manage"]

    def test_set_failure(self):
        mock = MockAdapter()
        mock.set_failure("chef-manage", error="conflicts with chef-manage-legacy")
        receipt = mock.execute(ExecutionContext(action=_action()))
        assert receipt.failed
        assert "conflicts" in receipt.error

    def test_reset(self):
        mock = MockAdapter()
        mock.set_failure("chef-manage")
        mock.execute(ExecutionContext(action=_action()))
        mock.reset()
        assert mock.call_count == 0
        assert mock.execute(ExecutionContext(action=_action())).ok


# ── Registry Tests ──────────────────────────────────────────────────


class TestAdapterRegistry:
    def test_register_and_get(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="dpkg")
        registry.register(mock)
        assert registry.get("dpkg") is mock
        assert registry.list_adapters() == ["dpkg"]

    def test_unregister(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter(adapter_name="rpm"))
        registry.unregister("rpm")
        assert registry.get("rpm") is None

    def test_missing_backend_fails(self):
        receipt = AdapterRegistry().execute_action(_action(backend="pacman"))
        assert receipt.failed
        assert "No backend registered" in receipt.error

    def test_mock_mode_default(self):
        receipt = AdapterRegistry(mock_mode=True).execute_action(_action())
        assert receipt.ok
        assert "[mock]" in receipt.output

    def test_mock_mode_with_custom_mock(self):
        registry = AdapterRegistry()
        mock = MockAdapter()
        registry.set_mock_mode(True, mock_adapter=mock)
        assert registry.execute_action(_action(backend="rpm")).ok
        assert mock.call_count == 1

    def test_dry_run_validates_only(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="dpkg")
        registry.register(mock)
        receipt = registry.execute_action(_action(), dry_run=True)
        assert receipt.status == "skipped"
        assert "[dry-run]" in receipt.output
        assert mock.call_count == 0

    def test_validation_failure(self, tmp_path: Path):
        registry = AdapterRegistry()
        registry.register(DpkgAdapter())
        receipt = registry.execute_action(_action(source=str(tmp_path / "missing.deb")))
        assert receipt.failed
        assert "does not exist" in receipt.error

    def test_adapter_status(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter(adapter_name="dpkg", available=True))
        registry.register(MockAdapter(adapter_name="rpm", available=False))
        status = registry.adapter_status()
        assert status["dpkg"]["available"] is True
        assert status["rpm"]["available"] is False

    def test_default_registry(self):
        registry = default_registry()
        assert sorted(registry.list_adapters()) == ["dpkg", "rpm"]


# ── Package Backends ────────────────────────────────────────────────


class TestFamilyMapping:
    def test_mapping(self):
        assert BACKEND_FOR_FAMILY[PlatformFamily.DEBIAN] == "dpkg"
        assert backend_for_family(PlatformFamily.RHEL) == "rpm"
        assert backend_for_family(PlatformFamily.SUSE) == "rpm"
        assert backend_for_family(PlatformFamily.UNKNOWN) is None


class TestPackageFileAdapters:
    def test_commands(self):
        assert DpkgAdapter().install_command("/c/a.deb") == ["dpkg", "-i", "/c/a.deb"]
        assert RpmAdapter().install_command("/c/a.rpm") == ["rpm", "-U", "--replacepkgs", "/c/a.rpm"]
        assert DpkgAdapter().name == "dpkg"
        assert RpmAdapter().name == "rpm"

    def test_validate_missing_source(self):
        ctx = ExecutionContext(action=_action(source=""))
        valid, msg = DpkgAdapter().validate(ctx)
        assert not valid
        assert "source" in msg

    def test_validate_existing_file(self, tmp_path: Path):
        pkg = tmp_path / "chef-manage.deb"
        pkg.write_bytes(b"x")
        valid, _ = _ShellBackend("true").validate(ExecutionContext(action=_action(source=str(pkg))))
        assert valid

    def test_execute_success(self, tmp_path: Path):
        pkg = tmp_path / "chef-manage.deb"
        pkg.write_bytes(b"x")
        backend = _ShellBackend('echo "installing $1"')
        receipt = backend.execute(ExecutionContext(action=_action(source=str(pkg))))
        assert receipt.ok
        assert f"installing {pkg}" in receipt.output
        assert receipt.metadata["return_code"] == 0

    def test_execute_failure_captures_stderr(self, tmp_path: Path):
        backend = _ShellBackend("echo 'dependency problems' >&2; exit 1")
        receipt = backend.execute(ExecutionContext(action=_action(source=str(tmp_path / "x.deb"))))
        assert receipt.failed
        assert "dependency problems" in receipt.error
        assert receipt.metadata["return_code"] == 1

    def test_execute_timeout(self, tmp_path: Path):
        backend = _ShellBackend("sleep 5")
        action = _action(source=str(tmp_path / "x.deb"))
        action.params["timeout"] = 0.2
        receipt = backend.execute(ExecutionContext(action=action))
        assert receipt.failed
        assert "timed out" in receipt.error
