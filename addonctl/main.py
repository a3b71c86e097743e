"""
addonctl — CLI entrypoint.

Usage:
    addonctl --help
    addonctl install
    addonctl config check
"""

from __future__ import annotations

import io
import json
import sys
from pathlib import Path

import click

from addonctl import __version__
from addonctl.core.observability.logging_config import configure_from_env


@click.group()
@click.version_option(version=__version__, prog_name="addonctl")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to addons.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """addonctl — fetch and install vendor add-on packages."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    configure_from_env(debug=debug, verbose=verbose, quiet=quiet)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--dry-run", is_flag=True, help="Resolve and fetch, but don't install.")
@click.option("--mock", is_flag=True, help="Use the mock backend (no package manager).")
@click.option(
    "--keep-going/--fail-fast",
    default=None,
    help="Continue with remaining packages after a failure.",
)
@click.pass_context
def install(
    ctx: click.Context,
    as_json: bool,
    dry_run: bool,
    mock: bool,
    keep_going: bool | None,
) -> None:
    """Fetch (remote mode) and install every configured add-on.

    Examples:

        addonctl install

        addonctl --config /etc/addonctl/addons.yml install --dry-run
    """
    from addonctl.core.use_cases.install import install_addons

    report_buf = io.StringIO() if as_json else None
    result = install_addons(
        config_path=ctx.obj.get("config_path"),
        dry_run=dry_run,
        mock_mode=mock,
        keep_going=keep_going,
        report_stream=report_buf,
    )

    if as_json:
        data = result.to_dict()
        data["lines"] = report_buf.getvalue().splitlines() if report_buf else []
        click.echo(json.dumps(data, indent=2))
        sys.exit(0 if result.ok else 1)

    quiet = ctx.obj.get("quiet", False)
    report = result.report

    if report and not quiet:
        mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
        click.secho(
            f"\n📦 {mode_label}{report.total} add-on package(s), {report.mode.value} mode",
            fg="cyan",
            bold=True,
            err=True,
        )
        for outcome in report.outcomes:
            color = {"installed": "green", "failed": "red"}.get(outcome.state.value, "yellow")
            click.secho(f"   • {outcome.name}: {outcome.state.value}", fg=color, err=True)
            if ctx.obj.get("verbose") and outcome.path:
                click.echo(f"     │ {outcome.path}", err=True)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(ctx: click.Context, as_json: bool) -> None:
    """Show the release-channel build for each add-on (no download)."""
    from addonctl.core.use_cases.resolve import resolve_artifacts

    result = resolve_artifacts(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    assert result.platform is not None
    click.secho(
        f"\n🔍 {result.platform.name} {result.platform.version} ({result.platform.machine})",
        fg="cyan",
        bold=True,
    )
    for name, info in result.artifacts.items():
        click.secho(f"   ✓ {name} ", fg="green", nl=False)
        click.echo(f"{info.version}  → {info.url}")
        click.echo(f"     sha256 {info.checksum}")
    for name, error in result.failures.items():
        click.secho(f"   ✗ {name} ", fg="red", nl=False)
        click.echo(error)
    click.echo()

    if not result.ok:
        sys.exit(1)


@cli.command("platform")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def platform_cmd(ctx: click.Context, as_json: bool) -> None:
    """Show the platform add-ons will be resolved and installed for."""
    from addonctl.adapters import default_registry
    from addonctl.adapters.packages import backend_for_family
    from addonctl.core.config.loader import ConfigError, find_config_file, load_config
    from addonctl.core.services.platform import platform_for

    override = None
    path = ctx.obj.get("config_path") or find_config_file()
    if path is not None:
        try:
            override = load_config(path).platform
        except ConfigError as e:
            click.secho(f"⚠️  {e}", fg="yellow", err=True)

    info = platform_for(override)
    backend = backend_for_family(info.family)
    status = default_registry().adapter_status().get(backend or "", {})
    tool_ok = bool(status.get("available"))

    if as_json:
        data = info.model_dump(mode="json")
        data["package_suffix"] = info.package_suffix
        data["backend"] = backend
        data["backend_available"] = tool_ok
        data["pinned"] = override is not None
        click.echo(json.dumps(data, indent=2))
        return

    pinned = " (pinned)" if override is not None else ""
    click.secho(f"\n🖥️  {info.name} {info.version}{pinned}", fg="cyan", bold=True)
    click.echo(f"   Machine: {info.machine}")
    click.echo(f"   Family:  {info.family.value}")
    click.echo(f"   Backend: {backend or '(none)'}  .{info.package_suffix or '?'}")
    if backend and not tool_ok:
        click.secho(f"   ⚠️  {backend} not found on PATH", fg="yellow")
    click.echo()


@cli.group()
def config() -> None:
    """Add-on configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate addons.yml configuration."""
    from addonctl.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Mode: {result.config.mode.value}")
        click.echo(f"   Packages: {', '.join(result.config.packages)}")
        click.echo(f"   Source: {result.config.source}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


@cli.command()
@click.option("-n", "count", default=10, show_default=True, help="Number of runs to show.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, count: int, as_json: bool) -> None:
    """Show recent add-on runs from the audit ledger."""
    from addonctl.core.config.loader import config_root, find_config_file
    from addonctl.core.persistence.audit import AuditWriter, default_audit_path

    path = ctx.obj.get("config_path") or find_config_file()
    root = config_root(path) if path else Path.cwd()
    entries = AuditWriter(default_audit_path(root)).read_recent(count)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No add-on runs recorded.")
        return

    for entry in entries:
        color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(entry.status, "white")
        click.secho(f"{entry.timestamp}  {entry.status:<8}", fg=color, nl=False)
        dry = " [dry-run]" if entry.dry_run else ""
        click.echo(f" {entry.operation_id} ({entry.mode}){dry}")
        if entry.installed:
            click.echo(f"   installed: {', '.join(entry.installed)}")
        for err in entry.errors:
            click.echo(f"   error: {err}")


if __name__ == "__main__":
    cli()
