"""
debian-bridge — CLI entrypoint.

Usage:
    debian-bridge --help
    debian-bridge test
    debian-bridge create ./package.deb --display --sound --desktop-icon default
    debian-bridge run package
    debian-bridge remove package
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from debian_bridge import __version__
from debian_bridge.core.errors import BridgeError
from debian_bridge.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    LOG_LEVEL_ENV,
    level_from_flags,
    setup_logging,
)

PROG_NAME = "debian-bridge"


@click.group()
@click.version_option(version=__version__, prog_name=PROG_NAME)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Set a custom config file.",
)
@click.option("--verbose", "-v", count=True, help="Set the level of verbosity (-v, -vv).")
@click.option("--quiet", "-q", is_flag=True, help="Only report errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option("--mock", is_flag=True, help="Use a mock runtime (no docker calls).")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    verbose: int,
    quiet: bool,
    debug: bool,
    mock: bool,
) -> None:
    """debian-bridge — install .deb programs into containers and launch them."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["verbose"] = verbose
    ctx.obj["mock"] = mock

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=level_from_flags(verbose, quiet, debug, os.environ.get(LOG_LEVEL_ENV)),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
        quiet_third_party=not debug,
    )


def _make_app(ctx: click.Context, check_runtime: bool = False):
    """Load settings and registry, inspect the host, build the App.

    The docker daemon is only asked for its version when ``check_runtime``
    is set; every other command reaches docker only through its own action.
    """
    from debian_bridge.adapters import DockerAdapter, MockAdapter
    from debian_bridge.core.app import App
    from debian_bridge.core.config.loader import load_settings
    from debian_bridge.core.models.capability import CapabilityAvailability
    from debian_bridge.core.persistence.registry_file import load_registry
    from debian_bridge.core.services.host_probe import probe_host

    if not sys.platform.startswith("linux"):
        raise click.ClickException("Only linux supported for now.")

    settings = load_settings(ctx.obj.get("config_path"))
    registry = load_registry(Path(settings.registry_path))
    adapter = MockAdapter() if ctx.obj.get("mock") else DockerAdapter()
    host = probe_host(adapter if check_runtime else None)

    return App(
        settings=settings,
        registry=registry,
        availability=CapabilityAvailability.from_host(host),
        adapter=adapter,
        executable=PROG_NAME,
        host=host,
    )


def _fail(error: BridgeError) -> None:
    click.secho(f"❌ {error}", fg="red", err=True)
    sys.exit(1)


def _echo_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        click.secho(f"⚠️  {warning}", fg="yellow", err=True)


@cli.command()
@click.argument("package", type=click.Path(dir_okay=False))
@click.option("--command", "command", default=None, help="Custom command to run.")
@click.option("--dependencies", "deps", default=None, help="Additional dependencies to install.")
@click.option("--tag", default=None, help="Register under this name instead of the package name.")
@click.option("-d", "--display", is_flag=True, help="Share host display.")
@click.option("-s", "--sound", is_flag=True, help="Share sound device.")
@click.option("-h", "--home", is_flag=True, help="Persist the container home directory.")
@click.option("-n", "--notifications", is_flag=True, help="Mount the session dbus.")
@click.option("-t", "--timezone", is_flag=True, help="Share local timezone.")
@click.option("-i", "--devices", is_flag=True, help="Enable devices.")
@click.option(
    "--desktop-icon",
    "desktop_icon",
    default=None,
    help="Icon path for a desktop entry, or 'default'.",
)
@click.pass_context
def create(
    ctx: click.Context,
    package: str,
    command: str | None,
    deps: str | None,
    tag: str | None,
    display: bool,
    sound: bool,
    home: bool,
    notifications: bool,
    timezone: bool,
    devices: bool,
    desktop_icon: str | None,
) -> None:
    """Create new docker build for existing package."""
    from debian_bridge.core.models.capability import Capability
    from debian_bridge.core.models.program import Icon

    flags = {
        Capability.DISPLAY: display,
        Capability.SOUND: sound,
        Capability.PERSISTENT_HOME: home,
        Capability.NOTIFICATION: notifications,
        Capability.TIMEZONE: timezone,
        Capability.DEVICES: devices,
    }
    capabilities = [c for c, on in flags.items() if on]

    icon = None
    if desktop_icon == "default":
        icon = Icon.default()
    elif desktop_icon:
        icon = Icon(path=str(Path(desktop_icon).expanduser().resolve()))

    try:
        app = _make_app(ctx)
        result = app.create(
            Path(package),
            capabilities,
            icon=icon,
            command=command,
            deps=deps,
            tag=tag,
        )
        app.save()
    except BridgeError as e:
        _fail(e)
        return

    _echo_warnings(result.warnings)
    program = result.program
    click.secho(f"✅ Program '{program.name}' successfully created", fg="green")
    if program.capabilities:
        labels = ", ".join(c.label for c in program.capabilities)
        click.echo(f"   Features: {labels}")


@cli.command()
@click.argument("name")
@click.pass_context
def run(ctx: click.Context, name: str) -> None:
    """Run installed program."""
    try:
        app = _make_app(ctx)
        app.run(name)
    except BridgeError as e:
        _fail(e)


@cli.command()
@click.argument("name")
@click.pass_context
def remove(ctx: click.Context, name: str) -> None:
    """Remove program."""
    try:
        app = _make_app(ctx)
        result = app.remove(name)
        app.save()
    except BridgeError as e:
        _fail(e)
        return

    _echo_warnings(result.warnings)
    click.secho("✅ Program successfully removed", fg="green")


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_programs(ctx: click.Context, as_json: bool) -> None:
    """Show installed programs."""
    try:
        app = _make_app(ctx)
        names = app.list()
    except BridgeError as e:
        _fail(e)
        return

    if as_json:
        click.echo(json.dumps({"programs": names}, indent=2))
        return

    if not names:
        click.echo("No program added yet")
        return
    click.echo(f"Available programs list: {', '.join(names)}")


@cli.command("test")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def test_system(ctx: click.Context, as_json: bool) -> None:
    """Test compatibility and feature access."""
    try:
        app = _make_app(ctx, check_runtime=True)
    except BridgeError as e:
        _fail(e)
        return

    host = app.host
    if as_json:
        click.echo(json.dumps({
            "system": host.model_dump() if host else {},
            "features": app.features.to_dict(),
        }, indent=2))
        return

    click.secho("\n🖥  System settings:", fg="cyan", bold=True)
    if host is not None:
        for label, value in host.summary():
            click.echo(f"\t{label:<15} {value}")

    click.secho("\n🔌 Available features:", fg="cyan", bold=True)
    for capability, available in app.features.items():
        click.echo(f"\t{capability.label:<15} ===> ", nl=False)
        if available:
            click.secho("available", fg="green")
        else:
            click.secho("unavailable", fg="red")
    click.echo()


# ── Register sub-command groups from debian_bridge/ui/cli/ ───────

from debian_bridge.ui.cli.completion import completion  # noqa: E402

cli.add_command(completion)


def main() -> None:
    cli(prog_name=PROG_NAME)


if __name__ == "__main__":
    main()
