"""
CLI commands for the virtual audio driver installer.

Thin wrappers over ``src.core.services.virtual_audio``.
"""

from __future__ import annotations

import json
import sys
import uuid

import click

# States after which the driver is usable (possibly after a restart)
_OK_STATES = ("installed", "already-installed", "reboot-required")

_STATE_STYLE = {
    "installed": ("✅", "green"),
    "already-installed": ("✅", "green"),
    "reboot-required": ("🔁", "yellow"),
    "user-cancelled": ("⊘", "yellow"),
    "unsupported": ("⚠️", "yellow"),
    "failed": ("❌", "red"),
}


@click.command("provider")
@click.option("--platform", default=None, help="Platform name (default: current).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def provider(platform: str | None, as_json: bool) -> None:
    """Show the virtual audio provider for this platform."""
    from src.core.services.virtual_audio import get_preferred_provider_for_platform

    preferred = get_preferred_provider_for_platform(platform)

    if as_json:
        click.echo(json.dumps({"provider": preferred.value if preferred else None}))
        return

    if preferred is None:
        click.secho("⚠️  No virtual audio provider for this platform", fg="yellow")
        sys.exit(1)
    click.echo(preferred.value)


@click.command("validate")
@click.option("--provider", "provider_name", default=None, help="Provider to check.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def validate(provider_name: str | None, as_json: bool) -> None:
    """Verify the bundled installer without installing it."""
    from src.core.services.virtual_audio import validate_bundled_virtual_audio_assets

    result = validate_bundled_virtual_audio_assets(provider_name)

    if as_json:
        click.echo(json.dumps(result, indent=2))
    elif result["ok"]:
        click.secho(f"✅ {result['message']}", fg="green")
    else:
        click.secho(f"❌ {result['message']}", fg="red")

    if not result["ok"]:
        sys.exit(1)


@click.command("state")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def state(as_json: bool) -> None:
    """Show installer progress and bundle readiness."""
    from src.core.services.virtual_audio import get_virtual_audio_installer_state

    snapshot = get_virtual_audio_installer_state()

    if as_json:
        click.echo(json.dumps(snapshot.to_dict(), indent=2))
        return

    click.secho("🔊 Virtual audio installer", fg="cyan", bold=True)
    click.echo(f"   Platform supported: {'yes' if snapshot.platform_supported else 'no'}")
    if snapshot.in_progress:
        click.secho(f"   Installing: {snapshot.active_provider}", fg="yellow")
    else:
        click.echo("   Installing: no")
    icon = "✅" if snapshot.bundle_ready else "❌"
    click.echo(f"   Bundle: {icon} {snapshot.bundle_message}")


@click.command("install")
@click.argument("provider_name", required=False)
@click.option("--correlation-id", default=None, help="Id echoed in the result.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def install(provider_name: str | None, correlation_id: str | None, as_json: bool) -> None:
    """Install the virtual audio driver (prompts for elevation)."""
    from src.core.services.virtual_audio import (
        get_preferred_provider_for_platform,
        install_virtual_audio_driver,
    )

    if provider_name is None:
        preferred = get_preferred_provider_for_platform()
        if preferred is None:
            click.secho("❌ No virtual audio provider for this platform", fg="red")
            sys.exit(1)
        provider_name = preferred.value

    cid = correlation_id or str(uuid.uuid4())
    result = install_virtual_audio_driver(provider_name, cid)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        icon, color = _STATE_STYLE.get(result.state, ("❔", "white"))
        click.secho(f"{icon} {result.provider}: {result.state}", fg=color, bold=True)
        if result.message:
            click.echo(f"   {result.message}")
        if result.requires_restart:
            click.secho("   Restart the computer to finish the install.", fg="yellow")

    if result.state not in _OK_STATES:
        sys.exit(1)
