"""
Virtual Audio Installer — CLI entrypoint.

Usage:
    python -m src.main --help
    python -m src.main validate
    python -m src.main install --correlation-id cid-1
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from src.core.observability.logging_config import setup_logging

from src import __version__


@click.group()
@click.version_option(version=__version__, prog_name="vai")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to installer.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Virtual Audio Installer — verify and install the bundled audio driver."""
    from src.core.config.loader import ConfigError, apply_config, load_config

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    try:
        config = load_config(ctx.obj["config_path"])
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    # Register bundle roots in core context (used by the bundle resolver)
    apply_config(config)
    ctx.obj["config"] = config

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        flag_level = "DEBUG"
    elif verbose:
        flag_level = "INFO"
    elif quiet:
        flag_level = "ERROR"
    else:
        flag_level = None

    setup_logging(flag_level, config)


# ── Register commands from src/ui/cli/ ──────────────────────────

from src.ui.cli.driver import install, provider, state, validate

cli.add_command(provider)
cli.add_command(validate)
cli.add_command(state)
cli.add_command(install)


if __name__ == "__main__":
    cli()
