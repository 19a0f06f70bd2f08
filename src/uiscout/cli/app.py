"""Unified CLI entry point for uiscout.

Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (UISCOUT_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

import logging
import sys

import typer

from uiscout.cli.run_cmd import index_command, run_command
from uiscout.cli.settings_cmd import settings_app

try:
    from importlib.metadata import version

    VERSION = version("uiscout")
except Exception:
    VERSION = "unknown"

APP_HELP = (
    "uiscout — heuristic UI explorer. "
    "Clicks through a live web app and records before/after snapshots for dataset building. "
    "Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (UISCOUT_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)

app.command("run")(run_command)
app.command("index")(index_command)
app.add_typer(settings_app, name="settings")


def configure_logging(level: str) -> None:
    """Route library logging to stderr at *level*."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    # Quieten noisy libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"uiscout {VERSION}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    from uiscout.settings import get_settings

    settings = get_settings()
    configure_logging("DEBUG" if verbose or settings.debug else settings.log_level)


if __name__ == "__main__":
    app()
