"""Entry point for wm-cli."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from wm_cli import __version__
from wm_cli.commands import config as config_commands
from wm_cli.commands.export import export_command
from wm_cli.commands.location import locate_command, map_command
from wm_cli.commands.session import session_command
from wm_cli.commands.workouts import (
    add_app,
    import_command,
    list_command,
    reset_command,
    show_command,
)
from wm_cli.core.config import ConfigError, default_config_path, expand_path, load_config, resolve_storage_path
from wm_cli.core.state import CLIState
from wm_cli.utils.logging import resolve_level, setup_logging

app = typer.Typer(
    add_completion=False,
    help="Log workouts on a map from the command line",
    invoke_without_command=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON where available"),
    plain_output: bool = typer.Option(
        False,
        "--plain",
        help="Output plain text (no rich formatting/tables)",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Quiet output"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Initialize global CLI state."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if json_output and plain_output:
        typer.echo("Options --json and --plain are mutually exclusive.")
        raise typer.Exit(code=2)

    cfg_path = (config or default_config_path()).expanduser().resolve()
    try:
        cfg = load_config(cfg_path)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)

    log_file = cfg.get("logging", {}).get("file")
    setup_logging(
        level=resolve_level(cfg, verbose=verbose, quiet=quiet),
        log_file=expand_path(str(log_file)) if log_file else None,
    )

    console = Console(
        quiet=quiet,
        no_color=plain_output,
        log_time=False,
        log_path=False,
    )
    ctx.obj = CLIState(
        json_output=(json_output and not plain_output),
        plain_output=plain_output,
        verbose=verbose,
        quiet=quiet,
        config_path=cfg_path,
        config=cfg,
        console=console,
        storage_path=resolve_storage_path(cfg),
    )

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


# Top-level commands
app.add_typer(add_app, name="add")
app.command("import")(import_command)
app.command("list")(list_command)
app.command("show")(show_command)
app.command("reset")(reset_command)
app.command("locate")(locate_command)
app.command("map")(map_command)
app.command("session")(session_command)
app.command("export")(export_command)
app.add_typer(config_commands.app, name="config")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
