"""Configuration commands."""

from __future__ import annotations

import typer

from wm_cli.commands.common import get_state, parse_coordinates, print_json_payload
from wm_cli.core.config import ConfigError, read_user_config, save_config

app = typer.Typer(help="Inspect and update configuration")


@app.command("show")
def show_command(ctx: typer.Context) -> None:
    """Print the effective configuration."""
    state = get_state(ctx)
    payload = dict(state.config)
    payload["storage"] = dict(payload.get("storage", {}), resolved_path=str(state.storage_path))

    if state.json_output or not state.plain_output:
        print_json_payload(state, payload)
        return

    typer.echo(f"config_path\t{state.config_path}")
    for section, values in payload.items():
        if isinstance(values, dict):
            for key, value in values.items():
                typer.echo(f"{section}.{key}\t{value}")
        else:
            typer.echo(f"{section}\t{values}")


@app.command("set-location")
def set_location_command(
    ctx: typer.Context,
    lat: float = typer.Option(..., "--lat", help="Home latitude"),
    lng: float = typer.Option(..., "--lng", help="Home longitude"),
) -> None:
    """Use a fixed home position instead of an IP lookup."""
    state = get_state(ctx)
    coordinates = parse_coordinates(lat, lng)

    try:
        stored = read_user_config(state.config_path)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc
    location = dict(stored.get("location", {}))
    location.update(provider="fixed", latitude=coordinates.latitude, longitude=coordinates.longitude)
    stored["location"] = location
    path = save_config(stored, state.config_path)

    if state.json_output:
        print_json_payload(state, {"status": "saved", "path": str(path), "location": location})
        return

    if state.plain_output:
        typer.echo("status\tsaved")
        typer.echo(f"path\t{path}")
        return

    state.console.print(f"Home position {coordinates} saved to {path}")
