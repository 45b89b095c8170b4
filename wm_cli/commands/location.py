"""Position lookup and map rendering commands."""

from __future__ import annotations

from contextlib import nullcontext
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from wm_cli.commands.common import build_controller, get_state, print_json_payload, reported_messages
from wm_cli.core.config import resolve_output_dir
from wm_cli.core.constants import MSG_NO_POSITION, TILE_ATTRIBUTION, TILE_URL
from wm_cli.core.controller import SessionController
from wm_cli.core.location import LocationProvider, resolve_location_provider
from wm_cli.core.models import InvalidCoordinatesError
from wm_cli.core.state import CLIState
from wm_cli.exporters.html_map import HtmlMapView


def _provider(state: CLIState, lat: Optional[float], lng: Optional[float]) -> LocationProvider:
    try:
        return resolve_location_provider(state.config, latitude=lat, longitude=lng)
    except (InvalidCoordinatesError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc


def _start(state: CLIState, controller: SessionController, provider: LocationProvider) -> None:
    status_ctx = (
        state.console.status("Locating...")
        if not (state.plain_output or state.json_output)
        else nullcontext()
    )
    with status_ctx:
        controller.start(provider)


def _report_error(state: CLIState, message: str) -> None:
    if state.json_output:
        print_json_payload(state, {"status": "error", "message": message})
    elif state.plain_output:
        typer.echo("status\terror")
        typer.echo(f"message\t{message}")
    else:
        state.console.print(f"[bold red]{escape(message)}[/bold red]")


def _report_no_position(state: CLIState, controller: SessionController) -> None:
    messages = reported_messages(controller)
    _report_error(state, messages[-1] if messages else MSG_NO_POSITION)


def locate_command(
    ctx: typer.Context,
    lat: Optional[float] = typer.Option(None, "--lat", help="Use this latitude instead of a lookup"),
    lng: Optional[float] = typer.Option(None, "--lng", help="Use this longitude instead of a lookup"),
) -> None:
    """Acquire the current position and center the map on it."""
    state = get_state(ctx)
    provider = _provider(state, lat, lng)
    controller = build_controller(state, silent=True)
    _start(state, controller, provider)

    position = controller.session.current_position
    if position is None:
        _report_no_position(state, controller)
        raise typer.Exit(code=1)

    payload = {
        "status": "located",
        "latitude": position.latitude,
        "longitude": position.longitude,
        "zoom_level": controller.zoom_level,
        "markers": len(controller.session),
    }
    if state.json_output:
        print_json_payload(state, payload)
        return

    if state.plain_output:
        for key, value in payload.items():
            typer.echo(f"{key}\t{value}")
        return

    state.console.print(f"Current position: {position}")
    state.console.print(f"Map centered at zoom {controller.zoom_level} with {len(controller.session)} marker(s)")


def map_command(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="HTML file to write"),
    lat: Optional[float] = typer.Option(None, "--lat", help="Center latitude instead of a lookup"),
    lng: Optional[float] = typer.Option(None, "--lng", help="Center longitude instead of a lookup"),
    open_browser: bool = typer.Option(False, "--open", help="Open the map in a browser"),
) -> None:
    """Write an interactive Leaflet map with every workout as a marker."""
    state = get_state(ctx)
    provider = _provider(state, lat, lng)

    map_cfg = state.config.get("map", {})
    view = HtmlMapView(
        tile_url=str(map_cfg.get("tile_url") or TILE_URL),
        attribution=str(map_cfg.get("attribution") or TILE_ATTRIBUTION),
    )
    controller = build_controller(state, silent=True, map_view=view)
    _start(state, controller, provider)

    if not controller.map_ready:
        _report_no_position(state, controller)
        raise typer.Exit(code=1)

    path = (output or resolve_output_dir(state.config) / "map.html").expanduser().resolve()
    try:
        view.write(path)
    except OSError as exc:
        _report_error(state, f"Cannot write map to {path}: {exc}")
        raise typer.Exit(code=1)

    if state.json_output:
        print_json_payload(state, {"status": "written", "path": str(path), "markers": len(view.markers)})
    elif state.plain_output:
        typer.echo(f"path\t{path}")
        typer.echo(f"markers\t{len(view.markers)}")
    else:
        state.console.print(f"Map with {len(view.markers)} marker(s) written to: {path}")

    if open_browser:
        typer.launch(str(path))
