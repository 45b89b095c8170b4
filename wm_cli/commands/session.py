"""Interactive session driving the map/form/list state machine."""

from __future__ import annotations

from typing import List, Optional

import typer

from wm_cli.commands.common import (
    build_controller,
    echo_workouts_plain,
    get_state,
    parse_coordinates,
    workouts_table,
)
from wm_cli.core.controller import ControllerState, SessionController
from wm_cli.core.location import LocationProvider, resolve_location_provider
from wm_cli.core.models import InvalidCoordinatesError
from wm_cli.core.state import CLIState
from wm_cli.views.console import ConsoleFormView

ACTIONS = ("click", "list", "select", "reset", "quit")


def _new_controller(state: CLIState, provider: LocationProvider, resets: List[bool]) -> SessionController:
    form_view = ConsoleFormView(state.console)
    controller = build_controller(
        state,
        silent=False,
        form_view=form_view,
        on_reset=lambda: resets.append(True),
    )
    controller.start(provider)
    return controller


def _click(state: CLIState, controller: SessionController) -> None:
    try:
        lat = float(typer.prompt("Latitude"))
        lng = float(typer.prompt("Longitude"))
        coordinates = parse_coordinates(lat, lng)
    except (ValueError, typer.BadParameter) as exc:
        state.console.print(f"[red]Invalid location: {exc}[/red]")
        return

    controller.map_clicked(coordinates)
    form_view = controller.form_view
    if not isinstance(form_view, ConsoleFormView):
        return

    while controller.state is ControllerState.AWAITING_INPUT:
        workout = controller.form_submitted(form_view.read_fields())
        if workout is not None:
            return
        if not typer.confirm("Correct the form?", default=True):
            controller.form_cancelled()


def _list(state: CLIState, controller: SessionController) -> None:
    workouts = controller.workouts
    if state.plain_output:
        echo_workouts_plain(workouts)
    elif not workouts:
        state.console.print("No workouts logged yet")
    else:
        state.console.print(workouts_table(workouts, title=f"Workouts ({len(workouts)} total)"))


def session_command(
    ctx: typer.Context,
    lat: Optional[float] = typer.Option(None, "--lat", help="Start position latitude"),
    lng: Optional[float] = typer.Option(None, "--lng", help="Start position longitude"),
) -> None:
    """Log workouts interactively: click the map, fill the form, select from the list."""
    state = get_state(ctx)
    if state.json_output:
        raise typer.BadParameter("The interactive session does not support --json")

    try:
        provider = resolve_location_provider(state.config, latitude=lat, longitude=lng)
    except (InvalidCoordinatesError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    resets: List[bool] = []
    controller = _new_controller(state, provider, resets)

    while True:
        action = str(typer.prompt(f"Action ({'/'.join(ACTIONS)})", default="click")).strip().lower()
        if action in {"quit", "q", "exit"}:
            break
        if action == "click":
            _click(state, controller)
        elif action == "list":
            _list(state, controller)
        elif action == "select":
            controller.list_item_clicked(str(typer.prompt("Workout ID")).strip())
        elif action == "reset":
            if typer.confirm("Delete all logged workouts?", default=False):
                controller.reset_requested()
        else:
            state.console.print(f"Unknown action: {action}")

        if resets:
            resets.clear()
            state.console.print("Session reset; starting fresh")
            controller = _new_controller(state, provider, resets)

    state.console.print(f"{len(controller.session)} workout(s) logged")
