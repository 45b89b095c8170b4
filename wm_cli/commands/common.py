"""Shared command helpers."""

from __future__ import annotations

import json
from typing import Any, Callable, List, Optional

import typer
from rich.table import Table

from wm_cli.core.controller import SessionController
from wm_cli.core.models import Coordinates, InvalidCoordinatesError, Workout
from wm_cli.core.state import CLIState
from wm_cli.core.store import JsonFileSlot, SessionStore
from wm_cli.utils.formatting import workout_row
from wm_cli.views.base import FormView, MapView
from wm_cli.views.console import ConsoleFormView, ConsoleListView, ConsoleMapView, ConsoleNotifier


def get_state(ctx: typer.Context) -> CLIState:
    """Extract validated CLI state from Typer context."""
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=2)
    return state


def print_json_payload(state: CLIState, payload: Any) -> None:
    """Print JSON payload with plain-mode fallback for piping."""
    if state.plain_output:
        typer.echo(json.dumps(payload, separators=(",", ":"), ensure_ascii=False))
        return
    state.console.print_json(data=payload)


def open_store(state: CLIState) -> SessionStore:
    """Session store over the configured storage file."""
    key = str(state.config.get("storage", {}).get("key") or "workouts")
    return SessionStore(JsonFileSlot(state.storage_path), key=key)


def build_controller(
    state: CLIState,
    silent: Optional[bool] = None,
    map_view: Optional[MapView] = None,
    form_view: Optional[FormView] = None,
    on_reset: Optional[Callable[[], None]] = None,
) -> SessionController:
    """Wire a controller to console views; silent views only record."""
    quiet = state.json_output if silent is None else silent
    return SessionController(
        store=open_store(state),
        map_view=map_view or ConsoleMapView(state.console, plain=state.plain_output, silent=quiet),
        list_view=ConsoleListView(state.console, plain=state.plain_output, silent=quiet),
        form_view=form_view or ConsoleFormView(state.console, silent=quiet),
        notifier=ConsoleNotifier(state.console, plain=state.plain_output, silent=quiet),
        zoom_level=state.zoom_level,
        persist_interactions=state.persist_interactions,
        on_reset=on_reset,
    )


def reported_messages(controller: SessionController) -> List[str]:
    """Messages the controller reported through a console notifier."""
    notifier = controller.notifier
    return list(notifier.messages) if isinstance(notifier, ConsoleNotifier) else []


def parse_coordinates(latitude: Optional[float], longitude: Optional[float]) -> Coordinates:
    """Validate --lat/--lng option values."""
    try:
        return Coordinates.parse(latitude, longitude)
    except InvalidCoordinatesError as exc:
        raise typer.BadParameter(str(exc)) from exc


def workouts_table(workouts: List[Workout], title: str) -> Table:
    table = Table(title=title)
    for column in ("ID", "Workout", "Location", "Distance", "Duration", "Pace/Speed", "Cadence/Elev.", "Clicks"):
        table.add_column(column)
    for workout in workouts:
        row = workout_row(workout)
        table.add_row(
            row["id"],
            row["label"],
            row["coordinates"],
            row["distance"],
            row["duration"],
            row["metric"],
            row["detail"],
            row["clicks"],
        )
    return table


def echo_workouts_plain(workouts: List[Workout]) -> None:
    typer.echo("id\tkind\tlabel\tlatitude\tlongitude\tdistance\tduration\tmetric\tdetail\tclicks")
    for workout in workouts:
        row = workout_row(workout)
        typer.echo(
            "\t".join(
                [
                    workout.id,
                    workout.kind,
                    workout.label,
                    str(workout.coordinates.latitude),
                    str(workout.coordinates.longitude),
                    row["distance"],
                    row["duration"],
                    row["metric"],
                    row["detail"],
                    row["clicks"],
                ]
            )
        )
    typer.echo(f"total\t{len(workouts)}")
