"""Workout creation, listing, selection and reset commands."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from wm_cli.commands.common import (
    build_controller,
    echo_workouts_plain,
    get_state,
    parse_coordinates,
    print_json_payload,
    reported_messages,
    workouts_table,
)
from wm_cli.core.constants import CYCLING, MSG_INVALID_DATA, RUNNING
from wm_cli.core.controller import FormFields, SessionController
from wm_cli.core.models import Coordinates, InvalidCoordinatesError, Workout
from wm_cli.core.state import CLIState
from wm_cli.utils.formatting import summary_line
from wm_cli.utils.parsing import load_workout_input

add_app = typer.Typer(help="Log a new workout at a map location")


def _report_created(state: CLIState, workout: Workout, warnings: List[str]) -> None:
    if state.json_output:
        print_json_payload(state, {"status": "created", "workout": workout.to_dict(), "warnings": warnings})
        return

    if state.plain_output:
        typer.echo("status\tcreated")
        typer.echo(f"id\t{workout.id}")
        typer.echo(f"summary\t{summary_line(workout)}")
        for warning in warnings:
            typer.echo(f"warning\t{warning}")
        return

    state.console.print(f"Created [bold]{workout.label}[/bold] ({workout.id}) at {workout.coordinates}")
    state.console.print(summary_line(workout))
    for warning in warnings:
        state.console.print(f"[yellow]{warning}[/yellow]")


def _report_rejected(state: CLIState, message: str) -> None:
    if state.json_output:
        print_json_payload(state, {"status": "error", "message": message})
    elif state.plain_output:
        typer.echo("status\terror")
        typer.echo(f"message\t{message}")
    else:
        state.console.print(f"[bold red]{message}[/bold red]")


def _submit(controller: SessionController, coordinates: Coordinates, fields: FormFields) -> Optional[Workout]:
    """Click the map at ``coordinates`` and submit ``fields``; cancel the form on rejection."""
    controller.map_clicked(coordinates)
    workout = controller.form_submitted(fields)
    if workout is None:
        controller.form_cancelled()
    return workout


def _add(state: CLIState, coordinates: Coordinates, fields: FormFields) -> None:
    controller = build_controller(state, silent=True)
    controller.start()
    workout = _submit(controller, coordinates, fields)
    messages = reported_messages(controller)

    if workout is None:
        _report_rejected(state, messages[-1] if messages else MSG_INVALID_DATA)
        raise typer.Exit(code=1)

    _report_created(state, workout, messages)


@add_app.command("running")
def add_running_command(
    ctx: typer.Context,
    lat: float = typer.Option(..., "--lat", help="Latitude of the workout"),
    lng: float = typer.Option(..., "--lng", help="Longitude of the workout"),
    distance: str = typer.Option(..., help="Distance in km"),
    duration: str = typer.Option(..., help="Duration in minutes"),
    cadence: str = typer.Option(..., help="Cadence in steps/min"),
) -> None:
    """Log a running workout."""
    state = get_state(ctx)
    coordinates = parse_coordinates(lat, lng)
    _add(state, coordinates, FormFields(kind=RUNNING, distance=distance, duration=duration, cadence=cadence))


@add_app.command("cycling")
def add_cycling_command(
    ctx: typer.Context,
    lat: float = typer.Option(..., "--lat", help="Latitude of the workout"),
    lng: float = typer.Option(..., "--lng", help="Longitude of the workout"),
    distance: str = typer.Option(..., help="Distance in km"),
    duration: str = typer.Option(..., help="Duration in minutes"),
    elevation: str = typer.Option(..., help="Elevation gain in m (negative for net descent)"),
) -> None:
    """Log a cycling workout."""
    state = get_state(ctx)
    coordinates = parse_coordinates(lat, lng)
    _add(
        state,
        coordinates,
        FormFields(kind=CYCLING, distance=distance, duration=duration, elevation_gain=elevation),
    )


def _entry_coordinates(entry: Dict[str, Any]) -> Coordinates:
    if "coordinates" in entry:
        return Coordinates.from_list(entry["coordinates"])
    return Coordinates.parse(
        entry.get("lat", entry.get("latitude")),
        entry.get("lng", entry.get("longitude")),
    )


def _entry_fields(entry: Dict[str, Any]) -> FormFields:
    return FormFields(
        kind=str(entry.get("kind") or entry.get("type") or ""),
        distance=entry.get("distance"),
        duration=entry.get("duration"),
        cadence=entry.get("cadence"),
        elevation_gain=entry.get("elevation_gain", entry.get("elevation")),
    )


def import_command(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(None, help="JSON/YAML file with workout entries"),
    stdin: bool = typer.Option(False, "--stdin", help="Read workout entries from stdin"),
) -> None:
    """Log several workouts from a file, one map click and form submit per entry."""
    state = get_state(ctx)

    stdin_text = sys.stdin.read() if stdin else ""
    try:
        entries = load_workout_input(file_path=file, read_stdin=stdin, stdin_text=stdin_text)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"Cannot read workout entries: {exc}") from exc
    if not entries:
        raise typer.BadParameter("Provide a FILE or --stdin with at least one workout entry")

    controller = build_controller(state, silent=True)
    controller.start()

    results: List[Dict[str, Any]] = []
    for index, entry in enumerate(entries):
        try:
            coordinates = _entry_coordinates(entry)
        except InvalidCoordinatesError as exc:
            results.append({"index": index, "status": "rejected", "reason": str(exc)})
            continue

        seen = len(reported_messages(controller))
        workout = _submit(controller, coordinates, _entry_fields(entry))
        if workout is None:
            new_messages = reported_messages(controller)[seen:]
            reason = new_messages[-1] if new_messages else MSG_INVALID_DATA
            results.append({"index": index, "status": "rejected", "reason": reason})
            continue
        results.append({"index": index, "status": "created", "id": workout.id, "label": workout.label})

    created = sum(1 for item in results if item["status"] == "created")

    if state.json_output:
        print_json_payload(state, {"results": results, "created": created})
    elif state.plain_output:
        typer.echo(f"processed\t{len(results)}")
        typer.echo(f"created\t{created}")
        for item in results:
            typer.echo(json.dumps(item, separators=(",", ":"), ensure_ascii=False))
    else:
        state.console.print(f"Processed {len(results)} entr{'y' if len(results) == 1 else 'ies'}, created {created}")
        for item in results:
            if item["status"] == "created":
                state.console.print(f"  [green]✓[/green] #{item['index']} {item['label']} ({item['id']})")
            else:
                state.console.print(f"  [red]✗[/red] #{item['index']} {item['reason']}")

    if created < len(results):
        raise typer.Exit(code=1)


def list_command(
    ctx: typer.Context,
    kind: Optional[str] = typer.Option(None, "--kind", help="Filter: running|cycling"),
) -> None:
    """List logged workouts in creation order."""
    state = get_state(ctx)
    if kind is not None and kind not in {RUNNING, CYCLING}:
        raise typer.BadParameter("--kind must be one of: running, cycling")

    controller = build_controller(state, silent=True)
    controller.start()
    workouts = [workout for workout in controller.workouts if kind is None or workout.kind == kind]

    if state.json_output:
        print_json_payload(state, {"workouts": [workout.to_dict() for workout in workouts], "total": len(workouts)})
        return

    if state.plain_output:
        echo_workouts_plain(workouts)
        return

    if not workouts:
        state.console.print("No workouts logged yet")
        return
    state.console.print(workouts_table(workouts, title=f"Workouts ({len(workouts)} total)"))


def show_command(
    ctx: typer.Context,
    workout_id: str = typer.Argument(..., help="Workout ID"),
) -> None:
    """Select a workout from the list and show it."""
    state = get_state(ctx)
    controller = build_controller(state, silent=True)
    controller.start()

    workout = controller.list_item_clicked(workout_id)
    if workout is None:
        _report_rejected(state, f"No workout with id {workout_id}")
        raise typer.Exit(code=1)

    if state.json_output:
        print_json_payload(state, workout.to_dict())
        return

    if state.plain_output:
        for key, value in workout.to_dict().items():
            typer.echo(f"{key}\t{value}")
        return

    state.console.print(workouts_table([workout], title=workout.label))


def reset_command(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Skip confirmation prompt"),
) -> None:
    """Delete every logged workout and start over."""
    state = get_state(ctx)

    if not force:
        confirmed = typer.confirm("Delete all logged workouts?", default=False)
        if not confirmed:
            raise typer.Exit(code=0)

    controller = build_controller(state, silent=True)
    controller.start()
    removed = len(controller.session)
    controller.reset_requested()
    messages = reported_messages(controller)

    if messages:
        _report_rejected(state, messages[-1])
        raise typer.Exit(code=1)

    if state.json_output:
        print_json_payload(state, {"status": "reset", "removed": removed})
        return

    if state.plain_output:
        typer.echo("status\treset")
        typer.echo(f"removed\t{removed}")
        return

    state.console.print(f"Removed {removed} workout(s)")
