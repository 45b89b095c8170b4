"""Terminal renditions of the map, list and form collaborators."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape

from wm_cli.core.constants import RUNNING, WORKOUT_KINDS
from wm_cli.core.controller import FormFields
from wm_cli.core.models import Coordinates, Workout
from wm_cli.utils.formatting import summary_details, summary_line


class ConsoleMapView:
    """Keeps the map state and narrates changes on the console."""

    def __init__(self, console: Console, plain: bool = False, silent: bool = False) -> None:
        self.console = console
        self.plain = plain
        self.silent = silent
        self.center: Optional[Coordinates] = None
        self.zoom_level: Optional[int] = None
        self.markers: List[Tuple[Coordinates, str, str]] = []

    def center_on(self, coordinates: Coordinates, zoom_level: int) -> None:
        self.center = coordinates
        self.zoom_level = zoom_level
        if self.silent:
            return
        if self.plain:
            typer.echo(f"center\t{coordinates.latitude}\t{coordinates.longitude}\t{zoom_level}")
            return
        self.console.print(f"[dim]Map centered on {coordinates} (zoom {zoom_level})[/dim]")

    def add_marker(self, coordinates: Coordinates, popup_content: str, style_class: str) -> None:
        self.markers.append((coordinates, popup_content, style_class))
        if self.silent:
            return
        if self.plain:
            typer.echo(f"marker\t{coordinates.latitude}\t{coordinates.longitude}\t{popup_content}")
            return
        color = "green" if style_class.startswith(RUNNING) else "yellow"
        self.console.print(f"[{color}]📍 {escape(popup_content)}[/{color}] [dim]@ {coordinates}[/dim]")


class ConsoleListView:
    """Prints one summary row per workout appended to the list."""

    def __init__(self, console: Console, plain: bool = False, silent: bool = False) -> None:
        self.console = console
        self.plain = plain
        self.silent = silent
        self.rows: List[str] = []

    def append_summary(self, workout: Workout) -> None:
        self.rows.append(workout.id)
        if self.silent:
            return
        if self.plain:
            typer.echo(f"{workout.id}\t{summary_line(workout)}")
            return
        color = "green" if workout.kind == RUNNING else "yellow"
        details = "  ".join(f"{icon} [bold]{value}[/bold] {unit}" for icon, value, unit in summary_details(workout))
        self.console.print(f"[{color}]▌[/{color}] [bold]{escape(workout.label)}[/bold] [dim]({workout.id})[/dim]")
        self.console.print(f"  {details}")


class ConsoleFormView:
    """Prompts for workout fields; only the active kind's extra field is asked."""

    def __init__(
        self,
        console: Console,
        prompt: Callable[..., Any] = typer.prompt,
        silent: bool = False,
    ) -> None:
        self.console = console
        self.prompt = prompt
        self.silent = silent
        self.visible = False
        self.kind = RUNNING
        self.values: Dict[str, str] = {}

    def show(self) -> None:
        self.visible = True
        if not self.silent:
            self.console.print("[bold]New workout[/bold] [dim](blank input is rejected)[/dim]")

    def hide(self) -> None:
        self.visible = False

    def clear(self) -> None:
        self.values = {}

    def type_changed(self, kind: str) -> str:
        """Switch the form kind and return the extra field now shown."""
        self.kind = kind if kind in WORKOUT_KINDS else RUNNING
        return "cadence" if self.kind == RUNNING else "elevation_gain"

    def read_fields(self) -> FormFields:
        kind = str(self.prompt(f"Type ({'/'.join(WORKOUT_KINDS)})", default=self.kind)).strip().lower()
        extra_field = self.type_changed(kind)
        self.values["kind"] = kind
        self.values["distance"] = str(self.prompt("Distance (km)", default="", show_default=False))
        self.values["duration"] = str(self.prompt("Duration (min)", default="", show_default=False))
        if extra_field == "cadence":
            self.values["cadence"] = str(self.prompt("Cadence (step/min)", default="", show_default=False))
        else:
            self.values["elevation_gain"] = str(self.prompt("Elevation gain (m)", default="", show_default=False))
        return FormFields(
            kind=kind,
            distance=self.values["distance"],
            duration=self.values["duration"],
            cadence=self.values.get("cadence"),
            elevation_gain=self.values.get("elevation_gain"),
        )


class ConsoleNotifier:
    """Reports recoverable failures to the user."""

    def __init__(self, console: Console, plain: bool = False, silent: bool = False) -> None:
        self.console = console
        self.plain = plain
        self.silent = silent
        self.messages: List[str] = []

    def report(self, message: str) -> None:
        self.messages.append(message)
        if self.silent:
            return
        if self.plain:
            typer.echo(f"error\t{message}", err=True)
            return
        self.console.print(f"[bold red]{escape(message)}[/bold red]")

