from __future__ import annotations

from typing import Any, Dict, List

from rich.console import Console

from wm_cli.core.models import Coordinates, Cycling, Running
from wm_cli.views.console import ConsoleFormView, ConsoleListView, ConsoleMapView, ConsoleNotifier


def _scripted_prompt(answers: List[str], seen: List[str]):
    replies = iter(answers)

    def _prompt(text: str, **kwargs: Dict[str, Any]) -> str:
        seen.append(text)
        return next(replies)

    return _prompt


def test_form_asks_cadence_for_running() -> None:
    seen: List[str] = []
    form = ConsoleFormView(Console(record=True), prompt=_scripted_prompt(["running", "5", "25", "180"], seen))
    fields = form.read_fields()

    assert fields.kind == "running"
    assert (fields.distance, fields.duration, fields.cadence) == ("5", "25", "180")
    assert fields.elevation_gain is None
    assert seen[-1].startswith("Cadence")


def test_form_asks_elevation_for_cycling() -> None:
    seen: List[str] = []
    form = ConsoleFormView(Console(record=True), prompt=_scripted_prompt(["Cycling", "27", "95", "-5"], seen))
    fields = form.read_fields()

    assert fields.kind == "cycling"
    assert fields.elevation_gain == "-5"
    assert fields.cadence is None
    assert seen[-1].startswith("Elevation gain")
    assert form.kind == "cycling"


def test_form_type_changed_and_clear() -> None:
    form = ConsoleFormView(Console(record=True), silent=True)
    assert form.type_changed("cycling") == "elevation_gain"
    assert form.type_changed("rowing") == "cadence"
    form.values["distance"] = "5"
    form.show()
    assert form.visible
    form.clear()
    form.hide()
    assert form.values == {}
    assert not form.visible


def test_map_view_records_and_prints(new_york: Coordinates) -> None:
    console = Console(record=True, width=120)
    view = ConsoleMapView(console)
    view.center_on(new_york, 10)
    view.add_marker(new_york, "Running on April 14", "running-popup")

    assert view.center == new_york
    assert view.zoom_level == 10
    assert view.markers == [(new_york, "Running on April 14", "running-popup")]
    text = console.export_text()
    assert "Map centered on 40.70000, -74.00000 (zoom 10)" in text
    assert "Running on April 14" in text


def test_silent_views_print_nothing(new_york: Coordinates, sample_running: Running) -> None:
    console = Console(record=True)
    ConsoleMapView(console, silent=True).center_on(new_york, 10)
    list_view = ConsoleListView(console, silent=True)
    list_view.append_summary(sample_running)
    notifier = ConsoleNotifier(console, silent=True)
    notifier.report("Data is incorrect!")

    assert console.export_text() == ""
    assert list_view.rows == ["run0000001"]
    assert notifier.messages == ["Data is incorrect!"]


def test_list_view_prints_summary(sample_cycling: Cycling) -> None:
    console = Console(record=True, width=120)
    ConsoleListView(console).append_summary(sample_cycling)
    text = console.export_text()
    assert "Cycling on October 3" in text
    assert "17.1" in text
    assert "bike000001" in text
