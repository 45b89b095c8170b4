from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import pytest
import typer
from rich.console import Console

from wm_cli.commands.common import (
    build_controller,
    get_state,
    open_store,
    parse_coordinates,
    reported_messages,
    workouts_table,
)
from wm_cli.core.controller import FormFields
from wm_cli.core.models import Coordinates, Running
from wm_cli.core.state import CLIState
from wm_cli.exporters.html_map import HtmlMapView


@dataclass
class FakeContext:
    obj: Any


def _state(tmp_path: Path, config: Optional[Dict[str, Any]] = None) -> CLIState:
    return CLIState(
        json_output=False,
        plain_output=True,
        verbose=False,
        quiet=False,
        config_path=tmp_path / "config.toml",
        config=config or {"map": {"zoom_level": 14}, "storage": {"key": "mapty", "persist_interactions": True}},
        console=Console(record=True),
        storage_path=tmp_path / "storage.json",
    )


def test_get_state_returns_cli_state(tmp_path: Path) -> None:
    state = _state(tmp_path)
    assert get_state(FakeContext(obj=state)) is state


def test_get_state_raises_on_invalid_obj() -> None:
    with pytest.raises(typer.Exit):
        get_state(FakeContext(obj={"not": "state"}))


def test_state_reads_map_and_storage_settings(tmp_path: Path) -> None:
    state = _state(tmp_path)
    assert state.zoom_level == 14
    assert state.persist_interactions is True
    assert _state(tmp_path, config={"other": {}}).zoom_level == 10


def test_open_store_uses_configured_key_and_file(tmp_path: Path, sample_running: Running) -> None:
    state = _state(tmp_path)
    open_store(state).save([sample_running])
    assert '"mapty"' in state.storage_path.read_text()
    assert open_store(state).load() == [sample_running]


def test_build_controller_wires_configured_settings(tmp_path: Path, new_york: Coordinates) -> None:
    state = _state(tmp_path)
    view = HtmlMapView()
    controller = build_controller(state, silent=True, map_view=view)

    assert controller.map_view is view
    assert controller.zoom_level == 14
    assert controller.persist_interactions is True

    controller.start()
    controller.map_clicked(new_york)
    assert controller.form_submitted(FormFields("running", "0", "25", cadence="180")) is None
    assert reported_messages(controller) == ["Data is incorrect!"]


def test_parse_coordinates_wraps_errors() -> None:
    assert parse_coordinates(40.7, -74.0) == Coordinates(40.7, -74.0)
    with pytest.raises(typer.BadParameter):
        parse_coordinates(95.0, 0.0)


def test_workouts_table_has_one_row_per_workout(sample_running: Running) -> None:
    table = workouts_table([sample_running], title="Workouts")
    assert table.row_count == 1
    assert [column.header for column in table.columns][0] == "ID"
