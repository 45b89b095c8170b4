from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, List, Tuple

import pytest
from typer.testing import CliRunner

from wm_cli.core.controller import SessionController
from wm_cli.core.models import Coordinates, Cycling, Running, create_cycling, create_running
from wm_cli.core.store import MemorySlot, SessionStore


class RecordingMapView:
    def __init__(self) -> None:
        self.centers: List[Tuple[Coordinates, int]] = []
        self.markers: List[Tuple[Coordinates, str, str]] = []

    def center_on(self, coordinates: Coordinates, zoom_level: int) -> None:
        self.centers.append((coordinates, zoom_level))

    def add_marker(self, coordinates: Coordinates, popup_content: str, style_class: str) -> None:
        self.markers.append((coordinates, popup_content, style_class))


class RecordingListView:
    def __init__(self) -> None:
        self.rows: List[str] = []

    def append_summary(self, workout: Any) -> None:
        self.rows.append(workout.id)


class RecordingFormView:
    def __init__(self) -> None:
        self.visible = False
        self.cleared = 0

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def clear(self) -> None:
        self.cleared += 1


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: List[str] = []

    def report(self, message: str) -> None:
        self.messages.append(message)


class FailingSlot(MemorySlot):
    def set_item(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    data_dir = tmp_path / "data"
    monkeypatch.setenv("WM_DATA_DIR", str(data_dir))
    monkeypatch.setenv("WM_CONFIG_FILE", str(tmp_path / "config" / "config.toml"))
    monkeypatch.setenv("WM_OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.delenv("WM_STORAGE_FILE", raising=False)
    return data_dir


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("wm_cli")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture()
def slot() -> MemorySlot:
    return MemorySlot()


@pytest.fixture()
def store(slot: MemorySlot) -> SessionStore:
    return SessionStore(slot)


@pytest.fixture()
def make_controller():
    def _make(store: SessionStore, **kwargs: Any) -> SessionController:
        return SessionController(
            store=store,
            map_view=RecordingMapView(),
            list_view=RecordingListView(),
            form_view=RecordingFormView(),
            notifier=RecordingNotifier(),
            **kwargs,
        )

    return _make


@pytest.fixture()
def controller(make_controller, store: SessionStore) -> SessionController:
    return make_controller(store)


@pytest.fixture()
def new_york() -> Coordinates:
    return Coordinates(latitude=40.7, longitude=-74.0)


@pytest.fixture()
def sample_running(new_york: Coordinates) -> Running:
    return create_running(
        new_york,
        distance=5.0,
        duration=25.0,
        cadence=180.0,
        now=datetime(2026, 4, 14, 7, 30),
        workout_id="run0000001",
    )


@pytest.fixture()
def sample_cycling() -> Cycling:
    return create_cycling(
        Coordinates(latitude=46.5, longitude=7.9),
        distance=27.0,
        duration=95.0,
        elevation_gain=-5.0,
        now=datetime(2026, 10, 3, 18, 5, 12, 345678),
        workout_id="bike000001",
    )


@pytest.fixture()
def write_temp_json(tmp_path: Path):
    def _write(name: str, payload: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload, indent=2) + "\n")
        return path

    return _write


@pytest.fixture()
def write_temp_toml(tmp_path: Path):
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content.strip() + "\n")
        return path

    return _write


@pytest.fixture()
def failing_store() -> SessionStore:
    return SessionStore(FailingSlot())
