from __future__ import annotations

import json

import pytest

from wm_cli.core.constants import MSG_INVALID_DATA, MSG_NO_POSITION, MSG_STORAGE_WRITE_FAILED
from wm_cli.core.controller import (
    ControllerState,
    FormCancelled,
    FormFields,
    FormSubmitted,
    ListItemClicked,
    LocationAcquired,
    MapClicked,
    RecordNotFound,
    ResetRequested,
    Session,
    SessionController,
    ValidationError,
    validate_form,
)
from wm_cli.core.location import FixedLocationProvider, LocationResult, NullLocationProvider
from wm_cli.core.models import Coordinates, Cycling, Running
from wm_cli.core.store import MemorySlot, SessionStore

RUN_FIELDS = FormFields(kind="running", distance="5", duration="25", cadence="180")
RIDE_FIELDS = FormFields(kind="cycling", distance="27", duration="95", elevation_gain="-5")


def test_fresh_session_starts_empty(controller: SessionController) -> None:
    controller.start()
    assert len(controller.session) == 0
    assert controller.state is ControllerState.IDLE
    assert controller.list_view.rows == []
    assert controller.map_ready is False


def test_click_then_submit_creates_running_record(
    controller: SessionController, slot: MemorySlot, new_york: Coordinates
) -> None:
    controller.start()
    controller.map_clicked(new_york)
    assert controller.form_view.visible is True
    assert controller.state is ControllerState.AWAITING_INPUT

    workout = controller.form_submitted(RUN_FIELDS)

    assert isinstance(workout, Running)
    assert workout.pace == 5.0
    assert workout.coordinates == new_york
    assert len(controller.session) == 1
    assert controller.list_view.rows == [workout.id]
    assert controller.form_view.visible is False
    assert controller.form_view.cleared == 1
    assert controller.session.last_map_event is None
    assert controller.state is ControllerState.IDLE

    stored = json.loads(slot.items["workouts"])["workouts"]
    assert [item["id"] for item in stored] == [workout.id]


def test_invalid_submission_keeps_form_open(controller: SessionController, new_york: Coordinates) -> None:
    controller.start()
    controller.map_clicked(new_york)

    result = controller.form_submitted(FormFields(kind="running", distance="0", duration="25", cadence="180"))

    assert result is None
    assert controller.notifier.messages == [MSG_INVALID_DATA]
    assert len(controller.session) == 0
    assert controller.form_view.visible is True
    assert controller.session.last_map_event == new_york
    assert controller.state is ControllerState.AWAITING_INPUT

    # Correcting the form afterwards still uses the pending location.
    workout = controller.form_submitted(RUN_FIELDS)
    assert workout is not None
    assert workout.coordinates == new_york


def test_restart_rehydrates_and_renders_markers(
    make_controller, store: SessionStore, new_york: Coordinates
) -> None:
    first = make_controller(store)
    first.start()
    first.map_clicked(new_york)
    run = first.form_submitted(RUN_FIELDS)
    first.map_clicked(Coordinates(46.5, 7.9))
    ride = first.form_submitted(RIDE_FIELDS)

    second = make_controller(store)
    second.start(FixedLocationProvider(new_york))

    assert len(second.session) == 2
    assert second.list_view.rows == [run.id, ride.id]
    assert [marker[0] for marker in second.map_view.markers] == [new_york, Coordinates(46.5, 7.9)]
    assert [marker[2] for marker in second.map_view.markers] == ["running-popup", "cycling-popup"]
    restored = second.session.find(ride.id)
    assert isinstance(restored, Cycling)
    assert restored.speed == ride.speed


def test_reset_empties_session_and_store(
    controller: SessionController, store: SessionStore, slot: MemorySlot, new_york: Coordinates
) -> None:
    resets = []
    controller.on_reset = lambda: resets.append(True)
    controller.start(FixedLocationProvider(new_york))
    controller.map_clicked(new_york)
    controller.form_submitted(RUN_FIELDS)

    controller.reset_requested()

    assert len(controller.session) == 0
    assert "workouts" not in slot.items
    assert store.load() == []
    assert controller.map_ready is False
    assert resets == [True]


def test_start_centers_map_on_position(controller: SessionController, new_york: Coordinates) -> None:
    controller.start(FixedLocationProvider(new_york))
    assert controller.session.current_position == new_york
    assert controller.map_view.centers == [(new_york, 10)]
    assert controller.map_ready is True


def test_position_failure_reports_and_leaves_map_uninitialized(
    make_controller, store: SessionStore, sample_running: Running
) -> None:
    store.save([sample_running])
    controller = make_controller(store)
    controller.start(NullLocationProvider())

    assert controller.notifier.messages == [MSG_NO_POSITION]
    assert controller.map_ready is False
    assert controller.map_view.centers == []
    assert controller.map_view.markers == []
    # The list is rendered even without a position.
    assert controller.list_view.rows == [sample_running.id]


def test_markers_wait_for_map_ready(controller: SessionController, new_york: Coordinates) -> None:
    controller.start()
    controller.map_clicked(new_york)
    controller.form_submitted(RUN_FIELDS)
    assert controller.map_view.markers == []

    controller.dispatch(LocationAcquired(LocationResult.success(new_york)))
    assert len(controller.map_view.markers) == 1
    coordinates, popup, style = controller.map_view.markers[0]
    assert coordinates == new_york
    assert "Running on" in popup
    assert style == "running-popup"


def test_custom_zoom_level(make_controller, store: SessionStore, new_york: Coordinates) -> None:
    controller = make_controller(store, zoom_level=13)
    controller.start(FixedLocationProvider(new_york))
    assert controller.map_view.centers == [(new_york, 13)]


def test_submit_without_click_is_ignored(controller: SessionController) -> None:
    controller.start()
    assert controller.form_submitted(RUN_FIELDS) is None
    assert len(controller.session) == 0
    assert controller.notifier.messages == []


def test_second_click_replaces_pending_location(controller: SessionController, new_york: Coordinates) -> None:
    controller.start()
    controller.map_clicked(new_york)
    other = Coordinates(51.5, -0.1)
    controller.map_clicked(other)
    workout = controller.form_submitted(RIDE_FIELDS)
    assert workout.coordinates == other


def test_cancel_returns_to_idle(controller: SessionController, new_york: Coordinates) -> None:
    controller.start()
    controller.map_clicked(new_york)
    controller.form_cancelled()
    assert controller.state is ControllerState.IDLE
    assert controller.session.last_map_event is None
    assert controller.form_view.visible is False
    assert controller.form_submitted(RUN_FIELDS) is None


def test_list_click_centers_and_counts(
    make_controller, store: SessionStore, sample_running: Running, sample_cycling: Cycling, new_york: Coordinates
) -> None:
    store.save([sample_running, sample_cycling])
    controller = make_controller(store)
    controller.start(FixedLocationProvider(new_york))

    selected = controller.list_item_clicked("bike000001")
    controller.list_item_clicked("bike000001")

    assert selected is not None
    assert selected.interaction_count == 2
    assert controller.map_view.centers[-1] == (sample_cycling.coordinates, 10)
    # Selections are not persisted unless configured.
    assert store.load()[1].interaction_count == 0


def test_list_click_persists_when_configured(
    make_controller, store: SessionStore, sample_running: Running
) -> None:
    store.save([sample_running])
    controller = make_controller(store, persist_interactions=True)
    controller.start()
    controller.list_item_clicked(sample_running.id)
    assert store.load()[0].interaction_count == 1


def test_list_click_without_map_does_not_center(
    make_controller, store: SessionStore, sample_running: Running
) -> None:
    store.save([sample_running])
    controller = make_controller(store)
    controller.start()
    assert controller.list_item_clicked(sample_running.id) is not None
    assert controller.map_view.centers == []


def test_list_click_unknown_id_is_a_no_op(controller: SessionController) -> None:
    controller.start()
    assert controller.list_item_clicked("missing") is None
    assert controller.notifier.messages == []


def test_storage_failure_keeps_session(make_controller, failing_store: SessionStore, new_york: Coordinates) -> None:
    controller = make_controller(failing_store)
    controller.start()
    controller.map_clicked(new_york)

    workout = controller.form_submitted(RUN_FIELDS)

    assert workout is not None
    assert controller.workouts == [workout]
    assert controller.notifier.messages == [MSG_STORAGE_WRITE_FAILED]
    assert controller.state is ControllerState.IDLE


def test_dispatch_routes_events(controller: SessionController, new_york: Coordinates) -> None:
    controller.start()
    controller.dispatch(MapClicked(new_york))
    workout = controller.dispatch(FormSubmitted(RUN_FIELDS))
    assert controller.dispatch(ListItemClicked(workout.id)) is workout
    controller.dispatch(MapClicked(new_york))
    controller.dispatch(FormCancelled())
    assert controller.state is ControllerState.IDLE
    controller.dispatch(ResetRequested())
    assert len(controller.session) == 0


def test_dispatch_rejects_unknown_events(controller: SessionController) -> None:
    with pytest.raises(TypeError):
        controller.dispatch("click")


def test_workouts_property_is_a_copy(controller: SessionController, new_york: Coordinates) -> None:
    controller.start()
    controller.map_clicked(new_york)
    controller.form_submitted(RUN_FIELDS)
    controller.workouts.clear()
    assert len(controller.session) == 1


def test_created_ids_are_unique(controller: SessionController, new_york: Coordinates) -> None:
    controller.start()
    for _ in range(5):
        controller.map_clicked(new_york)
        controller.form_submitted(RUN_FIELDS)
    assert len(set(controller.session.ids())) == 5


def test_session_rejects_duplicate_ids(sample_running: Running) -> None:
    session = Session()
    session.append(sample_running)
    with pytest.raises(ValueError):
        session.append(sample_running)
    with pytest.raises(RecordNotFound):
        session.find("missing")


@pytest.mark.parametrize(
    "fields,invalid",
    [
        (FormFields("running", "0", "25", cadence="180"), ["distance"]),
        (FormFields("running", "-1", "25", cadence="180"), ["distance"]),
        (FormFields("running", "5", "-25", cadence="180"), ["duration"]),
        (FormFields("running", "5", "25", cadence=""), ["cadence"]),
        (FormFields("running", "abc", "25", cadence="180"), ["distance"]),
        (FormFields("cycling", "10", "30", elevation_gain="0"), ["elevation_gain"]),
        (FormFields("cycling", "10", "30", elevation_gain="nan"), ["elevation_gain"]),
        (FormFields("cycling", "-10", "30", elevation_gain="100"), ["distance"]),
        (FormFields("swimming", "1", "1"), ["kind"]),
    ],
)
def test_validate_form_rejects(fields: FormFields, invalid) -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_form(fields)
    assert excinfo.value.fields == invalid
    assert str(excinfo.value) == MSG_INVALID_DATA


def test_validate_form_accepts_negative_elevation_and_small_values() -> None:
    form = validate_form(FormFields("Cycling", "0.1", "1", elevation_gain="-40"))
    assert form.kind == "cycling"
    assert form.elevation_gain == -40.0
    assert validate_form(FormFields("running", 3, 12.5, cadence=170)).cadence == 170.0
    assert validate_form(FormFields("running", "0.0001", "25", cadence="180")).distance == 0.0001
