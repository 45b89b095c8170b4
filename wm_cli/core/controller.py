"""Session state and the interaction state machine.

The controller turns discrete host events (position acquired, map clicked,
form submitted, list item activated, reset) into validated workout records,
keeps the view collaborators in sync and persists the session after every
successful create. Events are handled one at a time, each to completion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from wm_cli.core.constants import (
    CYCLING,
    DEFAULT_ZOOM_LEVEL,
    MSG_INVALID_DATA,
    MSG_NO_POSITION,
    MSG_STORAGE_WRITE_FAILED,
    RUNNING,
)
from wm_cli.core.location import LocationProvider, LocationResult
from wm_cli.core.models import (
    Coordinates,
    Workout,
    create_cycling,
    create_running,
    new_workout_id,
    register_interaction,
)
from wm_cli.core.store import SessionStore, StorageWriteError
from wm_cli.utils.formatting import popup_class, popup_content
from wm_cli.utils.parsing import is_valid_number, parse_number
from wm_cli.views.base import FormView, ListView, MapView, Notifier

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when submitted form fields do not describe a valid workout."""

    def __init__(self, fields: List[str], message: str = MSG_INVALID_DATA) -> None:
        super().__init__(message)
        self.fields = fields


class RecordNotFound(KeyError):
    """Raised when no workout in the session has the requested id."""


class ControllerState(str, Enum):
    IDLE = "idle"
    AWAITING_INPUT = "awaiting_input"


@dataclass
class Session:
    """Ordered, id-unique workouts plus the transient interaction state."""

    workouts: List[Workout] = field(default_factory=list)
    last_map_event: Optional[Coordinates] = None
    current_position: Optional[Coordinates] = None

    def __len__(self) -> int:
        return len(self.workouts)

    def __iter__(self) -> Iterator[Workout]:
        return iter(self.workouts)

    def ids(self) -> List[str]:
        return [workout.id for workout in self.workouts]

    def append(self, workout: Workout) -> None:
        if any(existing.id == workout.id for existing in self.workouts):
            raise ValueError(f"Duplicate workout id: {workout.id}")
        self.workouts.append(workout)

    def find(self, workout_id: str) -> Workout:
        for workout in self.workouts:
            if workout.id == workout_id:
                return workout
        raise RecordNotFound(workout_id)

    def clear(self) -> None:
        self.workouts = []
        self.last_map_event = None
        self.current_position = None


@dataclass(frozen=True)
class FormFields:
    """Raw form values as typed by the user."""

    kind: str
    distance: Any
    duration: Any
    cadence: Any = None
    elevation_gain: Any = None


@dataclass(frozen=True)
class ValidatedForm:
    kind: str
    distance: float
    duration: float
    cadence: Optional[float] = None
    elevation_gain: Optional[float] = None


def validate_form(fields: FormFields) -> ValidatedForm:
    """Check raw form fields.

    Every number must be finite and non-zero. Distance, duration and cadence
    must also be positive; elevation gain may be negative.
    """
    kind = str(fields.kind).strip().lower()
    distance = parse_number(fields.distance)
    duration = parse_number(fields.duration)

    if kind == RUNNING:
        cadence = parse_number(fields.cadence)
        values = {"distance": distance, "duration": duration, "cadence": cadence}
        positive = values
    elif kind == CYCLING:
        elevation_gain = parse_number(fields.elevation_gain)
        values = {"distance": distance, "duration": duration, "elevation_gain": elevation_gain}
        positive = {"distance": distance, "duration": duration}
    else:
        raise ValidationError(["kind"])

    invalid = [name for name, value in values.items() if not is_valid_number(value)]
    invalid += [name for name, value in positive.items() if name not in invalid and not value > 0]
    if invalid:
        raise ValidationError(invalid)

    if kind == RUNNING:
        return ValidatedForm(kind, distance, duration, cadence=values["cadence"])
    return ValidatedForm(kind, distance, duration, elevation_gain=values["elevation_gain"])


@dataclass(frozen=True)
class LocationAcquired:
    result: LocationResult


@dataclass(frozen=True)
class MapClicked:
    coordinates: Coordinates


@dataclass(frozen=True)
class FormSubmitted:
    fields: FormFields


@dataclass(frozen=True)
class FormCancelled:
    pass


@dataclass(frozen=True)
class ListItemClicked:
    workout_id: str


@dataclass(frozen=True)
class ResetRequested:
    pass


Event = Union[LocationAcquired, MapClicked, FormSubmitted, FormCancelled, ListItemClicked, ResetRequested]


class SessionController:
    """Owns the session and mediates between host events and the views."""

    def __init__(
        self,
        store: SessionStore,
        map_view: MapView,
        list_view: ListView,
        form_view: FormView,
        notifier: Notifier,
        zoom_level: int = DEFAULT_ZOOM_LEVEL,
        persist_interactions: bool = False,
        on_reset: Optional[Callable[[], None]] = None,
    ) -> None:
        self.store = store
        self.map_view = map_view
        self.list_view = list_view
        self.form_view = form_view
        self.notifier = notifier
        self.zoom_level = zoom_level
        self.persist_interactions = persist_interactions
        self.on_reset = on_reset

        self.session = Session()
        self.state = ControllerState.IDLE
        self.map_ready = False
        self._handlers: Dict[type, Callable[[Any], Any]] = {
            LocationAcquired: lambda event: self.location_acquired(event.result),
            MapClicked: lambda event: self.map_clicked(event.coordinates),
            FormSubmitted: lambda event: self.form_submitted(event.fields),
            FormCancelled: lambda event: self.form_cancelled(),
            ListItemClicked: lambda event: self.list_item_clicked(event.workout_id),
            ResetRequested: lambda event: self.reset_requested(),
        }

    @property
    def workouts(self) -> List[Workout]:
        return list(self.session.workouts)

    def dispatch(self, event: Event) -> Any:
        """Route one event to its handler and return the handler's result."""
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported event: {event!r}")
        return handler(event)

    def start(self, location_provider: Optional[LocationProvider] = None) -> None:
        """Hydrate from the store, render the list, then ask for the position."""
        self.session.workouts = self.store.load()
        for workout in self.session.workouts:
            self.list_view.append_summary(workout)
        logger.debug("Session started with %d stored workout(s)", len(self.session))

        if location_provider is not None:
            location_provider.request_current_position(
                lambda result: self.dispatch(LocationAcquired(result))
            )

    def location_acquired(self, result: LocationResult) -> bool:
        if not result.ok:
            logger.info("Position unavailable: %s", result.error)
            self.notifier.report(MSG_NO_POSITION)
            return False

        coordinates = result.unwrap()
        self.session.current_position = coordinates
        self.map_view.center_on(coordinates, self.zoom_level)
        self.map_ready = True
        for workout in self.session.workouts:
            self._render_marker(workout)
        return True

    def map_clicked(self, coordinates: Coordinates) -> None:
        if self.state is ControllerState.AWAITING_INPUT:
            logger.debug("Replacing pending map location %s", self.session.last_map_event)
        self.session.last_map_event = coordinates
        self.form_view.show()
        self.state = ControllerState.AWAITING_INPUT

    def form_cancelled(self) -> None:
        self.session.last_map_event = None
        self.form_view.clear()
        self.form_view.hide()
        self.state = ControllerState.IDLE

    def form_submitted(self, fields: FormFields) -> Optional[Workout]:
        """Create a workout from the form, or report invalid data and keep the form open."""
        if self.state is not ControllerState.AWAITING_INPUT or self.session.last_map_event is None:
            logger.warning("Form submitted without a pending map location; ignoring")
            return None

        try:
            form = validate_form(fields)
        except ValidationError as exc:
            logger.info("Rejected form input, invalid field(s): %s", ", ".join(exc.fields))
            self.notifier.report(str(exc))
            return None

        coordinates = self.session.last_map_event
        workout_id = new_workout_id(set(self.session.ids()))
        workout: Workout
        if form.kind == RUNNING:
            workout = create_running(
                coordinates, form.distance, form.duration, form.cadence, workout_id=workout_id
            )
        else:
            workout = create_cycling(
                coordinates, form.distance, form.duration, form.elevation_gain, workout_id=workout_id
            )

        self.session.append(workout)
        self._render_marker(workout)
        self.list_view.append_summary(workout)
        self._persist()

        self.form_view.clear()
        self.form_view.hide()
        self.session.last_map_event = None
        self.state = ControllerState.IDLE
        logger.debug("Created %s workout %s", workout.kind, workout.id)
        return workout

    def list_item_clicked(self, workout_id: str) -> Optional[Workout]:
        try:
            workout = self.session.find(workout_id)
        except RecordNotFound:
            logger.debug("No workout with id %s; ignoring selection", workout_id)
            return None

        if self.map_ready:
            self.map_view.center_on(workout.coordinates, self.zoom_level)
        register_interaction(workout)
        if self.persist_interactions:
            self._persist()
        return workout

    def reset_requested(self) -> None:
        self.session.clear()
        self.state = ControllerState.IDLE
        self.map_ready = False
        try:
            self.store.clear()
        except StorageWriteError as exc:
            logger.error("Could not clear stored workouts: %s", exc)
            self.notifier.report(str(exc))
        logger.debug("Session reset")
        if self.on_reset is not None:
            self.on_reset()

    def _render_marker(self, workout: Workout) -> None:
        if not self.map_ready:
            return
        self.map_view.add_marker(workout.coordinates, popup_content(workout), popup_class(workout))

    def _persist(self) -> bool:
        try:
            self.store.save(self.session.workouts)
        except StorageWriteError as exc:
            logger.error("%s", exc)
            self.notifier.report(MSG_STORAGE_WRITE_FAILED)
            return False
        return True
