"""Workout records and their type-specific derived metrics."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Container, Dict, List, Optional, Type

from wm_cli.core.constants import CYCLING, MONTHS, RUNNING


class InvalidMetricError(ValueError):
    """Raised when a workout is built from non-positive or non-finite inputs."""


class InvalidCoordinatesError(ValueError):
    """Raised when a latitude/longitude pair is not a geographic point."""


@dataclass(frozen=True)
class Coordinates:
    """A (latitude, longitude) pair in decimal degrees."""

    latitude: float
    longitude: float

    @classmethod
    def parse(cls, latitude: Any, longitude: Any) -> "Coordinates":
        try:
            lat = float(latitude)
            lng = float(longitude)
        except (TypeError, ValueError) as exc:
            raise InvalidCoordinatesError(f"Invalid coordinates: {latitude!r}, {longitude!r}") from exc
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise InvalidCoordinatesError(f"Invalid coordinates: {latitude!r}, {longitude!r}")
        if not -90.0 <= lat <= 90.0:
            raise InvalidCoordinatesError(f"Latitude out of range: {lat}")
        if not -180.0 <= lng <= 180.0:
            raise InvalidCoordinatesError(f"Longitude out of range: {lng}")
        return cls(latitude=lat, longitude=lng)

    @classmethod
    def from_list(cls, value: Any) -> "Coordinates":
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise InvalidCoordinatesError(f"Expected [lat, lng], got {value!r}")
        return cls.parse(value[0], value[1])

    def as_list(self) -> List[float]:
        return [self.latitude, self.longitude]

    def __str__(self) -> str:
        return f"{self.latitude:.5f}, {self.longitude:.5f}"


def describe(kind: str, created_at: datetime) -> str:
    """Build the display label, e.g. 'Running on April 14'."""
    return f"{kind[:1].upper()}{kind[1:]} on {MONTHS[created_at.month - 1]} {created_at.day}"


def new_workout_id(existing: Container[str] = ()) -> str:
    """Generate an opaque 10-character id not present in ``existing``."""
    while True:
        candidate = uuid.uuid4().hex[:10]
        if candidate not in existing:
            return candidate


@dataclass
class Workout:
    """Base workout record.

    Inputs and derived values are fixed at creation; only
    ``interaction_count`` changes afterwards, via :func:`register_interaction`.
    """

    kind: ClassVar[str] = ""

    id: str
    coordinates: Coordinates
    distance: float
    duration: float
    created_at: datetime
    label: str
    interaction_count: int

    @property
    def metric(self) -> float:
        raise NotImplementedError

    @property
    def detail(self) -> float:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        """Flat, JSON-friendly representation including derived fields."""
        return {
            "id": self.id,
            "kind": self.kind,
            "coordinates": self.coordinates.as_list(),
            "distance": self.distance,
            "duration": self.duration,
            "created_at": self.created_at.isoformat(),
            "label": self.label,
            "interaction_count": self.interaction_count,
        }

    @classmethod
    def _base_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        created_at = data["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        if not isinstance(created_at, datetime):
            raise ValueError(f"Invalid created_at: {created_at!r}")
        return {
            "id": str(data["id"]),
            "coordinates": Coordinates.from_list(data["coordinates"]),
            "distance": float(data["distance"]),
            "duration": float(data["duration"]),
            "created_at": created_at,
            "label": str(data["label"]),
            "interaction_count": int(data.get("interaction_count", 0)),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workout":
        raise NotImplementedError


@dataclass
class Running(Workout):
    """Running workout; pace is minutes per kilometer."""

    kind: ClassVar[str] = RUNNING

    cadence: float
    pace: float

    @property
    def metric(self) -> float:
        return self.pace

    @property
    def detail(self) -> float:
        return self.cadence

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["cadence"] = self.cadence
        payload["pace"] = self.pace
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Running":
        return cls(
            **cls._base_fields(data),
            cadence=float(data["cadence"]),
            pace=float(data["pace"]),
        )


@dataclass
class Cycling(Workout):
    """Cycling workout; speed is kilometers per hour."""

    kind: ClassVar[str] = CYCLING

    elevation_gain: float
    speed: float

    @property
    def metric(self) -> float:
        return self.speed

    @property
    def detail(self) -> float:
        return self.elevation_gain

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["elevation_gain"] = self.elevation_gain
        payload["speed"] = self.speed
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cycling":
        return cls(
            **cls._base_fields(data),
            elevation_gain=float(data["elevation_gain"]),
            speed=float(data["speed"]),
        )


WORKOUT_TYPES: Dict[str, Type[Workout]] = {RUNNING: Running, CYCLING: Cycling}


def workout_from_dict(data: Dict[str, Any]) -> Workout:
    """Rebuild the concrete workout variant named by ``data['kind']``."""
    kind = data.get("kind")
    workout_cls = WORKOUT_TYPES.get(str(kind))
    if workout_cls is None:
        raise ValueError(f"Unknown workout kind: {kind!r}")
    return workout_cls.from_dict(data)


def _require_positive(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value) or value <= 0:
            raise InvalidMetricError(f"{name} must be a positive number, got {value!r}")


def create_running(
    coordinates: Coordinates,
    distance: float,
    duration: float,
    cadence: float,
    now: Optional[datetime] = None,
    workout_id: Optional[str] = None,
) -> Running:
    """Create a running record and compute its pace."""
    _require_positive(distance=distance, duration=duration, cadence=cadence)
    created_at = now or datetime.now()
    return Running(
        id=workout_id or new_workout_id(),
        coordinates=coordinates,
        distance=distance,
        duration=duration,
        created_at=created_at,
        label=describe(RUNNING, created_at),
        interaction_count=0,
        cadence=cadence,
        pace=duration / distance,
    )


def create_cycling(
    coordinates: Coordinates,
    distance: float,
    duration: float,
    elevation_gain: float,
    now: Optional[datetime] = None,
    workout_id: Optional[str] = None,
) -> Cycling:
    """Create a cycling record and compute its speed.

    Elevation gain may be negative; a net descent is a valid ride.
    """
    _require_positive(distance=distance, duration=duration)
    if not math.isfinite(elevation_gain):
        raise InvalidMetricError(f"elevation_gain must be finite, got {elevation_gain!r}")
    created_at = now or datetime.now()
    return Cycling(
        id=workout_id or new_workout_id(),
        coordinates=coordinates,
        distance=distance,
        duration=duration,
        created_at=created_at,
        label=describe(CYCLING, created_at),
        interaction_count=0,
        elevation_gain=elevation_gain,
        speed=distance / (duration / 60),
    )


def register_interaction(workout: Workout) -> int:
    """Count one selection of ``workout`` and return the new total."""
    workout.interaction_count += 1
    return workout.interaction_count
