"""Formatting helpers used by views, exports and console output."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from wm_cli.core.constants import (
    DETAIL_ICONS,
    DETAIL_UNITS,
    DURATION_ICON,
    KIND_ICONS,
    METRIC_ICON,
    METRIC_UNITS,
)
from wm_cli.core.models import Workout


def format_number(value: float) -> str:
    """Render whole numbers without a trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def popup_content(workout: Workout) -> str:
    """Marker popup text, e.g. '🏃‍♂️ Running on April 14'."""
    return f"{KIND_ICONS[workout.kind]} {workout.label}"


def popup_class(workout: Workout) -> str:
    return f"{workout.kind}-popup"


def format_metric(workout: Workout) -> str:
    """Pace or speed to one decimal with its unit."""
    return f"{workout.metric:.1f} {METRIC_UNITS[workout.kind]}"


def format_detail(workout: Workout) -> str:
    return f"{format_number(workout.detail)} {DETAIL_UNITS[workout.kind]}"


def summary_details(workout: Workout) -> List[Tuple[str, str, str]]:
    """(icon, value, unit) rows shown for a workout in the list."""
    return [
        (KIND_ICONS[workout.kind], format_number(workout.distance), "km"),
        (DURATION_ICON, format_number(workout.duration), "min"),
        (METRIC_ICON, f"{workout.metric:.1f}", METRIC_UNITS[workout.kind]),
        (DETAIL_ICONS[workout.kind], format_number(workout.detail), DETAIL_UNITS[workout.kind]),
    ]


def summary_line(workout: Workout) -> str:
    """Single-line summary for plain output."""
    details = "  ".join(f"{icon} {value} {unit}" for icon, value, unit in summary_details(workout))
    return f"{workout.label}  {details}"


def workout_row(workout: Workout) -> Dict[str, Any]:
    """Flat row for tables and tab-separated output."""
    return {
        "id": workout.id,
        "kind": workout.kind,
        "label": workout.label,
        "coordinates": str(workout.coordinates),
        "distance": f"{format_number(workout.distance)} km",
        "duration": f"{format_number(workout.duration)} min",
        "metric": format_metric(workout),
        "detail": format_detail(workout),
        "clicks": str(workout.interaction_count),
    }
