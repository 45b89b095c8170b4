"""Markdown workout export functionality."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Sequence

from wm_cli.core.models import Workout
from wm_cli.utils.formatting import format_detail, format_metric, format_number, summary_details


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-") or "workout"


def workout_to_markdown(workout: Workout) -> str:
    """Convert a workout to markdown with frontmatter."""
    label_yaml = workout.label.replace('"', '\\"')
    details = "\n".join(f"- {icon} **{value}** {unit}" for icon, value, unit in summary_details(workout))
    return (
        f"---\n"
        f"id: \"{workout.id}\"\n"
        f"kind: \"{workout.kind}\"\n"
        f"label: \"{label_yaml}\"\n"
        f"date: \"{workout.created_at.strftime('%Y-%m-%d')}\"\n"
        f"latitude: {workout.coordinates.latitude}\n"
        f"longitude: {workout.coordinates.longitude}\n"
        f"distance_km: {format_number(workout.distance)}\n"
        f"duration_min: {format_number(workout.duration)}\n"
        f"---\n\n"
        f"# {workout.label}\n\n"
        f"{details}\n\n"
        f"Location: {workout.coordinates}\n"
    )


def workout_filename(workout: Workout) -> str:
    return f"{workout.created_at.strftime('%Y-%m-%d')}-{_slug(workout.label)}-{workout.id}.md"


def write_workout_markdown(output_dir: Path, workout: Workout, rewrite: bool = False) -> Path:
    """Write one workout markdown file and return output path."""
    out_dir = output_dir / workout.kind
    out_path = out_dir / workout_filename(workout)

    if out_path.exists() and not rewrite:
        return out_path

    out_dir.mkdir(parents=True, exist_ok=True)
    out_path.write_text(workout_to_markdown(workout), encoding="utf-8")
    return out_path


def generate_index(output_dir: Path, workouts: Sequence[Workout]) -> Path:
    """Write INDEX.md listing workouts newest first, as the list view shows them."""
    lines: List[str] = [
        "# All Workouts",
        "",
        f"_{len(workouts)} workouts_",
        "",
        "| Date | Workout | Distance | Duration | Pace/Speed | Cadence/Elevation |",
        "|------|---------|----------|----------|------------|-------------------|",
    ]
    for workout in reversed(list(workouts)):
        link = f"[{workout.label}]({workout.kind}/{workout_filename(workout)})"
        lines.append(
            f"| {workout.created_at.strftime('%Y-%m-%d')} | {link} | {format_number(workout.distance)} km"
            f" | {format_number(workout.duration)} min | {format_metric(workout)} | {format_detail(workout)} |"
        )
    lines.append("")
    path = output_dir / "INDEX.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines), encoding="utf-8")
    return path
