"""JSON export helpers."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Sequence

from wm_cli import __version__
from wm_cli.core.models import Workout


def workouts_payload(workouts: Sequence[Workout]) -> Dict[str, Any]:
    """Export document: records in creation order plus per-kind totals."""
    totals: Dict[str, Dict[str, float]] = {}
    for workout in workouts:
        bucket = totals.setdefault(workout.kind, {"count": 0, "distance": 0.0, "duration": 0.0})
        bucket["count"] += 1
        bucket["distance"] += workout.distance
        bucket["duration"] += workout.duration

    return {
        "exported_at": datetime.now().isoformat(timespec="seconds"),
        "generator": f"wm-cli {__version__}",
        "workouts": [workout.to_dict() for workout in workouts],
        "summary": {"total": len(workouts), "by_kind": totals},
    }


def write_json(path: Path, payload: Any) -> Path:
    """Write payload as pretty JSON and return path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path
