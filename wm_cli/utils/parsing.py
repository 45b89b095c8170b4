"""Parsing helpers for form input and workout import files."""

from __future__ import annotations

import json
import math
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def parse_number(raw: Any) -> float:
    """Parse a form field the way an HTML number input reads.

    Blank input reads as 0, anything unparseable as NaN.
    """
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        return math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return 0.0
    if not _NUMBER_RE.match(text):
        return math.nan
    return float(text)


def is_valid_number(value: float) -> bool:
    """Finite and non-zero."""
    return math.isfinite(value) and value != 0


def load_workout_input(file_path: Optional[Path], read_stdin: bool = False, stdin_text: str = "") -> List[Dict[str, Any]]:
    """Load workout entries from a JSON/YAML file or stdin text."""
    raw_data: Any
    if file_path:
        text = file_path.read_text()
        if file_path.suffix.lower() in {".yaml", ".yml"}:
            raw_data = yaml.safe_load(text)
        else:
            raw_data = json.loads(text)
    elif read_stdin:
        text = stdin_text.strip()
        if not text:
            return []
        try:
            raw_data = json.loads(text)
        except json.JSONDecodeError:
            raw_data = yaml.safe_load(text)
    else:
        return []

    if isinstance(raw_data, dict):
        if isinstance(raw_data.get("workouts"), list):
            raw_data = raw_data["workouts"]
        else:
            return [raw_data]
    if isinstance(raw_data, list):
        return [item for item in raw_data if isinstance(item, dict)]
    return []
