"""Runtime state container for CLI context."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from rich.console import Console

from wm_cli.core.constants import DEFAULT_ZOOM_LEVEL


@dataclass
class CLIState:
    """Global CLI options, loaded configuration and resolved storage file."""

    json_output: bool
    plain_output: bool
    verbose: bool
    quiet: bool
    config_path: Path
    config: Dict[str, Any]
    console: Console
    storage_path: Path

    @property
    def zoom_level(self) -> int:
        return int(self.config.get("map", {}).get("zoom_level", DEFAULT_ZOOM_LEVEL))

    @property
    def persist_interactions(self) -> bool:
        return bool(self.config.get("storage", {}).get("persist_interactions", False))
