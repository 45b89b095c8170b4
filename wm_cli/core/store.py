"""Durable persistence of the session's workout records."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from wm_cli.core.constants import STORAGE_FORMAT_VERSION, STORAGE_KEY
from wm_cli.core.models import Workout, workout_from_dict

logger = logging.getLogger(__name__)


class StorageReadError(RuntimeError):
    """Raised when the durable slot cannot be read or decoded."""


class StorageWriteError(RuntimeError):
    """Raised when the durable slot cannot be written."""


class KeyValueSlot(Protocol):
    """Minimal string key-value storage, shaped like browser localStorage."""

    def set_item(self, key: str, value: str) -> None: ...

    def get_item(self, key: str) -> Optional[str]: ...

    def remove_item(self, key: str) -> None: ...


class MemorySlot:
    """In-process key-value slot."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.items: Dict[str, str] = dict(initial or {})

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileSlot:
    """Key-value slot backed by a JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageReadError(f"Cannot read storage file {self.path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise StorageReadError(f"Storage file {self.path} must contain a JSON object")
        return {str(key): value for key, value in loaded.items() if isinstance(value, str)}

    def _write_all(self, items: Dict[str, str]) -> None:
        tmp_name: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=".wm-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(json.dumps(items, indent=2) + "\n")
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageWriteError(f"Cannot write storage file {self.path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        try:
            items = self._read_all()
        except StorageReadError:
            logger.warning("Overwriting unreadable storage file %s", self.path)
            items = {}
        items[key] = value
        self._write_all(items)

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def remove_item(self, key: str) -> None:
        try:
            items = self._read_all()
        except StorageReadError:
            logger.warning("Resetting unreadable storage file %s", self.path)
            self._write_all({})
            return
        if key in items:
            del items[key]
            self._write_all(items)


def _decode_items(raw: str) -> List[Any]:
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StorageReadError(f"Stored workouts are not valid JSON: {exc}") from exc

    # Unversioned documents are a bare list of records.
    if isinstance(document, list):
        return document
    if isinstance(document, dict) and isinstance(document.get("workouts"), list):
        version = document.get("version")
        if version != STORAGE_FORMAT_VERSION:
            logger.warning("Reading workouts stored with format version %r", version)
        return document["workouts"]
    raise StorageReadError("Stored workouts have an unexpected shape")


class SessionStore:
    """Save, load and clear workout records in a durable slot."""

    def __init__(self, slot: KeyValueSlot, key: str = STORAGE_KEY) -> None:
        self.slot = slot
        self.key = key

    def save(self, workouts: Sequence[Workout]) -> None:
        """Serialize every record, derived fields included."""
        document = {
            "version": STORAGE_FORMAT_VERSION,
            "workouts": [workout.to_dict() for workout in workouts],
        }
        try:
            self.slot.set_item(self.key, json.dumps(document))
        except OSError as exc:
            raise StorageWriteError(f"Cannot store workouts: {exc}") from exc
        logger.debug("Saved %d workout(s) under %r", len(workouts), self.key)

    def load(self) -> List[Workout]:
        """Return stored records as concrete variants; empty when nothing usable is stored."""
        try:
            raw = self.slot.get_item(self.key)
            if raw is None:
                return []
            items = _decode_items(raw)
        except StorageReadError as exc:
            logger.warning("Ignoring stored workouts: %s", exc)
            return []

        workouts: List[Workout] = []
        seen = set()
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                logger.warning("Skipping stored workout #%d: not an object", index)
                continue
            try:
                workout = workout_from_dict(item)
            except (KeyError, TypeError, ValueError, OverflowError) as exc:
                logger.warning("Skipping stored workout #%d: %s", index, exc)
                continue
            if workout.id in seen:
                logger.warning("Skipping stored workout #%d: duplicate id %s", index, workout.id)
                continue
            seen.add(workout.id)
            workouts.append(workout)

        logger.debug("Loaded %d workout(s) from %r", len(workouts), self.key)
        return workouts

    def clear(self) -> None:
        """Remove the stored records entirely."""
        self.slot.remove_item(self.key)
        logger.debug("Cleared stored workouts under %r", self.key)
