"""Interfaces of the presentation collaborators driven by the session controller."""

from __future__ import annotations

from typing import Protocol

from wm_cli.core.models import Coordinates, Workout


class MapView(Protocol):
    def center_on(self, coordinates: Coordinates, zoom_level: int) -> None: ...

    def add_marker(self, coordinates: Coordinates, popup_content: str, style_class: str) -> None: ...


class ListView(Protocol):
    def append_summary(self, workout: Workout) -> None: ...


class FormView(Protocol):
    def show(self) -> None: ...

    def hide(self) -> None: ...

    def clear(self) -> None: ...


class Notifier(Protocol):
    def report(self, message: str) -> None: ...
