"""One-shot acquisition of the user's current position."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

import requests

from wm_cli.core.constants import LOCATION_LOOKUP_URL
from wm_cli.core.models import Coordinates, InvalidCoordinatesError

logger = logging.getLogger(__name__)


class GeolocationUnavailable(RuntimeError):
    """Raised when the current position cannot be determined."""


@dataclass(frozen=True)
class LocationResult:
    """Outcome of a position request: coordinates or a failure reason."""

    coordinates: Optional[Coordinates] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.coordinates is not None

    @classmethod
    def success(cls, coordinates: Coordinates) -> "LocationResult":
        return cls(coordinates=coordinates)

    @classmethod
    def failure(cls, reason: str) -> "LocationResult":
        return cls(error=reason)

    def unwrap(self) -> Coordinates:
        if self.coordinates is None:
            raise GeolocationUnavailable(self.error or "position unavailable")
        return self.coordinates


LocationCallback = Callable[[LocationResult], None]


class LocationProvider(Protocol):
    def request_current_position(self, callback: LocationCallback) -> None: ...


class NullLocationProvider:
    """Provider for hosts without any geolocation capability."""

    def request_current_position(self, callback: LocationCallback) -> None:
        callback(LocationResult.failure("geolocation is not supported"))


class FixedLocationProvider:
    """Reports a position supplied up front (flags or config)."""

    def __init__(self, coordinates: Optional[Coordinates]) -> None:
        self.coordinates = coordinates

    def request_current_position(self, callback: LocationCallback) -> None:
        if self.coordinates is None:
            callback(LocationResult.failure("no fixed position configured"))
            return
        callback(LocationResult.success(self.coordinates))


class IPLocationProvider:
    """Approximates the position from the public IP address."""

    def __init__(self, lookup_url: str = LOCATION_LOOKUP_URL, timeout_seconds: float = 10) -> None:
        self.lookup_url = lookup_url
        self.timeout_seconds = timeout_seconds

    def _lookup(self) -> Coordinates:
        response = requests.get(self.lookup_url, timeout=self.timeout_seconds)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("unexpected lookup response")
        latitude = payload.get("latitude", payload.get("lat"))
        longitude = payload.get("longitude", payload.get("lon"))
        return Coordinates.parse(latitude, longitude)

    def request_current_position(self, callback: LocationCallback) -> None:
        try:
            coordinates = self._lookup()
        except (requests.RequestException, ValueError, InvalidCoordinatesError) as exc:
            logger.info("IP location lookup failed: %s", exc)
            callback(LocationResult.failure(str(exc)))
            return
        callback(LocationResult.success(coordinates))


def resolve_location_provider(
    config: Dict[str, Any],
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
) -> LocationProvider:
    """Pick a provider: explicit coordinates first, then ``location.provider``."""
    if latitude is not None or longitude is not None:
        if latitude is None or longitude is None:
            raise InvalidCoordinatesError("Both latitude and longitude are required")
        return FixedLocationProvider(Coordinates.parse(latitude, longitude))

    location_cfg = config.get("location", {})
    provider = str(location_cfg.get("provider", "ip")).lower()

    if provider == "fixed":
        lat = location_cfg.get("latitude")
        lng = location_cfg.get("longitude")
        if lat is None or lng is None:
            return FixedLocationProvider(None)
        return FixedLocationProvider(Coordinates.parse(lat, lng))
    if provider == "ip":
        return IPLocationProvider(
            lookup_url=str(location_cfg.get("lookup_url") or LOCATION_LOOKUP_URL),
            timeout_seconds=float(location_cfg.get("timeout_seconds", 10)),
        )
    if provider == "none":
        return NullLocationProvider()
    raise ValueError(f"Unknown location provider: {provider}")
