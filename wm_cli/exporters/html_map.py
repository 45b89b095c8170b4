"""Standalone Leaflet page showing one popup marker per workout."""

from __future__ import annotations

import html
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from wm_cli.core.constants import DEFAULT_ZOOM_LEVEL, TILE_ATTRIBUTION, TILE_URL
from wm_cli.core.models import Coordinates


class HtmlMapView:
    """Map view that accumulates state and renders it as a Leaflet page."""

    def __init__(self, tile_url: str = TILE_URL, attribution: str = TILE_ATTRIBUTION) -> None:
        self.tile_url = tile_url
        self.attribution = attribution
        self.center: Optional[Coordinates] = None
        self.zoom_level = DEFAULT_ZOOM_LEVEL
        self.markers: List[Dict[str, Any]] = []

    def center_on(self, coordinates: Coordinates, zoom_level: int) -> None:
        self.center = coordinates
        self.zoom_level = zoom_level

    def add_marker(self, coordinates: Coordinates, popup_content: str, style_class: str) -> None:
        self.markers.append(
            {
                "coordinates": coordinates.as_list(),
                "popup": html.escape(popup_content),
                "className": style_class,
            }
        )

    def render(self, title: str = "Workouts") -> str:
        """Render the page; an uncentered map falls back to a world view."""
        center = self.center.as_list() if self.center else [0.0, 0.0]
        zoom = self.zoom_level if self.center else 2

        return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <link rel="stylesheet" href="https://unpkg.com/leaflet@1.9.4/dist/leaflet.css">
    <style>
        body {{ margin: 0; padding: 0; }}
        #map {{ position: absolute; top: 0; bottom: 0; width: 100%; }}
        .leaflet-popup .leaflet-popup-content-wrapper {{ border-radius: 5px; padding-right: 0.6rem; }}
        .leaflet-popup .leaflet-popup-content {{ font-size: 1.1rem; }}
        .running-popup .leaflet-popup-content-wrapper {{ border-left: 5px solid #00c46a; }}
        .cycling-popup .leaflet-popup-content-wrapper {{ border-left: 5px solid #ffb545; }}
    </style>
</head>
<body>
    <div id="map"></div>
    <script src="https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"></script>
    <script>
        var map = L.map('map').setView({json.dumps(center)}, {zoom});

        L.tileLayer({json.dumps(self.tile_url)}, {{
            attribution: {json.dumps(self.attribution)}
        }}).addTo(map);

        var markers = {json.dumps(self.markers)};
        markers.forEach(function (marker) {{
            L.marker(marker.coordinates)
                .addTo(map)
                .bindPopup(L.popup({{
                    maxWidth: 250,
                    minWidth: 100,
                    autoClose: false,
                    closeOnClick: false,
                    className: marker.className
                }}))
                .setPopupContent(marker.popup)
                .openPopup();
        }});
    </script>
</body>
</html>
"""

    def write(self, path: Path, title: str = "Workouts") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(title), encoding="utf-8")
        return path
