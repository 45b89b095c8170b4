"""Static constants and mappings for the workout map CLI."""

from __future__ import annotations

RUNNING = "running"
CYCLING = "cycling"
WORKOUT_KINDS = (RUNNING, CYCLING)

MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

KIND_ICONS = {RUNNING: "🏃‍♂️", CYCLING: "🚴‍♀️"}
DURATION_ICON = "⏱"
METRIC_ICON = "⚡️"
DETAIL_ICONS = {RUNNING: "🦶🏼", CYCLING: "⛰"}

METRIC_UNITS = {RUNNING: "min/km", CYCLING: "km/h"}
DETAIL_UNITS = {RUNNING: "spm", CYCLING: "m"}

DEFAULT_ZOOM_LEVEL = 10

TILE_URL = "https://{s}.tile.openstreetmap.fr/hot/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)

LOCATION_LOOKUP_URL = "https://ipapi.co/json/"

STORAGE_KEY = "workouts"
STORAGE_FORMAT_VERSION = 1

MSG_INVALID_DATA = "Data is incorrect!"
MSG_NO_POSITION = "Could not get your position"
MSG_STORAGE_WRITE_FAILED = "Could not save workouts; they are kept for this session only"
