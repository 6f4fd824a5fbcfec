"""Application-wide constants for the Rehome operations console."""

from __future__ import annotations

# Service cities grouped by weekday route; overridable via CITY_UNIVERSE
DEFAULT_CITY_UNIVERSE = (
    # Monday route
    "Amsterdam",
    "Utrecht",
    "Almere",
    "Haarlem",
    "Zaanstad",
    "Amersfoort",
    "s-Hertogenbosch",
    "Hoofddorp",
    # Tuesday route
    "Rotterdam",
    "The Hague",
    "Breda",
    "Leiden",
    "Dordrecht",
    "Zoetermeer",
    "Delft",
    # Wednesday route
    "Eindhoven",
    "Maastricht",
    # Thursday route
    "Tilburg",
    "Groningen",
    "Nijmegen",
    "Enschede",
    "Arnhem",
    "Apeldoorn",
    "Deventer",
    "Zwolle",
)

# Text constraints
MAX_REASON_LENGTH = 255
MAX_CITY_NAME_LENGTH = 100

# Wire format for time-of-day values (zero-padded, minute resolution)
TIME_OF_DAY_FORMAT = "%H:%M"
TIME_OF_DAY_WITH_SECONDS_FORMAT = "%H:%M:%S"

# API metadata
BRAND_NAME = "Rehome"
API_TITLE = f"{BRAND_NAME} Operations API"
API_DESCRIPTION = f"Scheduling and availability API for the {BRAND_NAME} operations console"
API_VERSION = "1.0.0"
