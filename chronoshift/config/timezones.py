"""Zone labels and the static world-map hotspot table."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class TimezoneOption:
    value: str
    label: str


@dataclass(frozen=True)
class MapHotspot:
    id: str
    name: str
    timezone: str
    x: float  # percent from the left edge of the map image
    y: float  # percent from the top edge


MAP_HOTSPOTS: tuple[MapHotspot, ...] = (
    MapHotspot("london", "London, UK", "Europe/London", 49.5, 34),
    MapHotspot("new-york", "New York, USA", "America/New_York", 28, 38.5),
    MapHotspot("tokyo", "Tokyo, Japan", "Asia/Tokyo", 83, 39.5),
    MapHotspot("sydney", "Sydney, Australia", "Australia/Sydney", 87, 74),
    MapHotspot("los-angeles", "Los Angeles, USA", "America/Los_Angeles", 18, 40.5),
    MapHotspot("paris", "Paris, France", "Europe/Paris", 50.5, 36),
    MapHotspot("moscow", "Moscow, Russia", "Europe/Moscow", 59, 32.5),
    MapHotspot("dubai", "Dubai, UAE", "Asia/Dubai", 63.5, 47.5),
    MapHotspot("sao-paulo", "São Paulo, Brazil", "America/Sao_Paulo", 35.5, 70),
    MapHotspot("beijing", "Beijing, China", "Asia/Shanghai", 77.5, 38.5),
    MapHotspot("delhi", "New Delhi, India", "Asia/Kolkata", 69.5, 44.5),
    MapHotspot("cairo", "Cairo, Egypt", "Africa/Cairo", 56.5, 44),
    MapHotspot("johannesburg", "Johannesburg, SA", "Africa/Johannesburg", 56, 71.5),
    MapHotspot("buenos-aires", "Buenos Aires, Arg.", "America/Argentina/Buenos_Aires", 32, 75.5),
    MapHotspot("mexico-city", "Mexico City, Mex.", "America/Mexico_City", 22.5, 49.5),
)


def format_timezone_for_display(identifier: str | None) -> str:
    """Return ``America / New York`` style labels for zone identifiers."""
    if not identifier:
        return "N/A"
    return identifier.replace("_", " ").replace("/", " / ")


def location_name(identifier: str | None) -> str:
    label = format_timezone_for_display(identifier)
    return label.split(" / ")[-1] or label


def build_timezone_options(zones: Iterable[str]) -> list[TimezoneOption]:
    """Return labelled options for the given zone identifiers, de-duplicated in order."""
    return [
        TimezoneOption(value=zone, label=format_timezone_for_display(zone))
        for zone in dict.fromkeys(zones)
        if zone
    ]
