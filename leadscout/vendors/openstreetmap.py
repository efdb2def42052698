"""Client utilities for the free OpenStreetMap services (Nominatim and Overpass)."""

import logging
from typing import Any, Dict, List, Tuple

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
_OVERPASS_URL = "https://overpass-api.de/api/interpreter"
USER_AGENT = "LeadScout/1.0"


class OpenStreetMapError(RuntimeError):
    """Raised when Nominatim or Overpass cannot serve a request."""


def geocode(location: str) -> Tuple[float, float]:
    """Return ``(lat, lon)`` for the best Nominatim match."""
    response = _SESSION.get(
        _NOMINATIM_URL,
        params={"q": location, "format": "json", "limit": 1},
        headers={"User-Agent": USER_AGENT},
        timeout=10,
    )
    response.raise_for_status()
    matches = response.json()
    if not matches:
        raise OpenStreetMapError(f"Could not geocode location: {location}")
    return float(matches[0]["lat"]), float(matches[0]["lon"])


def build_overpass_query(selector: str, lat: float, lon: float, radius_m: int) -> str:
    """Named nodes and ways matching ``selector`` within ``radius_m`` of the point."""
    return (
        "[out:json][timeout:25];\n"
        "(\n"
        f'  node[{selector}]["name"](around:{radius_m},{lat},{lon});\n'
        f'  way[{selector}]["name"](around:{radius_m},{lat},{lon});\n'
        ");\n"
        "out center;"
    )


def overpass(query: str) -> List[Dict[str, Any]]:
    response = _SESSION.post(
        _OVERPASS_URL,
        data={"data": query},
        headers={"User-Agent": USER_AGENT},
        timeout=30,
    )
    response.raise_for_status()
    payload = response.json()
    elements = payload.get("elements")
    if elements is None:
        logger.error("overpass returned no elements: remark=%s", payload.get("remark"))
        raise OpenStreetMapError(payload.get("remark") or "Overpass response missing elements")
    return elements
