"""Client utilities for the Google Places and Geocoding APIs."""

import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/place"
_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
_OK_STATUSES = {"OK", "ZERO_RESULTS"}
_DETAIL_FIELDS = (
    "place_id,name,formatted_address,formatted_phone_number,website,types,geometry,rating,user_ratings_total"
)


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


def _get(url: str, params: Dict[str, Any], operation: str) -> Dict[str, Any]:
    response = _SESSION.get(url, params=params, timeout=10)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status not in _OK_STATUSES:
        logger.error("%s failed: status=%s, error_message=%s", operation, status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status)
    return payload


def geocode(location: str, api_key: str) -> Dict[str, float]:
    """Resolve a free-form location into ``{"lat": ..., "lng": ...}``."""
    payload = _get(_GEOCODE_URL, {"address": location, "key": api_key}, "geocode")
    results = payload.get("results") or []
    if not results:
        raise GooglePlacesError(f"Could not geocode location: {location}")
    return results[0]["geometry"]["location"]


def nearby_search(
    lat: float,
    lng: float,
    radius_m: int,
    api_key: str,
    place_type: str = "establishment",
    keyword: Optional[str] = None,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "location": f"{lat},{lng}",
        "radius": radius_m,
        "type": place_type,
        "key": api_key,
    }
    if keyword:
        params["keyword"] = keyword
    return _get(f"{_BASE_URL}/nearbysearch/json", params, "nearby_search")


def place_details(place_id: str, api_key: str) -> Dict[str, Any]:
    params = {"place_id": place_id, "key": api_key, "fields": _DETAIL_FIELDS}
    payload = _get(f"{_BASE_URL}/details/json", params, "place_details")
    return payload.get("result", {})
