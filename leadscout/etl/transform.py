"""Utilities for transforming provider responses into ``Candidate`` objects."""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from leadscout.models import DEFAULT_CATEGORY, Candidate

logger = logging.getLogger(__name__)

UNKNOWN_ADDRESS = "Address not specified"

# Google place type -> prospect category; first mapped type wins.
GOOGLE_TYPE_CATEGORIES = {
    "restaurant": "Restaurant",
    "food": "Restaurant",
    "meal_takeaway": "Restaurant",
    "cafe": "Restaurant",
    "bakery": "Restaurant",
    "bar": "Restaurant",
    "store": "Retail",
    "clothing_store": "Retail",
    "shoe_store": "Retail",
    "electronics_store": "Retail",
    "furniture_store": "Retail",
    "jewelry_store": "Retail",
    "book_store": "Retail",
    "beauty_salon": "Beauty & Wellness",
    "hair_care": "Beauty & Wellness",
    "spa": "Beauty & Wellness",
    "gym": "Beauty & Wellness",
    "dentist": "Healthcare",
    "doctor": "Healthcare",
    "hospital": "Healthcare",
    "pharmacy": "Healthcare",
    "veterinary_care": "Healthcare",
    "lawyer": "Professional Services",
    "accounting": "Professional Services",
    "real_estate_agency": "Professional Services",
    "insurance_agency": "Professional Services",
    "car_repair": "Automotive",
    "car_dealer": "Automotive",
    "gas_station": "Automotive",
    "lodging": "Hospitality",
    "travel_agency": "Hospitality",
}

# Search category -> (Google place type, keyword) for nearby search.
GOOGLE_SEARCH_TYPES = {
    "restaurant": ("restaurant", None),
    "retail": ("store", None),
    "beauty": ("beauty_salon", None),
    "professional": ("establishment", "professional services"),
    "automotive": ("car_repair", None),
    "healthcare": ("doctor", None),
    "hospitality": ("lodging", None),
    "home": ("establishment", "home services"),
}

# Search category -> Overpass tag selector.
OSM_SELECTORS = {
    "restaurant": '"amenity"~"restaurant|cafe|fast_food"',
    "retail": '"shop"',
    "beauty": '"shop"~"beauty|hairdresser"',
    "professional": '"office"',
    "automotive": '"shop"~"car_repair|car"',
}
OSM_DEFAULT_SELECTOR = '"amenity"'

SEARCH_CATEGORY_LABELS = {
    "restaurant": "Restaurant",
    "retail": "Retail",
    "beauty": "Beauty & Wellness",
    "professional": "Professional Services",
    "automotive": "Automotive",
    "healthcare": "Healthcare",
    "hospitality": "Hospitality",
}

_SEARCH_CATEGORY_ALIASES = {label.lower(): key for key, label in SEARCH_CATEGORY_LABELS.items()}


def normalize_search_category(category: Optional[str]) -> str:
    """Map UI values and category labels onto search keys; "" means all types."""
    if not category:
        return ""
    value = category.strip().lower()
    if value in ("all", "any"):
        return ""
    return _SEARCH_CATEGORY_ALIASES.get(value, value)


def categorize_place_types(types: Iterable[str]) -> str:
    for type_name in types or []:
        category = GOOGLE_TYPE_CATEGORIES.get(type_name)
        if category:
            return category
    return DEFAULT_CATEGORY


def categorize_osm_tags(tags: Dict[str, Any]) -> str:
    amenity = tags.get("amenity")
    if amenity in ("restaurant", "cafe", "fast_food"):
        return "Restaurant"
    if amenity == "bank":
        return "Professional Services"
    shop = tags.get("shop")
    if shop:
        if shop in ("beauty", "hairdresser"):
            return "Beauty & Wellness"
        if shop in ("car_repair", "car"):
            return "Automotive"
        return "Retail"
    if tags.get("office"):
        return "Professional Services"
    return DEFAULT_CATEGORY


def build_osm_address(tags: Dict[str, Any]) -> str:
    parts = [tags.get("addr:housenumber"), tags.get("addr:street"), tags.get("addr:city")]
    return " ".join(part for part in parts if part) or UNKNOWN_ADDRESS


def place_details_to_candidate(details: Dict[str, Any]) -> Candidate:
    location = details.get("geometry", {}).get("location", {})
    return Candidate(
        external_id=details["place_id"],
        name=details.get("name", "").strip(),
        address=_strip_or_none(details.get("formatted_address")) or UNKNOWN_ADDRESS,
        phone=_strip_or_none(details.get("formatted_phone_number")),
        website=_strip_or_none(details.get("website")),
        category=categorize_place_types(details.get("types", [])),
        latitude=_safe_float(location.get("lat")),
        longitude=_safe_float(location.get("lng")),
        rating=_safe_float(details.get("rating")),
        review_count=_safe_int(details.get("user_ratings_total")),
        source="google_places",
    )


def osm_element_to_candidate(element: Dict[str, Any], fallback: Tuple[float, float]) -> Optional[Candidate]:
    tags = element.get("tags") or {}
    name = (tags.get("name") or "").strip()
    if not name or element.get("id") is None:
        return None

    center = element.get("center") or {}
    latitude = element.get("lat") or center.get("lat") or fallback[0]
    longitude = element.get("lon") or center.get("lon") or fallback[1]
    return Candidate(
        external_id=f"osm-{element['id']}",
        name=name,
        address=build_osm_address(tags),
        phone=_strip_or_none(tags.get("phone") or tags.get("contact:phone")),
        email=_strip_or_none(tags.get("email") or tags.get("contact:email")),
        website=_strip_or_none(tags.get("website") or tags.get("contact:website")),
        category=categorize_osm_tags(tags),
        latitude=_safe_float(latitude),
        longitude=_safe_float(longitude),
        source="openstreetmap",
    )


def serpapi_result_to_candidate(raw: Dict[str, Any]) -> Optional[Candidate]:
    name = (raw.get("title") or raw.get("name") or "").strip()
    external_id = raw.get("place_id") or raw.get("data_id")
    if not name or not external_id:
        logger.debug("Skipping SerpAPI result without name or id: %s", str(raw)[:200])
        return None

    gps = raw.get("gps_coordinates") or {}
    types = raw.get("types") or []
    if raw.get("type"):
        types = [raw["type"]] + list(types)
    return Candidate(
        external_id=f"serpapi-{external_id}",
        name=name,
        address=_strip_or_none(raw.get("address")) or UNKNOWN_ADDRESS,
        phone=_strip_or_none(raw.get("phone")),
        website=_strip_or_none(raw.get("website")),
        category=_categorize_labels(types),
        latitude=_safe_float(gps.get("latitude")),
        longitude=_safe_float(gps.get("longitude")),
        rating=_safe_float(raw.get("rating")),
        review_count=_safe_int(raw.get("reviews_count") or raw.get("reviews")),
        source="serpapi_google_maps",
    )


def _categorize_labels(labels: Iterable[str]) -> str:
    # SerpAPI reports human labels ("Coffee shop"); match them against Google type names.
    normalized = [str(label).strip().lower().replace(" ", "_") for label in labels]
    category = categorize_place_types(normalized)
    if category != DEFAULT_CATEGORY:
        return category
    for label in normalized:
        category = categorize_place_types(label.split("_"))
        if category != DEFAULT_CATEGORY:
            return category
    return DEFAULT_CATEGORY


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)

    if isinstance(value, str):
        digits = "".join(ch for ch in value if ch.isdigit())
        if digits:
            return int(digits)
    return None
