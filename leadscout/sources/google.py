"""Google Places source adapter."""

import logging
from typing import List

import requests

from leadscout.etl.transform import GOOGLE_SEARCH_TYPES, normalize_search_category, place_details_to_candidate
from leadscout.models import Candidate
from leadscout.sources.base import SourceAdapter, SourceError
from leadscout.vendors import google_places

logger = logging.getLogger(__name__)


class GooglePlacesSource(SourceAdapter):
    name = "google_places"

    def __init__(self, api_key: str, max_results: int = 20) -> None:
        if not api_key:
            raise ValueError("Google Places API key is required")
        self.api_key = api_key
        self.max_results = max_results

    def search(self, location: str, category: str, radius_km: float) -> List[Candidate]:
        place_type, keyword = GOOGLE_SEARCH_TYPES.get(normalize_search_category(category), ("establishment", None))
        try:
            point = google_places.geocode(location, self.api_key)
            response = google_places.nearby_search(
                point["lat"],
                point["lng"],
                int(radius_km * 1000),
                self.api_key,
                place_type=place_type,
                keyword=keyword,
            )
        except (google_places.GooglePlacesError, requests.RequestException, KeyError) as exc:
            raise SourceError(f"Google Places search failed for {location!r}: {exc}") from exc

        results = response.get("results", [])
        logger.info("Google Places returned %d results for %s", len(results), location)

        candidates: List[Candidate] = []
        for result in results[: self.max_results]:
            place_id = result.get("place_id")
            if not place_id:
                logger.debug("Skipping result without place_id: %s", result)
                continue
            try:
                details = google_places.place_details(place_id=place_id, api_key=self.api_key)
            except (google_places.GooglePlacesError, requests.RequestException) as exc:
                logger.warning("Failed to fetch details for %s: %s", place_id, exc)
                continue
            if not details.get("place_id") or not details.get("name"):
                logger.debug("Skipping incomplete details for %s", place_id)
                continue
            candidates.append(place_details_to_candidate(details))
        return candidates
