"""SerpAPI Google Maps source adapter."""

import logging
from typing import List

from leadscout.etl.transform import SEARCH_CATEGORY_LABELS, normalize_search_category, serpapi_result_to_candidate
from leadscout.models import Candidate
from leadscout.sources.base import SourceAdapter, SourceError
from leadscout.vendors.serpapi_maps import extract_items, fetch_from_serpapi

logger = logging.getLogger(__name__)


class SerpApiMapsSource(SourceAdapter):
    """Text query against SerpAPI's Google Maps engine; the radius is not forwarded."""

    name = "serpapi_google_maps"

    def __init__(self, api_key: str) -> None:
        if not api_key:
            raise ValueError("SerpAPI API key is required")
        self.api_key = api_key

    def search(self, location: str, category: str, radius_km: float) -> List[Candidate]:
        key = normalize_search_category(category)
        subject = SEARCH_CATEGORY_LABELS.get(key) or "businesses"
        query = f"{subject} in {location}"
        try:
            data = fetch_from_serpapi(query, self.api_key)
        except Exception as exc:  # noqa: BLE001
            raise SourceError(f"SerpAPI search failed for {query!r}: {exc}") from exc

        candidates: List[Candidate] = []
        for raw in extract_items(data):
            if not isinstance(raw, dict):
                continue
            candidate = serpapi_result_to_candidate(raw)
            if candidate is not None:
                candidates.append(candidate)
        logger.info("Parsed %s candidates from SerpAPI response.", len(candidates))
        return candidates
