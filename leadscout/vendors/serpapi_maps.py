"""SerpAPI Google Maps helpers."""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Dict, Iterable, Optional

from serpapi import GoogleSearch

logger = logging.getLogger(__name__)

RETRY_LIMIT = 2
RETRY_DELAY_SECONDS = 1.2


def build_serpapi_params(query: str, api_key: str) -> Dict[str, Any]:
    """Construct SerpAPI request parameters for the Google Maps engine."""
    if not query or not query.strip():
        raise ValueError("Query must be provided for SerpAPI lookups.")

    return {
        "engine": "google_maps",
        "q": query.strip(),
        "api_key": api_key,
        "type": "search",
    }


def fetch_from_serpapi(query: str, api_key: str) -> Dict[str, Any]:
    """Call SerpAPI Google Maps and return the raw JSON response with retry logic.

    SerpAPI charges per request; every attempt is logged so usage can be
    reconciled against the account quota.
    """
    params = build_serpapi_params(query, api_key)

    attempt = 0
    while True:
        attempt += 1
        try:
            logger.info("Calling SerpAPI (attempt %s) for query=%s", attempt, query)
            search = GoogleSearch(params)
            data = search.get_dict()
            if not data:
                raise ValueError("SerpAPI returned an empty payload.")
            if "error" in data:
                message = data.get("error") or data
                # "no results" is reported through the error field
                if "hasn't returned any results" in str(message):
                    return {"local_results": []}
                raise RuntimeError(f"SerpAPI returned an error response: {message}")
            return data
        except Exception as exc:  # noqa: BLE001
            logger.warning("SerpAPI request failed (attempt %s/%s): %s", attempt, RETRY_LIMIT + 1, exc)
            if attempt > RETRY_LIMIT:
                logger.error("SerpAPI request exhausted retries for query=%s", query)
                raise
            sleep_for = RETRY_DELAY_SECONDS + random.uniform(0, 0.8)
            time.sleep(sleep_for)


def extract_items(data: Optional[Dict[str, Any]]) -> Iterable[Any]:
    """SerpAPI sometimes returns local_results as a list or nested dict."""
    if not data:
        return []
    local_results = data.get("local_results")
    if isinstance(local_results, list):
        return local_results
    if isinstance(local_results, dict):
        logger.debug("local_results is dict with keys: %s", list(local_results.keys())[:10])
        candidate_lists = [
            local_results.get("places"),
            local_results.get("results"),
            local_results.get("local_results"),
        ]
        for maybe in candidate_lists:
            if isinstance(maybe, list):
                return maybe

    place_results = data.get("place_results")
    if isinstance(place_results, list):
        return place_results
    if isinstance(place_results, dict):
        return [place_results]

    logger.warning("SerpAPI response missing local_results iterable. keys=%s", list(data.keys())[:10])
    return []
