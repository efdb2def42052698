"""OpenStreetMap (Nominatim + Overpass) source adapter."""

import logging
from typing import List

import requests

from leadscout.etl.transform import OSM_DEFAULT_SELECTOR, OSM_SELECTORS, normalize_search_category, osm_element_to_candidate
from leadscout.models import Candidate
from leadscout.sources.base import SourceAdapter, SourceError
from leadscout.vendors import openstreetmap

logger = logging.getLogger(__name__)


class OpenStreetMapSource(SourceAdapter):
    name = "openstreetmap"

    def __init__(self, limit: int = 10) -> None:
        self.limit = limit

    def search(self, location: str, category: str, radius_km: float) -> List[Candidate]:
        selector = OSM_SELECTORS.get(normalize_search_category(category), OSM_DEFAULT_SELECTOR)
        try:
            lat, lon = openstreetmap.geocode(location)
        except openstreetmap.OpenStreetMapError:
            logger.info("Nominatim found no match for %s", location)
            return []
        except (requests.RequestException, ValueError, KeyError) as exc:
            raise SourceError(f"Nominatim geocoding failed for {location!r}: {exc}") from exc

        query = openstreetmap.build_overpass_query(selector, lat, lon, int(radius_km * 1000))
        try:
            elements = openstreetmap.overpass(query)
        except (openstreetmap.OpenStreetMapError, requests.RequestException, ValueError) as exc:
            raise SourceError(f"Overpass query failed for {location!r}: {exc}") from exc

        candidates: List[Candidate] = []
        for element in elements:
            candidate = osm_element_to_candidate(element, fallback=(lat, lon))
            if candidate is None:
                continue
            candidates.append(candidate)
            if len(candidates) >= self.limit:
                break
        logger.info("OpenStreetMap returned %d candidates for %s", len(candidates), location)
        return candidates
