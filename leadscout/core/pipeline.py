"""Business ingestion: fan out to sources, merge, dedupe, canonicalize, rank."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from leadscout.core.config import Settings
from leadscout.core.store import ProspectStore
from leadscout.models import Business, Candidate
from leadscout.sources.base import SourceAdapter
from leadscout.sources.google import GooglePlacesSource
from leadscout.sources.openstreetmap import OpenStreetMapSource
from leadscout.sources.sample import SampleBusinessSource
from leadscout.sources.serpapi import SerpApiMapsSource

logger = logging.getLogger(__name__)

MIN_RADIUS_KM = 1
MAX_RADIUS_KM = 50


@dataclass
class IngestionResult:
    businesses: List[Business]
    total_found: int
    no_website_count: int
    ranked: List[Business] = field(default_factory=list, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "businesses": [business.to_dict() for business in self.businesses],
            "totalFound": self.total_found,
            "noWebsiteCount": self.no_website_count,
        }


def dedupe_candidates(candidates: Sequence[Candidate]) -> List[Candidate]:
    """Drop later candidates whose exact ``(name, address)`` pair was already seen."""
    seen = set()
    unique: List[Candidate] = []
    for candidate in candidates:
        key = (candidate.name, candidate.address)
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def rank_businesses(businesses: Sequence[Business]) -> List[Business]:
    """Stable sort putting businesses without a website first."""
    return sorted(businesses, key=lambda business: business.has_website)


class IngestionPipeline:
    def __init__(
        self,
        store: ProspectStore,
        sources: Sequence[SourceAdapter],
        fallback_sources: Sequence[SourceAdapter] = (),
    ) -> None:
        if not sources and not fallback_sources:
            raise ValueError("at least one source adapter is required")
        self.store = store
        self.sources = list(sources)
        self.fallback_sources = list(fallback_sources)

    def ingest(self, location: str, category: Optional[str], radius_km: int) -> IngestionResult:
        location = (location or "").strip()
        if not location:
            raise ValueError("location must be a non-empty string")
        if not MIN_RADIUS_KM <= radius_km <= MAX_RADIUS_KM:
            raise ValueError(f"radius must be between {MIN_RADIUS_KM} and {MAX_RADIUS_KM}")
        category = (category or "").strip()

        logger.info("Ingesting location=%s category=%s radius=%s", location, category or "all", radius_km)
        candidates = self.collect(location, category, radius_km)
        unique = dedupe_candidates(candidates)
        logger.info("Merged %d candidates into %d unique entries", len(candidates), len(unique))

        ranked = rank_businesses(self._canonicalize(unique))
        no_website = [business for business in ranked if not business.has_website]

        self.store.create_search_history(
            location=location,
            radius=radius_km,
            category=category or None,
            results_count=len(ranked),
            no_website_count=len(no_website),
        )
        return IngestionResult(
            businesses=no_website,
            total_found=len(ranked),
            no_website_count=len(no_website),
            ranked=ranked,
        )

    def collect(self, location: str, category: str, radius_km: float) -> List[Candidate]:
        """Candidates from the active sources, falling back when every one of them failed."""
        candidates, failures = self._fan_out(self.sources, location, category, radius_km)
        if self.fallback_sources and failures == len(self.sources):
            if self.sources:
                logger.warning("All primary sources failed; using fallback sources")
            fallback, _ = self._fan_out(self.fallback_sources, location, category, radius_km)
            candidates.extend(fallback)
        return candidates

    def _fan_out(
        self,
        sources: Sequence[SourceAdapter],
        location: str,
        category: str,
        radius_km: float,
    ) -> Tuple[List[Candidate], int]:
        if not sources:
            return [], 0

        candidates: List[Candidate] = []
        failures = 0
        with ThreadPoolExecutor(max_workers=len(sources)) as executor:
            futures = [executor.submit(source.search, location, category, radius_km) for source in sources]
            # results merge in source order, not completion order
            for source, future in zip(sources, futures):
                try:
                    found = future.result()
                except Exception as exc:  # noqa: BLE001
                    failures += 1
                    logger.warning("Source %s failed: %s", source.name, exc)
                    continue
                logger.info("Source %s returned %d candidates", source.name, len(found))
                candidates.extend(found)
        return candidates, failures

    def _canonicalize(self, candidates: Sequence[Candidate]) -> List[Business]:
        businesses: List[Business] = []
        seen_ids = set()
        for candidate in candidates:
            business = self.store.get_by_external_id(candidate.external_id)
            if business is None:
                business = self.store.create(candidate)
            if business.id in seen_ids:
                continue
            seen_ids.add(business.id)
            businesses.append(business)
        return businesses


def build_sources(settings: Settings) -> Tuple[List[SourceAdapter], List[SourceAdapter]]:
    """Return ``(primary, fallback)`` source sets for the configured credentials."""
    primary: List[SourceAdapter] = []
    if settings.google_api_key:
        primary.append(GooglePlacesSource(settings.google_api_key, max_results=settings.max_place_results))
    if settings.serpapi_api_key:
        primary.append(SerpApiMapsSource(settings.serpapi_api_key))

    free: List[SourceAdapter] = [OpenStreetMapSource()]
    if settings.enable_sample_source:
        free.append(SampleBusinessSource())

    if not primary:
        return free, []
    return primary, free


def build_pipeline(settings: Settings, store: ProspectStore) -> IngestionPipeline:
    primary, fallback = build_sources(settings)
    logger.info(
        "Configured sources: %s (fallback: %s)",
        [source.name for source in primary],
        [source.name for source in fallback],
    )
    return IngestionPipeline(store, primary, fallback)
