"""Prospect store: canonical businesses and the append-only search history."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from leadscout.core.config import Settings
from leadscout.models import Business, Candidate, ContactStatus, SearchHistory

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("contact_status", "notes")


def validate_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(patch) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"fields cannot be updated: {', '.join(sorted(unknown))}")
    status = patch.get("contact_status")
    if "contact_status" in patch and status not in ContactStatus.ALL:
        raise ValueError(f"invalid contact status: {status!r}")
    return patch


class ProspectStore(ABC):
    """Storage contract used by the pipeline, the dispatcher and the HTTP layer."""

    @abstractmethod
    def get(self, business_id: int) -> Optional[Business]:
        ...

    @abstractmethod
    def get_by_external_id(self, external_id: str) -> Optional[Business]:
        ...

    @abstractmethod
    def create(self, candidate: Candidate) -> Business:
        ...

    @abstractmethod
    def update(self, business_id: int, patch: Dict[str, Any]) -> Optional[Business]:
        """Apply ``contact_status``/``notes`` from ``patch``; ``None`` when the id is unknown."""

    @abstractmethod
    def list(self, contact_status: Optional[str] = None, category: Optional[str] = None) -> List[Business]:
        ...

    @abstractmethod
    def list_without_website(self) -> List[Business]:
        ...

    @abstractmethod
    def create_search_history(
        self,
        *,
        location: str,
        radius: int,
        category: Optional[str],
        results_count: int,
        no_website_count: int,
    ) -> SearchHistory:
        ...

    @abstractmethod
    def search_history(self) -> List[SearchHistory]:
        ...

    @abstractmethod
    def stats(self) -> Dict[str, int]:
        ...


def _newest_first(businesses: List[Business]) -> List[Business]:
    return sorted(businesses, key=lambda b: (b.created_at, b.id), reverse=True)


class InMemoryProspectStore(ProspectStore):
    """Process-local store; one instance per application (or per test)."""

    def __init__(self) -> None:
        self._businesses: Dict[int, Business] = {}
        self._by_external_id: Dict[str, int] = {}
        self._history: Dict[int, SearchHistory] = {}
        self._next_business_id = 1
        self._next_search_id = 1

    def get(self, business_id: int) -> Optional[Business]:
        return self._businesses.get(business_id)

    def get_by_external_id(self, external_id: str) -> Optional[Business]:
        business_id = self._by_external_id.get(external_id)
        if business_id is None:
            return None
        return self._businesses[business_id]

    def create(self, candidate: Candidate) -> Business:
        if candidate.external_id in self._by_external_id:
            raise ValueError(f"business with external id {candidate.external_id!r} already exists")

        business = Business.from_candidate(self._next_business_id, candidate, datetime.now(timezone.utc))
        self._next_business_id += 1
        self._businesses[business.id] = business
        self._by_external_id[business.external_id] = business.id
        logger.debug("Created business %s (%s)", business.id, business.name)
        return business

    def update(self, business_id: int, patch: Dict[str, Any]) -> Optional[Business]:
        patch = validate_patch(patch)
        business = self._businesses.get(business_id)
        if business is None:
            return None
        updated = replace(business, **patch)
        self._businesses[business_id] = updated
        return updated

    def list(self, contact_status: Optional[str] = None, category: Optional[str] = None) -> List[Business]:
        results = list(self._businesses.values())
        if contact_status:
            results = [b for b in results if b.contact_status == contact_status]
        if category:
            results = [b for b in results if b.category == category]
        return _newest_first(results)

    def list_without_website(self) -> List[Business]:
        return _newest_first([b for b in self._businesses.values() if not b.has_website])

    def create_search_history(
        self,
        *,
        location: str,
        radius: int,
        category: Optional[str],
        results_count: int,
        no_website_count: int,
    ) -> SearchHistory:
        entry = SearchHistory(
            id=self._next_search_id,
            location=location,
            radius=radius,
            category=category or None,
            results_count=results_count,
            no_website_count=no_website_count,
            created_at=datetime.now(timezone.utc),
        )
        self._next_search_id += 1
        self._history[entry.id] = entry
        return entry

    def search_history(self) -> List[SearchHistory]:
        return sorted(self._history.values(), key=lambda h: (h.created_at, h.id), reverse=True)

    def stats(self) -> Dict[str, int]:
        businesses = list(self._businesses.values())
        return {
            "totalSearched": len(businesses),
            "noWebsite": sum(1 for b in businesses if not b.has_website),
            "contacted": sum(1 for b in businesses if b.contact_status == ContactStatus.CONTACTED),
            "interested": sum(1 for b in businesses if b.contact_status == ContactStatus.INTERESTED),
        }


def create_store(settings: Settings) -> ProspectStore:
    """Pick the Postgres store when DATABASE_URL is configured, else keep prospects in memory."""
    if settings.database_url:
        from leadscout.core.db import PostgresProspectStore

        store = PostgresProspectStore(settings.database_url)
        store.ensure_schema()
        logger.info("Using PostgreSQL prospect store")
        return store
    logger.info("Using in-memory prospect store")
    return InMemoryProspectStore()
