"""Core data models shared by the ingestion pipeline, the store and the REST layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


class ContactStatus:
    NEW = "new"
    CONTACTED = "contacted"
    INTERESTED = "interested"
    NOT_INTERESTED = "not_interested"

    ALL = (NEW, CONTACTED, INTERESTED, NOT_INTERESTED)


CATEGORIES = (
    "Restaurant",
    "Retail",
    "Beauty & Wellness",
    "Professional Services",
    "Healthcare",
    "Automotive",
    "Hospitality",
    "Other",
)
DEFAULT_CATEGORY = "Other"


@dataclass(slots=True)
class Candidate:
    """Normalized snapshot of a business reported by one source adapter."""

    external_id: str
    name: str
    address: str
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    category: str = DEFAULT_CATEGORY
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    source: str = "unknown"

    @property
    def has_website(self) -> bool:
        return bool(self.website and self.website.strip())


@dataclass
class Business:
    """Canonical prospect record with a tracked contact status."""

    id: int
    external_id: str
    name: str
    address: str
    created_at: datetime
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    has_website: bool = False
    category: str = DEFAULT_CATEGORY
    rating: Optional[float] = None
    review_count: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contact_status: str = ContactStatus.NEW
    notes: Optional[str] = None

    @classmethod
    def from_candidate(cls, business_id: int, candidate: Candidate, created_at: datetime) -> "Business":
        return cls(
            id=business_id,
            external_id=candidate.external_id,
            name=candidate.name,
            address=candidate.address,
            created_at=created_at,
            phone=candidate.phone,
            email=candidate.email,
            website=candidate.website,
            has_website=candidate.has_website,
            category=candidate.category or DEFAULT_CATEGORY,
            rating=candidate.rating,
            review_count=candidate.review_count,
            latitude=candidate.latitude,
            longitude=candidate.longitude,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON projection used by the REST layer (camelCase keys)."""
        return {
            "id": self.id,
            "externalId": self.external_id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "website": self.website,
            "hasWebsite": self.has_website,
            "category": self.category,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "contactStatus": self.contact_status,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class SearchHistory:
    id: int
    location: str
    radius: int
    results_count: int
    no_website_count: int
    created_at: datetime
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "location": self.location,
            "category": self.category,
            "radius": self.radius,
            "resultsCount": self.results_count,
            "noWebsiteCount": self.no_website_count,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
