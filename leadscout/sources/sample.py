"""Synthetic local-business generator used when no live source can answer."""

import random
import re
from typing import List

from leadscout.etl.transform import SEARCH_CATEGORY_LABELS, normalize_search_category
from leadscout.models import DEFAULT_CATEGORY, Candidate
from leadscout.sources.base import SourceAdapter

SAMPLE_SIZE = 8
WEBSITE_RATIO = 0.3

BUSINESS_NAMES = {
    "restaurant": [
        "Local Kitchen", "Family Restaurant", "Corner Cafe", "Traditional Cuisine", "Quick Bites",
        "Home Style Food", "Community Diner", "Fresh Food Joint", "Local Flavors", "Neighborhood Grill",
    ],
    "retail": [
        "Local Shop", "General Store", "Fashion Boutique", "Electronics Store", "Gift Shop",
        "Convenience Store", "Local Market", "Accessories Shop", "Phone Repair", "Computer Store",
    ],
    "beauty": [
        "Beauty Salon", "Hair Studio", "Nail Care", "Barber Shop", "Spa Services",
        "Ladies Salon", "Gents Salon", "Beauty Center", "Hair & Beauty", "Wellness Spa",
    ],
    "professional": [
        "Law Office", "Accounting Services", "Real Estate Agency", "Insurance Services", "Consulting Firm",
        "Tax Services", "Legal Aid", "Business Services", "Financial Advisory", "Property Management",
    ],
    "automotive": [
        "Auto Repair", "Car Service", "Tire Shop", "Mechanic Workshop", "Car Wash",
        "Auto Parts", "Vehicle Service", "Garage Services", "Car Care Center", "Motor Services",
    ],
}
STREET_NAMES = ["Main", "Market", "Church", "High", "Park", "Station", "Victoria", "Commercial", "Industrial", "Central"]
STREET_SUFFIXES = ["Street", "Road", "Avenue", "Drive", "Lane", "Close", "Way"]
PHONE_PREFIXES = ["+256 70", "+256 75", "+256 77", "+256 78", "+256 79"]
# Kampala
CENTER_LAT = 0.3136
CENTER_LNG = 32.5811


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-") or "any"


class SampleBusinessSource(SourceAdapter):
    """Always answers; output is a pure function of ``(location, category)``."""

    name = "sample"

    def search(self, location: str, category: str, radius_km: float) -> List[Candidate]:
        key = normalize_search_category(category)
        names = BUSINESS_NAMES.get(key, BUSINESS_NAMES["retail"])
        label = SEARCH_CATEGORY_LABELS.get(key, DEFAULT_CATEGORY)
        rng = random.Random(f"{location.strip().lower()}|{key}")
        town = location.split(",")[0].strip()

        candidates: List[Candidate] = []
        for index, name in enumerate(names[:SAMPLE_SIZE]):
            street = f"{STREET_NAMES[index % len(STREET_NAMES)]} {STREET_SUFFIXES[index % len(STREET_SUFFIXES)]}"
            has_website = rng.random() < WEBSITE_RATIO
            candidates.append(
                Candidate(
                    external_id=f"sample-{_slug(location)}-{key or 'all'}-{index}",
                    name=f"{name} {town}".strip(),
                    address=f"{10 + index * 5} {street}, {location}",
                    phone=f"{rng.choice(PHONE_PREFIXES)} {rng.randint(1000000, 9999999)}",
                    website=f"www.{re.sub(r'[^a-z0-9]', '', name.lower())}.com" if has_website else None,
                    category=label,
                    latitude=CENTER_LAT + (rng.random() - 0.5) * 0.1,
                    longitude=CENTER_LNG + (rng.random() - 0.5) * 0.1,
                    rating=round(3.5 + rng.random() * 1.5, 1),
                    review_count=rng.randint(10, 209),
                    source=self.name,
                )
            )
        return candidates
