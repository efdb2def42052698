"""CSV export of prospects."""

from typing import Iterable, Optional

from leadscout.models import Business

CSV_HEADERS = ["Name", "Category", "Address", "Phone", "Rating", "Contact Status", "Notes"]


def _quoted(value: Optional[str]) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def _rating(value: Optional[float]) -> str:
    return "" if value is None else f"{value:g}"


def business_to_row(business: Business) -> str:
    """Text columns are always quoted (missing values as ``""``); the rating is left bare."""
    return ",".join(
        [
            _quoted(business.name),
            _quoted(business.category),
            _quoted(business.address),
            _quoted(business.phone),
            _rating(business.rating),
            _quoted(business.contact_status),
            _quoted(business.notes),
        ]
    )


def businesses_to_csv(businesses: Iterable[Business]) -> str:
    lines = [",".join(CSV_HEADERS)]
    lines.extend(business_to_row(business) for business in businesses)
    return "\n".join(lines)
