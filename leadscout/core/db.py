"""PostgreSQL-backed prospect store."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from psycopg2 import extras, pool

from leadscout.core.store import ProspectStore, validate_patch
from leadscout.models import Business, Candidate, ContactStatus, SearchHistory

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS businesses (
    id SERIAL PRIMARY KEY,
    external_id TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    address TEXT NOT NULL,
    phone TEXT,
    email TEXT,
    website TEXT,
    has_website BOOLEAN NOT NULL DEFAULT FALSE,
    category TEXT NOT NULL,
    rating REAL,
    review_count INTEGER,
    latitude DOUBLE PRECISION,
    longitude DOUBLE PRECISION,
    contact_status TEXT NOT NULL DEFAULT 'new',
    notes TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE TABLE IF NOT EXISTS search_history (
    id SERIAL PRIMARY KEY,
    location TEXT NOT NULL,
    radius INTEGER NOT NULL,
    category TEXT,
    results_count INTEGER NOT NULL,
    no_website_count INTEGER NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

_INSERT_BUSINESS = """
INSERT INTO businesses (
    external_id,
    name,
    address,
    phone,
    email,
    website,
    has_website,
    category,
    rating,
    review_count,
    latitude,
    longitude
) VALUES (
    %(external_id)s,
    %(name)s,
    %(address)s,
    %(phone)s,
    %(email)s,
    %(website)s,
    %(has_website)s,
    %(category)s,
    %(rating)s,
    %(review_count)s,
    %(latitude)s,
    %(longitude)s
)
RETURNING *;
"""

_INSERT_SEARCH_HISTORY = """
INSERT INTO search_history (location, radius, category, results_count, no_website_count)
VALUES (%(location)s, %(radius)s, %(category)s, %(results_count)s, %(no_website_count)s)
RETURNING *;
"""

_STATS = """
SELECT
    COUNT(*) AS total_searched,
    COUNT(*) FILTER (WHERE NOT has_website) AS no_website,
    COUNT(*) FILTER (WHERE contact_status = %(contacted)s) AS contacted,
    COUNT(*) FILTER (WHERE contact_status = %(interested)s) AS interested
FROM businesses;
"""

_ORDER_NEWEST = " ORDER BY created_at DESC, id DESC"


def _prepare_params(candidate: Candidate) -> Dict[str, Any]:
    return {
        "external_id": candidate.external_id,
        "name": candidate.name,
        "address": candidate.address,
        "phone": candidate.phone,
        "email": candidate.email,
        "website": candidate.website,
        "has_website": candidate.has_website,
        "category": candidate.category,
        "rating": candidate.rating,
        "review_count": candidate.review_count,
        "latitude": candidate.latitude,
        "longitude": candidate.longitude,
    }


def _row_to_business(row: Dict[str, Any]) -> Business:
    return Business(
        id=row["id"],
        external_id=row["external_id"],
        name=row["name"],
        address=row["address"],
        created_at=row["created_at"],
        phone=row.get("phone"),
        email=row.get("email"),
        website=row.get("website"),
        has_website=bool(row.get("has_website")),
        category=row["category"],
        rating=row.get("rating"),
        review_count=row.get("review_count"),
        latitude=row.get("latitude"),
        longitude=row.get("longitude"),
        contact_status=row.get("contact_status") or ContactStatus.NEW,
        notes=row.get("notes"),
    )


def _row_to_history(row: Dict[str, Any]) -> SearchHistory:
    return SearchHistory(
        id=row["id"],
        location=row["location"],
        radius=row["radius"],
        category=row.get("category"),
        results_count=row["results_count"],
        no_website_count=row["no_website_count"],
        created_at=row["created_at"],
    )


class PostgresProspectStore(ProspectStore):
    """Prospect store persisted in the ``businesses`` and ``search_history`` tables."""

    def __init__(self, database_url: str, minconn: int = 1, maxconn: int = 5) -> None:
        if not database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        self._database_url = database_url
        self._minconn = minconn
        self._maxconn = maxconn
        self._pool: Optional[pool.SimpleConnectionPool] = None

    def init_pool(self) -> pool.SimpleConnectionPool:
        """Initialise and return this store's connection pool."""
        if self._pool is None:
            self._pool = pool.SimpleConnectionPool(
                self._minconn,
                self._maxconn,
                dsn=self._database_url,
                connect_timeout=10,
            )
            logger.info("Database connection pool initialised")
        return self._pool

    @contextmanager
    def get_connection(self):
        """Context manager yielding a pooled connection."""
        pg_pool = self.init_pool()
        conn = pg_pool.getconn()
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        finally:
            pg_pool.putconn(conn)

    def _fetch(self, sql: str, params: Optional[Dict[str, Any]] = None, *, commit: bool = False) -> List[Dict[str, Any]]:
        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                cur.execute(sql, params or {})
                rows = cur.fetchall() if cur.description else []
            if commit:
                conn.commit()
        return [dict(row) for row in rows]

    def ensure_schema(self) -> None:
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_SCHEMA)
            conn.commit()

    def get(self, business_id: int) -> Optional[Business]:
        rows = self._fetch("SELECT * FROM businesses WHERE id = %(id)s;", {"id": business_id})
        return _row_to_business(rows[0]) if rows else None

    def get_by_external_id(self, external_id: str) -> Optional[Business]:
        rows = self._fetch(
            "SELECT * FROM businesses WHERE external_id = %(external_id)s;",
            {"external_id": external_id},
        )
        return _row_to_business(rows[0]) if rows else None

    def create(self, candidate: Candidate) -> Business:
        params = _prepare_params(candidate)
        if not params["name"] or not params["address"]:
            raise ValueError("name and address are required to create a business")
        rows = self._fetch(_INSERT_BUSINESS, params, commit=True)
        logger.debug("Inserted business %s", params["name"])
        return _row_to_business(rows[0])

    def update(self, business_id: int, patch: Dict[str, Any]) -> Optional[Business]:
        patch = validate_patch(patch)
        if not patch:
            return self.get(business_id)
        assignments = ", ".join(f"{column} = %({column})s" for column in patch)
        params = dict(patch, id=business_id)
        rows = self._fetch(
            f"UPDATE businesses SET {assignments} WHERE id = %(id)s RETURNING *;",
            params,
            commit=True,
        )
        return _row_to_business(rows[0]) if rows else None

    def list(self, contact_status: Optional[str] = None, category: Optional[str] = None) -> List[Business]:
        clauses = []
        params: Dict[str, Any] = {}
        if contact_status:
            clauses.append("contact_status = %(contact_status)s")
            params["contact_status"] = contact_status
        if category:
            clauses.append("category = %(category)s")
            params["category"] = category
        sql = "SELECT * FROM businesses"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        rows = self._fetch(sql + _ORDER_NEWEST + ";", params)
        return [_row_to_business(row) for row in rows]

    def list_without_website(self) -> List[Business]:
        rows = self._fetch("SELECT * FROM businesses WHERE NOT has_website" + _ORDER_NEWEST + ";")
        return [_row_to_business(row) for row in rows]

    def create_search_history(
        self,
        *,
        location: str,
        radius: int,
        category: Optional[str],
        results_count: int,
        no_website_count: int,
    ) -> SearchHistory:
        rows = self._fetch(
            _INSERT_SEARCH_HISTORY,
            {
                "location": location,
                "radius": radius,
                "category": category or None,
                "results_count": results_count,
                "no_website_count": no_website_count,
            },
            commit=True,
        )
        return _row_to_history(rows[0])

    def search_history(self) -> List[SearchHistory]:
        rows = self._fetch("SELECT * FROM search_history" + _ORDER_NEWEST + ";")
        return [_row_to_history(row) for row in rows]

    def stats(self) -> Dict[str, int]:
        rows = self._fetch(
            _STATS,
            {"contacted": ContactStatus.CONTACTED, "interested": ContactStatus.INTERESTED},
        )
        row = rows[0] if rows else {}
        return {
            "totalSearched": int(row.get("total_searched") or 0),
            "noWebsite": int(row.get("no_website") or 0),
            "contacted": int(row.get("contacted") or 0),
            "interested": int(row.get("interested") or 0),
        }
