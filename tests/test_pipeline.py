import time

import pytest

from leadscout.core import pipeline as pipeline_module
from leadscout.core.config import Settings
from leadscout.core.pipeline import IngestionPipeline, build_sources, dedupe_candidates, rank_businesses
from leadscout.core.store import InMemoryProspectStore
from leadscout.models import Candidate
from leadscout.sources.base import SourceAdapter, SourceError


class FixedSource(SourceAdapter):
    def __init__(self, name, candidates, delay=0.0):
        self.name = name
        self.candidates = candidates
        self.delay = delay
        self.calls = []

    def search(self, location, category, radius_km):
        self.calls.append((location, category, radius_km))
        if self.delay:
            time.sleep(self.delay)
        return list(self.candidates)


class FailingSource(SourceAdapter):
    name = "broken"

    def search(self, location, category, radius_km):
        raise SourceError("quota exceeded")


def candidate(external_id, name, address="1 Main St", website=None, **kwargs):
    return Candidate(external_id=external_id, name=name, address=address, website=website, **kwargs)


MIAMI = [
    candidate("m1", "Joe's Cafe", "1 Ocean Dr"),
    candidate("m2", "Sun Salon", "2 Ocean Dr", website="https://sunsalon.example"),
    candidate("m3", "Bay Tacos", "3 Ocean Dr"),
]


@pytest.fixture
def store():
    return InMemoryProspectStore()


def test_ingest_is_idempotent(store):
    pipeline = IngestionPipeline(store, [FixedSource("fixed", MIAMI)])

    first = pipeline.ingest("Miami, FL", "restaurant", 5)
    second = pipeline.ingest("Miami, FL", "restaurant", 5)

    assert len(store.list()) == 3
    assert [b.id for b in first.ranked] == [b.id for b in second.ranked]
    assert len(store.search_history()) == 2
    assert store.search_history()[0].results_count == 3


def test_ingest_returns_only_businesses_without_website(store):
    pipeline = IngestionPipeline(store, [FixedSource("fixed", MIAMI)])

    result = pipeline.ingest("Miami, FL", None, 5)

    assert result.total_found == 3
    assert result.no_website_count == 2
    assert [b.name for b in result.businesses] == ["Joe's Cafe", "Bay Tacos"]
    payload = result.to_dict()
    assert payload["totalFound"] == 3
    assert payload["noWebsiteCount"] == 2
    assert all(item["hasWebsite"] is False for item in payload["businesses"])


def test_existing_records_are_not_updated(store):
    pipeline = IngestionPipeline(store, [FixedSource("fixed", MIAMI)])
    pipeline.ingest("Miami, FL", None, 5)
    joe = store.get_by_external_id("m1")
    store.update(joe.id, {"contact_status": "contacted", "notes": "called"})

    changed = [candidate("m1", "Joe's Cafe", "1 Ocean Dr", website="https://joes.example", phone="555")]
    result = IngestionPipeline(store, [FixedSource("fixed", changed)]).ingest("Miami, FL", None, 5)

    stored = store.get(joe.id)
    assert stored.website is None
    assert stored.phone is None
    assert stored.contact_status == "contacted"
    assert result.businesses[0].notes == "called"


def test_dedupe_on_exact_name_and_address():
    candidates = [
        candidate("g-1", "Joe's Cafe", "1 Main St", phone="555-0100"),
        candidate("osm-9", "Joe's Cafe", "1 Main St"),
        candidate("osm-10", "Joe's Cafe", "1 Main Street"),
    ]

    unique = dedupe_candidates(candidates)

    assert [c.external_id for c in unique] == ["g-1", "osm-10"]
    assert unique[0].phone == "555-0100"


def test_rank_is_stable_with_no_website_first(store):
    flags = [True, False, False, True]
    businesses = [
        store.create(candidate(f"r{i}", f"Shop {i}", website="https://x.example" if has else None))
        for i, has in enumerate(flags)
    ]

    ranked = rank_businesses(businesses)

    assert [b.external_id for b in ranked] == ["r1", "r2", "r0", "r3"]


def test_failing_source_is_tolerated(store):
    pipeline = IngestionPipeline(store, [FailingSource(), FixedSource("fixed", MIAMI)])

    result = pipeline.ingest("Miami, FL", None, 5)

    assert result.total_found == 3


def test_merge_follows_source_order_not_completion_order(store):
    slow = FixedSource("slow", [candidate("s1", "Slow Shop", "9 Elm St")], delay=0.05)
    fast = FixedSource("fast", [candidate("f1", "Fast Shop", "8 Elm St")])

    IngestionPipeline(store, [slow, fast]).ingest("Miami, FL", None, 5)

    assert store.get_by_external_id("s1").id == 1
    assert store.get_by_external_id("f1").id == 2


def test_fallback_used_only_when_every_primary_fails(store):
    fallback = FixedSource("sample", MIAMI)
    pipeline = IngestionPipeline(store, [FailingSource()], fallback_sources=[fallback])

    result = pipeline.ingest("Miami, FL", None, 5)

    assert result.total_found == 3
    assert len(fallback.calls) == 1


def test_fallback_skipped_when_a_primary_answers_empty(store):
    fallback = FixedSource("sample", MIAMI)
    pipeline = IngestionPipeline(store, [FailingSource(), FixedSource("empty", [])], fallback_sources=[fallback])

    result = pipeline.ingest("Miami, FL", None, 5)

    assert result.total_found == 0
    assert fallback.calls == []
    assert store.search_history()[0].results_count == 0


def test_all_sources_failing_records_empty_search(store):
    pipeline = IngestionPipeline(store, [FailingSource()])

    result = pipeline.ingest("Nowhere", None, 5)

    assert result.total_found == 0
    assert result.businesses == []
    assert len(store.search_history()) == 1


def test_category_and_radius_are_forwarded(store):
    source = FixedSource("fixed", [])

    IngestionPipeline(store, [source]).ingest("  Kampala ", " retail ", 12)

    assert source.calls == [("Kampala", "retail", 12)]
    entry = store.search_history()[0]
    assert (entry.location, entry.category, entry.radius) == ("Kampala", "retail", 12)


@pytest.mark.parametrize("location, radius", [("", 5), ("   ", 5), ("Miami", 0), ("Miami", 51)])
def test_invalid_input_is_rejected(store, location, radius):
    pipeline = IngestionPipeline(store, [FixedSource("fixed", MIAMI)])

    with pytest.raises(ValueError):
        pipeline.ingest(location, None, radius)
    assert store.search_history() == []


def test_build_sources_without_keys_uses_free_sources():
    primary, fallback = build_sources(Settings())

    assert [s.name for s in primary] == ["openstreetmap", "sample"]
    assert fallback == []


def test_build_sources_with_keys():
    primary, fallback = build_sources(Settings(google_api_key="g", serpapi_api_key="s", enable_sample_source=False))

    assert [s.name for s in primary] == ["google_places", "serpapi_google_maps"]
    assert [s.name for s in fallback] == ["openstreetmap"]


def test_build_pipeline_wires_store(store):
    pipeline = pipeline_module.build_pipeline(Settings(google_api_key="g"), store)

    assert pipeline.store is store
    assert [s.name for s in pipeline.fallback_sources] == ["openstreetmap", "sample"]
