import pytest

from leadscout.core.config import Settings
from leadscout.core.pipeline import IngestionResult
from leadscout.jobs import run_search


class RecordingPipeline:
    def __init__(self):
        self.calls = []

    def ingest(self, location, category, radius_km):
        self.calls.append((location, category, radius_km))
        if radius_km > 50:
            raise ValueError("radius must be between 1 and 50")
        return IngestionResult(businesses=[], total_found=0, no_website_count=0)


@pytest.fixture
def pipeline(monkeypatch):
    recording = RecordingPipeline()
    settings = Settings()
    store = object()

    monkeypatch.setattr(run_search, "get_settings", lambda: settings)
    monkeypatch.setattr(run_search, "create_store", lambda s: store if s is settings else None)
    monkeypatch.setattr(run_search, "build_pipeline", lambda s, st: recording if st is store else None)
    return recording


def test_run_search_job(pipeline):
    result = run_search.run_search_job(location="Kampala", category="retail", radius=10)

    assert result.total_found == 0
    assert pipeline.calls == [("Kampala", "retail", 10)]


def test_parser_defaults():
    args = run_search.build_parser().parse_args(["--location", "Miami, FL"])

    assert args.location == "Miami, FL"
    assert args.category is None
    assert args.radius == 5


def test_main_reports_invalid_input(pipeline, monkeypatch):
    monkeypatch.setattr("sys.argv", ["leadscout-search", "--location", "Kampala", "--radius", "99"])

    with pytest.raises(SystemExit) as excinfo:
        run_search.main()

    assert excinfo.value.code == 2
