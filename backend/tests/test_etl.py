import pytest
from sqlalchemy.exc import OperationalError

from biopeak.core.config import Settings
from biopeak.core.errors import PersistFailed, UpstreamFetchFailed
from biopeak.models.activity_sample import GarminActivityDetail
from biopeak.models.best_segment import ActivityBestSegment
from biopeak.models.heart_rate_zones import ActivityHeartRateZones
from biopeak.models.variation_analysis import ActivityVariationAnalysis
from biopeak.services.etl import MetricKey, MetricKind, MetricState, build_orchestrator
from biopeak.services.samples import load_samples
from biopeak.services.sources import ActivitySource

from conftest import add_activity, add_samples, add_track


@pytest.fixture
def orchestrator():
    return build_orchestrator(Settings(hr_max=None))


def key(user_id="u1", activity_id="a1", source=ActivitySource.garmin):
    return MetricKey(user_id=user_id, activity_id=activity_id, activity_source=source)


def steady_samples(db, n=30):
    add_samples(db, [148, 150, 152] * (n // 3), [3.3, 3.35, 3.3] * (n // 3))


def count_calls(monkeypatch, orchestrator, kind):
    calc = orchestrator.calculators[kind]
    calls = []
    original = calc.compute

    def counting(db, k, **options):
        calls.append(k)
        return original(db, k, **options)

    monkeypatch.setattr(calc, "compute", counting)
    return calls


def test_second_read_is_cache_hit(db, orchestrator, monkeypatch):
    steady_samples(db)
    calls = count_calls(monkeypatch, orchestrator, MetricKind.variation_analysis)

    first = orchestrator.get_or_compute(db, MetricKind.variation_analysis, key())
    second = orchestrator.get_or_compute(db, MetricKind.variation_analysis, key())

    assert first.state == MetricState.ready and first.source == "calculated"
    assert second.state == MetricState.ready and second.source == "cache"
    assert second.row.id == first.row.id
    assert len(calls) == 1
    assert db.query(ActivityVariationAnalysis).count() == 1


def test_insufficient_data_is_not_persisted(db, orchestrator):
    result = orchestrator.get_or_compute(db, MetricKind.heart_rate_zones, key())
    assert result.state == MetricState.failed
    assert result.row is None
    assert result.message


def test_too_few_points_is_cached_as_invalid(db, orchestrator):
    add_samples(db, [150] * 5, [3.0] * 5)
    result = orchestrator.get_or_compute(db, MetricKind.variation_analysis, key())
    assert result.ok
    assert result.row.has_valid_data is False
    assert result.row.data_points_count == 5


def test_concurrent_insert_returns_existing_row(db, session_factory, orchestrator, monkeypatch):
    steady_samples(db)
    calc = orchestrator.calculators[MetricKind.variation_analysis]
    original = calc.compute

    def racing(session, k, **options):
        values = original(session, k, **options)
        # Another worker stores the same key while we are computing
        other = session_factory()
        other.add(calc.to_row(k, dict(values, diagnosis="winner")))
        other.commit()
        other.close()
        return values

    monkeypatch.setattr(calc, "compute", racing)
    result = orchestrator.compute_and_store(db, MetricKind.variation_analysis, key())

    assert result.state == MetricState.ready
    assert result.source == "cache"
    assert result.row.diagnosis == "winner"
    assert db.query(ActivityVariationAnalysis).count() == 1


def test_write_failure_carries_computed_values(db, orchestrator, monkeypatch):
    steady_samples(db)

    def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", broken_commit)
    with pytest.raises(PersistFailed) as excinfo:
        orchestrator.compute_and_store(db, MetricKind.variation_analysis, key())
    assert excinfo.value.data["data_points_count"] == 30
    assert excinfo.value.retryable


def test_sample_read_failure_is_upstream_error(db, monkeypatch):
    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection reset"))

    monkeypatch.setattr(db, "query", broken_query)
    with pytest.raises(UpstreamFetchFailed):
        load_samples(db, "garmin", "a1")


def test_recompute_replaces_row(db, orchestrator):
    steady_samples(db)
    orchestrator.get_or_compute(db, MetricKind.variation_analysis, key())
    db.query(ActivityVariationAnalysis).update({"diagnosis": "stale"})
    db.commit()

    result = orchestrator.recompute(db, MetricKind.variation_analysis, key())
    assert result.source == "calculated"
    assert result.row.diagnosis != "stale"
    assert db.query(ActivityVariationAnalysis).count() == 1


def test_zones_use_requested_max(db, orchestrator):
    steady_samples(db)
    result = orchestrator.get_or_compute(db, MetricKind.heart_rate_zones, key(), max_heart_rate=200)
    assert result.ok
    assert result.row.max_heart_rate == 200
    assert len(result.row.zones) == 5
    assert sum(z["percentage"] for z in result.row.zones) == pytest.approx(100.0, abs=0.5)


def test_best_segment_from_track(db, orchestrator, steady_run):
    result = orchestrator.get_or_compute(db, MetricKind.best_segment, key())
    assert result.ok
    row = result.row
    assert row.segment_start_distance_meters == 0
    assert row.segment_duration_seconds == pytest.approx(300.0)
    assert row.best_1km_pace_min_km == pytest.approx(5.0)
    assert row.activity_source == "garmin"


def test_best_segment_short_activity_skips_samples(db, orchestrator, monkeypatch):
    add_activity(db, total_distance_meters=900.0)
    add_track(db, [0, 450, 900], [0, 135, 270])

    def fail(*args, **kwargs):
        raise AssertionError("samples should not be loaded")

    monkeypatch.setattr("biopeak.services.etl.load_samples", fail)
    result = orchestrator.get_or_compute(db, MetricKind.best_segment, key())
    assert result.state == MetricState.failed
    assert result.message == "no segment found"
    assert db.query(ActivityBestSegment).count() == 0


def test_zones_outside_range_are_not_cached(db, orchestrator):
    add_samples(db, [150] * 30)
    low = orchestrator.get_or_compute(db, MetricKind.heart_rate_zones, key(), max_heart_rate=120)
    assert low.state == MetricState.failed
    assert db.query(ActivityHeartRateZones).count() == 0

    result = orchestrator.get_or_compute(db, MetricKind.heart_rate_zones, key(), max_heart_rate=190)
    assert result.source == "calculated"
    assert result.row.max_heart_rate == 190
    assert sum(z["percentage"] for z in result.row.zones) == pytest.approx(100.0, abs=0.5)


def test_failed_recompute_keeps_stored_row(db, orchestrator):
    steady_samples(db)
    orchestrator.get_or_compute(db, MetricKind.variation_analysis, key())
    db.query(GarminActivityDetail).delete()
    db.commit()

    result = orchestrator.recompute(db, MetricKind.variation_analysis, key())
    assert result.state == MetricState.failed
    assert db.query(ActivityVariationAnalysis).count() == 1


def test_recompute_read_error_keeps_stored_row(db, orchestrator, monkeypatch):
    steady_samples(db)
    orchestrator.get_or_compute(db, MetricKind.variation_analysis, key())

    def unavailable(*args, **kwargs):
        raise UpstreamFetchFailed("sample store unavailable")

    monkeypatch.setattr("biopeak.services.etl.load_samples", unavailable)
    with pytest.raises(UpstreamFetchFailed):
        orchestrator.recompute(db, MetricKind.variation_analysis, key())
    assert db.query(ActivityVariationAnalysis).count() == 1
