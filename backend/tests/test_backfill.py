from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from biopeak.core.config import Settings
from biopeak.core.errors import InvalidInput, UpstreamFetchFailed
from biopeak.core.retry import RetryPolicy
from biopeak.models.fitness_score import FitnessScoreDaily
from biopeak.models.variation_analysis import ActivityVariationAnalysis
from biopeak.services import backfill as backfill_module
from biopeak.services.backfill import (
    backfill_fitness_scores,
    backfill_variation_analysis,
    clamp_limit,
    page_activities,
    resolve_sources,
)
from biopeak.services.etl import build_orchestrator
from biopeak.services.sources import ActivitySource

from conftest import START_TS, add_activity, add_samples

TARGET = date(2023, 11, 20)
NO_WAIT = RetryPolicy(max_tries=2, factor=0)


@pytest.fixture
def settings():
    return Settings(hr_max=None, backfill_concurrency=1)


@pytest.fixture
def orchestrator(settings):
    return build_orchestrator(settings)


def seed_activities(db, count=5, with_samples=True):
    ids = []
    for i in range(count):
        activity_id = f"a{i}"
        add_activity(
            db,
            activity_id=activity_id,
            start_time=datetime.fromtimestamp(START_TS + i * 3600, tz=timezone.utc),
        )
        if with_samples:
            add_samples(db, [150, 152, 148] * 5, [3.3] * 15, activity_id=activity_id)
        ids.append(activity_id)
    return ids


def test_limit_is_clamped():
    assert clamp_limit(None) == 100
    assert clamp_limit(0) == 1
    assert clamp_limit(5000, maximum=1000) == 1000


def test_all_means_every_source():
    assert resolve_sources("all") == list(ActivitySource)
    assert resolve_sources("POLAR") == [ActivitySource.polar]
    with pytest.raises(InvalidInput):
        resolve_sources("fitbit")


def test_pages_cover_every_activity_once(db, orchestrator):
    ids = seed_activities(db)
    pages = []
    offset = 0
    while True:
        page = [activity_id for _, activity_id in page_activities(db, ActivitySource.garmin, 2, offset)]
        out = backfill_variation_analysis(db, orchestrator, NO_WAIT, limit=2, offset=offset)
        summary = out["results"]["garmin"]
        assert summary["fetched"] == len(page)
        if not page:
            break
        assert summary["ok"] == len(page)
        pages.append(set(page))
        offset = summary["next_offset"]

    for i, first in enumerate(pages):
        for second in pages[i + 1:]:
            assert first.isdisjoint(second)
    assert sum(len(p) for p in pages) == len(ids)
    assert set().union(*pages) == set(ids)
    assert db.query(ActivityVariationAnalysis).count() == len(ids)


def test_failed_page_query_only_affects_its_source(db, orchestrator, monkeypatch):
    seed_activities(db, count=2)
    real_page = backfill_module.page_activities

    def page_or_fail(session, source, *args, **kwargs):
        if source == ActivitySource.polar:
            raise OperationalError("SELECT", {}, Exception("connection reset"))
        return real_page(session, source, *args, **kwargs)

    monkeypatch.setattr(backfill_module, "page_activities", page_or_fail)
    out = backfill_variation_analysis(db, orchestrator, NO_WAIT, source="all")

    assert out["ok"] is False
    assert set(out["results"]) == {s.value for s in ActivitySource}
    assert out["results"]["garmin"]["ok"] == 2
    assert out["results"]["garmin"]["error"] is None
    polar = out["results"]["polar"]
    assert "connection reset" in polar["error"]
    assert polar["next_offset"] == 0
    assert out["results"]["healthkit"]["error"] is None


def test_newest_activity_comes_first(db, orchestrator):
    seed_activities(db, count=3)
    backfill_variation_analysis(db, orchestrator, NO_WAIT, limit=1)
    rows = db.query(ActivityVariationAnalysis).all()
    assert [r.activity_id for r in rows] == ["a2"]


def test_dry_run_writes_nothing(db, orchestrator):
    seed_activities(db, count=3)
    out = backfill_variation_analysis(db, orchestrator, NO_WAIT, dry_run=True)
    summary = out["results"]["garmin"]
    assert summary["processed"] == 3
    assert summary["ok"] == 0
    assert db.query(ActivityVariationAnalysis).count() == 0


def test_one_failure_does_not_stop_the_batch(db, orchestrator, monkeypatch):
    seed_activities(db, count=3)
    original = orchestrator.recompute
    attempts = []

    def flaky_recompute(session, kind, key, **options):
        if key.activity_id == "a1":
            attempts.append(key)
            raise UpstreamFetchFailed("sample store unavailable")
        return original(session, kind, key, **options)

    monkeypatch.setattr(orchestrator, "recompute", flaky_recompute)
    summary = backfill_variation_analysis(db, orchestrator, NO_WAIT)["results"]["garmin"]

    assert summary["ok"] == 2
    assert summary["failures"] == [
        {"user_id": "u1", "activity_id": "a1", "step": "process", "error": "sample store unavailable"}
    ]
    assert len(attempts) == 2
    assert db.query(ActivityVariationAnalysis).count() == 2


def test_activity_without_samples_is_a_compute_failure(db, orchestrator):
    seed_activities(db, count=1, with_samples=False)
    summary = backfill_variation_analysis(db, orchestrator, NO_WAIT)["results"]["garmin"]
    assert summary["ok"] == 0
    assert summary["failures"][0]["step"] == "compute"


def test_fitness_backfill_skips_users_already_scored(db, session_factory, settings):
    for user_id in ("u1", "u2", "u3"):
        add_activity(
            db,
            user_id=user_id,
            activity_date=TARGET - timedelta(days=1),
            total_time_seconds=3600.0,
            average_heart_rate=150,
            max_heart_rate=180,
        )
    db.add(FitnessScoreDaily(user_id="u2", calendar_date=TARGET, fitness=1.0, fatigue=1.0, performance=0.0))
    db.commit()

    out = backfill_fitness_scores(session_factory, settings, NO_WAIT, TARGET, limit=10)

    assert out["users_scanned"] == 3
    assert out["users_to_process"] == 2
    assert out["users_updated"] == 2
    assert out["users_failed"] == 0
    assert out["next_offset"] is None

    db.expire_all()
    rows = {r.user_id: r for r in db.query(FitnessScoreDaily).all()}
    assert rows["u2"].fitness == 1.0
    assert rows["u1"].fitness > 0
    assert rows["u1"].activities_count == 1


def test_fitness_backfill_next_offset_on_full_page(db, session_factory, settings):
    for user_id in ("u1", "u2"):
        add_activity(db, user_id=user_id, activity_date=TARGET)

    first = backfill_fitness_scores(session_factory, settings, NO_WAIT, TARGET, limit=1)
    assert first["users_scanned"] == 1
    assert first["next_offset"] == 1

    second = backfill_fitness_scores(session_factory, settings, NO_WAIT, TARGET, limit=1, offset=1)
    assert second["next_offset"] == 2

    third = backfill_fitness_scores(session_factory, settings, NO_WAIT, TARGET, limit=1, offset=2)
    assert third["users_scanned"] == 0
    assert third["next_offset"] is None
