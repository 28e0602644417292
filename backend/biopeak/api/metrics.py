from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from biopeak.analytics.effort import effort_distribution
from biopeak.analytics.pace import compare_pace, normalize_category
from biopeak.analytics.vo2max import summarize_vo2max
from biopeak.api.deps import get_orchestrator, get_pace_cache, get_settings, resolve_key
from biopeak.core.cache import CacheStore
from biopeak.core.config import Settings
from biopeak.core.errors import InsufficientData, InvalidInput
from biopeak.core.time_utils import format_pace
from biopeak.db import get_db
from biopeak.schemas.metrics import (
    ActivityMetricRequest,
    AveragePaceRead,
    AveragePaceRequest,
    BestSegmentRead,
    BestSegmentRequest,
    EffortDistributionRead,
    FitnessScoreRead,
    FitnessScoreRequest,
    HeartRateZonesRead,
    HeartRateZonesRequest,
    MetricResponse,
    PaceComparisonRead,
    VariationAnalysisRead,
    Vo2MaxRead,
    Vo2MaxRequest,
)
from biopeak.services.activities import find_activity, vo2max_efforts
from biopeak.services.average_pace import calculate_average_pace, latest_average
from biopeak.services.etl import MetricKey, MetricKind, MetricsOrchestrator, EtlResult
from biopeak.services.fitness_scores import compute_and_store_fitness
from biopeak.services.samples import load_samples, sample_source
from biopeak.services.sources import ActivitySource


router = APIRouter(prefix="/metrics", tags=["metrics"])


def _today():
    return datetime.now(timezone.utc).date()


def _envelope(result: EtlResult, read_model) -> dict:
    if not result.ok:
        return {"success": False, "source": None, "data": None, "message": result.message}
    return {
        "success": True,
        "source": result.source,
        "data": read_model.model_validate(result.row),
        "message": None,
    }


@router.post("/variation-analysis", response_model=MetricResponse[VariationAnalysisRead])
def compute_variation_analysis(
    payload: ActivityMetricRequest,
    db: Session = Depends(get_db),
    orchestrator: MetricsOrchestrator = Depends(get_orchestrator),
):
    key = resolve_key(db, payload.activity_id, payload.activity_source, payload.user_id)
    result = orchestrator.get_or_compute(db, MetricKind.variation_analysis, key)
    return _envelope(result, VariationAnalysisRead)


@router.post("/heart-rate-zones", response_model=MetricResponse[HeartRateZonesRead])
def compute_heart_rate_zones(
    payload: HeartRateZonesRequest,
    db: Session = Depends(get_db),
    orchestrator: MetricsOrchestrator = Depends(get_orchestrator),
):
    key = resolve_key(db, payload.activity_id, payload.activity_source, payload.user_id)
    result = orchestrator.get_or_compute(
        db, MetricKind.heart_rate_zones, key, max_heart_rate=payload.max_heart_rate
    )
    return _envelope(result, HeartRateZonesRead)


@router.post("/best-segment", response_model=MetricResponse[BestSegmentRead])
def compute_best_segment(
    payload: BestSegmentRequest,
    db: Session = Depends(get_db),
    orchestrator: MetricsOrchestrator = Depends(get_orchestrator),
):
    # The source is whatever the activity was synced from, else whichever
    # sample table holds it
    activity = find_activity(db, payload.activity_id, payload.activity_source, payload.user_id)
    if activity is not None:
        source = ActivitySource.parse(activity.activity_source)
    else:
        source = sample_source(db, payload.activity_id, payload.user_id, payload.activity_source)
    if source is None:
        raise InvalidInput(f"Activity {payload.activity_id} not found", status_code=404)
    key = MetricKey(user_id=payload.user_id, activity_id=str(payload.activity_id), activity_source=source)
    result = orchestrator.get_or_compute(db, MetricKind.best_segment, key)
    body = _envelope(result, BestSegmentRead)
    if body["data"] is not None:
        body["data"].best_1km_pace = format_pace(body["data"].best_1km_pace_min_km)
    return body


@router.post("/fitness-score", response_model=MetricResponse[FitnessScoreRead])
def compute_fitness_score(
    payload: FitnessScoreRequest,
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
):
    target = payload.target_date or _today()
    row = compute_and_store_fitness(db, payload.user_id, target, cfg)
    return {"success": True, "source": "calculated", "data": FitnessScoreRead.model_validate(row)}


@router.post("/vo2max", response_model=MetricResponse[Vo2MaxRead])
def compute_vo2max(
    payload: Vo2MaxRequest,
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
):
    today = payload.today or _today()
    efforts = vo2max_efforts(db, payload.user_id, today, cfg.vo2max_lookback_days)
    summary = summarize_vo2max(
        efforts,
        today,
        current_window_days=cfg.vo2max_current_window_days,
        lookback_days=cfg.vo2max_lookback_days,
        stable_threshold=cfg.vo2max_stable_threshold,
        min_distance_m=cfg.vo2max_min_distance_m,
    )
    if summary.best_vo2max is None:
        return {"success": False, "message": "No running activities to estimate VO2max"}
    return {"success": True, "source": "calculated", "data": Vo2MaxRead.model_validate(summary)}


@router.post("/effort-distribution", response_model=MetricResponse[EffortDistributionRead])
def compute_effort_distribution(
    payload: ActivityMetricRequest,
    db: Session = Depends(get_db),
):
    key = resolve_key(db, payload.activity_id, payload.activity_source, payload.user_id)
    samples = load_samples(db, key.activity_source, key.activity_id, key.user_id)
    try:
        distribution = effort_distribution(samples)
    except InsufficientData as exc:
        return {"success": False, "message": exc.message}
    return {
        "success": True,
        "source": "calculated",
        "data": EffortDistributionRead.model_validate(distribution),
    }


@router.post("/average-pace", response_model=MetricResponse[list[AveragePaceRead]])
def compute_average_pace(
    payload: AveragePaceRequest,
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
    cache: CacheStore = Depends(get_pace_cache),
):
    period = payload.period_days or cfg.average_pace_period_days
    rows = calculate_average_pace(db, payload.today or _today(), period)
    cache.invalidate()
    return {
        "success": True,
        "source": "calculated",
        "data": [AveragePaceRead.model_validate(r) for r in rows],
        "message": f"Average pace calculated for {len(rows)} categories",
    }


@router.get("/average-pace/compare", response_model=MetricResponse[PaceComparisonRead])
def compare_average_pace(
    category: str = Query(...),
    user_pace: float = Query(..., gt=0),
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_pace_cache),
):
    category = normalize_category(category)
    snapshot = latest_average(db, category, cache)
    if snapshot is None:
        return {"success": False, "message": f"No community average for {category} yet"}
    comparison = compare_pace(category, user_pace, snapshot.average_pace_value)
    return {"success": True, "source": "cache", "data": PaceComparisonRead.model_validate(comparison)}
