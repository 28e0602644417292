from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from biopeak.api.deps import get_orchestrator, get_retry_policy, get_settings
from biopeak.core.config import Settings
from biopeak.core.retry import RetryPolicy
from biopeak.db import get_db, get_session_factory
from biopeak.schemas.backfill import (
    FitnessBackfillRequest,
    FitnessBackfillResponse,
    VariationBackfillRequest,
    VariationBackfillResponse,
)
from biopeak.services.backfill import backfill_fitness_scores, backfill_variation_analysis
from biopeak.services.etl import MetricsOrchestrator


router = APIRouter(prefix="/backfill", tags=["backfill"])


@router.post("/variation-analysis", response_model=VariationBackfillResponse)
def run_variation_backfill(
    payload: VariationBackfillRequest,
    db: Session = Depends(get_db),
    orchestrator: MetricsOrchestrator = Depends(get_orchestrator),
    retry: RetryPolicy = Depends(get_retry_policy),
    cfg: Settings = Depends(get_settings),
):
    return backfill_variation_analysis(
        db,
        orchestrator,
        retry,
        source=payload.source,
        limit=payload.limit,
        offset=payload.offset,
        dry_run=payload.dry_run,
        user_id=payload.user_id,
        max_limit=cfg.backfill_max_limit,
    )


@router.post("/fitness-scores", response_model=FitnessBackfillResponse)
def run_fitness_backfill(
    payload: FitnessBackfillRequest,
    session_factory=Depends(get_session_factory),
    retry: RetryPolicy = Depends(get_retry_policy),
    cfg: Settings = Depends(get_settings),
):
    return backfill_fitness_scores(
        session_factory,
        cfg,
        retry,
        target_date=payload.target_date or datetime.now(timezone.utc).date(),
        limit=payload.limit,
        offset=payload.offset,
        user_id=payload.user_id,
        concurrency=payload.concurrency,
        only_missing_today=payload.only_missing_today,
    )
