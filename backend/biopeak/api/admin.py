from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from biopeak.api.deps import get_orchestrator, resolve_key
from biopeak.db import get_db
from biopeak.schemas.backfill import RecomputeResponse
from biopeak.schemas.metrics import (
    BestSegmentRead,
    HeartRateZonesRead,
    RecomputeRequest,
    VariationAnalysisRead,
)
from biopeak.services.etl import MetricKind, MetricsOrchestrator


router = APIRouter(prefix="/admin", tags=["admin"])

READ_MODELS = {
    MetricKind.variation_analysis: VariationAnalysisRead,
    MetricKind.heart_rate_zones: HeartRateZonesRead,
    MetricKind.best_segment: BestSegmentRead,
}


@router.post("/recompute", response_model=RecomputeResponse)
def recompute_metric(
    payload: RecomputeRequest,
    db: Session = Depends(get_db),
    orchestrator: MetricsOrchestrator = Depends(get_orchestrator),
):
    """Throw away the cached row for one activity metric and build it again."""
    kind = MetricKind(payload.kind)
    key = resolve_key(db, payload.activity_id, payload.activity_source, payload.user_id)
    options = {"max_heart_rate": payload.max_heart_rate} if kind == MetricKind.heart_rate_zones else {}
    result = orchestrator.recompute(db, kind, key, **options)
    data = READ_MODELS[kind].model_validate(result.row) if result.ok else None
    return {
        "success": result.ok,
        "kind": kind.value,
        "state": result.state.value,
        "data": data,
        "message": result.message,
    }
