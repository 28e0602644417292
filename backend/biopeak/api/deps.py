from fastapi import Depends, Request
from sqlalchemy.orm import Session

from biopeak.core.cache import CacheStore
from biopeak.core.config import Settings, settings
from biopeak.core.errors import InvalidInput
from biopeak.core.retry import RetryPolicy
from biopeak.services.activities import find_activity
from biopeak.services.etl import MetricKey, MetricsOrchestrator
from biopeak.services.samples import sample_owner
from biopeak.services.sources import ActivitySource


def get_settings() -> Settings:
    return settings


def get_orchestrator(request: Request) -> MetricsOrchestrator:
    return request.app.state.orchestrator


def get_pace_cache(request: Request) -> CacheStore:
    return request.app.state.pace_cache


def get_retry_policy(cfg: Settings = Depends(get_settings)) -> RetryPolicy:
    return RetryPolicy.from_settings(cfg)


def resolve_key(db: Session, activity_id: str, activity_source: str, user_id: str | None) -> MetricKey:
    """Build the metric key, looking the owner up when the caller did not send it."""
    source = ActivitySource.parse(activity_source)
    activity_id = str(activity_id).strip()
    if not activity_id:
        raise InvalidInput("activity_id is required")
    if not user_id:
        activity = find_activity(db, activity_id, source)
        user_id = activity.user_id if activity is not None else sample_owner(db, source, activity_id)
    if not user_id:
        raise InvalidInput(f"Activity {activity_id} not found for source {source.value}", status_code=404)
    return MetricKey(user_id=str(user_id), activity_id=activity_id, activity_source=source)
