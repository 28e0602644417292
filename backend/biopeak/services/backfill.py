"""Batch runners that fill the metric tables for existing activities.

Both runners page through their input with limit/offset and return
`next_offset` so a caller can resume. A failing unit (one activity, one
user) is recorded and the batch moves on.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from biopeak.core.config import Settings
from biopeak.core.errors import BioPeakError
from biopeak.core.logger import get_logger
from biopeak.core.retry import RetryPolicy
from biopeak.models.activity import Activity
from biopeak.models.fitness_score import FitnessScoreDaily
from biopeak.services.etl import MetricKey, MetricKind, MetricsOrchestrator, MetricState
from biopeak.services.fitness_scores import compute_and_store_fitness
from biopeak.services.sources import ActivitySource

logger = get_logger(__name__)

ALL_SOURCES = "all"


def clamp_limit(limit: int | None, default: int = 100, maximum: int = 1000) -> int:
    if limit is None:
        return default
    return min(max(int(limit), 1), maximum)


def resolve_sources(source: str | None) -> list[ActivitySource]:
    if source is None or str(source).strip().lower() == ALL_SOURCES:
        return list(ActivitySource)
    return [ActivitySource.parse(source)]


@dataclass
class SourceBackfillResult:
    source: str
    fetched: int = 0
    processed: int = 0
    ok: int = 0
    failures: list[dict[str, Any]] = field(default_factory=list)
    next_offset: int = 0
    error: str | None = None


def page_activities(
    db: Session,
    source: ActivitySource,
    limit: int,
    offset: int,
    user_id: str | None = None,
) -> list[tuple[str, str]]:
    """(user_id, activity_id) pairs, newest first, in a stable order."""
    q = db.query(Activity.user_id, Activity.activity_id).filter(Activity.activity_source == source.value)
    if user_id:
        q = q.filter(Activity.user_id == str(user_id))
    rows = (
        q.order_by(Activity.start_time.desc().nulls_last(), Activity.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [(r[0], r[1]) for r in rows]


def backfill_variation_analysis(
    db: Session,
    orchestrator: MetricsOrchestrator,
    retry: RetryPolicy,
    source: str | None = "garmin",
    limit: int | None = 100,
    offset: int = 0,
    dry_run: bool = False,
    user_id: str | None = None,
    max_limit: int = 1000,
) -> dict[str, Any]:
    limit = clamp_limit(limit, maximum=max_limit)
    offset = max(int(offset or 0), 0)
    results: dict[str, Any] = {}

    for src in resolve_sources(source):
        try:
            items = page_activities(db, src, limit, offset, user_id)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Variation backfill {src.value}: page query failed: {exc!r}")
            # next_offset stays put so the page can be retried
            results[src.value] = asdict(SourceBackfillResult(source=src.value, next_offset=offset, error=str(exc)))
            continue
        summary = SourceBackfillResult(source=src.value, fetched=len(items), next_offset=offset + limit)
        logger.info(f"Variation backfill {src.value}: {len(items)} activities (offset {offset}, dry_run={dry_run})")

        for owner, activity_id in items:
            summary.processed += 1
            if dry_run:
                continue
            key = MetricKey(user_id=owner, activity_id=activity_id, activity_source=src)
            try:
                outcome = retry.call(orchestrator.recompute, db, MetricKind.variation_analysis, key)
            except BioPeakError as exc:
                summary.failures.append(
                    {"user_id": owner, "activity_id": activity_id, "step": "process", "error": exc.message}
                )
                continue
            except Exception as exc:
                db.rollback()
                logger.error(f"Variation backfill failed for {key}: {exc!r}")
                summary.failures.append(
                    {"user_id": owner, "activity_id": activity_id, "step": "process", "error": str(exc)}
                )
                continue

            if outcome.state == MetricState.ready:
                summary.ok += 1
            else:
                summary.failures.append(
                    {"user_id": owner, "activity_id": activity_id, "step": "compute", "error": outcome.message}
                )

        logger.info(
            f"Variation backfill {src.value}: ok={summary.ok} failed={len(summary.failures)} "
            f"next_offset={summary.next_offset}"
        )
        results[src.value] = asdict(summary)

    ok = not any(r["error"] for r in results.values())
    return {"ok": ok, "limit": limit, "offset": offset, "results": results}


def users_with_activities(db: Session, limit: int, offset: int, user_id: str | None = None) -> list[str]:
    q = db.query(Activity.user_id).distinct()
    if user_id:
        q = q.filter(Activity.user_id == str(user_id))
    rows = q.order_by(Activity.user_id).offset(offset).limit(limit).all()
    return [r[0] for r in rows]


def users_with_score(db: Session, user_ids: list[str], target_date: date) -> set[str]:
    if not user_ids:
        return set()
    rows = (
        db.query(FitnessScoreDaily.user_id)
        .filter(FitnessScoreDaily.calendar_date == target_date)
        .filter(FitnessScoreDaily.user_id.in_(user_ids))
        .all()
    )
    return {r[0] for r in rows}


def backfill_fitness_scores(
    session_factory: Callable[[], Session],
    settings: Settings,
    retry: RetryPolicy,
    target_date: date,
    limit: int | None = 100,
    offset: int = 0,
    user_id: str | None = None,
    concurrency: int | None = None,
    only_missing_today: bool = True,
) -> dict[str, Any]:
    limit = clamp_limit(limit, default=settings.backfill_default_limit, maximum=settings.backfill_max_limit)
    offset = max(int(offset or 0), 0)
    workers = max(1, concurrency or settings.backfill_concurrency)

    db = session_factory()
    try:
        users = users_with_activities(db, limit, offset, user_id)
        done = users_with_score(db, users, target_date) if only_missing_today else set()
    finally:
        db.close()

    pending = [u for u in users if u not in done]
    logger.info(
        f"Fitness backfill {target_date}: scanned {len(users)} users, {len(pending)} to process "
        f"({workers} workers)"
    )

    def run_one(uid: str) -> None:
        session = session_factory()
        try:
            retry.call(compute_and_store_fitness, session, uid, target_date, settings)
        finally:
            session.close()

    updated = 0
    errors: list[str] = []
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(run_one, uid): uid for uid in pending}
        for fut in as_completed(futures):
            uid = futures[fut]
            try:
                fut.result()
                updated += 1
            except Exception as exc:
                message = exc.message if isinstance(exc, BioPeakError) else str(exc)
                logger.error(f"Fitness backfill failed for user {uid}: {message}")
                errors.append(f"User {uid}: {message}")

    return {
        "target_date": target_date,
        "users_scanned": len(users),
        "users_to_process": len(pending),
        "users_updated": updated,
        "users_failed": len(errors),
        "errors": errors,
        "next_offset": offset + limit if len(users) == limit else None,
    }
