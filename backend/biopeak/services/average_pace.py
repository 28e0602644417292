from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from biopeak.analytics.pace import aggregate_by_category, average_for, normalize_category
from biopeak.core.cache import CacheStore
from biopeak.core.errors import PersistFailed
from biopeak.core.logger import get_logger
from biopeak.models.activity import Activity
from biopeak.models.average_pace import AveragePace

logger = get_logger(__name__)


def calculate_average_pace(db: Session, today: date, period_days: int = 30) -> list[AveragePace]:
    """Aggregate every user's activities over the period and store a snapshot per category."""
    period_start = today - timedelta(days=period_days)
    rows = (
        db.query(Activity.activity_type, Activity.total_distance_meters, Activity.total_time_seconds)
        .filter(Activity.activity_date >= period_start)
        .filter(Activity.activity_date <= today)
        .all()
    )

    snapshots = []
    for totals in aggregate_by_category([tuple(r) for r in rows]):
        avg = average_for(totals)
        if avg is None:
            logger.info(f"Skipping {totals.category}: no usable totals")
            continue
        snapshots.append(
            AveragePace(
                category=avg.category,
                average_pace_value=avg.average_pace_value,
                pace_unit=avg.pace_unit,
                period_start=period_start,
                period_end=today,
                total_activities=avg.total_activities,
                total_distance_meters=avg.total_distance_m,
                total_time_minutes=avg.total_time_min,
            )
        )
        logger.info(
            f"{avg.category}: {avg.average_pace_value:.2f} {avg.pace_unit} "
            f"({avg.total_activities} activities)"
        )

    try:
        db.add_all(snapshots)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistFailed("Could not store average pace snapshot") from exc
    for s in snapshots:
        db.refresh(s)
    return snapshots


@dataclass(frozen=True)
class PaceSnapshot:
    category: str
    average_pace_value: float
    pace_unit: str
    total_activities: int
    calculated_at: datetime | None

    def to_cache(self) -> dict:
        data = asdict(self)
        data["calculated_at"] = self.calculated_at.isoformat() if self.calculated_at else None
        return data

    @classmethod
    def from_cache(cls, data: dict) -> "PaceSnapshot":
        at = data.get("calculated_at")
        return cls(
            category=data["category"],
            average_pace_value=float(data["average_pace_value"]),
            pace_unit=data["pace_unit"],
            total_activities=int(data["total_activities"]),
            calculated_at=datetime.fromisoformat(at) if at else None,
        )


def latest_average(db: Session, category: str, cache: CacheStore | None = None) -> PaceSnapshot | None:
    """Most recent snapshot for a category, read through the cache when given."""
    category = normalize_category(category)
    cache_key = f"average_pace:{category}"
    if cache is not None:
        hit = cache.get(cache_key)
        if hit is not None:
            return PaceSnapshot.from_cache(hit)

    row = (
        db.query(AveragePace)
        .filter(AveragePace.category == category)
        .order_by(AveragePace.calculated_at.desc(), AveragePace.id.desc())
        .first()
    )
    if row is None:
        return None
    snapshot = PaceSnapshot(
        category=row.category,
        average_pace_value=row.average_pace_value,
        pace_unit=row.pace_unit,
        total_activities=row.total_activities,
        calculated_at=row.calculated_at,
    )
    if cache is not None:
        cache.set(cache_key, snapshot.to_cache())
    return snapshot
