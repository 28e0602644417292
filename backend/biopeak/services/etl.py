"""ETL-on-read for per-activity derived metrics.

A metric row is computed the first time somebody asks for it, stored, and
served from the table afterwards. Rows are only rebuilt through `recompute`
(admin trigger and backfill).

State of a key as seen by one caller:

    missing -> computing -> ready
    missing -> computing -> failed   (insufficient data, nothing stored)

A recompute only replaces the stored row once the new values exist, so a
failed rebuild leaves the previous row in place.
"""
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from biopeak.analytics.samples import elapsed_points
from biopeak.analytics.segments import fastest_segment
from biopeak.analytics.variation import analyze_variation
from biopeak.analytics.zones import bucket_heart_rate_zones, resolve_max_heart_rate
from biopeak.core.config import Settings
from biopeak.core.errors import InsufficientData, PersistFailed
from biopeak.core.logger import get_logger
from biopeak.models.best_segment import ActivityBestSegment
from biopeak.models.heart_rate_zones import ActivityHeartRateZones
from biopeak.models.variation_analysis import ActivityVariationAnalysis
from biopeak.services.activities import find_activity
from biopeak.services.samples import load_samples
from biopeak.services.sources import ActivitySource

logger = get_logger(__name__)

NO_SEGMENT_MESSAGE = "no segment found"


class MetricKind(str, Enum):
    variation_analysis = "variation_analysis"
    heart_rate_zones = "heart_rate_zones"
    best_segment = "best_segment"


class MetricState(str, Enum):
    missing = "missing"
    computing = "computing"
    ready = "ready"
    failed = "failed"


@dataclass(frozen=True)
class MetricKey:
    user_id: str
    activity_id: str
    activity_source: ActivitySource

    def __str__(self) -> str:
        return f"{self.activity_source.value}/{self.activity_id} (user {self.user_id})"


@dataclass
class EtlResult:
    kind: MetricKind
    key: MetricKey
    state: MetricState
    source: str | None = None  # "cache" | "calculated"
    row: Any = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.state == MetricState.ready


class MetricCalculator:
    """One derived metric: where it is stored and how it is computed."""

    kind: MetricKind
    model: type

    def __init__(self, settings: Settings):
        self.settings = settings

    def filter(self, q, key: MetricKey):
        m = self.model
        return (
            q.filter(m.user_id == key.user_id)
            .filter(m.activity_id == key.activity_id)
            .filter(m.activity_source == key.activity_source.value)
        )

    def key_columns(self, key: MetricKey) -> dict[str, Any]:
        return {
            "user_id": key.user_id,
            "activity_id": key.activity_id,
            "activity_source": key.activity_source.value,
        }

    def compute(self, db: Session, key: MetricKey, **options) -> dict[str, Any]:
        raise NotImplementedError

    def to_row(self, key: MetricKey, values: dict[str, Any]):
        return self.model(**self.key_columns(key), **values)


class VariationCalculator(MetricCalculator):
    kind = MetricKind.variation_analysis
    model = ActivityVariationAnalysis

    def compute(self, db, key, **options):
        samples = load_samples(db, key.activity_source, key.activity_id, key.user_id)
        if not samples:
            # Not synced yet: don't cache an empty verdict
            raise InsufficientData(f"No samples found for activity {key.activity_id}")
        result = analyze_variation(
            samples,
            hr_threshold=self.settings.heart_rate_cv_threshold,
            pace_threshold=self.settings.pace_cv_threshold,
            min_points=self.settings.variation_min_data_points,
        )
        return asdict(result)


class HeartRateZonesCalculator(MetricCalculator):
    kind = MetricKind.heart_rate_zones
    model = ActivityHeartRateZones

    def compute(self, db, key, max_heart_rate: int | None = None, **options):
        samples = load_samples(db, key.activity_source, key.activity_id, key.user_id)
        hr_max = resolve_max_heart_rate(samples, requested=max_heart_rate, configured=self.settings.hr_max)
        breakdown = bucket_heart_rate_zones(samples, hr_max)
        return {
            "max_heart_rate": breakdown.max_heart_rate,
            "zones": [z.as_dict() for z in breakdown.zones],
            "total_valid_seconds": breakdown.total_valid_seconds,
            "out_of_range_seconds": breakdown.out_of_range_seconds,
        }


class BestSegmentCalculator(MetricCalculator):
    kind = MetricKind.best_segment
    model = ActivityBestSegment

    def filter(self, q, key):
        # One best segment per activity, whatever source it came from
        m = self.model
        return q.filter(m.user_id == key.user_id).filter(m.activity_id == key.activity_id)

    def compute(self, db, key, **options):
        segment_m = self.settings.best_segment_distance_m
        activity = find_activity(db, key.activity_id, key.activity_source, key.user_id)
        if activity is not None and activity.total_distance_meters is not None:
            if activity.total_distance_meters < segment_m:
                raise InsufficientData(NO_SEGMENT_MESSAGE)

        samples = load_samples(db, key.activity_source, key.activity_id, key.user_id)
        best = fastest_segment(elapsed_points(samples), segment_m)
        if best is None:
            raise InsufficientData(NO_SEGMENT_MESSAGE)

        activity_date = activity.activity_date if activity is not None else None
        if activity_date is None and samples:
            activity_date = datetime.fromtimestamp(samples[0].timestamp, tz=timezone.utc).date()
        return {
            "activity_date": activity_date,
            "segment_start_distance_meters": round(best.start_distance_m, 2),
            "segment_end_distance_meters": round(best.end_distance_m, 2),
            "segment_duration_seconds": round(best.duration_s, 2),
            "best_1km_pace_min_km": round(best.avg_pace_min_km, 2),
        }


class MetricsOrchestrator:
    def __init__(self, calculators: dict[MetricKind, MetricCalculator]):
        self.calculators = calculators

    def _calculator(self, kind: MetricKind) -> MetricCalculator:
        return self.calculators[MetricKind(kind)]

    def _transition(self, kind: MetricKind, key: MetricKey, old: MetricState, new: MetricState, note: str = ""):
        suffix = f" ({note})" if note else ""
        logger.info(f"{kind.value} {key}: {old.value} -> {new.value}{suffix}")

    def get(self, db: Session, kind: MetricKind, key: MetricKey):
        calc = self._calculator(kind)
        return calc.filter(db.query(calc.model), key).first()

    def _compute(self, db: Session, calc: MetricCalculator, key: MetricKey, **options):
        self._transition(calc.kind, key, MetricState.missing, MetricState.computing)
        try:
            return calc.compute(db, key, **options), None
        except InsufficientData as exc:
            self._transition(calc.kind, key, MetricState.computing, MetricState.failed, exc.message)
            return None, EtlResult(calc.kind, key, MetricState.failed, message=exc.message)

    def _persist(
        self,
        db: Session,
        calc: MetricCalculator,
        key: MetricKey,
        values: dict[str, Any],
        replace: bool = False,
    ) -> EtlResult:
        """Insert the row; with `replace`, drop the old one in the same transaction."""
        kind = calc.kind
        try:
            if replace:
                deleted = calc.filter(db.query(calc.model), key).delete(synchronize_session=False)
                if deleted:
                    logger.info(f"{kind.value} {key}: replacing {deleted} cached row(s)")
            row = calc.to_row(key, values)
            db.add(row)
            db.commit()
        except IntegrityError:
            # Another caller stored the same key first; theirs wins
            db.rollback()
            existing = self.get(db, kind, key)
            if existing is None:
                raise PersistFailed(f"Could not store {kind.value} for {key}", data=jsonable_encoder(values))
            self._transition(kind, key, MetricState.computing, MetricState.ready, "concurrent insert")
            return EtlResult(kind, key, MetricState.ready, "cache", existing)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Persist failed for {kind.value} {key}: {exc!r}")
            raise PersistFailed(
                f"Could not store {kind.value} for {key}",
                data=jsonable_encoder(values),
            ) from exc

        db.refresh(row)
        self._transition(kind, key, MetricState.computing, MetricState.ready)
        return EtlResult(kind, key, MetricState.ready, "calculated", row)

    def compute_and_store(self, db: Session, kind: MetricKind, key: MetricKey, **options) -> EtlResult:
        calc = self._calculator(kind)
        values, failed = self._compute(db, calc, key, **options)
        if failed is not None:
            return failed
        return self._persist(db, calc, key, values)

    def get_or_compute(self, db: Session, kind: MetricKind, key: MetricKey, **options) -> EtlResult:
        existing = self.get(db, kind, key)
        if existing is not None:
            logger.debug(f"{MetricKind(kind).value} {key}: cache hit")
            return EtlResult(MetricKind(kind), key, MetricState.ready, "cache", existing)
        return self.compute_and_store(db, kind, key, **options)

    def recompute(self, db: Session, kind: MetricKind, key: MetricKey, **options) -> EtlResult:
        """Build the row again and swap it in; a failed rebuild keeps the stored row."""
        calc = self._calculator(kind)
        values, failed = self._compute(db, calc, key, **options)
        if failed is not None:
            return failed
        return self._persist(db, calc, key, values, replace=True)


def build_orchestrator(settings: Settings) -> MetricsOrchestrator:
    calculators = [
        VariationCalculator(settings),
        HeartRateZonesCalculator(settings),
        BestSegmentCalculator(settings),
    ]
    return MetricsOrchestrator({c.kind: c for c in calculators})
