from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from biopeak.core.errors import InvalidInput, PersistFailed
from biopeak.core.logger import get_logger
from biopeak.ingest.gpx import ParsedGpx
from biopeak.models.activity import Activity
from biopeak.services.sources import ActivitySource, profile_for

logger = get_logger(__name__)


def store_gpx_activity(
    db: Session,
    user_id: str,
    source: ActivitySource,
    parsed: ParsedGpx,
    activity_id: str | None = None,
    activity_type: str | None = None,
) -> Activity:
    """Write the activity row and its samples for a GPX-capable source."""
    profile = profile_for(source)
    if profile.import_format != "gpx":
        raise InvalidInput(f"Source '{source.value}' does not accept GPX uploads")

    activity_id = activity_id or f"gpx_{int(parsed.samples[0].timestamp)}"
    heart_rates = parsed.heart_rates()
    activity = Activity(
        user_id=user_id,
        activity_id=activity_id,
        activity_source=source.value,
        activity_type=activity_type or parsed.activity_type or "running",
        activity_date=parsed.activity_date,
        start_time=parsed.start_time,
        total_distance_meters=parsed.total_distance_m,
        total_time_seconds=parsed.total_time_s,
        average_heart_rate=int(round(sum(heart_rates) / len(heart_rates))) if heart_rates else None,
        max_heart_rate=int(round(max(heart_rates))) if heart_rates else None,
        elevation_gain_meters=parsed.elevation_gain_m,
    )
    db.add(activity)

    model = profile.sample_model
    db.add_all(
        model(
            user_id=user_id,
            activity_id=activity_id,
            sample_timestamp=int(round(s.timestamp)),
            heart_rate=int(round(s.heart_rate)) if s.heart_rate is not None else None,
            speed_meters_per_second=s.speed_m_s,
            total_distance_in_meters=s.distance_m,
            latitude_in_degree=s.latitude,
            longitude_in_degree=s.longitude,
            elevation_in_meters=s.elevation_m,
            steps_per_minute=s.cadence,
            clock_duration_in_seconds=s.clock_s,
        )
        for s in parsed.samples
    )
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise InvalidInput(f"Activity {activity_id} was already imported", status_code=409) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistFailed(f"Could not store imported activity {activity_id}") from exc
    db.refresh(activity)
    logger.info(
        f"Imported {source.value} activity {activity_id} for {user_id}: "
        f"{len(parsed.samples)} samples, {parsed.total_distance_m:.0f} m"
    )
    return activity
