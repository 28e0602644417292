from datetime import date, timedelta

from sqlalchemy.orm import Session

from biopeak.analytics.fitness import ActivityLoadInput
from biopeak.analytics.vo2max import ActivityEffort
from biopeak.models.activity import Activity
from biopeak.services.sources import ActivitySource


def find_activity(
    db: Session,
    activity_id: str,
    source: "ActivitySource | None" = None,
    user_id: str | None = None,
) -> Activity | None:
    q = db.query(Activity).filter(Activity.activity_id == str(activity_id))
    if source is not None:
        q = q.filter(Activity.activity_source == ActivitySource.parse(source).value)
    if user_id:
        q = q.filter(Activity.user_id == str(user_id))
    return q.order_by(Activity.id).first()


def activities_between(db: Session, user_id: str, start: date, end: date) -> list[Activity]:
    return (
        db.query(Activity)
        .filter(Activity.user_id == str(user_id))
        .filter(Activity.activity_date >= start)
        .filter(Activity.activity_date <= end)
        .order_by(Activity.activity_date, Activity.id)
        .all()
    )


def load_inputs(db: Session, user_id: str, target_date: date, lookback_days: int) -> list[ActivityLoadInput]:
    start = target_date - timedelta(days=lookback_days - 1)
    return [
        ActivityLoadInput(
            activity_date=a.activity_date,
            activity_type=a.activity_type,
            duration_s=a.total_time_seconds,
            distance_m=a.total_distance_meters,
            average_heart_rate=a.average_heart_rate,
            max_heart_rate=a.max_heart_rate,
            elevation_gain_m=a.elevation_gain_meters,
        )
        for a in activities_between(db, user_id, start, target_date)
    ]


def vo2max_efforts(db: Session, user_id: str, today: date, lookback_days: int) -> list[ActivityEffort]:
    start = today - timedelta(days=lookback_days)
    return [
        ActivityEffort(
            activity_id=a.activity_id,
            activity_date=a.activity_date,
            activity_type=a.activity_type,
            distance_m=a.total_distance_meters,
            time_s=a.total_time_seconds,
        )
        for a in activities_between(db, user_id, start, today)
    ]
