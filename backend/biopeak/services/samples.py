from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from biopeak.analytics.samples import Sample
from biopeak.core.errors import UpstreamFetchFailed
from biopeak.core.logger import get_logger
from biopeak.services.sources import ActivitySource, profile_for

logger = get_logger(__name__)


def load_samples(
    db: Session,
    source: "str | ActivitySource",
    activity_id: str,
    user_id: str | None = None,
) -> list[Sample]:
    """Read an activity's samples from its vendor table, oldest first."""
    model = profile_for(source).sample_model
    try:
        q = db.query(model).filter(model.activity_id == str(activity_id))
        if user_id:
            q = q.filter(model.user_id == str(user_id))
        rows = q.order_by(model.sample_timestamp, model.id).all()
    except SQLAlchemyError as exc:
        logger.error(f"Sample read failed for {source}/{activity_id}: {exc!r}")
        raise UpstreamFetchFailed(f"Could not read samples for activity {activity_id}") from exc
    return [Sample.from_row(r) for r in rows]


def sample_owner(db: Session, source: "str | ActivitySource", activity_id: str) -> str | None:
    model = profile_for(source).sample_model
    try:
        row = db.query(model.user_id).filter(model.activity_id == str(activity_id)).first()
    except SQLAlchemyError as exc:
        raise UpstreamFetchFailed(f"Could not read samples for activity {activity_id}") from exc
    return row[0] if row else None


def sample_source(
    db: Session,
    activity_id: str,
    user_id: str | None = None,
    source: "str | ActivitySource | None" = None,
) -> ActivitySource | None:
    """First source whose sample table holds the activity (only `source` when given)."""
    candidates = [ActivitySource.parse(source)] if source else list(ActivitySource)
    for candidate in candidates:
        model = profile_for(candidate).sample_model
        try:
            q = db.query(model.id).filter(model.activity_id == str(activity_id))
            if user_id:
                q = q.filter(model.user_id == str(user_id))
            found = q.first()
        except SQLAlchemyError as exc:
            raise UpstreamFetchFailed(f"Could not read samples for activity {activity_id}") from exc
        if found is not None:
            return candidate
    return None
