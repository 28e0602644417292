from sqlalchemy import Column, Integer, String, Float, Date, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from biopeak.db import Base


class ActivityBestSegment(Base):
    __tablename__ = "activity_best_segments"
    __table_args__ = (
        UniqueConstraint("user_id", "activity_id", name="uq_best_segment_natural_key"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String, nullable=False, index=True)
    activity_id = Column(String, nullable=False)
    activity_source = Column(String(20), nullable=False)
    activity_date = Column(Date, nullable=True)

    segment_start_distance_meters = Column(Float, nullable=False)
    segment_end_distance_meters = Column(Float, nullable=False)
    segment_duration_seconds = Column(Float, nullable=False)
    best_1km_pace_min_km = Column(Float, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
