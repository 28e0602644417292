from sqlalchemy import Column, Integer, String, Date, DateTime, Float, UniqueConstraint, Index
from sqlalchemy.sql import func
from biopeak.db import Base


class Activity(Base):
    __tablename__ = "activities"
    __table_args__ = (
        UniqueConstraint("user_id", "activity_id", "activity_source", name="uq_activity_natural_key"),
        Index("ix_activities_source_start", "activity_source", "start_time"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String, nullable=False, index=True)
    activity_id = Column(String, nullable=False, index=True)
    activity_source = Column(String(20), nullable=False)  # garmin, polar, strava, strava_gpx, zepp_gpx, healthkit

    # Vendor type string as received (RUNNING, trail_running, Ride, ...)
    activity_type = Column(String, nullable=True)

    activity_date = Column(Date, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=True)

    total_distance_meters = Column(Float, nullable=True)
    total_time_seconds = Column(Float, nullable=True)
    average_heart_rate = Column(Integer, nullable=True)
    max_heart_rate = Column(Integer, nullable=True)
    elevation_gain_meters = Column(Float, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
