from sqlalchemy import Column, Integer, String, Float, BigInteger, Index
from sqlalchemy.orm import declared_attr
from biopeak.db import Base


class ActivitySampleMixin:
    """Column layout shared by every vendor sample table.

    Rows are written by the vendor sync jobs; this service only reads them
    (GPX import being the one writer).
    """

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String, nullable=False)
    activity_id = Column(String, nullable=False)

    # Epoch seconds (UTC)
    sample_timestamp = Column(BigInteger, nullable=False)

    heart_rate = Column(Integer, nullable=True)
    speed_meters_per_second = Column(Float, nullable=True)
    total_distance_in_meters = Column(Float, nullable=True)  # cumulative
    latitude_in_degree = Column(Float, nullable=True)
    longitude_in_degree = Column(Float, nullable=True)
    elevation_in_meters = Column(Float, nullable=True)
    power_in_watts = Column(Float, nullable=True)
    steps_per_minute = Column(Float, nullable=True)
    timer_duration_in_seconds = Column(Float, nullable=True)
    moving_duration_in_seconds = Column(Float, nullable=True)
    clock_duration_in_seconds = Column(Float, nullable=True)

    @declared_attr
    def __table_args__(cls):
        return (
            Index(f"ix_{cls.__tablename__}_activity_ts", "activity_id", "sample_timestamp"),
        )


class GarminActivityDetail(ActivitySampleMixin, Base):
    __tablename__ = "garmin_activity_details"


class PolarActivityDetail(ActivitySampleMixin, Base):
    __tablename__ = "polar_activity_details"


class StravaActivityStream(ActivitySampleMixin, Base):
    __tablename__ = "strava_activity_streams"


class StravaGpxSample(ActivitySampleMixin, Base):
    __tablename__ = "strava_gpx_samples"


class ZeppGpxSample(ActivitySampleMixin, Base):
    __tablename__ = "zepp_gpx_samples"


class HealthkitActivitySample(ActivitySampleMixin, Base):
    __tablename__ = "healthkit_activity_samples"
