from sqlalchemy import Column, Integer, String, Float, Date, DateTime
from sqlalchemy.sql import func
from biopeak.db import Base


class AveragePace(Base):
    """Community pace snapshot for one category, recomputed periodically."""

    __tablename__ = "average_pace"

    id = Column(Integer, primary_key=True, index=True)

    category = Column(String(20), nullable=False, index=True)  # RUNNING, CYCLING, SWIMMING
    average_pace_value = Column(Float, nullable=False)
    pace_unit = Column(String(20), nullable=False)  # min/km, km/h, min/100m

    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    total_activities = Column(Integer, nullable=False)
    total_distance_meters = Column(Float, nullable=False)
    total_time_minutes = Column(Float, nullable=False)

    calculated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
