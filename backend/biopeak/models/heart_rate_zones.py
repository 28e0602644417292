from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from biopeak.db import Base


class ActivityHeartRateZones(Base):
    __tablename__ = "activity_heart_rate_zones"
    __table_args__ = (
        UniqueConstraint("user_id", "activity_id", "activity_source", name="uq_hr_zones_natural_key"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String, nullable=False, index=True)
    activity_id = Column(String, nullable=False)
    activity_source = Column(String(20), nullable=False)

    max_heart_rate = Column(Integer, nullable=False)
    # [{zone, label, min_bpm, max_bpm, time_in_zone_seconds, percentage}] x5
    zones = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    total_valid_seconds = Column(Float, nullable=False, server_default="0")
    out_of_range_seconds = Column(Float, nullable=False, server_default="0")

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
