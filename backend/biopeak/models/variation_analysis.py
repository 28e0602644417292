from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, UniqueConstraint
from sqlalchemy.sql import false, func
from biopeak.db import Base


class ActivityVariationAnalysis(Base):
    __tablename__ = "activity_variation_analysis"
    __table_args__ = (
        UniqueConstraint("user_id", "activity_id", "activity_source", name="uq_variation_natural_key"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String, nullable=False, index=True)
    activity_id = Column(String, nullable=False)
    activity_source = Column(String(20), nullable=False)

    # Coefficients of variation, in percent
    heart_rate_cv = Column(Float, nullable=True)
    heart_rate_category = Column(String(10), nullable=True)  # Baixo | Alto
    pace_cv = Column(Float, nullable=True)
    pace_category = Column(String(10), nullable=True)

    diagnosis = Column(String, nullable=True)
    data_points_count = Column(Integer, nullable=False, server_default="0")

    has_valid_data = Column(Boolean, nullable=False, server_default=false())
    has_heart_rate_data = Column(Boolean, nullable=False, server_default=false())
    has_pace_data = Column(Boolean, nullable=False, server_default=false())

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
