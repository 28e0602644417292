from sqlalchemy import Column, Integer, String, Float, Date, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from biopeak.db import Base


class FitnessScoreDaily(Base):
    __tablename__ = "fitness_scores_daily"
    __table_args__ = (
        UniqueConstraint("user_id", "calendar_date", name="uq_fitness_user_date"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String, nullable=False, index=True)
    calendar_date = Column(Date, nullable=False)

    fitness = Column(Float, nullable=False)       # CTL
    fatigue = Column(Float, nullable=False)       # ATL
    performance = Column(Float, nullable=False)   # fitness - fatigue
    daily_strain = Column(Float, nullable=False, server_default="0")
    load_model = Column(String(20), nullable=False, server_default="trimp")
    activities_count = Column(Integer, nullable=False, server_default="0")

    # BioPeak Fitness Score (0-100) and its parts
    fitness_score = Column(Float, nullable=False, server_default="0")
    capacity_score = Column(Float, nullable=False, server_default="0")
    consistency_score = Column(Float, nullable=False, server_default="0")
    recovery_balance_score = Column(Float, nullable=False, server_default="0")

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
