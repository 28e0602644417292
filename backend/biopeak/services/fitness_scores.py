from datetime import date

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from biopeak.analytics.fitness import FitnessResult, fitness_fatigue, load_model_for
from biopeak.core.config import Settings
from biopeak.core.errors import PersistFailed
from biopeak.core.logger import get_logger
from biopeak.models.fitness_score import FitnessScoreDaily
from biopeak.services.activities import load_inputs

logger = get_logger(__name__)


def compute_fitness(db: Session, user_id: str, target_date: date, settings: Settings) -> FitnessResult:
    model = load_model_for(
        settings.fitness_load_model,
        hr_rest=settings.hr_rest,
        default_hr_max=settings.estimated_hr_max,
    )
    activities = load_inputs(db, user_id, target_date, settings.fitness_lookback_days)
    return fitness_fatigue(
        activities,
        target_date,
        model,
        lookback_days=settings.fitness_lookback_days,
        k1=settings.banister_k1,
        k2=settings.banister_k2,
        fitness_tau=settings.banister_fitness_tau,
        fatigue_tau=settings.banister_fatigue_tau,
    )


def _apply(row: FitnessScoreDaily, result: FitnessResult) -> None:
    row.fitness = result.fitness
    row.fatigue = result.fatigue
    row.performance = result.performance
    row.daily_strain = result.daily_strain
    row.load_model = result.load_model
    row.activities_count = result.activities_count
    row.fitness_score = result.fitness_score
    row.capacity_score = result.capacity_score
    row.consistency_score = result.consistency_score
    row.recovery_balance_score = result.recovery_balance_score


def upsert_fitness_score(db: Session, user_id: str, result: FitnessResult) -> FitnessScoreDaily:
    """Insert or overwrite the (user, date) row. Re-running a date is idempotent."""
    for attempt in range(2):
        row = (
            db.query(FitnessScoreDaily)
            .filter(FitnessScoreDaily.user_id == user_id)
            .filter(FitnessScoreDaily.calendar_date == result.calendar_date)
            .first()
        )
        if not row:
            row = FitnessScoreDaily(user_id=user_id, calendar_date=result.calendar_date)
            db.add(row)
        _apply(row, result)
        try:
            db.commit()
        except IntegrityError:
            # Lost an insert race; the second pass updates the winner's row
            db.rollback()
            if attempt == 1:
                raise PersistFailed(f"Could not store fitness score for {user_id}")
            continue
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistFailed(f"Could not store fitness score for {user_id}") from exc
        db.refresh(row)
        return row
    raise PersistFailed(f"Could not store fitness score for {user_id}")


def compute_and_store_fitness(db: Session, user_id: str, target_date: date, settings: Settings) -> FitnessScoreDaily:
    result = compute_fitness(db, user_id, target_date, settings)
    row = upsert_fitness_score(db, user_id, result)
    logger.info(
        f"Fitness score {user_id} {target_date}: fitness={result.fitness} "
        f"fatigue={result.fatigue} performance={result.performance} score={result.fitness_score} "
        f"({result.load_model})"
    )
    return row
