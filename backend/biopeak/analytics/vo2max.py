"""VO2max estimates from race-like running efforts (Daniels/Gilbert)."""
from dataclasses import dataclass
from datetime import date, timedelta

from biopeak.core.activity_types import is_running_like


@dataclass(frozen=True)
class ActivityEffort:
    activity_id: str
    activity_date: date
    activity_type: str | None
    distance_m: float | None
    time_s: float | None


@dataclass(frozen=True)
class Vo2MaxEstimate:
    activity_id: str
    activity_date: date
    distance_m: float
    time_s: float
    vo2max: float


@dataclass(frozen=True)
class Vo2MaxSummary:
    current_vo2max: float | None
    best_vo2max: float | None
    trend: str | None  # up | down | stable
    change: float | None
    best_activity: Vo2MaxEstimate | None
    estimates_count: int


def daniels_vo2max(distance_m: float | None, time_s: float | None, min_distance_m: float = 800.0) -> float | None:
    """VO2 = -4.6 + 0.182258 v + 0.000104 v^2, v in m/min, rounded to 0.1.

    None for efforts shorter than `min_distance_m` or non-positive results.
    """
    if not distance_m or not time_s or distance_m <= 0 or time_s <= 0:
        return None
    if distance_m < min_distance_m:
        return None
    v = distance_m / (time_s / 60.0)
    vo2 = -4.6 + 0.182258 * v + 0.000104 * v ** 2
    return round(vo2, 1) if vo2 > 0 else None


def estimate_efforts(efforts: list[ActivityEffort], min_distance_m: float = 800.0) -> list[Vo2MaxEstimate]:
    estimates = []
    for e in efforts:
        if not is_running_like(e.activity_type) or e.activity_date is None:
            continue
        vo2 = daniels_vo2max(e.distance_m, e.time_s, min_distance_m)
        if vo2 is None:
            continue
        estimates.append(
            Vo2MaxEstimate(
                activity_id=e.activity_id,
                activity_date=e.activity_date,
                distance_m=float(e.distance_m),
                time_s=float(e.time_s),
                vo2max=vo2,
            )
        )
    return estimates


def summarize_vo2max(
    efforts: list[ActivityEffort],
    today: date,
    current_window_days: int = 30,
    lookback_days: int = 90,
    stable_threshold: float = 1.0,
    min_distance_m: float = 800.0,
) -> Vo2MaxSummary:
    """Current (best of the recent window), best over the lookback and trend.

    The trend compares the current value with the best of the window right
    before it (days 30-60 back by default).
    """
    lookback_start = today - timedelta(days=lookback_days)
    recent_start = today - timedelta(days=current_window_days)
    previous_start = today - timedelta(days=current_window_days * 2)

    estimates = [
        e for e in estimate_efforts(efforts, min_distance_m)
        if lookback_start <= e.activity_date <= today
    ]
    if not estimates:
        return Vo2MaxSummary(None, None, None, None, None, 0)

    best = max(estimates, key=lambda e: e.vo2max)
    recent = [e.vo2max for e in estimates if e.activity_date >= recent_start]
    previous = [e.vo2max for e in estimates if previous_start <= e.activity_date < recent_start]

    current = max(recent) if recent else None
    trend = None
    change = None
    if current is not None and previous:
        change = round(current - max(previous), 1)
        if abs(change) < stable_threshold:
            trend = "stable"
        elif change > 0:
            trend = "up"
        else:
            trend = "down"

    return Vo2MaxSummary(
        current_vo2max=current,
        best_vo2max=best.vo2max,
        trend=trend,
        change=change,
        best_activity=best,
        estimates_count=len(estimates),
    )
