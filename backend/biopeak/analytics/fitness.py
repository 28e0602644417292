"""Fitness / fatigue / performance from daily training load.

Impulse-response model (Banister): each day's load contributes to fitness
and fatigue with an exponential decay over the days since it was done.

    fitness     = K1 * sum(load_d * exp(-d / tau_fitness))
    fatigue     = K2 * sum(load_d * exp(-d / tau_fatigue))
    performance = fitness - fatigue

The daily BioPeak Fitness Score (0-100) adds capacity (from fitness),
consistency (active days in the last two weeks) and recovery balance (the
fatigue/fitness ratio).

How an activity turns into a load number is pluggable (`LoadModel`).
"""
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol

from biopeak.core.errors import InvalidInput


@dataclass(frozen=True)
class ActivityLoadInput:
    activity_date: date
    activity_type: str | None
    duration_s: float | None
    distance_m: float | None = None
    average_heart_rate: float | None = None
    max_heart_rate: float | None = None
    elevation_gain_m: float | None = None

    @property
    def pace_min_km(self) -> float | None:
        if not self.distance_m or not self.duration_s or self.distance_m <= 0:
            return None
        return (self.duration_s / 60.0) / (self.distance_m / 1000.0)


class LoadModel(Protocol):
    name: str

    def load(self, activity: ActivityLoadInput) -> float: ...


class TrimpLoad:
    """Banister TRIMP: minutes x heart-rate reserve fraction."""

    name = "trimp"

    def __init__(self, hr_rest: float = 60.0, default_hr_max: float | None = None):
        self.hr_rest = hr_rest
        self.default_hr_max = default_hr_max

    def load(self, activity: ActivityLoadInput) -> float:
        hr_max = activity.max_heart_rate or self.default_hr_max
        avg = activity.average_heart_rate
        if not activity.duration_s or activity.duration_s <= 0 or not avg or not hr_max:
            return 0.0
        reserve = hr_max - self.hr_rest
        if reserve <= 0 or avg <= self.hr_rest:
            return 0.0
        minutes = activity.duration_s / 60.0
        return minutes * (avg - self.hr_rest) / reserve


SPORT_MULTIPLIERS = [
    ("running", 1.2),
    ("cycling", 1.0),
    ("swimming", 1.3),
    ("strength", 0.8),
    ("yoga", 0.3),
    ("walking", 0.4),
    ("hiking", 0.7),
]


class StrainLoad:
    """BioPeak strain: log-scaled duration x intensity, plus climbing, per sport."""

    name = "strain"

    def load(self, activity: ActivityLoadInput) -> float:
        minutes = (activity.duration_s or 0) / 60.0
        if minutes < 5:
            return 0.0

        strain = math.log(minutes + 1) * 10

        intensity = 1.0
        if activity.average_heart_rate and activity.max_heart_rate:
            intensity = max(0.5, min(2.0, activity.average_heart_rate / 180.0))
        elif activity.pace_min_km:
            intensity = min(2.0, max(0.5, 6.0 / activity.pace_min_km))
        strain *= intensity

        gain = activity.elevation_gain_m
        if gain and gain > 50:
            strain += math.log(gain / 100.0 + 1) * 5

        kind = (activity.activity_type or "").lower()
        for sport, multiplier in SPORT_MULTIPLIERS:
            if sport in kind:
                strain *= multiplier
                break

        return round(strain, 2)


def load_model_for(name: str, hr_rest: float = 60.0, default_hr_max: float | None = None) -> LoadModel:
    key = (name or "").strip().lower()
    if key == TrimpLoad.name:
        return TrimpLoad(hr_rest=hr_rest, default_hr_max=default_hr_max)
    if key == StrainLoad.name:
        return StrainLoad()
    raise InvalidInput(f"Unknown load model '{name}' (expected trimp or strain)")


# Composite BioPeak Fitness Score (0-100): capacity 0-60, consistency 0-20,
# recovery balance 0-20. Uses the unscaled weighted load sums (K1 = K2 = 1).
CAPACITY_MAX = 60.0
CAPACITY_DIVISOR = 20.0
CONSISTENCY_MAX = 20.0
CONSISTENCY_WINDOW_DAYS = 14
RECOVERY_BANDS = [
    (0.8, 1.2, 20.0),
    (0.6, 1.5, 15.0),
    (0.4, 2.0, 10.0),
]
RECOVERY_POOR = 5.0
RECOVERY_NEUTRAL = 10.0


def capacity_score(ctl: float) -> float:
    return min(CAPACITY_MAX, ctl / CAPACITY_DIVISOR)


def consistency_score(
    loads: dict[date, float],
    target_date: date,
    window_days: int = CONSISTENCY_WINDOW_DAYS,
) -> float:
    """Share of active days in the `window_days` days before the target date."""
    active = sum(
        1 for i in range(1, window_days + 1)
        if loads.get(target_date - timedelta(days=i), 0.0) > 0
    )
    return min(CONSISTENCY_MAX, active / window_days * CONSISTENCY_MAX)


def recovery_balance_score(atl: float, ctl: float) -> float:
    if ctl == 0:
        return RECOVERY_NEUTRAL
    ratio = atl / ctl
    for low, high, points in RECOVERY_BANDS:
        if low <= ratio <= high:
            return points
    return RECOVERY_POOR


@dataclass(frozen=True)
class FitnessResult:
    calendar_date: date
    fitness: float
    fatigue: float
    performance: float
    daily_strain: float
    load_model: str
    activities_count: int
    fitness_score: float = 0.0
    capacity_score: float = 0.0
    consistency_score: float = 0.0
    recovery_balance_score: float = 0.0


def daily_loads(activities: list[ActivityLoadInput], model: LoadModel) -> dict[date, float]:
    loads: dict[date, float] = defaultdict(float)
    for a in activities:
        if a.activity_date is None:
            continue
        loads[a.activity_date] += model.load(a)
    return dict(loads)


def fitness_fatigue(
    activities: list[ActivityLoadInput],
    target_date: date,
    model: LoadModel,
    lookback_days: int = 42,
    k1: float = 1.0,
    k2: float = 2.0,
    fitness_tau: float = 42.0,
    fatigue_tau: float = 7.0,
) -> FitnessResult:
    window_start = target_date - timedelta(days=lookback_days - 1)
    in_window = [
        a for a in activities
        if a.activity_date is not None and window_start <= a.activity_date <= target_date
    ]
    loads = daily_loads(in_window, model)

    ctl = 0.0
    atl = 0.0
    for day, load in loads.items():
        d = (target_date - day).days
        ctl += load * math.exp(-d / fitness_tau)
        atl += load * math.exp(-d / fatigue_tau)
    fitness = k1 * ctl
    fatigue = k2 * atl

    capacity = capacity_score(ctl)
    consistency = consistency_score(loads, target_date)
    recovery = recovery_balance_score(atl, ctl)

    return FitnessResult(
        calendar_date=target_date,
        fitness=round(fitness, 2),
        fatigue=round(fatigue, 2),
        performance=round(fitness - fatigue, 2),
        daily_strain=round(loads.get(target_date, 0.0), 2),
        load_model=model.name,
        activities_count=len(in_window),
        fitness_score=round(capacity + consistency + recovery, 2),
        capacity_score=round(capacity, 2),
        consistency_score=round(consistency, 2),
        recovery_balance_score=round(recovery, 2),
    )
