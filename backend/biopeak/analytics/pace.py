"""Community average pace per sport and how one activity compares with it."""
from dataclasses import dataclass

from biopeak.core.activity_types import pace_category
from biopeak.core.constants import PACE_UNITS
from biopeak.core.errors import InvalidInput


@dataclass(frozen=True)
class CategoryTotals:
    category: str
    total_distance_m: float
    total_time_min: float
    activity_count: int


@dataclass(frozen=True)
class CategoryAverage:
    category: str
    average_pace_value: float
    pace_unit: str
    total_activities: int
    total_distance_m: float
    total_time_min: float


@dataclass(frozen=True)
class PaceComparison:
    category: str
    user_pace: float
    average_pace: float
    pace_unit: str
    difference: float
    percent_difference: float
    is_faster: bool


def aggregate_by_category(rows: list[tuple[str | None, float | None, float | None]]) -> list[CategoryTotals]:
    """Sum distance (m) and time (s) per pace category from (type, distance, time) rows."""
    totals: dict[str, list[float]] = {}
    for activity_type, distance_m, time_s in rows:
        category = pace_category(activity_type)
        if category is None or not distance_m or not time_s or distance_m <= 0 or time_s <= 0:
            continue
        bucket = totals.setdefault(category, [0.0, 0.0, 0])
        bucket[0] += distance_m
        bucket[1] += time_s / 60.0
        bucket[2] += 1
    return [
        CategoryTotals(category, d, t, int(n))
        for category, (d, t, n) in sorted(totals.items())
    ]


def average_for(totals: CategoryTotals) -> CategoryAverage | None:
    if totals.activity_count == 0 or totals.total_distance_m <= 0 or totals.total_time_min <= 0:
        return None
    if totals.category == "RUNNING":
        value = totals.total_time_min / (totals.total_distance_m / 1000.0)
    elif totals.category == "CYCLING":
        value = (totals.total_distance_m / 1000.0) / (totals.total_time_min / 60.0)
    elif totals.category == "SWIMMING":
        value = totals.total_time_min / (totals.total_distance_m / 100.0)
    else:
        return None
    return CategoryAverage(
        category=totals.category,
        average_pace_value=value,
        pace_unit=PACE_UNITS[totals.category],
        total_activities=totals.activity_count,
        total_distance_m=totals.total_distance_m,
        total_time_min=totals.total_time_min,
    )


def normalize_category(value: str) -> str:
    category = (value or "").strip().upper()
    if category not in PACE_UNITS:
        raise InvalidInput(f"Unknown pace category '{value}' (expected RUNNING, CYCLING or SWIMMING)")
    return category


def compare_pace(category: str, user_pace: float, average_pace: float) -> PaceComparison:
    """Compare a user's pace with the community average for the category.

    Running and swimming paces are lower-is-faster. Cycling is compared as
    speed in km/h (higher is faster); the user value arrives as min/km and
    is converted first.
    """
    category = normalize_category(category)
    if user_pace is None or user_pace <= 0:
        raise InvalidInput("user_pace must be > 0")
    if average_pace is None or average_pace <= 0:
        raise InvalidInput("No valid community average for this category")

    if category == "CYCLING":
        user_value = 60.0 / user_pace
        is_faster = user_value > average_pace
    else:
        user_value = user_pace
        is_faster = user_value < average_pace

    difference = user_value - average_pace
    return PaceComparison(
        category=category,
        user_pace=round(user_value, 2),
        average_pace=round(average_pace, 2),
        pace_unit=PACE_UNITS[category],
        difference=round(abs(difference), 2),
        percent_difference=round(abs(difference / average_pace) * 100.0, 1),
        is_faster=is_faster,
    )
