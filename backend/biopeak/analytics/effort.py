"""Start / middle / end effort split of a session.

Valid heart-rate samples are cut into thirds by index. Average HR (as % of
the session max) and average pace per third feed a small decision matrix:

    HR higher + pace faster  -> negative_split
    HR higher + pace slower  -> cardiac_drift
    HR lower  + pace slower  -> positive_split
    HR lower  + pace faster  -> economy
    HR higher + pace stable  -> cardiac_drift
    HR stable + pace faster  -> negative_split
    HR stable + pace slower  -> positive_split
    otherwise                -> even_pace

Without pace data only the HR direction is used.
"""
from dataclasses import dataclass

from biopeak.analytics.samples import Sample, is_finite
from biopeak.core.constants import EFFORT_MAX_VALID_PACE, EFFORT_MIN_POINTS, EFFORT_STABLE_BAND_PCT
from biopeak.core.errors import InsufficientData


@dataclass(frozen=True)
class EffortDistribution:
    start_effort: float
    middle_effort: float
    end_effort: float
    start_pace: float | None
    middle_pace: float | None
    end_pace: float | None
    pattern: str
    has_cardiac_drift: bool
    pace_change: str
    hr_change: str


def _avg_hr(segment: list[Sample]) -> float:
    return sum(s.heart_rate for s in segment) / len(segment) if segment else 0.0


def _avg_pace(segment: list[Sample]) -> float | None:
    paces = [
        p for p in (s.pace_min_km for s in segment)
        if p is not None and 0 < p < EFFORT_MAX_VALID_PACE
    ]
    return sum(paces) / len(paces) if paces else None


def _direction(start: float, end: float, up: str, down: str) -> str:
    diff_pct = (end - start) / start * 100.0
    if diff_pct > EFFORT_STABLE_BAND_PCT:
        return up
    if diff_pct < -EFFORT_STABLE_BAND_PCT:
        return down
    return "stable"


def classify_pattern(hr_change: str, pace_change: str | None) -> str:
    if pace_change is None:
        return {"higher": "negative_split", "lower": "positive_split"}.get(hr_change, "even_pace")
    matrix = {
        ("higher", "faster"): "negative_split",
        ("higher", "slower"): "cardiac_drift",
        ("lower", "slower"): "positive_split",
        ("lower", "faster"): "economy",
        ("higher", "stable"): "cardiac_drift",
        ("stable", "faster"): "negative_split",
        ("stable", "slower"): "positive_split",
    }
    return matrix.get((hr_change, pace_change), "even_pace")


def effort_distribution(samples: list[Sample]) -> EffortDistribution:
    valid = [s for s in samples if is_finite(s.heart_rate) and s.heart_rate > 0]
    if len(valid) < EFFORT_MIN_POINTS:
        raise InsufficientData(
            f"Effort distribution needs at least {EFFORT_MIN_POINTS} heart rate points, got {len(valid)}"
        )

    total = len(valid)
    one_third = total // 3
    two_thirds = (total * 2) // 3
    start, middle, end = valid[:one_third], valid[one_third:two_thirds], valid[two_thirds:]

    start_hr, middle_hr, end_hr = _avg_hr(start), _avg_hr(middle), _avg_hr(end)
    start_pace, middle_pace, end_pace = _avg_pace(start), _avg_pace(middle), _avg_pace(end)
    max_hr = max(s.heart_rate for s in valid)

    hr_change = _direction(start_hr, end_hr, "higher", "lower")
    has_pace = start_pace is not None and end_pace is not None
    pace_change = _direction(start_pace, end_pace, "slower", "faster") if has_pace else None
    pattern = classify_pattern(hr_change, pace_change)

    return EffortDistribution(
        start_effort=round(start_hr / max_hr * 100.0, 1),
        middle_effort=round(middle_hr / max_hr * 100.0, 1),
        end_effort=round(end_hr / max_hr * 100.0, 1),
        start_pace=round(start_pace, 2) if start_pace is not None else None,
        middle_pace=round(middle_pace, 2) if middle_pace is not None else None,
        end_pace=round(end_pace, 2) if end_pace is not None else None,
        pattern=pattern,
        has_cardiac_drift=pattern == "cardiac_drift",
        pace_change=pace_change or "stable",
        hr_change=hr_change,
    )
