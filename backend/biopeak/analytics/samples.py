"""Immutable per-sample view shared by every calculator.

Sample Store rows (any vendor table) are converted into `Sample` once at the
data-access boundary; nothing under `analytics/` touches the database.
"""
import math
from dataclasses import dataclass

from biopeak.core.time_utils import speed_to_pace


@dataclass(frozen=True)
class Sample:
    timestamp: float  # epoch seconds
    heart_rate: float | None = None
    speed_m_s: float | None = None
    distance_m: float | None = None  # cumulative
    latitude: float | None = None
    longitude: float | None = None
    elevation_m: float | None = None
    power_w: float | None = None
    cadence: float | None = None
    timer_s: float | None = None
    moving_s: float | None = None
    clock_s: float | None = None

    @property
    def pace_min_km(self) -> float | None:
        return speed_to_pace(self.speed_m_s)

    @classmethod
    def from_row(cls, row) -> "Sample":
        return cls(
            timestamp=float(row.sample_timestamp),
            heart_rate=row.heart_rate,
            speed_m_s=row.speed_meters_per_second,
            distance_m=row.total_distance_in_meters,
            latitude=row.latitude_in_degree,
            longitude=row.longitude_in_degree,
            elevation_m=row.elevation_in_meters,
            power_w=row.power_in_watts,
            cadence=row.steps_per_minute,
            timer_s=row.timer_duration_in_seconds,
            moving_s=row.moving_duration_in_seconds,
            clock_s=row.clock_duration_in_seconds,
        )


def is_finite(value) -> bool:
    return value is not None and isinstance(value, (int, float)) and math.isfinite(value)


def valid_heart_rates(samples: list[Sample]) -> list[float]:
    return [float(s.heart_rate) for s in samples if is_finite(s.heart_rate) and s.heart_rate > 0]


def valid_paces(samples: list[Sample]) -> list[float]:
    """Paces in min/km for samples that are actually moving."""
    return [p for p in (s.pace_min_km for s in samples) if p is not None and math.isfinite(p)]


def elapsed_points(samples: list[Sample]) -> list[tuple[float, float]]:
    """(cumulative distance, elapsed seconds) pairs for segment search.

    Elapsed time prefers the device timer and falls back to the timestamp
    offset from the first sample.
    """
    if not samples:
        return []
    t0 = samples[0].timestamp
    points = []
    for s in samples:
        if not is_finite(s.distance_m):
            continue
        elapsed = s.timer_s if is_finite(s.timer_s) else s.timestamp - t0
        points.append((float(s.distance_m), float(elapsed)))
    return points
