"""Fastest fixed-distance window search over a cumulative distance series."""
import math
from dataclasses import dataclass

from biopeak.core.constants import SEGMENT_TIE_TOLERANCE_S
from biopeak.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BestSegmentResult:
    start_distance_m: float
    end_distance_m: float
    duration_s: float
    avg_pace_min_km: float


def _clean(points: list[tuple[float | None, float | None]]) -> list[tuple[float, float]]:
    """Drop unusable points; keep the series non-decreasing in both axes."""
    cleaned: list[tuple[float, float]] = []
    for d, t in points:
        if d is None or t is None:
            continue
        d, t = float(d), float(t)
        if not (math.isfinite(d) and math.isfinite(t)):
            continue
        if cleaned and (d < cleaned[-1][0] or t < cleaned[-1][1]):
            continue
        cleaned.append((d, t))
    return cleaned


def fastest_segment(
    points: list[tuple[float | None, float | None]],
    segment_m: float = 1000.0,
) -> BestSegmentResult | None:
    """Find the fastest `segment_m` window in (distance_m, elapsed_s) points.

    Every sample is tried as a window start. The end pointer only moves
    forward, so the scan is linear. The time at `start + segment_m` is
    interpolated between the two samples bracketing that distance.
    Ties keep the earliest start.

    Returns None when the activity is shorter than the segment or no window
    has a positive, finite duration.
    """
    pts = _clean(points)
    if len(pts) < 2 or pts[-1][0] - pts[0][0] < segment_m:
        return None

    best: BestSegmentResult | None = None
    j = 1
    for i in range(len(pts)):
        start_d, start_t = pts[i]
        target = start_d + segment_m
        if target > pts[-1][0]:
            break
        if j <= i:
            j = i + 1
        while j < len(pts) and pts[j][0] < target:
            j += 1
        if j >= len(pts):
            break

        d0, t0 = pts[j - 1]
        d1, t1 = pts[j]
        if d1 == d0:
            end_t = t1
        else:
            end_t = t0 + (t1 - t0) * (target - d0) / (d1 - d0)
        duration = end_t - start_t
        if not math.isfinite(duration) or duration <= 0:
            continue

        if best is None or duration < best.duration_s - SEGMENT_TIE_TOLERANCE_S:
            best = BestSegmentResult(
                start_distance_m=start_d,
                end_distance_m=target,
                duration_s=duration,
                avg_pace_min_km=(duration / 60.0) / (segment_m / 1000.0),
            )

    if best is None:
        logger.debug("No positive-duration window found")
    return best
