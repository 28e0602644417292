"""Time-in-zone bucketing of heart rate against a max-HR based zone table."""
from dataclasses import dataclass, field

from biopeak.analytics.samples import Sample, is_finite
from biopeak.core.constants import HR_ZONE_BOUNDS, HR_ZONE_LABELS
from biopeak.core.errors import InsufficientData


@dataclass(frozen=True)
class ZoneEntry:
    zone: int
    label: str
    min_bpm: int
    max_bpm: int
    time_in_zone_seconds: float
    percentage: float

    def as_dict(self) -> dict:
        return {
            "zone": self.zone,
            "label": self.label,
            "min_bpm": self.min_bpm,
            "max_bpm": self.max_bpm,
            "time_in_zone_seconds": self.time_in_zone_seconds,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class ZoneBreakdown:
    max_heart_rate: int
    zones: list[ZoneEntry] = field(default_factory=list)
    total_valid_seconds: float = 0.0
    out_of_range_seconds: float = 0.0


def resolve_max_heart_rate(
    samples: list[Sample],
    requested: int | None = None,
    configured: int | None = None,
) -> int:
    """Explicit value, else the configured HR max, else the highest HR seen."""
    for candidate in (requested, configured):
        if candidate is not None and candidate > 0:
            return int(candidate)
    observed = [s.heart_rate for s in samples if is_finite(s.heart_rate) and s.heart_rate > 0]
    if not observed:
        raise InsufficientData("No heart rate data for this activity")
    return int(round(max(observed)))


def _sample_weights(samples: list[Sample]) -> list[float]:
    # Each sample covers the gap to the next one (at least 1 s); the last covers 1 s
    weights = []
    for idx, s in enumerate(samples):
        if idx + 1 < len(samples):
            weights.append(max(1.0, samples[idx + 1].timestamp - s.timestamp))
        else:
            weights.append(1.0)
    return weights


def zone_index(heart_rate: float, max_heart_rate: float) -> int | None:
    """0-based zone for a heart rate, or None when outside 50-100% of max."""
    fraction = heart_rate / max_heart_rate
    if fraction < HR_ZONE_BOUNDS[0] or fraction > HR_ZONE_BOUNDS[-1]:
        return None
    last = len(HR_ZONE_BOUNDS) - 2
    for idx in range(last + 1):
        lo, hi = HR_ZONE_BOUNDS[idx], HR_ZONE_BOUNDS[idx + 1]
        if lo <= fraction < hi or (idx == last and fraction == hi):
            return idx
    return None


def bucket_heart_rate_zones(samples: list[Sample], max_heart_rate: int) -> ZoneBreakdown:
    if max_heart_rate is None or max_heart_rate <= 0:
        raise InsufficientData("A positive max heart rate is required for zone bucketing")
    ordered = sorted(samples, key=lambda s: s.timestamp)
    if not any(is_finite(s.heart_rate) and s.heart_rate > 0 for s in ordered):
        raise InsufficientData("No heart rate data for this activity")

    seconds = [0.0] * (len(HR_ZONE_BOUNDS) - 1)
    out_of_range = 0.0
    for s, weight in zip(ordered, _sample_weights(ordered)):
        idx = None
        if is_finite(s.heart_rate) and s.heart_rate > 0:
            idx = zone_index(float(s.heart_rate), float(max_heart_rate))
        if idx is None:
            out_of_range += weight
        else:
            seconds[idx] += weight

    total_valid = sum(seconds)
    if total_valid <= 0:
        # Percentages would all be 0; nothing usable to store
        raise InsufficientData("No heart rate samples inside the zone range")
    zones = []
    for idx, secs in enumerate(seconds):
        pct = round(secs / total_valid * 100.0, 1)
        zones.append(
            ZoneEntry(
                zone=idx + 1,
                label=HR_ZONE_LABELS[idx],
                min_bpm=int(round(HR_ZONE_BOUNDS[idx] * max_heart_rate)),
                max_bpm=int(round(HR_ZONE_BOUNDS[idx + 1] * max_heart_rate)),
                time_in_zone_seconds=round(secs, 1),
                percentage=pct,
            )
        )
    return ZoneBreakdown(
        max_heart_rate=int(max_heart_rate),
        zones=zones,
        total_valid_seconds=round(total_valid, 1),
        out_of_range_seconds=round(out_of_range, 1),
    )
