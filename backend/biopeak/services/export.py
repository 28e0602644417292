import csv
import io

from biopeak.analytics.samples import Sample
from biopeak.core.constants import MS_TO_KMH
from biopeak.core.time_utils import epoch_to_iso

CSV_COLUMNS = [
    "timestamp_utc",
    "timestamp_iso",
    "heart_rate_bpm",
    "latitude",
    "longitude",
    "distance_meters",
    "speed_ms",
    "pace_min_km",
    "elevation_meters",
    "power_watts",
    "cadence_steps_min",
    "timer_duration_sec",
    "moving_duration_sec",
    "clock_duration_sec",
]


def csv_pace(speed_m_s: float | None) -> float | None:
    # min/km from m/s via km/h
    if speed_m_s is None or speed_m_s <= 0:
        return None
    return round(60.0 / (speed_m_s * MS_TO_KMH), 2)


def _cell(value):
    return "" if value is None else value


def export_activity_csv(samples: list[Sample]) -> str:
    """One CSV row per sample in a fixed column order; missing values are empty."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for s in samples:
        ts = int(s.timestamp) if float(s.timestamp).is_integer() else s.timestamp
        writer.writerow(
            [
                _cell(ts),
                _cell(epoch_to_iso(s.timestamp)),
                _cell(s.heart_rate),
                _cell(s.latitude),
                _cell(s.longitude),
                _cell(s.distance_m),
                _cell(s.speed_m_s),
                _cell(csv_pace(s.speed_m_s)),
                _cell(s.elevation_m),
                _cell(s.power_w),
                _cell(s.cadence),
                _cell(s.timer_s),
                _cell(s.moving_s),
                _cell(s.clock_s),
            ]
        )
    return buf.getvalue()


def export_filename(activity_id: str) -> str:
    return f"activity_{activity_id}_details.csv"
